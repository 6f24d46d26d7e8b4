from unittest import TestCase

from hamcrest import is_, assert_that, calling, raises

from fleetlink.support.retry_strategy import ExponentialBackoffRetryStrategy, RetryStrategy


class RetryStrategyTest(TestCase):
    def test_is_zero(self):
        assert_that(RetryStrategy()(), is_(0))


class ExponentialBackoffRetryStrategyTest(TestCase):

    def test_doubles_up_to_the_cap(self):
        sut = ExponentialBackoffRetryStrategy(1, 30)
        assert_that([sut() for _ in range(8)], is_([1, 2, 4, 8, 16, 30, 30, 30]))

    def test_dry_run_does_not_double(self):
        sut = ExponentialBackoffRetryStrategy(1, 30)
        assert_that(sut(dryRun=True), is_(1))
        assert_that(sut(dryRun=True), is_(1))
        assert_that(sut(), is_(1))
        assert_that(sut(dryRun=True), is_(2))

    def test_reset_starts_again(self):
        sut = ExponentialBackoffRetryStrategy(1, 30)
        for _ in range(4):
            sut()
        sut.reset()
        assert_that(sut(), is_(1))
        assert_that(sut(), is_(2))

    def test_fractional_initial(self):
        sut = ExponentialBackoffRetryStrategy(0.25, 1)
        assert_that([sut() for _ in range(4)], is_([0.25, 0.5, 1, 1]))

    def test_invalid_range(self):
        assert_that(calling(ExponentialBackoffRetryStrategy).with_args(0, 30), raises(ValueError))
        assert_that(calling(ExponentialBackoffRetryStrategy).with_args(10, 5), raises(ValueError))

    def test_equality(self):
        assert_that(ExponentialBackoffRetryStrategy(1, 30), is_(ExponentialBackoffRetryStrategy(1, 30)))
