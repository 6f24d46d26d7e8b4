from fleetlink.support.mixins import CommonEqualityMixin


class RetryStrategy:
    def __call__(self, *args, **kwargs):
        return 0

    def reset(self):
        pass


class ExponentialBackoffRetryStrategy(RetryStrategy, CommonEqualityMixin):
    """
    Hands out the delay to wait before the next attempt. Each call returns the current delay and
    doubles it for next time, up to the maximum. reset() returns to the initial delay, and is
    called after a successful attempt.

    >>> backoff = ExponentialBackoffRetryStrategy(1, 30)
    >>> [backoff() for _ in range(7)]
    [1, 2, 4, 8, 16, 30, 30]
    """

    def __init__(self, initial=1, maximum=30):
        """
        :param initial: the first delay, in seconds.
        :param maximum: the delay never grows beyond this, in seconds.
        """
        if initial <= 0 or maximum < initial:
            raise ValueError("invalid backoff range %s..%s" % (initial, maximum))
        self.initial = initial
        self.maximum = maximum
        self.delay = initial

    def __call__(self, dryRun=False):
        """ returns the delay before the next attempt
            :param dryRun: when True, the delay is not doubled
        """
        result = self.delay
        if not dryRun:
            self.delay = min(self.delay * 2, self.maximum)
        return result

    def reset(self):
        self.delay = self.initial
