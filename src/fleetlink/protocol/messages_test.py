import unittest

from hamcrest import assert_that, is_, calling, raises, equal_to, is_not

from fleetlink.protocol.messages import Authentication, CONTROLLER_TO_SATELLITE, I32_MAX, I32_MIN, LinkServer, \
    MinigamePayload, Ping, Pong, Request, SATELLITE_TO_CONTROLLER, ServerKind, TransportPlayer, UnlinkServer, \
    UpdateActive, variants, variants_by_tag


class ServerKindTest(unittest.TestCase):
    def test_minigame_has_payload(self):
        kind = ServerKind.minigame("tag-ctf")
        assert_that(kind.tag, is_("Minigame"))
        assert_that(kind.payload, is_(MinigamePayload("tag-ctf")))

    def test_other_kinds_have_no_payload(self):
        for kind in (ServerKind.proxy(), ServerKind.lobby(), ServerKind.limbo()):
            assert_that(kind.payload, is_(None))

    def test_minigame_without_payload_is_rejected(self):
        assert_that(calling(ServerKind).with_args("Minigame"), raises(ValueError))

    def test_payload_on_other_kind_is_rejected(self):
        assert_that(calling(ServerKind).with_args("Lobby", MinigamePayload("x")), raises(ValueError))

    def test_unknown_tag_is_rejected(self):
        assert_that(calling(ServerKind).with_args("Arena"), raises(ValueError))

    def test_of(self):
        assert_that(ServerKind.of("Lobby"), is_(ServerKind.lobby()))
        assert_that(ServerKind.of("Minigame", "spleef"), is_(ServerKind.minigame("spleef")))

    def test_equality(self):
        assert_that(ServerKind.minigame("a"), is_(equal_to(ServerKind.minigame("a"))))
        assert_that(ServerKind.minigame("a"), is_not(equal_to(ServerKind.minigame("b"))))


class MessageTest(unittest.TestCase):
    def test_tags_are_unique_and_indexed(self):
        assert_that(len(variants_by_tag), is_(8))
        for variant in variants:
            assert_that(variants_by_tag[variant.tag], is_(variant))

    def test_directions(self):
        outbound = {v for v in variants if v.direction == SATELLITE_TO_CONTROLLER}
        inbound = {v for v in variants if v.direction == CONTROLLER_TO_SATELLITE}
        assert_that(outbound, is_({Authentication, Request, Pong, UpdateActive}))
        assert_that(inbound, is_({LinkServer, UnlinkServer, TransportPlayer, Ping}))

    def test_value_equality(self):
        assert_that(Ping(7), is_(equal_to(Ping(7))))
        assert_that(Ping(7), is_not(equal_to(Pong(7))))

    def test_str_names_the_variant(self):
        assert_that(str(UnlinkServer("L1")), is_("UnlinkServer{name: 'L1'}"))

    def test_i32_bounds(self):
        Ping(I32_MAX)
        Ping(I32_MIN)
        assert_that(calling(Ping).with_args(I32_MAX + 1), raises(ValueError))
        assert_that(calling(LinkServer).with_args("a", "b", 1, I32_MIN - 1), raises(ValueError))

    def test_port_range(self):
        LinkServer("a", "b", 65535, 0)
        assert_that(calling(LinkServer).with_args("a", "b", 65536, 0), raises(ValueError))
        assert_that(calling(LinkServer).with_args("a", "b", -1, 0), raises(ValueError))

    def test_bool_is_not_an_integer(self):
        assert_that(calling(Ping).with_args(True), raises(ValueError))

    def test_integer_is_not_a_bool(self):
        assert_that(calling(UpdateActive).with_args(1), raises(ValueError))

    def test_strings_are_required(self):
        assert_that(calling(UnlinkServer).with_args(None), raises(ValueError))
        assert_that(calling(TransportPlayer).with_args("p", 3), raises(ValueError))

    def test_request_player_is_optional(self):
        assert_that(Request(ServerKind.minigame("x")).player, is_(None))

    def test_kind_must_be_server_kind(self):
        assert_that(calling(Request).with_args("Minigame"), raises(ValueError))
        assert_that(calling(Authentication).with_args("a", "b", "Lobby"), raises(ValueError))
