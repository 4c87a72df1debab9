"""
Unit tests for EndpointRegistry.

Tests:
- Registration and address sharing
- Duplicate topic rejection
- open()/close() lifecycle and partial-failure policy
- Send routing and framing
"""

import pytest

from chainzmq.common.exceptions.exceptions import (
    ConfigurationError,
    DuplicateTopicError,
    TransportBindError,
    TransportSendError,
    TransportUnbindError,
)
from chainzmq.infra.transport.endpoint_registry import EndpointRegistry
from tests.fakes.fake_transport import FakeTransport

ADDR_A = "tcp://127.0.0.1:28332"
ADDR_B = "tcp://127.0.0.1:28333"
ADDR_C = "tcp://127.0.0.1:28334"


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def registry(transport):
    return EndpointRegistry(transport)


class TestRegistration:
    """Topic -> endpoint registration."""

    def test_requires_transport_adapter(self):
        with pytest.raises(TypeError):
            EndpointRegistry(object())

    def test_register_creates_unbound_endpoint(self, registry, transport):
        endpoint = registry.register("hashtx", ADDR_A)

        assert endpoint.address == ADDR_A
        assert endpoint.bound is False
        assert endpoint.topics == ["hashtx"]
        assert registry.has("hashtx")
        assert len(transport.sockets) == 1
        assert transport.get_call_count("bind") == 0

    def test_shared_address_reuses_one_socket(self, registry, transport):
        first = registry.register("hashblock", ADDR_A)
        second = registry.register("rawblock", ADDR_A)

        assert first is second
        assert len(transport.sockets) == 1
        assert len(registry.endpoints) == 1
        assert first.topics == ["hashblock", "rawblock"]
        assert registry.topics == {"hashblock": ADDR_A, "rawblock": ADDR_A}

    def test_distinct_addresses_get_distinct_sockets(self, registry, transport):
        registry.register("hashtx", ADDR_A)
        registry.register("rawtx", ADDR_B)

        assert len(transport.sockets) == 2
        assert registry.get(ADDR_A) is not registry.get(ADDR_B)

    def test_duplicate_topic_raises_and_leaves_state_unchanged(self, registry, transport):
        registry.register("hashtx", ADDR_A)
        topics_before = registry.topics
        endpoints_before = registry.endpoints

        with pytest.raises(DuplicateTopicError) as exc_info:
            registry.register("hashtx", ADDR_B)

        assert exc_info.value.topic == "hashtx"
        assert registry.topics == topics_before
        assert registry.endpoints == endpoints_before
        assert registry.get(ADDR_B) is None
        assert len(transport.sockets) == 1

    def test_duplicate_topic_on_same_address_also_raises(self, registry):
        registry.register("hashtx", ADDR_A)

        with pytest.raises(DuplicateTopicError):
            registry.register("hashtx", ADDR_A)

        assert registry.get(ADDR_A).topics == ["hashtx"]

    @pytest.mark.parametrize("topic,address", [("", ADDR_A), ("hashtx", ""), (None, ADDR_A), ("hashtx", None)])
    def test_empty_topic_or_address_rejected(self, registry, transport, topic, address):
        with pytest.raises(ConfigurationError):
            registry.register(topic, address)

        assert transport.sockets == []


class TestLifecycle:
    """open() / close()."""

    def test_open_binds_each_distinct_endpoint_once(self, registry, transport):
        registry.register("hashblock", ADDR_A)
        registry.register("rawblock", ADDR_A)
        registry.register("hashtx", ADDR_B)

        registry.open()

        binds = transport.get_calls("bind")
        assert [c.args[0] for c in binds] == [ADDR_A, ADDR_B]
        assert all(e.bound for e in registry.endpoints)
        assert registry.is_open

    def test_open_twice_does_not_rebind(self, registry, transport):
        registry.register("hashtx", ADDR_A)

        registry.open()
        registry.open()

        assert transport.get_call_count("bind") == 1

    def test_close_unbinds_shared_endpoint_exactly_once(self, registry, transport):
        registry.register("hashblock", ADDR_A)
        registry.register("rawblock", ADDR_A)
        registry.open()

        registry.close()
        registry.close()

        assert transport.get_call_count("unbind") == 1
        assert not any(e.bound for e in registry.endpoints)

    def test_close_before_open_is_noop(self, registry, transport):
        registry.register("hashtx", ADDR_A)

        registry.close()

        assert transport.get_call_count("unbind") == 0

    def test_empty_registry_opens_and_closes(self, registry, transport):
        registry.open()
        registry.close()

        assert registry.is_open
        assert transport.get_call_count("bind") == 0

    def test_failed_open_rolls_back_bound_endpoints(self, registry, transport):
        registry.register("hashblock", ADDR_A)
        registry.register("hashtx", ADDR_B)
        registry.register("rawtx", ADDR_C)
        transport.fail_bind.add(ADDR_B)

        with pytest.raises(TransportBindError) as exc_info:
            registry.open()

        assert exc_info.value.address == ADDR_B
        assert [c.args[0] for c in transport.get_calls("unbind")] == [ADDR_A]
        assert not any(e.bound for e in registry.endpoints)
        # ADDR_C was never attempted
        assert [c.args[0] for c in transport.get_calls("bind")] == [ADDR_A, ADDR_B]

    def test_open_can_be_retried_after_failure(self, registry, transport):
        registry.register("hashblock", ADDR_A)
        registry.register("hashtx", ADDR_B)
        transport.fail_bind.add(ADDR_B)

        with pytest.raises(TransportBindError):
            registry.open()

        transport.fail_bind.clear()
        registry.open()

        assert registry.is_open

    def test_rollback_unbind_failure_keeps_bind_error(self, registry, transport):
        registry.register("hashblock", ADDR_A)
        registry.register("hashtx", ADDR_B)
        transport.fail_bind.add(ADDR_B)
        transport.fail_unbind.add(ADDR_A)

        with pytest.raises(TransportBindError):
            registry.open()

        # Could not be unbound, so still reported as bound for a later close()
        assert registry.get(ADDR_A).bound is True
        assert registry.get(ADDR_B).bound is False

    def test_close_attempts_all_and_raises_first_error(self, registry, transport):
        registry.register("hashblock", ADDR_A)
        registry.register("hashtx", ADDR_B)
        registry.register("rawtx", ADDR_C)
        registry.open()
        transport.fail_unbind.update({ADDR_A, ADDR_C})

        with pytest.raises(TransportUnbindError) as exc_info:
            registry.close()

        assert exc_info.value.address == ADDR_A
        assert [c.args[0] for c in transport.get_calls("unbind")] == [ADDR_A, ADDR_B, ADDR_C]
        assert registry.get(ADDR_B).bound is False
        assert registry.get(ADDR_A).bound is True
        assert registry.get(ADDR_C).bound is True

    def test_close_retry_only_touches_still_bound(self, registry, transport):
        registry.register("hashblock", ADDR_A)
        registry.register("hashtx", ADDR_B)
        registry.open()
        transport.fail_unbind.add(ADDR_A)

        with pytest.raises(TransportUnbindError):
            registry.close()

        transport.fail_unbind.clear()
        registry.close()

        assert [c.args[0] for c in transport.get_calls("unbind")] == [ADDR_A, ADDR_B, ADDR_A]


class TestSend:
    """send() routing."""

    def test_send_unregistered_topic_is_noop(self, registry, transport):
        registry.register("hashtx", ADDR_A)
        registry.open()

        registry.send("rawtx", b"payload")

        assert transport.get_call_count("send_multipart") == 0

    def test_send_on_empty_registry_is_noop(self, registry, transport):
        registry.send("hashtx", b"payload")

        assert transport.get_calls("send_multipart") == []
        assert transport.sockets == []

    def test_send_is_topic_frame_then_payload(self, registry, transport):
        registry.register("rawtx", ADDR_A)
        registry.open()

        registry.send("rawtx", b"\x01\x02\x03")

        assert transport.sent_messages() == [[b"rawtx", b"\x01\x02\x03"]]

    def test_shared_endpoint_preserves_call_order(self, registry, transport):
        registry.register("hashblock", ADDR_A)
        registry.register("rawblock", ADDR_A)
        registry.open()

        registry.send("rawblock", b"r1")
        registry.send("hashblock", b"h1")
        registry.send("rawblock", b"r2")

        socket = transport.sockets[0]
        assert socket.sent == [[b"rawblock", b"r1"], [b"hashblock", b"h1"], [b"rawblock", b"r2"]]

    def test_send_routes_to_topic_endpoint(self, registry, transport):
        registry.register("hashtx", ADDR_A)
        registry.register("rawtx", ADDR_B)
        registry.open()

        registry.send("rawtx", b"raw")

        assert transport.sockets[0].sent == []
        assert transport.sockets[1].sent == [[b"rawtx", b"raw"]]

    def test_send_error_propagates(self, registry, transport):
        registry.register("hashtx", ADDR_A)
        registry.open()
        transport.fail_send.add(ADDR_A)

        with pytest.raises(TransportSendError):
            registry.send("hashtx", b"x" * 32)
