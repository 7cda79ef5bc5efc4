"""
Unit tests for ClientKeyAgent.
"""
import asyncio
from datetime import timedelta

import pytest
import pytest_asyncio

from access_keys.application.dto.key_dto import KeyDataDTO, StatusResult, ValidationResult
from client_agent.agent import DEFAULT_SETTINGS, AgentState, ClientKeyAgent
from client_agent.credentials import MemoryCredentialCache
from client_agent.mirror import FALLBACK_KEY_CODE, LocalKeyMirror
from client_agent.transport import KeyServiceTransport
from core.domain.exceptions import StoreUnavailableError
from core.domain.value_objects import ValidationStatus

from conftest import T0

CODE = "TEST-AAAA-BBBB"


def valid_result(code=CODE, uses_remaining=9):
    return ValidationResult(
        valid=True,
        message="Access granted",
        status=ValidationStatus.ACTIVE,
        key_data=KeyDataDTO(
            key=code,
            expires_at=T0 + timedelta(days=30),
            days_remaining=30,
            uses_remaining=uses_remaining,
            total_uses=10,
            duration_days=30,
        ),
    )


def refused_result(status=ValidationStatus.REVOKED, message="Key is revoked"):
    return ValidationResult(valid=False, message=message, status=status)


class FakeTransport(KeyServiceTransport):
    """Scripted transport recording every call."""

    def __init__(self, results=None, status=None, settings=None, error=None, delay=0):
        self.results = list(results or [])
        self.status = status
        self.settings = settings
        self.error = error
        self.delay = delay
        self.calls = []

    async def validate(self, code):
        self.calls.append(("validate", code))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.results.pop(0)

    async def check_status(self, code):
        self.calls.append(("status", code))
        if self.error is not None:
            raise self.error
        return self.status

    async def fetch_settings(self):
        self.calls.append(("settings", None))
        if self.error is not None:
            raise self.error
        return self.settings


class SpyMirror(LocalKeyMirror):
    """Mirror recording whether it was consulted."""

    def __init__(self, clock):
        super().__init__(clock=clock)
        self.consulted = []

    async def validate(self, code):
        self.consulted.append(("validate", code))
        return await super().validate(code)

    async def check_status(self, code):
        self.consulted.append(("status", code))
        return await super().check_status(code)


@pytest.fixture
def mirror(clock):
    """Fixture for an in-memory mirror at the test clock."""
    local = SpyMirror(clock)
    yield local
    local.close()


@pytest_asyncio.fixture
async def make_agent(mirror):
    """Factory fixture for agents; timers are stopped at teardown."""
    agents = []

    def _make(transport, **kwargs):
        kwargs.setdefault("mirror", mirror)
        agent = ClientKeyAgent(transport, **kwargs)
        agents.append(agent)
        return agent

    yield _make
    for agent in agents:
        await agent.stop()


@pytest.mark.asyncio
class TestSubmit:
    """Tests for submitting a key."""

    @pytest.mark.parametrize("raw", ["ab", "ABC", "ABCD_EFGH", "A" * 21])
    async def test_malformed_key_is_refused_locally(self, make_agent, mirror, raw):
        """Test that malformed input never reaches the service or the mirror."""
        transport = FakeTransport()
        agent = make_agent(transport)

        result = await agent.submit(raw)

        assert result.valid is False
        assert result.status == ValidationStatus.INVALID_FORMAT
        assert result.message == "Invalid key format. Use format: XXXX-XXXX-XXXX"
        assert transport.calls == []
        assert mirror.consulted == []
        assert agent.state == AgentState.NO_KEY

    async def test_empty_key(self, make_agent):
        transport = FakeTransport()
        agent = make_agent(transport)

        result = await agent.submit("   ")

        assert result.status == ValidationStatus.INVALID_FORMAT
        assert result.message == "Please enter an access key"
        assert transport.calls == []

    async def test_valid_key_is_adopted(self, make_agent):
        """Test that an accepted key is cached and both timers start."""
        credentials = MemoryCredentialCache()
        transport = FakeTransport(results=[valid_result()])
        agent = make_agent(transport, credentials=credentials)

        result = await agent.submit("  test-aaaa-bbbb ")

        assert result.valid is True
        assert transport.calls == [("validate", CODE)]
        assert agent.state == AgentState.KEY_ACTIVE
        assert agent.current_key == CODE
        assert agent.key_data["uses_remaining"] == 9
        assert credentials.load() == CODE
        assert agent.timers_running
        assert agent.degraded is False

    async def test_refused_key(self, make_agent):
        transport = FakeTransport(results=[refused_result()])
        agent = make_agent(transport)

        result = await agent.submit(CODE)

        assert result.status == ValidationStatus.REVOKED
        assert agent.state == AgentState.NO_KEY
        assert agent.current_key is None
        assert agent.last_rejection == result
        assert not agent.timers_running

    async def test_online_success_is_mirrored(self, make_agent, mirror, make_record):
        """Test that the mirror takes the service's counters for a known key."""
        existing = await mirror.store.put(make_record(uses=10))
        agent = make_agent(FakeTransport(results=[valid_result()]))

        await agent.submit(CODE)

        mirrored = await mirror.store.get(CODE)
        assert mirrored.id == existing.id
        assert mirrored.uses_remaining == 9

    async def test_online_success_fills_empty_mirror(self, make_agent, mirror):
        agent = make_agent(FakeTransport(results=[valid_result(uses_remaining=7)]))

        await agent.submit(CODE)

        mirrored = await mirror.store.get(CODE)
        assert mirrored.uses_remaining == 7
        assert mirrored.total_uses == 10
        assert mirrored.expires_at == T0 + timedelta(days=30)
        assert mirrored.created_at == T0
        assert mirror.consulted == []


@pytest.mark.asyncio
class TestDegradedMode:
    """Tests for falling back to the local mirror."""

    async def test_unavailable_service_uses_mirror(self, make_agent, mirror, make_record):
        await mirror.store.put(make_record(uses=3))
        transport = FakeTransport(error=StoreUnavailableError("connection refused"))
        agent = make_agent(transport)

        result = await agent.submit(CODE)

        assert result.valid is True
        assert result.degraded is True
        assert agent.degraded is True
        assert agent.state == AgentState.KEY_ACTIVE
        assert mirror.consulted == [("validate", CODE)]
        assert (await mirror.store.get(CODE)).uses_remaining == 2

    async def test_outage_during_revalidation_keeps_accepted_key(self, make_agent, mirror):
        """Test that an accepted key survives an outage on the next revalidation."""
        transport = FakeTransport(results=[valid_result(uses_remaining=9)])
        agent = make_agent(transport)
        await agent.submit(CODE)
        transport.error = StoreUnavailableError("connection refused")

        result = await agent.revalidate()

        assert result.valid is True
        assert result.degraded is True
        assert agent.state == AgentState.KEY_ACTIVE
        assert agent.current_key == CODE
        assert agent.key_data["uses_remaining"] == 8
        assert (await mirror.store.get(CODE)).uses_remaining == 8

    async def test_timeout_uses_mirror(self, make_agent, mirror, make_record):
        await mirror.store.put(make_record())
        transport = FakeTransport(results=[valid_result()], delay=1)
        agent = make_agent(transport, request_timeout=0.01)

        result = await agent.submit(CODE)

        assert result.degraded is True
        assert mirror.consulted == [("validate", CODE)]

    async def test_unknown_key_in_mirror(self, make_agent):
        agent = make_agent(FakeTransport(error=StoreUnavailableError()))

        result = await agent.submit(CODE)

        assert result.valid is False
        assert result.status == ValidationStatus.INVALID
        assert result.degraded is True

    async def test_mirror_failure_reports_error(self, make_agent, mirror):
        mirror.store.close()
        agent = make_agent(FakeTransport(error=StoreUnavailableError()))

        result = await agent.submit(CODE)

        assert result.status == ValidationStatus.ERROR
        assert result.message == "Validation error"

    async def test_fallback_key(self, make_agent, mirror):
        """Test that the demo key is usable offline once seeded."""
        assert await mirror.ensure_fallback() is True
        assert await mirror.ensure_fallback() is False
        agent = make_agent(FakeTransport(error=StoreUnavailableError()))

        result = await agent.submit(FALLBACK_KEY_CODE)

        assert result.valid is True
        assert result.key_data.uses_remaining == 99

    async def test_settings_fall_back_to_defaults(self, make_agent):
        agent = make_agent(FakeTransport(error=StoreUnavailableError()))

        assert await agent.fetch_settings() == DEFAULT_SETTINGS

    async def test_settings_from_service(self, make_agent):
        settings = {"redirect_url": "https://shop.test", "auto_expire": False, "enable_logging": True}
        agent = make_agent(FakeTransport(settings=settings))

        assert await agent.fetch_settings() == settings


@pytest.mark.asyncio
class TestStart:
    """Tests for validating the cached key on start."""

    async def test_no_cached_key(self, make_agent):
        transport = FakeTransport()
        agent = make_agent(transport)

        assert await agent.start() is None
        assert agent.state == AgentState.NO_KEY
        assert transport.calls == []

    async def test_cached_key_is_validated(self, make_agent):
        """Test that start costs one consuming validation."""
        transport = FakeTransport(results=[valid_result()])
        agent = make_agent(transport, credentials=MemoryCredentialCache(CODE))

        result = await agent.start()

        assert result.valid is True
        assert transport.calls == [("validate", CODE)]
        assert agent.state == AgentState.KEY_ACTIVE

    async def test_cached_key_rejected(self, make_agent):
        rejected = []
        credentials = MemoryCredentialCache(CODE)
        transport = FakeTransport(results=[refused_result(ValidationStatus.EXPIRED, "Key has expired")])
        agent = make_agent(transport, credentials=credentials, on_rejected=rejected.append)

        result = await agent.start()

        assert result.status == ValidationStatus.EXPIRED
        assert rejected == [result]
        assert credentials.load() is None
        assert agent.state == AgentState.NO_KEY

    async def test_malformed_cached_key(self, make_agent):
        credentials = MemoryCredentialCache("x")
        transport = FakeTransport()
        agent = make_agent(transport, credentials=credentials)

        result = await agent.start()

        assert result.status == ValidationStatus.INVALID_FORMAT
        assert credentials.load() is None
        assert transport.calls == []


@pytest.mark.asyncio
class TestPeriodicChecks:
    """Tests for revalidation and status refresh."""

    async def test_revalidation_updates_key_data(self, make_agent):
        transport = FakeTransport(results=[valid_result(), valid_result(uses_remaining=8)])
        agent = make_agent(transport)
        await agent.submit(CODE)

        result = await agent.revalidate()

        assert result.valid is True
        assert agent.key_data["uses_remaining"] == 8
        assert agent.state == AgentState.KEY_ACTIVE

    async def test_revalidation_rejection_evicts_key(self, make_agent):
        """Test that a key revoked since the last check is evicted."""
        rejected = []
        credentials = MemoryCredentialCache()
        transport = FakeTransport(results=[valid_result(), refused_result()])
        agent = make_agent(transport, credentials=credentials, on_rejected=rejected.append)
        await agent.submit(CODE)

        result = await agent.revalidate()

        assert result.status == ValidationStatus.REVOKED
        assert rejected == [result]
        assert agent.state == AgentState.NO_KEY
        assert agent.current_key is None
        assert credentials.load() is None
        assert not agent.timers_running

    async def test_revalidation_without_key(self, make_agent):
        transport = FakeTransport()
        agent = make_agent(transport)

        assert await agent.revalidate() is None
        assert transport.calls == []

    async def test_logout_discards_in_flight_revalidation(self, make_agent):
        """Test that a result arriving after logout does not resurrect the session."""
        rejected = []
        transport = FakeTransport(results=[valid_result()])
        agent = make_agent(transport, on_rejected=rejected.append)
        await agent.submit(CODE)
        transport.results.append(refused_result())
        transport.delay = 0.05

        pending = asyncio.ensure_future(agent.revalidate())
        await asyncio.sleep(0)
        agent.logout()
        result = await pending

        assert result is None
        assert rejected == []
        assert agent.state == AgentState.NO_KEY
        assert not agent.timers_running

    async def test_status_refresh_merges_key_data(self, make_agent):
        """Test that status checks refresh display data without consuming."""
        status = StatusResult(
            found=True,
            status="active",
            expires_at=T0 + timedelta(days=30),
            days_remaining=29,
            uses_remaining=7,
            total_uses=10,
        )
        transport = FakeTransport(results=[valid_result()], status=status)
        agent = make_agent(transport)
        await agent.submit(CODE)

        await agent.refresh_status()

        assert agent.key_data["days_remaining"] == 29
        assert agent.key_data["uses_remaining"] == 7
        assert agent.key_data["status"] == "active"
        assert agent.key_data["key"] == CODE
        assert [c[0] for c in transport.calls] == ["validate", "status"]
        assert agent.state == AgentState.KEY_ACTIVE

    async def test_status_refresh_never_rejects(self, make_agent):
        transport = FakeTransport(results=[valid_result()], status=StatusResult(found=False))
        agent = make_agent(transport)
        await agent.submit(CODE)

        await agent.refresh_status()

        assert agent.state == AgentState.KEY_ACTIVE
        assert agent.current_key == CODE

    async def test_timers_fire(self, make_agent):
        """Test that the revalidation timer drives consuming validations."""
        transport = FakeTransport(
            results=[valid_result()] * 20,
            status=StatusResult(found=False),
        )
        agent = make_agent(transport, validation_interval=0.01, status_interval=10)
        await agent.submit(CODE)

        await asyncio.sleep(0.05)
        await agent.stop()

        assert [c[0] for c in transport.calls].count("validate") >= 2
        assert not agent.timers_running
