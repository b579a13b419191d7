# ============================================================================
# HEALTH CHECK RUNNER TESTS
# ============================================================================
# STATUS: Tests - Orchestration under budget
# PURPOSE: Verify budget enforcement, caching, fault containment, ordering,
#          metrics, auth backstop and sanitization wiring
# CREATED: 18 OCT 2026
# ============================================================================
"""
Health Check Runner Tests

Covers:
1. Budget overrun -> single Partial budget_exceeded node
2. cache_ms > 0 -> check executed once across two runs
3. Raising check -> Unknown node with fault text
4. Garbage check results -> Unknown node
5. Service order follows configuration order
6. Performance tallies
7. Auth backstop raises UnauthorizedError without running checks
8. Site naming and sanitization applied to the final report

Run with:
    pytest tests/test_runner.py -v
"""

import asyncio
import pytest
from unittest.mock import AsyncMock, MagicMock

from core.contracts import BUDGET_EXCEEDED_NODE_ID, HealthStatus, SanitizeStrategy
from core.models import AuthConfig, RunnerConfig, StatusNode
from health.aggregator import create_status_node
from health.auth import UNAUTHORIZED, UnauthorizedError
from health.cache import TTLCache
from health.core import FunctionCheck
from health.runner import HealthCheckRunner, cache_key, run_health_check, with_timeout


OPEN_AUTH = AuthConfig(require_auth=False)


def _check(check_id, status=HealthStatus.UP, delay=0.0, message="ok", metadata=None):
    """Check that sleeps then reports status."""
    async def run():
        if delay:
            await asyncio.sleep(delay)
        return create_status_node(check_id, check_id.title(), status, message, metadata=metadata)
    return FunctionCheck(check_id, check_id.title(), run)


def _failing_check(check_id, error):
    async def run():
        raise error
    return FunctionCheck(check_id, check_id.title(), run)


def _run(config, request=None, runner=None):
    runner = runner or HealthCheckRunner()
    return asyncio.run(runner.run(config, request))


@pytest.fixture(autouse=True)
def development(monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.delenv("SITE", raising=False)
    monkeypatch.delenv("DOMAIN", raising=False)
    monkeypatch.delenv("REQUIRE_HEALTHCHECK_AUTH", raising=False)


# ============================================================================
# BUDGET
# ============================================================================

class TestBudget:
    """Test global budget enforcement."""

    def test_slow_check_exceeds_budget(self):
        config = RunnerConfig(
            checks=[_check("fast"), _check("slow", delay=0.5)],
            budget_ms=50,
            auth=OPEN_AUTH,
        )
        result = _run(config)

        assert result.status == HealthStatus.PARTIAL
        assert len(result.services) == 1
        assert result.services[0].id == BUDGET_EXCEEDED_NODE_ID
        assert result.services[0].status == HealthStatus.PARTIAL
        assert "50ms" in result.services[0].message
        assert result.performance.checks_failed == 2
        assert result.performance.checks_completed == 0

    def test_returns_near_budget_not_check_time(self):
        config = RunnerConfig(checks=[_check("slow", delay=2.0)], budget_ms=50, auth=OPEN_AUTH)
        result = _run(config)
        assert result.performance.total_check_time < 1000

    def test_pending_checks_cancelled_by_default(self):
        cancelled = []

        async def slow():
            try:
                await asyncio.sleep(1)
            except asyncio.CancelledError:
                cancelled.append(True)
                raise
            return create_status_node("slow", "Slow", HealthStatus.UP, "ok")

        async def scenario():
            config = RunnerConfig(
                checks=[FunctionCheck("slow", "Slow", slow)],
                budget_ms=20,
                auth=OPEN_AUTH,
            )
            result = await HealthCheckRunner().run(config)
            await asyncio.sleep(0.01)
            return result

        result = asyncio.run(scenario())
        assert result.services[0].id == BUDGET_EXCEEDED_NODE_ID
        assert cancelled == [True]

    def test_soft_cancellation_leaves_check_running(self):
        finished = []

        async def slow():
            await asyncio.sleep(0.05)
            finished.append(True)
            return create_status_node("slow", "Slow", HealthStatus.UP, "ok")

        async def scenario():
            config = RunnerConfig(
                checks=[FunctionCheck("slow", "Slow", slow)],
                budget_ms=10,
                auth=OPEN_AUTH,
                cancel_on_budget=False,
            )
            result = await HealthCheckRunner().run(config)
            assert finished == []
            await asyncio.sleep(0.1)
            return result

        result = asyncio.run(scenario())
        assert result.services[0].id == BUDGET_EXCEEDED_NODE_ID
        assert finished == [True]


# ============================================================================
# CACHING
# ============================================================================

class TestCaching:
    """Test cache-aware check execution."""

    def test_check_runs_once_when_cached(self):
        calls = {"count": 0}

        async def counted():
            calls["count"] += 1
            return create_status_node(
                "cached", "Cached", HealthStatus.UP, "ok",
                metadata={"runCount": calls["count"]},
            )

        runner = HealthCheckRunner()
        config = RunnerConfig(
            checks=[FunctionCheck("cached", "Cached", counted)],
            cache_ms=1000,
            auth=OPEN_AUTH,
        )
        first = _run(config, runner=runner)
        second = _run(config, runner=runner)

        assert calls["count"] == 1
        assert first.services[0].metadata == {"runCount": 1}
        assert second.services[0].metadata == {"runCount": 1}

    def test_no_caching_when_disabled(self):
        check_fn = AsyncMock(return_value=create_status_node("p", "P", HealthStatus.UP, "ok"))
        runner = HealthCheckRunner()
        config = RunnerConfig(checks=[FunctionCheck("p", "P", check_fn)], auth=OPEN_AUTH)
        _run(config, runner=runner)
        _run(config, runner=runner)
        assert check_fn.await_count == 2
        assert runner.cache.size() == 0

    def test_faults_are_not_cached(self):
        runner = HealthCheckRunner()
        config = RunnerConfig(
            checks=[_failing_check("bad", RuntimeError("nope"))],
            cache_ms=1000,
            auth=OPEN_AUTH,
        )
        _run(config, runner=runner)
        assert runner.cache.get(cache_key("bad")) is None

    def test_cached_value_isolated_from_callers(self):
        runner = HealthCheckRunner()
        config = RunnerConfig(
            checks=[_check("iso", metadata={"n": 1})],
            cache_ms=1000,
            auth=OPEN_AUTH,
        )
        first = _run(config, runner=runner)
        first.services[0].metadata["n"] = 99
        second = _run(config, runner=runner)
        assert second.services[0].metadata == {"n": 1}

    def test_shared_injected_cache(self):
        cache = TTLCache()
        config = RunnerConfig(checks=[_check("shared")], cache_ms=1000, auth=OPEN_AUTH)
        asyncio.run(run_health_check(config, cache=cache))
        assert cache.get(cache_key("shared")) is not None


# ============================================================================
# FAULT CONTAINMENT
# ============================================================================

class TestFaultContainment:
    """Test that check faults never escape."""

    def test_raising_check_becomes_unknown(self):
        config = RunnerConfig(
            checks=[_failing_check("err", RuntimeError("Test error"))],
            auth=OPEN_AUTH,
        )
        result = _run(config)

        assert len(result.services) == 1
        node = result.services[0]
        assert node.id == "err"
        assert node.status == HealthStatus.UNKNOWN
        assert "Test error" in node.message
        assert result.status == HealthStatus.UNKNOWN
        assert result.performance.checks_failed == 1

    def test_fault_does_not_affect_siblings(self):
        config = RunnerConfig(
            checks=[_check("a"), _failing_check("b", ValueError("bad")), _check("c")],
            auth=OPEN_AUTH,
        )
        result = _run(config)
        assert [s.status for s in result.services] == [
            HealthStatus.UP, HealthStatus.UNKNOWN, HealthStatus.UP,
        ]

    def test_down_outranks_fault(self):
        config = RunnerConfig(
            checks=[_check("down", HealthStatus.DOWN), _failing_check("err", RuntimeError("x"))],
            auth=OPEN_AUTH,
        )
        assert _run(config).status == HealthStatus.DOWN

    def test_exception_without_message(self):
        config = RunnerConfig(checks=[_failing_check("err", KeyError())], auth=OPEN_AUTH)
        node = _run(config).services[0]
        assert node.status == HealthStatus.UNKNOWN
        assert node.message

    @pytest.mark.parametrize("garbage", [None, 42, "Up", {"status": "Sideways"}])
    def test_garbage_result_becomes_unknown(self, garbage):
        async def run():
            return garbage

        config = RunnerConfig(checks=[FunctionCheck("junk", "Junk", run)], auth=OPEN_AUTH)
        node = _run(config).services[0]
        assert node.id == "junk"
        assert node.status == HealthStatus.UNKNOWN
        assert node.message == "Check returned invalid result"

    def test_mapping_result_is_accepted(self):
        async def run():
            return {"id": "dict", "name": "Dict", "status": "Up", "message": "ok"}

        config = RunnerConfig(checks=[FunctionCheck("dict", "Dict", run)], auth=OPEN_AUTH)
        node = _run(config).services[0]
        assert isinstance(node, StatusNode)
        assert node.status == HealthStatus.UP


# ============================================================================
# REPORT ASSEMBLY
# ============================================================================

class TestReport:
    """Test ordering, metrics, precedence and naming."""

    def test_order_follows_configuration(self):
        config = RunnerConfig(
            checks=[_check("slowest", delay=0.03), _check("middle", delay=0.02), _check("fastest")],
            auth=OPEN_AUTH,
        )
        result = _run(config)
        assert [s.id for s in result.services] == ["slowest", "middle", "fastest"]

    def test_metrics(self):
        config = RunnerConfig(
            checks=[
                _check("up"),
                _check("partial", HealthStatus.PARTIAL),
                _check("down", HealthStatus.DOWN),
                _check("unknown", HealthStatus.UNKNOWN),
            ],
            auth=OPEN_AUTH,
        )
        result = _run(config)
        assert result.performance.checks_completed == 4
        assert result.performance.checks_failed == 2
        assert result.status == HealthStatus.DOWN
        assert result.message == "Critical services unavailable"

    def test_custom_precedence(self):
        config = RunnerConfig(
            checks=[_check("p", HealthStatus.PARTIAL), _check("u", HealthStatus.UNKNOWN)],
            aggregation_precedence=[
                HealthStatus.DOWN, HealthStatus.UNKNOWN, HealthStatus.PARTIAL, HealthStatus.UP,
            ],
            auth=OPEN_AUTH,
        )
        assert _run(config).status == HealthStatus.UNKNOWN

    def test_empty_precedence_uses_fallback(self):
        config = RunnerConfig(
            checks=[_check("down", HealthStatus.DOWN)],
            aggregation_precedence=[],
            auth=OPEN_AUTH,
        )
        assert _run(config).status == HealthStatus.PARTIAL

    def test_no_checks_is_unknown(self):
        result = _run(RunnerConfig(checks=[], auth=OPEN_AUTH))
        assert result.status == HealthStatus.UNKNOWN
        assert result.services == []

    def test_site_name_from_request(self):
        config = RunnerConfig(checks=[_check("a")], auth=OPEN_AUTH)
        result = _run(config, request={"headers": {"X-Site-Name": "Shop"}})
        assert result.id == "shop_healthcheck"
        assert result.name == "Shop Site Health"

    def test_sanitization_applied(self):
        config = RunnerConfig(
            checks=[_failing_check("api", RuntimeError("secret-host.internal refused"))],
            sanitize=SanitizeStrategy.COUNTS_ONLY,
            auth=OPEN_AUTH,
        )
        result = _run(config)
        assert "secret-host" not in result.services[0].message
        assert result.performance.total_check_time % 100 == 0

    def test_run_single(self):
        config = RunnerConfig(checks=[_check("a"), _check("b", HealthStatus.DOWN)], auth=OPEN_AUTH)
        result = asyncio.run(HealthCheckRunner().run_single(config, "b"))
        assert [s.id for s in result.services] == ["b"]
        assert result.status == HealthStatus.DOWN

    def test_run_single_unknown_id(self):
        config = RunnerConfig(checks=[_check("a")], auth=OPEN_AUTH)
        assert asyncio.run(HealthCheckRunner().run_single(config, "zzz")) is None


# ============================================================================
# AUTH BACKSTOP
# ============================================================================

class TestAuthBackstop:
    """Test the runner's own auth check."""

    def test_denied_request_raises_sentinel(self):
        check_fn = AsyncMock()
        config = RunnerConfig(
            checks=[FunctionCheck("p", "P", check_fn)],
            auth=AuthConfig(token="secret"),
        )
        with pytest.raises(UnauthorizedError) as exc_info:
            _run(config, request={"headers": {"Authorization": "Bearer wrong!"}})

        assert str(exc_info.value) == UNAUTHORIZED
        check_fn.assert_not_called()

    def test_pre_authorized_skips_backstop(self):
        validator = MagicMock(return_value=False)
        config = RunnerConfig(
            checks=[_check("p")],
            auth=AuthConfig(custom_validator=validator),
        )
        result = asyncio.run(HealthCheckRunner().run(config, pre_authorized=True))

        assert result.status == HealthStatus.UP
        validator.assert_not_called()

    def test_authorized_request_runs(self):
        config = RunnerConfig(checks=[_check("p")], auth=AuthConfig(token="secret"))
        result = _run(config, request={"headers": {"Authorization": "Bearer secret"}})
        assert result.status == HealthStatus.UP


# ============================================================================
# HELPERS
# ============================================================================

class TestWithTimeout:
    """Test the timeout helper."""

    def test_returns_value_in_time(self):
        async def quick():
            return 1
        assert asyncio.run(with_timeout(quick(), 100, 0)) == 1

    def test_returns_fallback_on_timeout(self):
        async def slow():
            await asyncio.sleep(1)
            return 1
        assert asyncio.run(with_timeout(slow(), 10, "late")) == "late"
