"""
Tests for audit sinks, configuration and error types.
"""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from gatehouse import Config, ConfigurationError, EmptyPolicySetError
from gatehouse.audit import (
    AuditEvent,
    FileAuditLogger,
    MemoryAuditLogger,
    create_audit_logger,
)
from gatehouse.util import get_config_value, load_config_from_env


def make_event(policy_name: str, outcome: bool, **kwargs) -> AuditEvent:
    return AuditEvent(checker="PermissionChecker", policy_name=policy_name, outcome=outcome, **kwargs)


class TestMemoryAuditLogger:
    """Bounded in-memory sink."""

    @pytest.mark.asyncio
    async def test_bounded(self):
        audit = MemoryAuditLogger(max_entries=2)
        for name in ("A", "B", "C"):
            await audit.log(make_event(name, True))

        assert [e.policy_name for e in await audit.get_events()] == ["B", "C"]

    @pytest.mark.asyncio
    async def test_filters(self):
        audit = MemoryAuditLogger()
        now = datetime.now(timezone.utc)
        await audit.log(make_event("A", True, timestamp=now - timedelta(hours=2)))
        await audit.log(make_event("A", False, timestamp=now))
        await audit.log(make_event("B", False, timestamp=now))

        assert len(await audit.get_events(policy_name="A")) == 2
        assert len(await audit.get_events(outcome=False)) == 2
        assert len(await audit.get_events(start_time=now - timedelta(hours=1))) == 2
        assert len(await audit.get_events(end_time=now - timedelta(hours=1))) == 1

    def test_built_outside_running_loop(self):
        audit = MemoryAuditLogger()

        async def write_concurrently():
            await asyncio.gather(*(audit.log(make_event(f"P{i}", True)) for i in range(20)))
            return await audit.get_events()

        assert len(asyncio.run(write_concurrently())) == 20


class TestFileAuditLogger:
    """JSON-lines sink."""

    @pytest.mark.asyncio
    async def test_round_trip_with_filter(self, tmp_path):
        audit = FileAuditLogger(str(tmp_path / "audit.jsonl"))
        await audit.log(make_event("OwnerPolicy", True, reason="owner", category="ownership"))
        await audit.log(make_event("AdminPolicy", False, reason="not admin"))

        events = await audit.get_events(policy_name="OwnerPolicy")
        assert len(events) == 1
        assert events[0].reason == "owner"
        assert events[0].category == "ownership"
        assert events[0].outcome is True

    @pytest.mark.asyncio
    async def test_missing_file_is_empty(self, tmp_path):
        audit = FileAuditLogger(str(tmp_path / "missing.jsonl"))
        assert await audit.get_events() == []

    @pytest.mark.asyncio
    async def test_malformed_lines_skipped(self, tmp_path):
        path = tmp_path / "audit.jsonl"
        audit = FileAuditLogger(str(path))
        await audit.log(make_event("A", True))
        with open(path, "a", encoding="utf-8") as f:
            f.write("not json\n")

        assert [e.policy_name for e in await audit.get_events()] == ["A"]


class TestAuditFactory:

    def test_create_memory(self):
        audit = create_audit_logger("memory", max_entries=5)
        assert isinstance(audit, MemoryAuditLogger)
        assert audit.max_entries == 5

    def test_create_file(self, tmp_path):
        audit = create_audit_logger("file", file_path=str(tmp_path / "a.log"))
        assert isinstance(audit, FileAuditLogger)

    def test_unknown_type(self):
        with pytest.raises(ValueError):
            create_audit_logger("syslog")


class TestConfig:
    """Environment-driven configuration."""

    def test_defaults(self):
        config = Config()
        assert config.checker_name == "PermissionChecker"
        assert config.audit_enabled is True
        assert config.log_traces is False
        assert config.validate()

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("GATEHOUSE_CHECKER_NAME", "InvoiceAccess")
        monkeypatch.setenv("GATEHOUSE_AUDIT_ENABLED", "false")
        monkeypatch.setenv("GATEHOUSE_LOG_TRACES", "yes")
        config = Config.from_env()

        assert config.checker_name == "InvoiceAccess"
        assert config.audit_enabled is False
        assert config.log_traces is True
        assert config.metrics_enabled is True

    def test_validate_rejects_empty_name(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Config(checker_name="").validate()
        assert exc_info.value.details['config_key'] == "checker_name"

    def test_get_config_value_cast(self, monkeypatch):
        monkeypatch.setenv("GATEHOUSE_RETRIES", "3")
        monkeypatch.setenv("GATEHOUSE_BROKEN", "three")

        assert get_config_value("retries", cast_type=int) == 3
        assert get_config_value("broken", 7, int) == 7
        assert get_config_value("absent", "fallback") == "fallback"

    def test_load_config_from_env(self, monkeypatch):
        monkeypatch.setenv("GATEHOUSE_LOG_TRACES", "1")
        assert load_config_from_env()["log_traces"] == "1"


class TestErrors:

    def test_empty_policy_set_error(self):
        error = EmptyPolicySetError("OrPolicy")
        assert error.to_dict() == {
            'error': "invalid_policy",
            'message': "OrPolicy requires at least one policy",
            'details': {'combinator': "OrPolicy"},
        }
        assert str(error) == "invalid_policy: OrPolicy requires at least one policy"
