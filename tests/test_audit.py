"""Tests for audit logging of rule decisions."""

from __future__ import annotations

import logging

import pytest

from docdb_rls import Id, RLSConfig, RowLevelSecurity
from docdb_rls._audit import log_missing_rule, log_rule_decision, log_wrapper_created


class TestLogFunctions:
    def test_rule_decision_logs_id_not_contents(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="docdb_rls.audit"):
            log_rule_decision(
                table_name="messages",
                operation="read",
                rule="message_read",
                document={"_id": Id("messages", 3), "body": "private text"},
                allowed=False,
            )
        assert "messages:3" in caplog.text
        assert "deny" in caplog.text
        assert "private text" not in caplog.text

    def test_rule_decision_skipped_above_debug(self, caplog):
        with caplog.at_level(logging.INFO, logger="docdb_rls.audit"):
            log_rule_decision(
                table_name="messages", operation="read", rule="r", document={}, allowed=True
            )
        assert caplog.records == []

    def test_missing_rule_is_a_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="docdb_rls.audit"):
            log_missing_rule(table_name="notes", operation="write", fallback="always_allow")
        (record,) = caplog.records
        assert record.levelno == logging.WARNING
        assert "'notes'" in record.getMessage()
        assert "always_allow" in record.getMessage()

    def test_wrapper_created_lists_tables(self, caplog):
        with caplog.at_level(logging.INFO, logger="docdb_rls.audit"):
            log_wrapper_created(kind="reader", tables={"users", "messages"})
        assert "2 table(s) with rules: messages, users" in caplog.text

    def test_wrapper_created_without_tables(self, caplog):
        with caplog.at_level(logging.INFO, logger="docdb_rls.audit"):
            log_wrapper_created(kind="reader", tables=[])
        assert "(none)" in caplog.text


class TestDecisionLoggingThroughWrappers:
    @pytest.mark.asyncio
    async def test_no_logs_when_disabled(self, registry, context, anonymous, messages, caplog):
        rls = RowLevelSecurity(registry, config=RLSConfig())
        with caplog.at_level(logging.DEBUG, logger="docdb_rls"):
            await rls.reader(context(anonymous)).query("messages").collect()
        assert caplog.records == []

    @pytest.mark.asyncio
    async def test_each_decision_logged_when_enabled(
        self, registry, context, anonymous, messages, caplog
    ):
        rls = RowLevelSecurity(registry, config=RLSConfig(log_rule_decisions=True))
        with caplog.at_level(logging.DEBUG, logger="docdb_rls.audit"):
            await rls.reader(context(anonymous)).query("messages").collect()
        decisions = [r for r in caplog.records if r.levelno == logging.DEBUG]
        assert len(decisions) == 2
        assert any("allow" in r.getMessage() for r in decisions)
        assert any("deny" in r.getMessage() for r in decisions)
