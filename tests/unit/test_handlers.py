"""
Unit tests for operation handlers.
"""

import io
from datetime import datetime, timezone

import pytest
from unittest.mock import AsyncMock

from llcm.connectors.retry import RetryPolicy
from llcm.errors import BadArgumentError, ProviderError
from llcm.lifecycle.handlers import ApplyHandler, ListHandler, PreviewHandler
from llcm.lifecycle.models import DesiredState, LogGroupEntry
from tests.utils.mock_logs import MockLogsClient, make_log_group

NOW = datetime(2025, 4, 1, tzinfo=timezone.utc)


def entry(name, stored_bytes=900, retention_in_days=90, region="eu-west-1"):
    return LogGroupEntry.from_log_group(
        make_log_group(name, stored_bytes=stored_bytes, retention_in_days=retention_in_days, region=region),
        region,
        NOW,
    )


class TestListHandler:
    """Test cases for ListHandler."""

    @pytest.mark.asyncio
    async def test_collects_entries_and_total(self):
        handler = ListHandler()

        await handler(entry("a", stored_bytes=100))
        await handler(entry("b", stored_bytes=250))

        assert [e.name for e in handler.data.entries] == ["a", "b"]
        assert handler.data.total_stored_bytes == 350


class TestPreviewHandler:
    """Test cases for PreviewHandler."""

    def test_none_desired_state_fails(self):
        with pytest.raises(BadArgumentError):
            PreviewHandler(DesiredState.NONE)

    @pytest.mark.asyncio
    async def test_accumulates_totals(self):
        handler = PreviewHandler(DesiredState.ONE_MONTH)

        await handler(entry("a"))
        await handler(entry("b", stored_bytes=0))

        data = handler.data
        assert len(data.entries) == 2
        assert data.total_stored_bytes == 900
        assert data.total_reducible_bytes == 600
        assert data.total_remaining_bytes == 300


class TestApplyHandler:
    """Test cases for ApplyHandler."""

    def setup_method(self):
        self.client = MockLogsClient()
        self.sink = io.StringIO()
        self.retry_policy = RetryPolicy(max_attempts=3, delay_time_sec=1, sleep=AsyncMock())

    def _handler(self, desired):
        return ApplyHandler(self.client, self.retry_policy, desired, self.sink)

    def test_none_desired_state_fails(self):
        with pytest.raises(BadArgumentError):
            self._handler(DesiredState.NONE)

    @pytest.mark.asyncio
    async def test_delete(self):
        handler = self._handler(DesiredState.DELETE)

        await handler(entry("old"))

        assert self.client.mutations() == [("delete_log_group", "old", "eu-west-1")]
        assert self.sink.getvalue() == "deleted log group: old\n"
        assert handler.applied == 1

    @pytest.mark.asyncio
    async def test_infinite_removes_retention_policy(self):
        handler = self._handler(DesiredState.INFINITE)

        await handler(entry("keep"))

        assert self.client.mutations() == [("delete_retention_policy", "keep", "eu-west-1")]
        assert self.sink.getvalue() == "deleted retention policy: keep\n"

    @pytest.mark.asyncio
    async def test_positive_state_sets_retention(self):
        handler = self._handler(DesiredState.THIRTEEN_MONTHS)

        await handler(entry("a"))
        await handler(entry("b"))

        assert self.client.mutations() == [
            ("put_retention_policy", "a", 400, "eu-west-1"),
            ("put_retention_policy", "b", 400, "eu-west-1"),
        ]
        assert self.sink.getvalue() == "updated retention policy: a\nupdated retention policy: b\n"
        assert handler.applied == 2

    @pytest.mark.asyncio
    async def test_throttled_mutation_is_retried(self):
        self.client.fail("delete_log_group", "busy", ProviderError("api error ThrottlingException: Rate exceeded"))
        handler = self._handler(DesiredState.DELETE)

        await handler(entry("busy"))

        assert len(self.client.mutations()) == 2
        assert handler.applied == 1
        self.retry_policy._sleep.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failed_mutation_writes_nothing(self):
        self.client.fail("delete_log_group", "locked", ProviderError("OperationAbortedException"))
        handler = self._handler(DesiredState.DELETE)

        with pytest.raises(ProviderError):
            await handler(entry("locked"))

        assert self.sink.getvalue() == ""
        assert handler.applied == 0
