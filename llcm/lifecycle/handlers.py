"""
Per-entry operation handlers.

Handlers run on the event loop thread. Each shared mutation (appending to a
collection, updating totals, the applied counter, writing a sink line)
happens between two awaits, so handlers need no lock.
"""

from typing import TextIO

import structlog

from llcm.connectors.base import LogsAPI
from llcm.connectors.retry import RetryPolicy
from llcm.errors import BadArgumentError
from llcm.lifecycle.models import (
    DesiredState,
    ListEntry,
    ListEntryData,
    LogGroupEntry,
    PreviewEntryData,
)
from llcm.lifecycle.simulator import simulate

logger = structlog.get_logger(__name__)


class ListHandler:
    """Collect entries as they are."""

    def __init__(self):
        self.data = ListEntryData()

    async def __call__(self, entry: LogGroupEntry) -> None:
        self.data.entries.append(ListEntry(entry))
        self.data.total_stored_bytes += entry.stored_bytes


class PreviewHandler:
    """Collect the simulated effect of the desired state on each entry."""

    def __init__(self, desired: DesiredState):
        if desired is DesiredState.NONE:
            raise BadArgumentError("desired state is not set")
        self.desired = desired
        self.data = PreviewEntryData()

    async def __call__(self, entry: LogGroupEntry) -> None:
        preview = simulate(entry, self.desired)
        self.data.entries.append(preview)
        self.data.total_stored_bytes += preview.stored_bytes
        self.data.total_reducible_bytes += preview.reducible_bytes
        self.data.total_remaining_bytes += preview.remaining_bytes


class ApplyHandler:
    """
    Bring each entry to the desired state.

    Args:
        client: Logs client performing the mutations
        retry_policy: Policy wrapping every mutation
        desired: Target state, anything but NONE
        sink: Stream receiving one line per successful mutation
    """

    def __init__(self, client: LogsAPI, retry_policy: RetryPolicy, desired: DesiredState, sink: TextIO):
        if desired is DesiredState.NONE:
            raise BadArgumentError("desired state is not set")
        self.client = client
        self.retry_policy = retry_policy
        self.desired = desired
        self.sink = sink
        self.applied = 0

    async def __call__(self, entry: LogGroupEntry) -> None:
        if self.desired is DesiredState.DELETE:
            await self.retry_policy.call(self.client.delete_log_group, entry.name, entry.region)
            message = "deleted log group"
        elif self.desired is DesiredState.INFINITE:
            await self.retry_policy.call(self.client.delete_retention_policy, entry.name, entry.region)
            message = "deleted retention policy"
        else:
            await self.retry_policy.call(
                self.client.put_retention_policy, entry.name, int(self.desired), entry.region
            )
            message = "updated retention policy"

        self.applied += 1
        self.sink.write(f"{message}: {entry.name}\n")
        logger.debug(message, log_group=entry.name, region=entry.region, desired=str(self.desired))
