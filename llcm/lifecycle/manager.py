"""
Log group lifecycle manager.

Enumerates log groups across regions and runs a handler on every entry that
passes the filters. One producer task per region pages through
describe_log_groups; each log group is handed to a consumer task admitted by
a semaphore, so at most num_workers handlers run at once. The first error
cancels every other task and is raised to the caller.
"""

import asyncio
import json
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Set, TextIO

import structlog

from llcm.config.regions import ALLOWED_REGIONS
from llcm.config.settings import LlcmSettings
from llcm.connectors.base import LogsAPI
from llcm.connectors.retry import RetryPolicy
from llcm.errors import BadArgumentError
from llcm.lifecycle.filters import Filter, Predicate, compile_filters, matches, parse_filters
from llcm.lifecycle.handlers import ApplyHandler, ListHandler, PreviewHandler
from llcm.lifecycle.models import DesiredState, ListEntryData, LogGroupEntry, PreviewEntryData

logger = structlog.get_logger(__name__)

Handler = Callable[[LogGroupEntry], Awaitable[None]]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FirstErrorGroup:
    """
    Set of tasks that fails as a whole on the first error.

    The first exception raised by any task is kept and every other task is
    cancelled. Later exceptions are logged and dropped.
    """

    def __init__(self):
        self._tasks: Set[asyncio.Task] = set()
        self._error: Optional[BaseException] = None

    @property
    def failed(self) -> bool:
        return self._error is not None

    def spawn(self, fn: Callable[..., Awaitable[Any]], *args: Any) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(self._guard(fn, *args))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _guard(self, fn: Callable[..., Awaitable[Any]], *args: Any) -> None:
        try:
            await fn(*args)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self._fail(e)

    def _fail(self, err: BaseException) -> None:
        if self._error is not None:
            logger.debug("discarding secondary error", error=str(err))
            return
        self._error = err
        self.cancel(exclude=asyncio.current_task())

    def cancel(self, exclude: Optional[asyncio.Task] = None) -> None:
        for task in list(self._tasks):
            if task is not exclude:
                task.cancel()

    async def wait(self) -> None:
        """
        Wait until every task, including ones spawned meanwhile, has finished.

        Raises:
            Exception: The first error raised by a task.
            asyncio.CancelledError: If the waiting task itself is cancelled.
        """
        try:
            while self._tasks:
                await asyncio.wait(set(self._tasks))
        except asyncio.CancelledError:
            self.cancel()
            while self._tasks:
                await asyncio.wait(set(self._tasks))
            raise
        if self._error is not None:
            raise self._error


class LifecycleManager:
    """
    Lists, previews and applies retention changes on CloudWatch Logs log groups.

    Args:
        client: Logs client used for enumeration and mutations
        settings: Tunables and default regions. Defaults to LlcmSettings().
        now_func: Clock used to compute elapsed days. A naive result is taken
            as local time.
    """

    def __init__(
        self,
        client: LogsAPI,
        settings: Optional[LlcmSettings] = None,
        now_func: Optional[Callable[[], datetime]] = None,
    ):
        self.client = client
        self.settings = settings or LlcmSettings()
        self.now_func = now_func or _utcnow

        self.num_workers = self.settings.num_workers
        self.retry_policy = RetryPolicy(
            max_attempts=self.settings.max_retry_attempts,
            delay_time_sec=self.settings.delay_time_sec,
        )

        self.regions: List[str] = list(self.settings.regions)
        self.desired_state = DesiredState.NONE
        self.filters: List[Filter] = []
        self._predicates: List[Predicate] = []
        self.applied = 0

    def set_regions(self, regions: Optional[Sequence[str]]) -> None:
        """
        Set the target regions. An empty sequence keeps the current ones.

        Raises:
            BadArgumentError: If a region is not supported
        """
        if not regions:
            return
        for region in regions:
            if region not in ALLOWED_REGIONS:
                raise BadArgumentError(f"unsupported region: {region}")
        self.regions = list(dict.fromkeys(regions))

    def set_desired_state(self, token: str) -> None:
        self.desired_state = DesiredState.parse(token)

    def set_filter(self, expressions: Optional[Sequence[str]]) -> None:
        """
        Parse and compile filter expressions. Nothing is changed on error.

        Raises:
            BadSyntaxError: If an expression is malformed
            BadValueError: If a value does not fit its key
        """
        filters = parse_filters(expressions or [])
        predicates = compile_filters(filters)
        self.filters = filters
        self._predicates = predicates

    def to_dict(self) -> Dict[str, Any]:
        return {
            "regions": list(self.regions),
            "desiredState": str(self.desired_state),
            "filters": [str(f) for f in self.filters],
        }

    def __str__(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    async def list(self) -> ListEntryData:
        """Collect every matching log group. Entries are unordered."""
        handler = ListHandler()
        await self._run(handler)
        return handler.data

    async def preview(self) -> PreviewEntryData:
        """
        Simulate the desired state on every matching log group.

        Raises:
            BadArgumentError: If no desired state is set
        """
        handler = PreviewHandler(self.desired_state)
        await self._run(handler)
        return handler.data

    async def apply(self, sink: TextIO) -> int:
        """
        Bring every matching log group to the desired state.

        Each successful mutation writes one line to sink. The running count
        is kept on self.applied, which is a lower bound of the effective
        mutations when this raises.

        Returns:
            Number of successful mutations

        Raises:
            BadArgumentError: If no desired state is set
        """
        handler = ApplyHandler(self.client, self.retry_policy, self.desired_state, sink)
        self.applied = 0
        try:
            await self._run(handler)
        finally:
            self.applied = handler.applied
        return self.applied

    async def _run(self, handler: Handler) -> None:
        group = FirstErrorGroup()
        semaphore = asyncio.Semaphore(self.num_workers)
        now = self.now_func().astimezone(timezone.utc)

        async def consume(log_group: Dict[str, Any], region: str) -> None:
            try:
                entry = LogGroupEntry.from_log_group(log_group, region, now)
                if matches(entry, self._predicates):
                    await handler(entry)
            finally:
                semaphore.release()

        async def produce(region: str) -> None:
            next_token: Optional[str] = None
            pages = 0
            count = 0
            while True:
                page = await self.retry_policy.call(self.client.describe_log_groups, region, next_token)
                pages += 1
                for log_group in page.log_groups:
                    await semaphore.acquire()
                    if group.failed:
                        semaphore.release()
                        return
                    group.spawn(consume, log_group, region)
                    count += 1
                if not page.next_token:
                    break
                next_token = page.next_token
            logger.debug("enumerated log groups", region=region, pages=pages, log_groups=count)

        for region in self.regions:
            group.spawn(produce, region)
        await group.wait()
