"""
boto3 implementation of the CloudWatch Logs capability.

boto3 is synchronous, so every request runs on a dedicated thread pool and
is awaited from the event loop. One boto3 client is kept per region.
botocore's own retry loop is turned off: throttling is handled by
RetryPolicy and concurrency by the manager's semaphore.
"""

import asyncio
import functools
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Optional

import boto3
import structlog
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from llcm.connectors.base import DescribeLogGroupsPage, LogsAPI
from llcm.errors import ProviderError, ThrottledError

logger = structlog.get_logger(__name__)

THROTTLING_CODES = {"ThrottlingException", "Throttling", "TooManyRequestsException"}

DEFAULT_MAX_WORKERS = 32


class CloudWatchLogsClient(LogsAPI):
    """
    CloudWatch Logs client backed by boto3.

    Args:
        profile: Shared config profile. None uses the default credential chain.
        session: Preconfigured boto3 session, takes precedence over profile.
        max_workers: Size of the thread pool running SDK calls.
        include_linked_accounts: Also list log groups of source accounts
            when called from a monitoring account.
    """

    def __init__(
        self,
        profile: Optional[str] = None,
        session: Optional[boto3.Session] = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
        include_linked_accounts: bool = True,
    ):
        self.session = session or boto3.Session(profile_name=profile)
        self.include_linked_accounts = include_linked_accounts
        self._boto_config = Config(
            retries={"total_max_attempts": 1, "mode": "standard"},
            max_pool_connections=max_workers,
        )
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="llcm-logs")
        self._clients: Dict[str, Any] = {}

    def client_for(self, region: str) -> Any:
        """Return the boto3 logs client of a region, creating it on first use."""
        client = self._clients.get(region)
        if client is None:
            client = self.session.client("logs", region_name=region, config=self._boto_config)
            self._clients[region] = client
        return client

    async def _request(self, region: str, operation: str, **params: Any) -> Dict[str, Any]:
        # Clients are created on the loop thread; boto3 clients themselves are thread-safe.
        method = getattr(self.client_for(region), operation)
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(self._executor, functools.partial(method, **params))
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            if code in THROTTLING_CODES:
                raise ThrottledError(str(e), code=code) from e
            raise ProviderError(str(e), code=code) from e
        except BotoCoreError as e:
            raise ProviderError(str(e)) from e

    async def describe_log_groups(self, region: str, next_token: Optional[str] = None) -> DescribeLogGroupsPage:
        params: Dict[str, Any] = {}
        if self.include_linked_accounts:
            params["includeLinkedAccounts"] = True
        if next_token:
            params["nextToken"] = next_token
        response = await self._request(region, "describe_log_groups", **params)
        return DescribeLogGroupsPage(
            log_groups=response.get("logGroups", []) or [],
            next_token=response.get("nextToken") or None,
        )

    async def delete_log_group(self, name: str, region: str) -> None:
        await self._request(region, "delete_log_group", logGroupName=name)

    async def put_retention_policy(self, name: str, retention_in_days: int, region: str) -> None:
        await self._request(region, "put_retention_policy", logGroupName=name, retentionInDays=retention_in_days)

    async def delete_retention_policy(self, name: str, region: str) -> None:
        await self._request(region, "delete_retention_policy", logGroupName=name)

    def close(self) -> None:
        # In-flight SDK calls are not interrupted; wait=False lets the process exit.
        self._executor.shutdown(wait=False)
        logger.debug("closed cloudwatch logs client", regions=sorted(self._clients))
