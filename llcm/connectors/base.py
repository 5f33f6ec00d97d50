"""
Abstract base class for CloudWatch Logs clients.

The lifecycle manager only needs four operations from the log service. Real
and in-memory implementations plug in behind this interface, which lets the
engine be driven deterministically in tests.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class DescribeLogGroupsPage:
    """One page of a describe-log-groups response."""
    log_groups: List[Dict[str, Any]] = field(default_factory=list)
    next_token: Optional[str] = None


class LogsAPI(ABC):
    """
    Narrow capability interface over the log service.

    Every operation takes the target region explicitly; implementations
    must not depend on a default region.

    Log group dictionaries use the service's wire keys: logGroupName,
    logGroupArn, logGroupClass, creationTime (epoch ms), retentionInDays
    (absent when the group never expires) and storedBytes.
    """

    @abstractmethod
    async def describe_log_groups(self, region: str, next_token: Optional[str] = None) -> DescribeLogGroupsPage:
        """
        Fetch one page of log groups.

        Args:
            region: Region to query
            next_token: Continuation token from the previous page, None for the first page

        Returns:
            DescribeLogGroupsPage: Log groups and the token of the next page (None when last)
        """
        pass

    @abstractmethod
    async def delete_log_group(self, name: str, region: str) -> None:
        """Delete a log group."""
        pass

    @abstractmethod
    async def put_retention_policy(self, name: str, retention_in_days: int, region: str) -> None:
        """Set the retention of a log group in days."""
        pass

    @abstractmethod
    async def delete_retention_policy(self, name: str, region: str) -> None:
        """Remove the retention policy so the log group never expires."""
        pass

    def close(self) -> None:
        """Release resources held by the client."""
