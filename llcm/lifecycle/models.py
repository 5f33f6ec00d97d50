"""
Data models for the lifecycle manager.

This module contains the enums, the neutral log group record and the two
collected-data shapes handed to renderers.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum, IntEnum
from typing import Any, ClassVar, Dict, List, Optional, Union

from llcm.errors import BadArgumentError

# Provider value meaning "never expire" after normalisation
INFINITE_RETENTION = 9999

TOTAL_STORED_BYTES_LABEL = "storedBytes"
TOTAL_REDUCIBLE_BYTES_LABEL = "reducibleBytes"
TOTAL_REMAINING_BYTES_LABEL = "remainingBytes"


class DesiredState(IntEnum):
    """Target state of a log group: delete it, keep it forever, or retain for N days."""
    NONE = -9999
    DELETE = 0
    ONE_DAY = 1
    THREE_DAYS = 3
    FIVE_DAYS = 5
    ONE_WEEK = 7
    TWO_WEEKS = 14
    ONE_MONTH = 30
    TWO_MONTHS = 60
    THREE_MONTHS = 90
    FOUR_MONTHS = 120
    FIVE_MONTHS = 150
    SIX_MONTHS = 180
    ONE_YEAR = 365
    THIRTEEN_MONTHS = 400
    EIGHTEEN_MONTHS = 545
    TWO_YEARS = 731
    THREE_YEARS = 1096
    FIVE_YEARS = 1827
    SIX_YEARS = 2192
    SEVEN_YEARS = 2557
    EIGHT_YEARS = 2922
    NINE_YEARS = 3288
    TEN_YEARS = 3653
    INFINITE = INFINITE_RETENTION

    def __str__(self) -> str:
        return _DESIRED_STATE_TOKENS[self]

    @classmethod
    def parse(cls, token: str) -> "DesiredState":
        """
        Parse a readable token such as '1week' or 'delete'.

        Raises:
            BadArgumentError: If the token is unknown or means 'none'.
        """
        state = _DESIRED_STATE_BY_TOKEN.get(token)
        if state is None or state is cls.NONE:
            raise BadArgumentError(f"unsupported desired state: {token!r}")
        return state

    @classmethod
    def tokens(cls) -> List[str]:
        return [str(s) for s in cls if s is not cls.NONE]


_DESIRED_STATE_TOKENS: Dict[DesiredState, str] = {
    DesiredState.NONE: "none",
    DesiredState.DELETE: "delete",
    DesiredState.ONE_DAY: "1day",
    DesiredState.THREE_DAYS: "3days",
    DesiredState.FIVE_DAYS: "5days",
    DesiredState.ONE_WEEK: "1week",
    DesiredState.TWO_WEEKS: "2weeks",
    DesiredState.ONE_MONTH: "1month",
    DesiredState.TWO_MONTHS: "2months",
    DesiredState.THREE_MONTHS: "3months",
    DesiredState.FOUR_MONTHS: "4months",
    DesiredState.FIVE_MONTHS: "5months",
    DesiredState.SIX_MONTHS: "6months",
    DesiredState.ONE_YEAR: "1year",
    DesiredState.THIRTEEN_MONTHS: "13months",
    DesiredState.EIGHTEEN_MONTHS: "18months",
    DesiredState.TWO_YEARS: "2years",
    DesiredState.THREE_YEARS: "3years",
    DesiredState.FIVE_YEARS: "5years",
    DesiredState.SIX_YEARS: "6years",
    DesiredState.SEVEN_YEARS: "7years",
    DesiredState.EIGHT_YEARS: "8years",
    DesiredState.NINE_YEARS: "9years",
    DesiredState.TEN_YEARS: "10years",
    DesiredState.INFINITE: "infinite",
}

_DESIRED_STATE_BY_TOKEN: Dict[str, DesiredState] = {v: k for k, v in _DESIRED_STATE_TOKENS.items()}


class OutputType(Enum):
    """Rendering formats."""
    JSON = "json"
    PRETTY_JSON = "prettyjson"
    TEXT = "text"
    COMPRESSED_TEXT = "compressedtext"
    MARKDOWN = "markdown"
    BACKLOG = "backlog"
    TSV = "tsv"
    CHART = "chart"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, token: str) -> "OutputType":
        try:
            return cls(token)
        except ValueError:
            raise BadArgumentError(f"unsupported output type: {token!r}") from None


def parse_source(arn: Optional[str]) -> str:
    """
    Derive the emitting account from a log group ARN.

    Returns "<account-id>/<region>", or "" when the ARN is missing,
    malformed or lacks either part.
    """
    if not arn:
        return ""
    parts = arn.split(":", 5)
    if len(parts) < 6 or parts[0] != "arn":
        return ""
    region, account_id = parts[3], parts[4]
    if not account_id or not region:
        return ""
    return f"{account_id}/{region}"


@dataclass
class LogGroupEntry:
    """Neutral log group record passed between the engine and handlers."""
    name: str
    region: str
    source: str
    log_group_class: str
    created_at: datetime
    elapsed_days: int
    retention_in_days: int
    stored_bytes: int

    @classmethod
    def from_log_group(cls, log_group: Dict[str, Any], region: str, now: datetime) -> "LogGroupEntry":
        """
        Build an entry from a describe-log-groups record.

        A missing or zero retentionInDays means the group never expires and
        is normalised to 9999.
        """
        created_at = datetime.fromtimestamp((log_group.get("creationTime") or 0) / 1000, tz=timezone.utc)
        return cls(
            name=log_group.get("logGroupName", ""),
            region=region,
            source=parse_source(log_group.get("logGroupArn")),
            log_group_class=log_group.get("logGroupClass") or "",
            created_at=created_at,
            elapsed_days=(now - created_at) // timedelta(days=1),
            retention_in_days=log_group.get("retentionInDays") or INFINITE_RETENTION,
            stored_bytes=max(0, log_group.get("storedBytes") or 0),
        )

    def to_row(self) -> List[Any]:
        return [
            self.name,
            self.region,
            self.source,
            self.log_group_class,
            format_timestamp(self.created_at),
            self.elapsed_days,
            self.retention_in_days,
            self.stored_bytes,
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "LogGroupName": self.name,
            "Region": self.region,
            "Source": self.source,
            "Class": self.log_group_class,
            "CreatedAt": format_timestamp(self.created_at),
            "ElapsedDays": self.elapsed_days,
            "RetentionInDays": self.retention_in_days,
            "StoredBytes": self.stored_bytes,
        }


def format_timestamp(value: datetime) -> str:
    """RFC 3339 in UTC with a Z suffix."""
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


LIST_HEADER = [
    "Name",
    "Region",
    "Source",
    "Class",
    "CreatedAt",
    "ElapsedDays",
    "RetentionInDays",
    "StoredBytes",
]

PREVIEW_HEADER = LIST_HEADER + [
    "BytesPerDay",
    "DesiredState",
    "ReductionInDays",
    "ReducibleBytes",
    "RemainingBytes",
]


@dataclass
class ListEntry:
    """Log group as shown by list."""
    HEADER: ClassVar[List[str]] = LIST_HEADER

    entry: LogGroupEntry

    @property
    def name(self) -> str:
        return self.entry.name

    @property
    def stored_bytes(self) -> int:
        return self.entry.stored_bytes

    def to_row(self) -> List[Any]:
        return self.entry.to_row()

    def to_dict(self) -> Dict[str, Any]:
        return self.entry.to_dict()


@dataclass
class PreviewEntry:
    """Log group with the desired state and its simulated effect."""
    HEADER: ClassVar[List[str]] = PREVIEW_HEADER

    entry: LogGroupEntry
    desired_state: DesiredState
    bytes_per_day: int = 0
    reduction_in_days: int = 0
    reducible_bytes: int = 0
    remaining_bytes: int = 0

    @property
    def name(self) -> str:
        return self.entry.name

    @property
    def stored_bytes(self) -> int:
        return self.entry.stored_bytes

    def to_row(self) -> List[Any]:
        return self.entry.to_row() + [
            self.bytes_per_day,
            str(self.desired_state),
            self.reduction_in_days,
            self.reducible_bytes,
            self.remaining_bytes,
        ]

    def to_dict(self) -> Dict[str, Any]:
        data = self.entry.to_dict()
        data.update({
            "BytesPerDay": self.bytes_per_day,
            "DesiredState": str(self.desired_state),
            "ReductionInDays": self.reduction_in_days,
            "ReducibleBytes": self.reducible_bytes,
            "RemainingBytes": self.remaining_bytes,
        })
        return data


Entry = Union[ListEntry, PreviewEntry]


@dataclass
class ListEntryData:
    """Result of list."""
    entries: List[ListEntry] = field(default_factory=list)
    total_stored_bytes: int = 0
    header: List[str] = field(default_factory=lambda: list(LIST_HEADER))

    def totals(self) -> Dict[str, int]:
        return {TOTAL_STORED_BYTES_LABEL: self.total_stored_bytes}


@dataclass
class PreviewEntryData:
    """Result of preview."""
    entries: List[PreviewEntry] = field(default_factory=list)
    total_stored_bytes: int = 0
    total_reducible_bytes: int = 0
    total_remaining_bytes: int = 0
    header: List[str] = field(default_factory=lambda: list(PREVIEW_HEADER))

    def totals(self) -> Dict[str, int]:
        return {
            TOTAL_STORED_BYTES_LABEL: self.total_stored_bytes,
            TOTAL_REDUCIBLE_BYTES_LABEL: self.total_reducible_bytes,
            TOTAL_REMAINING_BYTES_LABEL: self.total_remaining_bytes,
        }


EntryData = Union[ListEntryData, PreviewEntryData]


def sort_entries(data: EntryData) -> None:
    """Sort entries in place by stored bytes (largest first), then name."""
    data.entries.sort(key=lambda e: (-e.stored_bytes, e.name))
