"""
Filter expressions over log group entries.

An expression is ``KEY OP VALUE``, e.g. ``name =~* ^prod-`` or
``retention < 1week``. Expressions are parsed into Filter triples, then
compiled into predicates that are AND-ed together.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Sequence

from llcm.errors import BadArgumentError, BadSyntaxError, BadValueError
from llcm.lifecycle.models import DesiredState, LogGroupEntry

Predicate = Callable[[LogGroupEntry], bool]


class FilterKey(Enum):
    NAME = "name"
    SOURCE = "source"
    CLASS = "class"
    ELAPSED = "elapsed"
    RETENTION = "retention"
    BYTES = "bytes"

    def __str__(self) -> str:
        return self.value

    @property
    def is_string(self) -> bool:
        return self in _STRING_KEYS


_STRING_KEYS = {FilterKey.NAME, FilterKey.SOURCE, FilterKey.CLASS}

# Keys whose value may also be given as a desired state token
_DURATION_KEYS = {FilterKey.ELAPSED, FilterKey.RETENTION}


class FilterOperator(Enum):
    GT = ">"
    GE = ">="
    LT = "<"
    LE = "<="
    EQ = "=="
    NE = "!="
    EQ_CI = "==*"
    NE_CI = "!=*"
    REGEX = "=~"
    REGEX_CI = "=~*"
    NOT_REGEX = "!~"
    NOT_REGEX_CI = "!~*"

    def __str__(self) -> str:
        return self.value


_NUMERIC_OPERATORS = {
    FilterOperator.GT,
    FilterOperator.GE,
    FilterOperator.LT,
    FilterOperator.LE,
    FilterOperator.EQ,
    FilterOperator.NE,
}

_STRING_OPERATORS = {
    FilterOperator.EQ,
    FilterOperator.NE,
    FilterOperator.EQ_CI,
    FilterOperator.NE_CI,
    FilterOperator.REGEX,
    FilterOperator.REGEX_CI,
    FilterOperator.NOT_REGEX,
    FilterOperator.NOT_REGEX_CI,
}

_REGEX_OPERATORS = {
    FilterOperator.REGEX,
    FilterOperator.REGEX_CI,
    FilterOperator.NOT_REGEX,
    FilterOperator.NOT_REGEX_CI,
}

_CASE_INSENSITIVE_OPERATORS = {
    FilterOperator.EQ_CI,
    FilterOperator.NE_CI,
    FilterOperator.REGEX_CI,
    FilterOperator.NOT_REGEX_CI,
}

_LEGACY_OCTAL = re.compile(r"[+-]?0[0-7_]+$")


@dataclass(frozen=True)
class Filter:
    """A parsed ``KEY OP VALUE`` expression."""
    key: FilterKey
    operator: FilterOperator
    value: str

    def __str__(self) -> str:
        return f"{self.key} {self.operator} {self.value}"


def parse_filter(expression: str) -> Filter:
    """
    Parse a single filter expression.

    Tokens beyond the third are joined with one space and become the value.

    Raises:
        BadSyntaxError: If the expression is blank, has fewer than three
            tokens, or names an unknown key or operator.
    """
    tokens = expression.split()
    if not tokens:
        raise BadSyntaxError("empty filter expression")
    if len(tokens) < 3:
        raise BadSyntaxError(f"filter must be 'KEY OP VALUE': {expression!r}")

    key_token, op_token = tokens[0], tokens[1]
    try:
        key = FilterKey(key_token)
    except ValueError:
        raise BadSyntaxError(f"unknown filter key: {key_token!r}") from None
    try:
        operator = FilterOperator(op_token)
    except ValueError:
        raise BadSyntaxError(f"unknown filter operator: {op_token!r}") from None

    return Filter(key=key, operator=operator, value=" ".join(tokens[2:]))


def parse_filters(expressions: Sequence[str]) -> List[Filter]:
    return [parse_filter(expression) for expression in expressions]


def _parse_int_value(key: FilterKey, value: str) -> int:
    # C-style octal, e.g. 010 == 8
    base = 8 if _LEGACY_OCTAL.match(value) else 0
    try:
        return int(value, base)
    except ValueError:
        pass
    if key in _DURATION_KEYS:
        try:
            state = DesiredState.parse(value)
        except BadArgumentError:
            state = None
        if state is not None and state > 0:
            return int(state)
    raise BadValueError(f"invalid value for {key}: {value!r}")


def _entry_value(key: FilterKey, entry: LogGroupEntry):
    if key is FilterKey.NAME:
        return entry.name
    if key is FilterKey.SOURCE:
        return entry.source
    if key is FilterKey.CLASS:
        return entry.log_group_class
    if key is FilterKey.ELAPSED:
        return entry.elapsed_days
    if key is FilterKey.RETENTION:
        return entry.retention_in_days
    return entry.stored_bytes


def _compile_numeric(f: Filter) -> Predicate:
    expected = _parse_int_value(f.key, f.value)
    key, op = f.key, f.operator

    def predicate(entry: LogGroupEntry) -> bool:
        actual = _entry_value(key, entry)
        if op is FilterOperator.GT:
            return actual > expected
        if op is FilterOperator.GE:
            return actual >= expected
        if op is FilterOperator.LT:
            return actual < expected
        if op is FilterOperator.LE:
            return actual <= expected
        if op is FilterOperator.EQ:
            return actual == expected
        return actual != expected

    return predicate


def _compile_string(f: Filter) -> Predicate:
    key, op = f.key, f.operator
    negate = op in (FilterOperator.NE, FilterOperator.NE_CI, FilterOperator.NOT_REGEX, FilterOperator.NOT_REGEX_CI)

    if op in _REGEX_OPERATORS:
        pattern = f.value
        if op in _CASE_INSENSITIVE_OPERATORS:
            pattern = "(?i)" + pattern
        try:
            regex = re.compile(pattern)
        except re.error as e:
            raise BadValueError(f"invalid regular expression {f.value!r}: {e}") from e

        def predicate(entry: LogGroupEntry) -> bool:
            return (regex.search(_entry_value(key, entry)) is not None) != negate

        return predicate

    if op in _CASE_INSENSITIVE_OPERATORS:
        expected = f.value.casefold()

        def predicate(entry: LogGroupEntry) -> bool:
            return (_entry_value(key, entry).casefold() == expected) != negate

        return predicate

    expected = f.value

    def predicate(entry: LogGroupEntry) -> bool:
        return (_entry_value(key, entry) == expected) != negate

    return predicate


def compile_filter(f: Filter) -> Predicate:
    """
    Turn a Filter into a predicate over LogGroupEntry.

    Raises:
        BadSyntaxError: If the operator does not apply to the key's type.
        BadValueError: If the value cannot be interpreted for the key.
    """
    if f.key.is_string:
        if f.operator not in _STRING_OPERATORS:
            raise BadSyntaxError(f"operator {f.operator} is not valid for {f.key}")
        return _compile_string(f)
    if f.operator not in _NUMERIC_OPERATORS:
        raise BadSyntaxError(f"operator {f.operator} is not valid for {f.key}")
    return _compile_numeric(f)


def compile_filters(filters: Sequence[Filter]) -> List[Predicate]:
    return [compile_filter(f) for f in filters]


def matches(entry: LogGroupEntry, predicates: Sequence[Predicate]) -> bool:
    """True when every predicate accepts the entry. No predicates accept everything."""
    return all(predicate(entry) for predicate in predicates)
