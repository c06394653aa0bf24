"""Result envelopes returned by every public service operation."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")

SOURCE = "componentkb"
VERSION = "2.0"


class ErrorCode(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    SEARCH_ERROR = "SEARCH_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    COMPONENT_NOT_FOUND = "COMPONENT_NOT_FOUND"


@dataclass(frozen=True)
class ErrorDetail:
    code: ErrorCode
    message: str
    details: str | None = None


@dataclass(frozen=True)
class ResultMetadata:
    tool: str
    execution_time_ms: float
    source: str = SOURCE
    version: str = VERSION


@dataclass(frozen=True)
class Success(Generic[T]):
    """Successful operation; ``notices`` carry non-fatal problems."""

    data: T
    metadata: ResultMetadata
    notices: tuple[ErrorDetail, ...] = ()

    @property
    def success(self) -> bool:
        return True

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": True,
            "data": _to_plain(self.data),
            "notices": [_to_plain(n) for n in self.notices],
            "metadata": _to_plain(self.metadata),
        }


@dataclass(frozen=True)
class Failure:
    """Failed operation with a stable error code and optional partial data."""

    errors: tuple[ErrorDetail, ...]
    metadata: ResultMetadata
    partial: Any = None

    @property
    def success(self) -> bool:
        return False

    @property
    def code(self) -> ErrorCode:
        return self.errors[0].code

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": False,
            "data": _to_plain(self.partial),
            "errors": [_to_plain(e) for e in self.errors],
            "metadata": _to_plain(self.metadata),
        }


Result = Union[Success[T], Failure]


def _to_plain(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: _to_plain(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {str(k): _to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_plain(v) for v in value]
    if isinstance(value, (set, frozenset)):
        return sorted(_to_plain(v) for v in value)
    return value


__all__ = [
    "ErrorCode",
    "ErrorDetail",
    "Failure",
    "Result",
    "ResultMetadata",
    "Success",
]
