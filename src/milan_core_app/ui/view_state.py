from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ViewStatus(str, Enum):
    LOADING = "loading"
    EMPTY = "empty"
    SUCCESS = "success"
    PARTIAL_ERROR = "partial_error"
    FATAL_ERROR = "fatal_error"


_BLOCKING = frozenset({ViewStatus.LOADING, ViewStatus.FATAL_ERROR})


@dataclass(frozen=True)
class ViewState:
    status: ViewStatus
    message: str | None = None
    trace_id: str | None = None
    data_available: bool = False

    @property
    def blocking(self) -> bool:
        """Inputs stay disabled while loading or after a failure with nothing to show."""
        return self.status in _BLOCKING

    def render(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "message": self.message,
            "trace_id": self.trace_id,
            "data_available": self.data_available,
            "blocking": self.blocking,
        }


def resolve_state(
    *,
    is_loading: bool,
    error: str | None,
    has_data: bool,
    trace_id: str | None = None,
    empty_message: str = "No data found",
) -> ViewState:
    # An error with data already on screen keeps the data visible.
    if is_loading:
        status, message = ViewStatus.LOADING, "Loading..."
    elif error:
        status, message = (ViewStatus.PARTIAL_ERROR if has_data else ViewStatus.FATAL_ERROR), error
    elif has_data:
        status, message = ViewStatus.SUCCESS, None
    else:
        status, message = ViewStatus.EMPTY, empty_message
    return ViewState(status=status, message=message, trace_id=trace_id, data_available=has_data)
