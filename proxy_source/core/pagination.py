from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

DEFAULT_LIMIT = 20


@dataclass(frozen=True)
class PruneWindow:
    """
    The slice of a Source's derived data that is exposed: data[start:start + limit].
    """
    start: int = 0
    limit: int = DEFAULT_LIMIT

    def __post_init__(self) -> None:
        if self.start < 0:
            raise ValueError(f"PruneWindow.start must be >= 0, got {self.start}")
        if self.limit <= 0:
            raise ValueError(f"PruneWindow.limit must be > 0, got {self.limit}")

    def to_dict(self) -> Dict[str, int]:
        return {"start": self.start, "limit": self.limit}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> PruneWindow:
        return cls(
            start=int(data.get("start", 0) or 0),
            limit=int(data.get("limit") or DEFAULT_LIMIT),
        )


@dataclass(frozen=True)
class Pagination:
    """
    Page metadata derived from (total, window). Never stored; rebuilt on every read.

    Note: 'last_page' is total // per_page and 'to' is not clamped to total,
    so a trailing partial page is not counted.
    """
    total: int
    current_page: int
    last_page: int
    per_page: int
    from_: int
    to: int
    has_previous_page: bool
    has_next_page: bool

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["from"] = data.pop("from_")
        return data


def _bounds(window: Optional[PruneWindow]) -> tuple[int, int]:
    limit = (window.limit if window else 0) or DEFAULT_LIMIT
    start = (window.start if window else 0) or 0
    return start, limit


def compute_pagination(total: int, window: Optional[PruneWindow]) -> Pagination:
    start, limit = _bounds(window)
    return Pagination(
        total=total,
        current_page=start // limit + 1,
        last_page=total // limit,
        per_page=limit,
        from_=start,
        to=start + limit,
        has_previous_page=start > 0,
        has_next_page=(start + limit) < total,
    )


def previous_start(total: int, window: Optional[PruneWindow]) -> int:
    start, limit = _bounds(window)
    return max(start - limit, 0)


def next_start(total: int, window: Optional[PruneWindow]) -> int:
    start, limit = _bounds(window)
    return min(start + limit, (total // limit) * limit)
