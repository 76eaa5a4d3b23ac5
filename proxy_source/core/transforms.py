from __future__ import annotations

import json
import numbers
import operator as op
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Sequence, Tuple

import numpy as np
import pandas as pd

from .pagination import PruneWindow

Record = Mapping[str, Any]
HandleFunc = Callable[[List[Record], Any], List[Record]]

_COMPARATORS: Dict[str, Callable[[Any, Any], Any]] = {
    "eq": op.eq,
    "ne": op.ne,
    "lt": op.lt,
    "le": op.le,
    "gt": op.gt,
    "ge": op.ge,
}
_MEMBERSHIP = ("in", "not_in")
OPERATORS = frozenset([*_COMPARATORS, *_MEMBERSHIP, "contains"])


@dataclass(frozen=True)
class Filter:
    """
    A single record predicate: record[field] <operator> value.

    Filters in a list are AND-combined. 'in' / 'not_in' take a list, tuple or set of values.
    """
    field: str
    value: Any
    operator: str = "eq"

    def __post_init__(self) -> None:
        if self.operator not in OPERATORS:
            raise ValueError(f"Unknown filter operator '{self.operator}'")
        if self.operator in _MEMBERSHIP and not isinstance(self.value, (list, tuple, set, frozenset)):
            raise ValueError(
                f"Filter '{self.operator}' on '{self.field}' needs a list of values, got {type(self.value).__name__}"
            )

    def to_dict(self) -> Dict[str, Any]:
        return {"field": self.field, "value": self.value, "operator": self.operator}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Filter:
        return cls(field=data["field"], value=data.get("value"), operator=data.get("operator", "eq"))


@dataclass(frozen=True)
class Sorter:
    field: str
    descending: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"field": self.field, "descending": self.descending}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Sorter:
        return cls(field=data["field"], descending=bool(data.get("descending", False)))


def _frame(data: Sequence[Record]) -> pd.DataFrame:
    # Positional index so masks/orderings map straight back onto 'data'.
    # object dtype keeps record values as-is (no int -> float64 upcast around missing values)
    return pd.DataFrame([dict(r) for r in data], index=pd.RangeIndex(len(data)), dtype=object)


def _is_missing(value: Any) -> bool:
    return pd.api.types.is_scalar(value) and bool(pd.isna(value))


def _mask(column: pd.Series, flt: Filter) -> np.ndarray:
    present = column.notna().to_numpy()

    if flt.operator == "in":
        return column.isin(list(flt.value)).to_numpy() & present
    if flt.operator == "not_in":
        return ~column.isin(list(flt.value)).to_numpy() | ~present
    if flt.operator == "contains":
        compare = _contains
    else:
        compare = _COMPARATORS[flt.operator]

    hits = np.array(
        [bool(ok) and _matches(compare, value, flt.value) for ok, value in zip(present, column)],
        dtype=bool,
    )
    if flt.operator == "ne":
        hits |= ~present
    return hits


def _contains(value: Any, needle: Any) -> bool:
    if not isinstance(value, (str, list, tuple, set, frozenset, dict)):
        return False
    return needle in value


def _matches(compare: Callable[[Any, Any], Any], value: Any, criteria: Any) -> bool:
    # Incomparable types (e.g. "a" < 3) simply do not match
    try:
        return bool(compare(value, criteria))
    except TypeError:
        return False


def filter_records(data: List[Record], filters: Sequence[Filter]) -> List[Record]:
    """
    Keep the records matching every filter. Records missing a filtered field
    only match 'ne' / 'not_in'.
    """
    if not data or not filters:
        return list(data)

    df = _frame(data)
    mask = np.ones(len(data), dtype=bool)
    for flt in filters:
        if flt.field in df.columns:
            mask &= _mask(df[flt.field], flt)
        elif flt.operator not in ("ne", "not_in"):
            mask[:] = False

    return [data[i] for i in np.flatnonzero(mask)]


def _rank_key(value: Any) -> Tuple[int, Any]:
    """Total order across types: numbers, then strings, then anything else by type name + repr."""
    if isinstance(value, numbers.Real):
        return 0, value
    if isinstance(value, str):
        return 1, value
    return 2, (type(value).__name__, repr(value))


def _mixed_sort(column: pd.Series, descending: bool) -> List[int]:
    present = [i for i, v in enumerate(column) if not _is_missing(v)]
    missing = [i for i, v in enumerate(column) if _is_missing(v)]
    # sorted() stays stable with reverse=True
    present.sort(key=lambda i: _rank_key(column.iloc[i]), reverse=descending)
    return present + missing


def sort_records(data: List[Record], sorter: Sorter) -> List[Record]:
    """
    Stable sort by one field; missing values go last. Unknown field leaves order unchanged.
    Columns mixing incomparable types (ints and strings...) fall back to a
    type-ranked order instead of failing.
    """
    if not data:
        return []

    df = _frame(data)
    if sorter.field not in df.columns:
        return list(data)

    try:
        order = list(df.sort_values(
            by=sorter.field,
            ascending=not sorter.descending,
            kind="mergesort",
            na_position="last",
        ).index)
    except TypeError:
        order = _mixed_sort(df[sorter.field], sorter.descending)
    return [data[i] for i in order]


def prune_records(data: List[Record], window: PruneWindow) -> List[Record]:
    return list(data[window.start:window.start + window.limit])


def _group_token(value: Any) -> Any:
    try:
        hash(value)
    except TypeError:
        # lists / dicts group by their canonical JSON form
        return ("unhashable", json.dumps(value, sort_keys=True, default=str))
    return value


def group_records(data: List[Record], key: str) -> List[Dict[str, Any]]:
    """
    Group records by the value of 'key', in order of first appearance.
    Records without the key end up in the None group; unhashable values
    (lists, dicts) group by equality of their JSON form.
    """
    if not data:
        return []

    codes, uniques = pd.factorize(
        pd.Series([_group_token(r.get(key)) for r in data], dtype=object),
        sort=False,
        use_na_sentinel=False,
    )

    groups: List[Dict[str, Any]] = []
    for code in range(len(uniques)):
        positions = np.flatnonzero(codes == code)
        groups.append({
            "key": data[positions[0]].get(key),
            "data": [data[i] for i in positions],
        })
    return groups
