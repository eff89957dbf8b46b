from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional

import pandas as pd

from core_helpers import clean_text


@dataclass(frozen=True)
class Cell:
    present: bool
    payload: Any = None


ABSENT = Cell(present=False)


@dataclass(frozen=True)
class Matrix:
    row_keys: list[str]
    col_keys: list[str]
    cells: dict[tuple[str, str], Any] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.row_keys or not self.col_keys

    def cell(self, row_key: str, col_key: str) -> Cell:
        k = (row_key, col_key)
        if k in self.cells:
            return Cell(present=True, payload=self.cells[k])
        return ABSENT

    def present_count(self) -> int:
        return len(self.cells)


def order_keys(keys: Iterable[str], priority: Optional[list[str]] = None) -> list[str]:
    uniq = set(keys)
    if not priority:
        return sorted(uniq)
    head = []
    for p in priority:
        if p in uniq and p not in head:
            head.append(p)
    tail = sorted(k for k in uniq if k not in head)
    return head + tail


def _key(fn: Callable[[Any], Any], row: Any) -> str:
    try:
        return clean_text(fn(row))
    except (KeyError, AttributeError, TypeError):
        return ""


def build_matrix(
    rows: Iterable[Any],
    row_key_of: Callable[[Any], Any],
    col_key_of: Callable[[Any], Any],
    payload_of: Callable[[Any], Any],
    column_priority: Optional[list[str]] = None,
    include_rows: Optional[Iterable[str]] = None,
    include_cols: Optional[Iterable[str]] = None,
) -> Matrix:
    """Pivot flat rows into a dense row-key x column-key matrix.

    Rows with a blank row or column key are dropped. When two rows share a
    (row, column) pair the later one wins. ``include_rows`` and
    ``include_cols`` add keys that must show up even with no rows behind
    them (e.g. every slot of a profile).
    """
    row_set: set[str] = {clean_text(k) for k in include_rows or [] if clean_text(k)}
    col_set: set[str] = {clean_text(k) for k in include_cols or [] if clean_text(k)}
    cells: dict[tuple[str, str], Any] = {}

    for row in rows or []:
        rk = _key(row_key_of, row)
        ck = _key(col_key_of, row)
        if not rk or not ck:
            continue
        row_set.add(rk)
        col_set.add(ck)
        cells[(rk, ck)] = payload_of(row)

    return Matrix(
        row_keys=order_keys(row_set),
        col_keys=order_keys(col_set, column_priority),
        cells=cells,
    )


def matrix_frame(
    matrix: Matrix,
    render: Callable[[Any], str],
    empty: str = "",
    index_name: str = "",
) -> pd.DataFrame:
    data = {
        c: [render(matrix.cell(r, c).payload) if matrix.cell(r, c).present else empty for r in matrix.row_keys]
        for c in matrix.col_keys
    }
    out = pd.DataFrame(data, index=pd.Index(matrix.row_keys, name=index_name or None), columns=matrix.col_keys)
    return out


def cell_rows(
    rows: Iterable[Any],
    row_key_of: Callable[[Any], Any],
    col_key_of: Callable[[Any], Any],
    row_key: str,
    col_key: str,
) -> list[Any]:
    """Every input row behind one matrix cell, in input order.

    A cell shows only the last of these; editing has to pick one.
    """
    return [r for r in rows or [] if _key(row_key_of, r) == row_key and _key(col_key_of, r) == col_key]
