from typing import Any, Callable, Iterable, Optional, Union

from config import ALL_OPTION

Selector = Union[str, Callable[[dict], Any]]


def clean_text(v: Any) -> str:
    if v is None:
        return ""
    return str(v).strip()


def field_value(row: Any, dimension: Selector) -> str:
    if callable(dimension):
        try:
            return clean_text(dimension(row))
        except (KeyError, AttributeError, TypeError):
            return ""
    if not isinstance(row, dict):
        return ""
    return clean_text(row.get(dimension))


def compute_options(rows: Iterable[dict], dimension: Selector) -> list[str]:
    """Sorted distinct non-blank values of ``dimension`` across ``rows``.

    Always fed the unfiltered rows so that one filter never narrows the
    choices offered by another.
    """
    seen: set[str] = set()
    for r in rows or []:
        v = field_value(r, dimension)
        if v:
            seen.add(v)
    return sorted(seen)


def resolve_filter(options: list[str], current: str, preferred_default: Optional[str] = None) -> str:
    if not options:
        return current
    if current in options:
        return current
    if preferred_default is not None and preferred_default in options:
        return preferred_default
    return options[0]


def is_unconstrained(value: Optional[str]) -> bool:
    return not value or value == ALL_OPTION


def row_matches(row: dict, filters: dict[str, str]) -> bool:
    for field, value in filters.items():
        if is_unconstrained(value):
            continue
        if field_value(row, field) != value:
            return False
    return True


def apply_filters(rows: Iterable[dict], filters: dict[str, str]) -> list[dict]:
    return [r for r in rows or [] if row_matches(r, filters)]


def matches_search(value: Any, query: str) -> bool:
    q = clean_text(query).lower()
    if not q:
        return True
    return q in clean_text(value).lower()


def parse_int(v: Any) -> Optional[int]:
    try:
        return int(str(v).strip())
    except (TypeError, ValueError):
        return None
