from dataclasses import dataclass, field
from typing import Optional

from config import ALL_OPTION
from core_helpers import apply_filters, compute_options, matches_search, resolve_filter


@dataclass(frozen=True)
class FilterSpec:
    field: str
    label: str
    preferred_default: Optional[str] = None
    # Coercing filters always hold a real option; others may be "All".
    coerce: bool = False

    @property
    def initial(self) -> str:
        if self.coerce:
            return self.preferred_default or ""
        return ALL_OPTION


@dataclass
class PageState:
    """Rows, options and filter choices owned by one page view.

    Options are recomputed from the full row set on every ``load`` and the
    coercing filters are re-resolved against them, so a fresh fetch never
    leaves a filter pointing at a value that no longer exists.
    """

    specs: list[FilterSpec]
    rows: list[dict] = field(default_factory=list)
    options: dict[str, list[str]] = field(default_factory=dict)
    filters: dict[str, str] = field(default_factory=dict)
    search: str = ""
    search_field: Optional[str] = None
    error: str = ""
    loaded: bool = False

    def __post_init__(self) -> None:
        for spec in self.specs:
            self.filters.setdefault(spec.field, spec.initial)
            self.options.setdefault(spec.field, [])

    def spec(self, name: str) -> FilterSpec:
        for s in self.specs:
            if s.field == name:
                return s
        raise KeyError(name)

    def load(self, rows: list[dict], error: str = "") -> None:
        self.rows = list(rows or [])
        self.error = error
        self.loaded = True
        self.options = {s.field: compute_options(self.rows, s.field) for s in self.specs}
        self._coerce()

    def _coerce(self) -> None:
        for s in self.specs:
            if not s.coerce:
                continue
            self.filters[s.field] = resolve_filter(
                self.options.get(s.field, []), self.filters.get(s.field, ""), s.preferred_default
            )

    def set_filter(self, name: str, value: str) -> None:
        self.spec(name)
        self.filters[name] = value or ""

    def choices(self, name: str) -> list[str]:
        opts = self.options.get(name, [])
        if self.spec(name).coerce:
            return list(opts)
        return [ALL_OPTION] + list(opts)

    def filtered_rows(self) -> list[dict]:
        out = apply_filters(self.rows, self.filters)
        if self.search_field and self.search.strip():
            out = [r for r in out if matches_search(r.get(self.search_field), self.search)]
        return out

    def reset(self) -> None:
        self.rows = []
        self.error = ""
        self.loaded = False
