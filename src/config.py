from dataclasses import dataclass

APP_TITLE = "IDNML Config Admin"

ALL_OPTION = "All"

BIDDER_CONFIGS_VIEW = "bidder_configs_enriched"
BIDDER_CONFIGS_TABLE = "bidder_configs"
SLOT_CONFIGS_VIEW = "slot_configs_enriched"
PROFILES_TABLE = "config_profiles"

BIDDER_ROW_COLUMNS = [
    "bidder_config_id",
    "bidder",
    "params",
    "slot_config_id",
    "slot",
    "profile_id",
    "profile_name",
    "geo",
    "device",
    "page_type",
]

PROFILE_SELECT = """
id,
name,
environment_id,
geo_id,
device_id,
page_type_id,
environments:environments!inner(code),
geos:geos!inner(code),
devices:devices!inner(code),
page_types:page_types!inner(code)
"""

# Joined relation name -> flat column name on a profile row.
PROFILE_JOINS = {
    "environments": "environment",
    "geos": "geo",
    "devices": "device",
    "page_types": "page_type",
}

VIEWS = ("profiles", "profile", "bidders", "bidder")

FILTER_DEFAULTS = {
    "geo": "uk",
    "device": "mobile",
}

# Known page types lead the bidder matrix columns in this order.
PAGE_TYPE_PRIORITY = [
    "index",
    "article",
    "gallery",
    "video",
]

EMPTY_CELL = "—"

MATRIX_CSS = """
<style>
.nav-line {
  margin-bottom: 16px;
  font-size: 0.95rem;
}
.nav-line a { text-decoration: none; }
.tiny-note {
  color: #64748b;
  font-size: 0.90rem;
}
.param-matrix {
  border-collapse: collapse;
  font-size: 12px;
}
.param-matrix th {
  text-align: left;
  white-space: nowrap;
  padding: 6px 8px;
  border-bottom: 1px solid #cbd5e1;
  min-width: 160px;
}
.param-matrix td {
  vertical-align: top;
  padding: 6px 8px;
  border-bottom: 1px solid #e2e8f0;
}
.param-matrix td.row-key {
  font-weight: 600;
  white-space: nowrap;
}
.param-matrix pre {
  white-space: pre-wrap;
  margin: 0;
  font-family: monospace;
}
.param-matrix .empty-cell { color: #9ca3af; }
</style>
"""


@dataclass
class Settings:
    supabase_url: str
    supabase_key: str
    timeout_seconds: float = 10.0
    write_timeout_seconds: float = 15.0

    @property
    def enabled(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)

    @property
    def rest_url(self) -> str:
        return f"{self.supabase_url.rstrip('/')}/rest/v1"
