from typing import Any, Optional
from urllib.parse import quote

import pandas as pd

from config import PROFILE_JOINS
from core_helpers import clean_text, matches_search


def _joined_code(v: Any) -> Optional[str]:
    # PostgREST returns an embedded relation as an object, or a list of one.
    if isinstance(v, list):
        v = v[0] if v else None
    if isinstance(v, dict):
        code = v.get("code")
        return None if code is None else str(code)
    return None


def flatten_profile_row(row: dict) -> dict:
    out = {
        "id": row.get("id"),
        "name": row.get("name"),
    }
    for k in ("environment_id", "geo_id", "device_id", "page_type_id"):
        if k in row:
            out[k] = row.get(k)
    for rel, flat in PROFILE_JOINS.items():
        out[flat] = _joined_code(row.get(rel))
    return out


def profile_label(profile: dict) -> str:
    name = clean_text(profile.get("name"))
    if name:
        return name
    return " | ".join(
        str(profile.get(k)) for k in ("environment", "geo", "device", "page_type")
    )


def profile_summary(profile: dict) -> str:
    return " · ".join(str(profile.get(k)) for k in ("environment", "geo", "device", "page_type"))


def unique_slots(rows: list[dict]) -> list[dict]:
    seen: dict[Any, dict] = {}
    for r in rows or []:
        sid = r.get("slot_config_id")
        if sid is None or sid in seen:
            continue
        seen[sid] = {"slot_config_id": sid, "slot_code": clean_text(r.get("slot_code"))}
    return sorted(seen.values(), key=lambda s: s["slot_code"])


def attach_slot_codes(configs: list[dict], slots: list[dict]) -> list[dict]:
    codes = {s["slot_config_id"]: s["slot_code"] for s in slots}
    out = []
    for c in configs or []:
        row = dict(c)
        row["slot"] = codes.get(c.get("slot_config_id"), "")
        out.append(row)
    return out


def distinct_bidders(rows: list[dict], search: str = "") -> list[str]:
    seen: set[str] = set()
    for r in rows or []:
        code = clean_text(r.get("bidder"))
        if code and matches_search(code, search):
            seen.add(code)
    return sorted(seen)


def profiles_frame(profiles: list[dict], link_base: str = "") -> pd.DataFrame:
    cols = ["ID", "Profile", "Matrix"]
    if not profiles:
        return pd.DataFrame(columns=cols)
    return pd.DataFrame(
        {
            "ID": [p.get("id") for p in profiles],
            "Profile": [profile_label(p) for p in profiles],
            "Matrix": [f"{link_base}?view=profile&id={p.get('id')}" for p in profiles],
        },
        columns=cols,
    )


def bidders_frame(bidders: list[str], link_base: str = "") -> pd.DataFrame:
    return pd.DataFrame(
        {
            "Bidder": bidders,
            "Mappings": [f"{link_base}?view=bidder&code={quote(b)}" for b in bidders],
        },
        columns=["Bidder", "Mappings"],
    )
