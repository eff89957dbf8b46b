import json
import logging
import os
from typing import Any, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from config import (
    BIDDER_CONFIGS_TABLE,
    BIDDER_CONFIGS_VIEW,
    BIDDER_ROW_COLUMNS,
    PROFILE_SELECT,
    PROFILES_TABLE,
    SLOT_CONFIGS_VIEW,
    Settings,
)
from data_io import flatten_profile_row, unique_slots

logger = logging.getLogger(__name__)


def _get_secret(name: str) -> str:
    val = os.getenv(name, "")
    if val:
        return str(val).strip()
    try:
        import streamlit as st

        if name in st.secrets:
            return str(st.secrets[name]).strip()
    except Exception:
        # No secrets.toml outside a running app.
        pass
    return ""


def load_settings() -> Settings:
    url = _get_secret("SUPABASE_URL") or _get_secret("NEXT_PUBLIC_SUPABASE_URL")
    key = (
        _get_secret("SUPABASE_KEY")
        or _get_secret("SUPABASE_ANON_KEY")
        or _get_secret("NEXT_PUBLIC_SUPABASE_ANON_KEY")
    )
    timeout = _get_secret("SUPABASE_TIMEOUT_SECONDS")
    try:
        timeout_s = float(timeout) if timeout else 10.0
    except ValueError:
        timeout_s = 10.0
    return Settings(supabase_url=url, supabase_key=key, timeout_seconds=timeout_s)


def _headers(settings: Settings, extra: Optional[dict] = None) -> dict:
    h = {
        "apikey": settings.supabase_key,
        "Authorization": f"Bearer {settings.supabase_key}",
        "Accept": "application/json",
    }
    if extra:
        h.update(extra)
    return h


def _error_message(e: HTTPError) -> str:
    try:
        body = json.loads(e.read().decode("utf-8"))
    except Exception:
        return f"HTTP {e.code}"
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or body.get("hint") or f"HTTP {e.code}")
    return f"HTTP {e.code}"


def _table_url(settings: Settings, table: str, query: list[tuple[str, str]]) -> str:
    url = f"{settings.rest_url}/{table}"
    if query:
        url = f"{url}?{urlencode(query)}"
    return url


def _rest_get(
    table: str,
    select: str,
    filters: Optional[list[tuple[str, str]]] = None,
    order: Optional[list[str]] = None,
    settings: Optional[Settings] = None,
) -> tuple[Optional[list[dict]], str]:
    cfg = settings or load_settings()
    if not cfg.enabled:
        return None, "Supabase is not configured (set SUPABASE_URL and SUPABASE_KEY)."
    query = [("select", "".join(select.split()))]
    for col, cond in filters or []:
        query.append((col, cond))
    if order:
        query.append(("order", ",".join(order)))
    req = Request(_table_url(cfg, table, query), headers=_headers(cfg))
    try:
        with urlopen(req, timeout=cfg.timeout_seconds) as resp:
            data = json.loads(resp.read().decode("utf-8") or "[]")
    except HTTPError as e:
        msg = _error_message(e)
        logger.error("Read from %s failed (%s): %s", table, e.code, msg)
        return None, msg
    except URLError as e:
        logger.error("Read from %s failed: %s", table, e.reason)
        return None, f"Network error: {e.reason}"
    except ValueError:
        logger.error("Read from %s returned invalid JSON", table)
        return None, f"Invalid response from {table}."
    if not isinstance(data, list):
        return [], ""
    return data, ""


def _rest_write(
    method: str,
    table: str,
    filters: list[tuple[str, str]],
    body: Optional[dict] = None,
    settings: Optional[Settings] = None,
) -> tuple[bool, str]:
    cfg = settings or load_settings()
    if not cfg.enabled:
        return False, "Supabase is not configured (set SUPABASE_URL and SUPABASE_KEY)."
    payload = None if body is None else json.dumps(body).encode("utf-8")
    req = Request(
        _table_url(cfg, table, filters),
        data=payload,
        method=method,
        headers=_headers(cfg, {"Content-Type": "application/json", "Prefer": "return=minimal"}),
    )
    try:
        with urlopen(req, timeout=cfg.write_timeout_seconds):
            return True, ""
    except HTTPError as e:
        msg = _error_message(e)
        logger.error("%s on %s failed (%s): %s", method, table, e.code, msg)
        return False, msg
    except URLError as e:
        logger.error("%s on %s failed: %s", method, table, e.reason)
        return False, f"Network error: {e.reason}"


def fetch_bidder_index_rows(settings: Optional[Settings] = None) -> tuple[list[dict], str]:
    data, err = _rest_get(BIDDER_CONFIGS_VIEW, "bidder, geo, device, page_type", settings=settings)
    return data or [], err


def fetch_bidder_rows(bidder: str, settings: Optional[Settings] = None) -> tuple[list[dict], str]:
    data, err = _rest_get(
        BIDDER_CONFIGS_VIEW,
        ",".join(BIDDER_ROW_COLUMNS),
        filters=[("bidder", f"eq.{bidder}")],
        order=["profile_id.asc", "slot.asc"],
        settings=settings,
    )
    return data or [], err


def fetch_profiles(settings: Optional[Settings] = None) -> tuple[list[dict], str]:
    data, err = _rest_get(PROFILES_TABLE, PROFILE_SELECT, order=["id.asc"], settings=settings)
    return [flatten_profile_row(r) for r in data or []], err


def fetch_profile(profile_id: int, settings: Optional[Settings] = None) -> tuple[Optional[dict], str]:
    data, err = _rest_get(
        PROFILES_TABLE,
        PROFILE_SELECT,
        filters=[("id", f"eq.{profile_id}")],
        settings=settings,
    )
    if err:
        return None, err
    if not data:
        return None, ""
    return flatten_profile_row(data[0]), ""


def fetch_profile_slots(profile_id: int, settings: Optional[Settings] = None) -> tuple[list[dict], str]:
    data, err = _rest_get(
        SLOT_CONFIGS_VIEW,
        "slot_config_id, slot_code",
        filters=[("profile_id", f"eq.{profile_id}")],
        settings=settings,
    )
    return unique_slots(data or []), err


def fetch_profile_configs(profile_id: int, settings: Optional[Settings] = None) -> tuple[list[dict], str]:
    data, err = _rest_get(
        BIDDER_CONFIGS_VIEW,
        "bidder_config_id, bidder, slot_config_id, params",
        filters=[("profile_id", f"eq.{profile_id}")],
        settings=settings,
    )
    out = [
        {
            "bidder_config_id": r.get("bidder_config_id"),
            "bidder": r.get("bidder"),
            "slot_config_id": r.get("slot_config_id"),
            "params": r.get("params"),
        }
        for r in data or []
    ]
    return out, err


def save_params(record_id: Any, params: Optional[dict], settings: Optional[Settings] = None) -> tuple[bool, str]:
    """Write a cell's params back; ``params=None`` deletes the mapping row."""
    if record_id is None:
        return False, "Missing bidder config id."
    filters = [("id", f"eq.{record_id}")]
    if params is None:
        ok, err = _rest_write("DELETE", BIDDER_CONFIGS_TABLE, filters, settings=settings)
        if ok:
            logger.info("Deleted bidder config %s", record_id)
        return ok, err
    ok, err = _rest_write("PATCH", BIDDER_CONFIGS_TABLE, filters, body={"params": params}, settings=settings)
    if ok:
        logger.info("Updated params for bidder config %s (%d keys)", record_id, len(params))
    return ok, err
