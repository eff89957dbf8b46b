"""Text codec for a cell's bidder params.

Params are edited as one ``key: value`` pair per line. Integer-looking
values are stored as ints, everything else as strings. A blank edit means
"delete this mapping", which is why ``decode`` returns ``None`` rather than
an empty dict for blank input.

Encoding is lossy in places: a stored null shows as ``null`` and comes back
as the string ``"null"``, and integer-looking strings come back as ints.
"""
import json
import re
from dataclasses import dataclass, field
from typing import Any, Optional, Union

ParamValue = Union[str, int]
ParamsMapping = dict[str, ParamValue]

MEDIATYPES_KEY = "mediatypes"
_INT_RE = re.compile(r"-?[0-9]+")

ABSENT = "absent"
EMPTY = "empty"
MAPPING = "mapping"


def _coerce_value(value: str) -> ParamValue:
    if _INT_RE.fullmatch(value):
        return int(value)
    return value


def decode(text: Optional[str]) -> Optional[ParamsMapping]:
    trimmed = (text or "").strip()
    if not trimmed:
        return None

    params: ParamsMapping = {}
    for raw in trimmed.splitlines():
        line = raw.strip()
        if not line or ":" not in line:
            continue
        key_raw, value_raw = line.split(":", 1)
        key = key_raw.strip()
        if not key:
            continue
        # mediatypes is display-only; it is never written back.
        if key.lower() == MEDIATYPES_KEY:
            continue
        params[key] = _coerce_value(value_raw.strip())
    return params


def encode(params: Any) -> str:
    if not params or not isinstance(params, dict):
        return ""
    return "\n".join(f"{k}: {_value_text(v)}" for k, v in params.items())


def _value_text(v: Any) -> str:
    if v is None:
        return "null"
    if isinstance(v, bool):
        return "true" if v else "false"
    if isinstance(v, (dict, list)):
        return json.dumps(v, separators=(",", ":"))
    return str(v)


@dataclass(frozen=True)
class ParamsState:
    kind: str
    params: ParamsMapping = field(default_factory=dict)

    def to_store(self) -> Optional[ParamsMapping]:
        """Value to persist: ``None`` deletes the mapping row."""
        if self.kind == ABSENT:
            return None
        return dict(self.params)


def decode_state(text: Optional[str]) -> ParamsState:
    params = decode(text)
    if params is None:
        return ParamsState(ABSENT)
    if not params:
        return ParamsState(EMPTY)
    return ParamsState(MAPPING, params)


def format_params_json(params: Any) -> str:
    if params is None:
        return ""
    if isinstance(params, str):
        try:
            params = json.loads(params)
        except ValueError:
            return params
    return json.dumps(params, indent=2)
