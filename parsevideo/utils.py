import re
from typing import Any

from .errors import InputValidationError

# Share messages mix CJK text and punctuation right after the link.
_URL_RE = re.compile(r"https?://[^\s<>\"'，。！？、；：「」【】（）《》　]+")


def regexp_match_url_from_string(text: str) -> str:
    """Return the first http(s) URL found in ``text``."""
    if not isinstance(text, str) or not text.strip():
        raise InputValidationError("share message is empty")
    m = _URL_RE.search(text)
    if not m:
        raise InputValidationError(f"no http(s) url found in share message: {text[:60]}")
    return m.group(0)


def json_get(obj: Any, path: str) -> Any:
    """Walk a dotted path (``"ret.0"``, ``"data.itemDO.title"``) through dicts and lists.

    Returns None as soon as a step is missing.
    """
    cur = obj
    for part in path.split("."):
        if isinstance(cur, dict):
            cur = cur.get(part)
        elif isinstance(cur, list) and part.isdigit():
            idx = int(part)
            cur = cur[idx] if idx < len(cur) else None
        else:
            return None
        if cur is None:
            return None
    return cur


def str_or_empty(v: Any) -> str:
    if v is None:
        return ""
    if isinstance(v, str):
        return v
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return str(v)
    return ""
