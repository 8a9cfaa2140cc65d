"""Reshaping helpers shared by the Confluence tools."""

import json
import re
from typing import Any, Dict, Optional

_TAG_RE = re.compile(r"<[^>]*>")
_WS_RE = re.compile(r"\s+")

# &amp; is decoded after &lt;/&gt; so "&amp;lt;" yields a literal "&lt;".
_ENTITIES = (
    ("&nbsp;", " "),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&amp;", "&"),
    ("&quot;", '"'),
    ("&#39;", "'"),
)


def html_to_plain_text(html: str) -> str:
    """Flatten Confluence storage-format markup into a single line of text.

    Tags are dropped, the common entities decoded and whitespace runs
    collapsed to one space.
    """
    text = _TAG_RE.sub("", html)
    for entity, char in _ENTITIES:
        text = text.replace(entity, char)
    return _WS_RE.sub(" ", text).strip()


def compact(data: Dict[str, Any]) -> Dict[str, Any]:
    """Drop keys whose value is None."""
    return {k: v for k, v in data.items() if v is not None}


def page_url(site_url: str, space_key: Optional[str], page_id: Optional[str]) -> Optional[str]:
    if not space_key or not page_id:
        return None
    return f"{site_url}/spaces/{space_key}/pages/{page_id}"


def space_url(site_url: str, space_key: Optional[str]) -> Optional[str]:
    if not space_key:
        return None
    return f"{site_url}/spaces/{space_key}"


def dig(data: Optional[Dict[str, Any]], *path: str) -> Any:
    """Follow nested keys, returning None as soon as one is missing."""
    current: Any = data
    for key in path:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def to_text(result: Any) -> str:
    """Serialize a reshaped result for a text content block."""
    return json.dumps(result, indent=2, ensure_ascii=False)
