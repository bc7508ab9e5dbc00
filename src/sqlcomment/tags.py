"""Tag container and sqlcommenter encoding.

Encoding follows https://google.github.io/sqlcommenter/spec/:

- keys are sorted so the same tags always render the same comment,
- keys and values are URL-encoded,
- values are wrapped in single quotes,
- pairs are joined with ``,``.

URL-encoding escapes ``*``, ``'`` and ``\\``, so no tag content can close the
surrounding block comment or break out of a quoted value.
"""

from typing import Any, Mapping, Optional
from urllib.parse import quote

KEY_DB_DRIVER = "db_driver"
KEY_FRAMEWORK = "framework"
KEY_APPLICATION = "application"
KEY_ROUTE = "route"
KEY_CONTROLLER = "controller"
KEY_ACTION = "action"
KEY_TRACEPARENT = "traceparent"
KEY_TRACESTATE = "tracestate"

# Paths are common tag values and stay readable; "/" alone cannot end a comment.
_SAFE_CHARS = "/"


class Tags(dict):
    """Mapping of tag keys to tag values attached to a single statement."""

    def merge(self, *others: Optional[Mapping[str, Any]]) -> "Tags":
        """Return a new Tags with ``others`` layered on top, last one winning."""
        merged = Tags(self)
        for other in others:
            if other:
                merged.update(other)
        return merged

    def marshal(self) -> str:
        """Render the tags as ``key='value'`` pairs in key order."""
        return ",".join(
            f"{_escape(key)}='{_escape(value)}'" for key, value in sorted(self.items())
        )


def _escape(value: Any) -> str:
    return quote(str(value), safe=_SAFE_CHARS, errors="backslashreplace")


def merge(a: Optional[Mapping[str, Any]], b: Optional[Mapping[str, Any]]) -> Tags:
    """Right-biased union of two tag mappings."""
    return Tags(a or {}).merge(b)


def encode(tags: Mapping[str, Any]) -> str:
    """Encode tags into the body of a sqlcommenter comment."""
    return Tags(tags).marshal()


def comment(tags: Mapping[str, Any]) -> str:
    """Render tags as a complete ``/*...*/`` block comment."""
    return f"/*{encode(tags)}*/"
