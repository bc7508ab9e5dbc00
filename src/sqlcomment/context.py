"""Request-scoped comment options carried on an OpenTelemetry context.

The options live under a single context key as one frozen value. Every
helper returns a new context holding a new value, so a context that has
already been handed to another caller is never changed underneath it.

Example middleware tagging every statement with the request path::

    def middleware(request, call_next):
        ctx = sqlcomment.with_tag(None, sqlcomment.KEY_ROUTE, request.url.path)
        token = context.attach(ctx)
        try:
            return call_next(request)
        finally:
            context.detach(token)
"""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping, Optional

from opentelemetry import context as otel_context
from opentelemetry.context import Context

from sqlcomment.tags import Tags

_COMMENT_OPTIONS_KEY = otel_context.create_key("sqlcomment-options")


@dataclass(frozen=True)
class CommentOptions:
    """Skip flag and ad hoc tags attached to a context."""

    skip: bool = False
    tags: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))


def _resolve(ctx: Optional[Context]) -> Context:
    return ctx if ctx is not None else otel_context.get_current()


def _options(ctx: Context) -> CommentOptions:
    value = otel_context.get_value(_COMMENT_OPTIONS_KEY, context=ctx)
    if isinstance(value, CommentOptions):
        return value
    return CommentOptions()


def skip(ctx: Optional[Context] = None) -> Context:
    """Return a context that tells the driver not to comment statements.

    Tags already attached to ``ctx`` are kept, and contexts derived from the
    returned one keep the flag.
    """
    ctx = _resolve(ctx)
    options = replace(_options(ctx), skip=True)
    return otel_context.set_value(_COMMENT_OPTIONS_KEY, options, context=ctx)


def with_tag(ctx: Optional[Context], key: str, value: str) -> Context:
    """Return a context carrying ``key=value`` in addition to existing tags."""
    ctx = _resolve(ctx)
    current = _options(ctx)
    tags = dict(current.tags)
    tags[key] = value
    options = replace(current, tags=MappingProxyType(tags))
    return otel_context.set_value(_COMMENT_OPTIONS_KEY, options, context=ctx)


def from_context(ctx: Optional[Context] = None) -> Tags:
    """Return a copy of the ad hoc tags stored on ``ctx``."""
    return Tags(_options(_resolve(ctx)).tags)


def is_skipped(ctx: Optional[Context] = None) -> bool:
    """Return True when commenting was disabled for ``ctx``."""
    return _options(_resolve(ctx)).skip
