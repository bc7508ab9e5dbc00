"""Driver and transaction wrappers that append a sqlcommenter comment.

See https://google.github.io/sqlcommenter for the comment format.

Every wrapper operation runs on the caller's thread: it rewrites the
statement, then forwards to the wrapped object with the same context and
arguments. Errors raised by the wrapped object propagate unchanged.

Transaction statements are tagged from the context passed to each call, not
from the context the transaction was started with.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol, Sequence

from opentelemetry import context as otel_context
from opentelemetry.context import Context

from sqlcomment.capabilities import (
    BEGIN_TX,
    EXECUTE_CONTEXT,
    QUERY_CONTEXT,
    Capabilities,
    probe_capabilities,
)
from sqlcomment.context import is_skipped
from sqlcomment.errors import UnsupportedCapabilityError
from sqlcomment.options import Option, Options, build_options, with_tagger
from sqlcomment.taggers import ContextTagger
from sqlcomment.tags import Tags

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TxOptions:
    """Options for ``begin_tx``."""

    isolation_level: Optional[str] = None
    read_only: bool = False


class Tx(Protocol):
    """Transaction interface expected from the wrapped driver.

    ``query_context`` and ``execute_context`` are optional.
    """

    def execute(self, ctx: Context, query: str, args: Optional[Sequence[Any]] = None) -> Any:
        """Run a statement and return its result."""
        ...

    def query(self, ctx: Context, query: str, args: Optional[Sequence[Any]] = None) -> Any:
        """Run a query and return its rows."""
        ...

    def commit(self) -> None:
        """Commit the transaction."""
        ...

    def rollback(self) -> None:
        """Roll back the transaction."""
        ...


class Driver(Protocol):
    """Driver interface expected from the wrapped object.

    ``query_context``, ``execute_context`` and ``begin_tx`` are optional.
    """

    def execute(self, ctx: Context, query: str, args: Optional[Sequence[Any]] = None) -> Any:
        """Run a statement and return its result."""
        ...

    def query(self, ctx: Context, query: str, args: Optional[Sequence[Any]] = None) -> Any:
        """Run a query and return its rows."""
        ...

    def tx(self, ctx: Context) -> Tx:
        """Start a transaction."""
        ...


def _resolve(ctx: Optional[Context]) -> Context:
    return ctx if ctx is not None else otel_context.get_current()


class Commenter:
    """Runs the tagger chain and appends the encoded comment to a statement."""

    def __init__(self, options: Options) -> None:
        """Share ``options`` read-only across all calls."""
        self._options = options

    @property
    def options(self) -> Options:
        """Return the tagger chain."""
        return self._options

    def tags(self, ctx: Context) -> Tags:
        """Merge the output of every tagger, later taggers winning."""
        tags = Tags()
        for tagger in self._options.taggers:
            tags = tags.merge(tagger.tag(ctx))
        return tags

    def with_comment(self, ctx: Context, query: str) -> str:
        """Return ``query`` with the comment appended, unless ``ctx`` is skipped."""
        if is_skipped(ctx):
            return query
        return f"{query} /*{self.tags(ctx).marshal()}*/"


class _CommentingProxy:
    """Shared rewrite-and-forward logic for driver and transaction wrappers."""

    _target_name = "Driver"

    def __init__(self, wrapped: Any, commenter: Commenter) -> None:
        """Wrap ``wrapped`` and record its optional operations once."""
        self._wrapped = wrapped
        self._commenter = commenter
        self._capabilities = probe_capabilities(wrapped)

    def __getattr__(self, name: str) -> Any:
        # Only called for attributes not defined on the wrapper.
        if name == "_wrapped":
            raise AttributeError(name)
        return getattr(self._wrapped, name)

    @property
    def capabilities(self) -> Capabilities:
        """Return the optional operations found on the wrapped object."""
        return self._capabilities

    @property
    def commenter(self) -> Commenter:
        """Return the commenter shared with transactions."""
        return self._commenter

    def unwrap(self) -> Any:
        """Return the wrapped object."""
        return self._wrapped

    def _require(self, operation: str) -> Any:
        if not self._capabilities.supports(operation):
            logger.debug(
                "%s.%s not available on %s",
                self._target_name,
                operation,
                type(self._wrapped).__name__,
            )
            raise UnsupportedCapabilityError(self._target_name, operation)
        return getattr(self._wrapped, operation)

    def execute(
        self, ctx: Optional[Context], query: str, args: Optional[Sequence[Any]] = None
    ) -> Any:
        """Comment ``query`` and call the wrapped ``execute``."""
        ctx = _resolve(ctx)
        return self._wrapped.execute(ctx, self._commenter.with_comment(ctx, query), args)

    def query(
        self, ctx: Optional[Context], query: str, args: Optional[Sequence[Any]] = None
    ) -> Any:
        """Comment ``query`` and call the wrapped ``query``."""
        ctx = _resolve(ctx)
        return self._wrapped.query(ctx, self._commenter.with_comment(ctx, query), args)

    def execute_context(self, ctx: Optional[Context], query: str, *args: Any) -> Any:
        """Comment ``query`` and call the wrapped ``execute_context`` if it exists."""
        execute_context = self._require(EXECUTE_CONTEXT)
        ctx = _resolve(ctx)
        return execute_context(ctx, self._commenter.with_comment(ctx, query), *args)

    def query_context(self, ctx: Optional[Context], query: str, *args: Any) -> Any:
        """Comment ``query`` and call the wrapped ``query_context`` if it exists."""
        query_context = self._require(QUERY_CONTEXT)
        ctx = _resolve(ctx)
        return query_context(ctx, self._commenter.with_comment(ctx, query), *args)


class CommentTx(_CommentingProxy):
    """Transaction wrapper that comments every statement."""

    _target_name = "Tx"

    def commit(self) -> None:
        """Commit the wrapped transaction."""
        return self._wrapped.commit()

    def rollback(self) -> None:
        """Roll back the wrapped transaction."""
        return self._wrapped.rollback()


class CommentDriver(_CommentingProxy):
    """Driver wrapper that comments every statement, including those in transactions."""

    def tx(self, ctx: Optional[Context] = None) -> CommentTx:
        """Start a transaction on the wrapped driver and wrap it."""
        tx = self._wrapped.tx(_resolve(ctx))
        return CommentTx(tx, self._commenter)

    def begin_tx(self, ctx: Optional[Context], options: Optional[TxOptions] = None) -> CommentTx:
        """Start a transaction with ``options`` if the wrapped driver supports it."""
        begin_tx = self._require(BEGIN_TX)
        tx = begin_tx(_resolve(ctx), options or TxOptions())
        return CommentTx(tx, self._commenter)


def new_driver(driver: Driver, *options: Option) -> CommentDriver:
    """Wrap ``driver`` so every statement carries a sqlcommenter comment.

    The context tagger is registered first, so tags from ``with_tag`` lose
    to any configured tagger emitting the same key.
    """
    opts = build_options((with_tagger(ContextTagger()), *options), driver=driver)
    logger.debug(
        "Commenting %s with %d taggers", type(driver).__name__, len(opts.taggers)
    )
    return CommentDriver(driver, Commenter(opts))
