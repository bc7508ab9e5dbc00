"""Trace context tags (``traceparent``/``tracestate``) from OpenTelemetry."""

import logging
from typing import List, Optional

from opentelemetry import propagate
from opentelemetry.context import Context
from opentelemetry.propagators.textmap import Getter, Setter, TextMapPropagator

from sqlcomment.tags import Tags

logger = logging.getLogger(__name__)


class CommentCarrier(Tags):
    """Text map carrier collecting propagated fields as comment tags."""

    def set(self, key: str, value: str) -> None:
        """Store a propagated field."""
        self[key] = value


class CarrierAccessor(Getter[CommentCarrier], Setter[CommentCarrier]):
    """Reads and writes ``CommentCarrier`` fields for a propagator."""

    def get(self, carrier: CommentCarrier, key: str) -> Optional[List[str]]:
        value = carrier.get(key)
        if value is None:
            return None
        return [value]

    def set(self, carrier: CommentCarrier, key: str, value: str) -> None:
        carrier.set(key, value)

    def keys(self, carrier: CommentCarrier) -> List[str]:
        return list(carrier.keys())


carrier_accessor = CarrierAccessor()


class OTELTagger:
    """Adds the trace context active on each call as comment tags.

    The propagator decides which keys are produced. With the W3C
    ``TraceContextTextMapPropagator`` those are ``traceparent`` and, when
    present, ``tracestate``.
    """

    def __init__(self, propagator: TextMapPropagator) -> None:
        """Use ``propagator`` for every call."""
        self._propagator = propagator

    @classmethod
    def from_global(cls) -> "OTELTagger":
        """Build a tagger around the globally configured propagator."""
        propagator = propagate.get_global_textmap()
        logger.debug("Using global text map propagator %s", type(propagator).__name__)
        return cls(propagator)

    @property
    def propagator(self) -> TextMapPropagator:
        """Return the propagator in use."""
        return self._propagator

    def tag(self, ctx: Context) -> Tags:
        """Inject the trace context found on ``ctx`` into a fresh carrier."""
        carrier = CommentCarrier()
        self._propagator.inject(carrier, context=ctx, setter=carrier_accessor)
        return Tags(carrier)
