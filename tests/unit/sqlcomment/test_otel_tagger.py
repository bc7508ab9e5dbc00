"""Tests for trace context tags."""

from opentelemetry import context as otel_context
from opentelemetry import trace
from opentelemetry.baggage import set_baggage
from opentelemetry.baggage.propagation import W3CBaggagePropagator
from opentelemetry.context import Context
from opentelemetry.propagators.composite import CompositePropagator
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.trace import NonRecordingSpan, SpanContext, TraceFlags, TraceState
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

from sqlcomment.driver import Commenter
from sqlcomment.options import build_options, with_tagger
from sqlcomment.otel import CommentCarrier, OTELTagger, carrier_accessor

_TRACE_ID = 0x4BF92F3577B34DA6A3CE929D0E0E4736
_SPAN_ID = 0x00F067AA0BA902B7


def _remote_span_context(trace_state=None) -> Context:
    span_context = SpanContext(
        trace_id=_TRACE_ID,
        span_id=_SPAN_ID,
        is_remote=True,
        trace_flags=TraceFlags(TraceFlags.SAMPLED),
        trace_state=trace_state,
    )
    return trace.set_span_in_context(NonRecordingSpan(span_context), Context())


def test_no_active_span_yields_no_tags():
    """Without a span there is nothing to propagate."""
    tagger = OTELTagger(TraceContextTextMapPropagator())
    assert tagger.tag(Context()) == {}


def test_traceparent_and_tracestate():
    """W3C trace context fields become tags."""
    ctx = _remote_span_context(TraceState([("vendor", "abc")]))
    tags = OTELTagger(TraceContextTextMapPropagator()).tag(ctx)

    assert tags == {
        "traceparent": "00-4bf92f3577b34da6a3ce929d0e0e4736-00f067aa0ba902b7-01",
        "tracestate": "vendor=abc",
    }


def test_sdk_span_is_propagated():
    """Spans started by an SDK tracer are found on the current context."""
    provider = TracerProvider()
    tracer = provider.get_tracer("sqlcomment-test")
    tagger = OTELTagger(TraceContextTextMapPropagator())

    with tracer.start_as_current_span("request") as span:
        tags = tagger.tag(otel_context.get_current())
        span_context = span.get_span_context()

    assert tags["traceparent"] == (
        f"00-{span_context.trace_id:032x}-{span_context.span_id:016x}"
        f"-{span_context.trace_flags:02x}"
    )
    assert span_context.trace_flags.sampled


def test_composite_propagator_adds_baggage():
    """Whatever the propagator injects is returned."""
    propagator = CompositePropagator([TraceContextTextMapPropagator(), W3CBaggagePropagator()])
    ctx = set_baggage("tenant", "acme", context=_remote_span_context())

    tags = OTELTagger(propagator).tag(ctx)

    assert tags["baggage"] == "tenant=acme"
    assert "traceparent" in tags


def test_encoded_comment_contains_trace_tags():
    """Trace tags survive encoding readable enough for log parsers."""
    tagger = OTELTagger(TraceContextTextMapPropagator())
    commenter = Commenter(build_options([with_tagger(tagger)]))

    result = commenter.with_comment(_remote_span_context(), "SELECT 1")

    assert result == (
        "SELECT 1 /*traceparent='00-4bf92f3577b34da6a3ce929d0e0e4736-00f067aa0ba902b7-01'*/"
    )


def test_from_global_snapshots_propagator(monkeypatch):
    """The global propagator is read once at construction."""
    propagator = TraceContextTextMapPropagator()
    monkeypatch.setattr("opentelemetry.propagate.get_global_textmap", lambda: propagator)

    assert OTELTagger.from_global().propagator is propagator


def test_carrier_accessor_round_trip():
    """The accessor exposes carrier fields to propagators."""
    carrier = CommentCarrier()
    carrier_accessor.set(carrier, "traceparent", "00-abc")

    assert carrier.get("traceparent") == "00-abc"
    assert carrier_accessor.get(carrier, "traceparent") == ["00-abc"]
    assert carrier_accessor.get(carrier, "missing") is None
    assert carrier_accessor.keys(carrier) == ["traceparent"]
