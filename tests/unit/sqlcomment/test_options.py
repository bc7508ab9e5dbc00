"""Tests for option assembly and capability probing."""

import dataclasses

import pytest

from sqlcomment.capabilities import Capabilities, probe_capabilities
from sqlcomment.driver import new_driver
from sqlcomment.options import Options, build_options, with_driver_ver_tag, with_tagger, with_tags
from sqlcomment.taggers import ContextTagger, DriverVersionTagger, StaticTagger


class _Tagger:
    def tag(self, ctx):
        return {}


def test_build_options_keeps_registration_order():
    """Taggers are kept in the order options were applied."""
    first, second, third = _Tagger(), _Tagger(), _Tagger()

    options = build_options([with_tagger(first, second), with_tagger(third)])

    assert options.taggers == (first, second, third)


def test_with_tags_and_driver_version_install_taggers():
    """Static tags and the driver version add one tagger each."""
    options = build_options([with_tags({"a": "1"}), with_driver_ver_tag("pkg-x")])

    static, version = options.taggers
    assert isinstance(static, StaticTagger)
    assert isinstance(version, DriverVersionTagger)
    assert version.version == "pkg-x"


def test_options_are_immutable():
    """The tagger chain cannot be replaced after construction."""
    options = build_options([with_tagger(_Tagger())])

    assert isinstance(options.taggers, tuple)
    with pytest.raises(dataclasses.FrozenInstanceError):
        options.taggers = ()  # type: ignore[misc]
    assert build_options([]) == Options()


def test_new_driver_registers_context_tagger_first():
    """The context tagger precedes every configured tagger."""
    custom = _Tagger()

    class _Driver:
        def execute(self, ctx, query, args=None):
            pass

    drv = new_driver(_Driver(), with_tagger(custom))

    taggers = drv.commenter.options.taggers
    assert isinstance(taggers[0], ContextTagger)
    assert taggers[1:] == (custom,)


def test_probe_capabilities():
    """Only callable attributes count as supported operations."""

    class _Partial:
        query_context = None

        def begin_tx(self, ctx, options):
            pass

    assert probe_capabilities(object()) == Capabilities()
    assert probe_capabilities(_Partial()) == Capabilities(supports_begin_tx=True)
    assert Capabilities(supports_begin_tx=True).supports("begin_tx") is True
    assert Capabilities().supports("unknown") is False
