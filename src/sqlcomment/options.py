"""Functional options assembling the tagger chain of a commenting driver.

Taggers run in registration order and a later tagger overrides an earlier
one on a shared key. ``new_driver`` registers the context tagger before any
option, so tags attached with ``with_tag`` have the lowest precedence: a
static or derived tagger emitting the same key replaces them. Note this is
the opposite of "most specific wins".
"""

from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Mapping, Optional, Tuple

from sqlcomment.taggers import DriverVersionTagger, StaticTagger, Tagger, resolve_driver_package


class OptionsBuilder:
    """Accumulates taggers while options are applied."""

    def __init__(self, driver: Optional[Any] = None) -> None:
        """Start an empty chain for ``driver``."""
        self.driver = driver
        self.taggers: List[Tagger] = []

    def add(self, *taggers: Tagger) -> None:
        """Append taggers to the chain."""
        self.taggers.extend(taggers)


Option = Callable[[OptionsBuilder], None]


@dataclass(frozen=True)
class Options:
    """Immutable, ordered tagger chain shared by a driver and its transactions."""

    taggers: Tuple[Tagger, ...] = ()


def with_tagger(*taggers: Tagger) -> Option:
    """Append one or more taggers."""

    def apply(builder: OptionsBuilder) -> None:
        builder.add(*taggers)

    return apply


def with_tags(tags: Mapping[str, str]) -> Option:
    """Add a fixed set of tags to every statement."""
    tagger = StaticTagger(tags)

    def apply(builder: OptionsBuilder) -> None:
        builder.add(tagger)

    return apply


def with_driver_ver_tag(package: Optional[str] = None) -> Option:
    """Add the ``db_driver`` tag.

    Without ``package`` the name is derived from the wrapped driver, see
    ``resolve_driver_package``.
    """

    def apply(builder: OptionsBuilder) -> None:
        name = package or resolve_driver_package(builder.driver)
        builder.add(DriverVersionTagger(name))

    return apply


def build_options(options: Iterable[Option], driver: Optional[Any] = None) -> Options:
    """Apply ``options`` in order and freeze the resulting chain."""
    builder = OptionsBuilder(driver)
    for option in options:
        option(builder)
    return Options(taggers=tuple(builder.taggers))
