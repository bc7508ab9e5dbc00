"""Built-in tag producers.

A tagger is any object with ``tag(ctx) -> Tags``. Taggers are called for
every statement, possibly from many threads at once, and must not modify the
context or any state shared between calls.
"""

import logging
from importlib import metadata
from typing import Any, Mapping, Optional, Protocol, runtime_checkable

from opentelemetry.context import Context

from sqlcomment.context import from_context
from sqlcomment.tags import KEY_DB_DRIVER, Tags

logger = logging.getLogger(__name__)


@runtime_checkable
class Tagger(Protocol):
    """Produces tags for a statement issued under ``ctx``."""

    def tag(self, ctx: Context) -> Tags:
        """Return the tags to attach."""
        ...


class ContextTagger:
    """Returns the ad hoc tags attached with ``with_tag``."""

    def tag(self, ctx: Context) -> Tags:
        """Read the tag overlay stored on ``ctx``."""
        return from_context(ctx)


class StaticTagger:
    """Adds the same tags to every statement."""

    def __init__(self, tags: Mapping[str, str]) -> None:
        """Copy ``tags`` so later changes by the caller are not picked up."""
        self._tags = Tags(tags)

    def tag(self, ctx: Context) -> Tags:
        """Return a copy of the configured tags."""
        return Tags(self._tags)


class DriverVersionTagger:
    """Adds ``db_driver='<package>:<version>'`` resolved once at construction."""

    def __init__(self, package: str) -> None:
        """Resolve the installed version of ``package``."""
        self._version = _resolve_version(package)

    @property
    def version(self) -> str:
        """Return the resolved ``db_driver`` value."""
        return self._version

    def tag(self, ctx: Context) -> Tags:
        """Return the driver tag."""
        return Tags({KEY_DB_DRIVER: self._version})


def _resolve_version(package: str) -> str:
    try:
        return f"{package}:{metadata.version(package)}"
    except metadata.PackageNotFoundError:
        logger.debug("No distribution metadata for %s; tagging without version", package)
        return package


def resolve_driver_package(driver: Optional[Any]) -> str:
    """Return the package name that identifies ``driver`` in the db_driver tag."""
    if driver is None:
        return "sqlcomment"
    package = getattr(driver, "driver_package", None)
    if isinstance(package, str) and package:
        return package
    return type(driver).__module__.split(".")[0]
