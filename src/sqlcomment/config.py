"""Environment driven configuration for commenting drivers.

Variables:

- ``SQLCOMMENT_ENABLED``: wrap drivers at all (default true).
- ``SQLCOMMENT_APPLICATION``: value of the ``application`` tag.
- ``SQLCOMMENT_FRAMEWORK``: value of the ``framework`` tag.
- ``SQLCOMMENT_TAGS``: extra static tags, ``key=value`` pairs separated by commas.
- ``SQLCOMMENT_DRIVER_VERSION``: add the ``db_driver`` tag (default false).
- ``SQLCOMMENT_TRACE``: add trace context tags using the global propagator (default false).
"""

import logging
import os
from typing import Any, Dict, List, Optional, Union

from sqlcomment.driver import CommentDriver, new_driver
from sqlcomment.options import Option, with_driver_ver_tag, with_tagger, with_tags
from sqlcomment.otel import OTELTagger
from sqlcomment.tags import KEY_APPLICATION, KEY_FRAMEWORK

logger = logging.getLogger(__name__)


def get_env_str(name: str, default: Optional[str] = None) -> Optional[str]:
    """Get an environment variable as a string, treating blank values as unset."""
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def get_env_bool(name: str, default: bool = False) -> bool:
    """Get an environment variable as a boolean.

    Truthy: true, 1, yes, on
    Falsey: false, 0, no, off, (empty string)
    """
    value = os.getenv(name)
    if value is None:
        return default

    val_lower = value.strip().lower()
    if val_lower in ("true", "1", "yes", "on"):
        return True
    if val_lower in ("false", "0", "no", "off", ""):
        return False

    raise ValueError(f"Environment variable '{name}' must be a boolean, got '{value}'.")


def get_env_list(name: str, separator: str = ",") -> List[str]:
    """Get an environment variable as a list of non-empty strings."""
    value = os.getenv(name)
    if value is None:
        return []
    return [s.strip() for s in value.split(separator) if s.strip()]


def commenting_enabled() -> bool:
    """Return True unless SQLCOMMENT_ENABLED turns commenting off."""
    return get_env_bool("SQLCOMMENT_ENABLED", True)


def static_tags_from_env() -> Dict[str, str]:
    """Collect the static tags configured through the environment."""
    tags: Dict[str, str] = {}
    for pair in get_env_list("SQLCOMMENT_TAGS"):
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise ValueError(
                f"Environment variable 'SQLCOMMENT_TAGS' must contain key=value pairs, "
                f"got '{pair}'."
            )
        tags[key.strip()] = value.strip()

    application = get_env_str("SQLCOMMENT_APPLICATION")
    if application:
        tags[KEY_APPLICATION] = application
    framework = get_env_str("SQLCOMMENT_FRAMEWORK")
    if framework:
        tags[KEY_FRAMEWORK] = framework
    return tags


def options_from_env() -> List[Option]:
    """Build driver options from SQLCOMMENT_* variables."""
    options: List[Option] = []
    if get_env_bool("SQLCOMMENT_TRACE", False):
        options.append(with_tagger(OTELTagger.from_global()))
    if get_env_bool("SQLCOMMENT_DRIVER_VERSION", False):
        options.append(with_driver_ver_tag())
    tags = static_tags_from_env()
    if tags:
        options.append(with_tags(tags))
    return options


def new_driver_from_env(driver: Any, *extra: Option) -> Union[CommentDriver, Any]:
    """Wrap ``driver`` using environment options, or return it as-is when disabled."""
    if not commenting_enabled():
        logger.info("SQL commenting disabled via SQLCOMMENT_ENABLED")
        return driver
    return new_driver(driver, *options_from_env(), *extra)
