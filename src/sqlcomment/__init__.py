"""SQL commenting for database drivers.

Wraps a driver so every statement carries a trailing sqlcommenter comment
(https://google.github.io/sqlcommenter) with tags such as the application,
the request route or the active trace context::

    drv = sqlcomment.new_driver(
        EngineDriver(engine),
        sqlcomment.with_tagger(OTELTagger.from_global()),
        sqlcomment.with_driver_ver_tag(),
        sqlcomment.with_tags({sqlcomment.KEY_APPLICATION: "bootcamp"}),
    )
    drv.execute(sqlcomment.with_tag(None, "route", "/users"), "SELECT 1")
    # SELECT 1 /*application='bootcamp',db_driver='sqlalchemy%3A2.0.36',route='/users',...*/
"""

from sqlcomment.capabilities import Capabilities, probe_capabilities
from sqlcomment.context import from_context, is_skipped, skip, with_tag
from sqlcomment.driver import (
    Commenter,
    CommentDriver,
    CommentTx,
    Driver,
    Tx,
    TxOptions,
    new_driver,
)
from sqlcomment.errors import UnsupportedCapabilityError
from sqlcomment.options import (
    Option,
    Options,
    build_options,
    with_driver_ver_tag,
    with_tagger,
    with_tags,
)
from sqlcomment.taggers import ContextTagger, DriverVersionTagger, StaticTagger, Tagger
from sqlcomment.tags import (
    KEY_ACTION,
    KEY_APPLICATION,
    KEY_CONTROLLER,
    KEY_DB_DRIVER,
    KEY_FRAMEWORK,
    KEY_ROUTE,
    KEY_TRACEPARENT,
    KEY_TRACESTATE,
    Tags,
    comment,
    encode,
    merge,
)

__all__ = [
    "KEY_ACTION",
    "KEY_APPLICATION",
    "KEY_CONTROLLER",
    "KEY_DB_DRIVER",
    "KEY_FRAMEWORK",
    "KEY_ROUTE",
    "KEY_TRACEPARENT",
    "KEY_TRACESTATE",
    "Capabilities",
    "CommentDriver",
    "CommentTx",
    "Commenter",
    "ContextTagger",
    "Driver",
    "DriverVersionTagger",
    "Option",
    "Options",
    "StaticTagger",
    "Tagger",
    "Tags",
    "Tx",
    "TxOptions",
    "UnsupportedCapabilityError",
    "build_options",
    "comment",
    "encode",
    "from_context",
    "is_skipped",
    "merge",
    "new_driver",
    "probe_capabilities",
    "skip",
    "with_driver_ver_tag",
    "with_tag",
    "with_tagger",
    "with_tags",
]
