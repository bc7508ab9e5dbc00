from dataclasses import dataclass
from typing import Any

QUERY_CONTEXT = "query_context"
EXECUTE_CONTEXT = "execute_context"
BEGIN_TX = "begin_tx"


@dataclass(frozen=True)
class Capabilities:
    """Optional operations implemented by a wrapped driver or transaction."""

    supports_query_context: bool = False
    supports_execute_context: bool = False
    supports_begin_tx: bool = False

    def supports(self, operation: str) -> bool:
        """Return True when ``operation`` was found on the wrapped object."""
        if operation == QUERY_CONTEXT:
            return self.supports_query_context
        if operation == EXECUTE_CONTEXT:
            return self.supports_execute_context
        if operation == BEGIN_TX:
            return self.supports_begin_tx
        return False


def _has_operation(target: Any, name: str) -> bool:
    return callable(getattr(target, name, None))


def probe_capabilities(target: Any) -> Capabilities:
    """Inspect ``target`` once and record which optional operations it offers."""
    return Capabilities(
        supports_query_context=_has_operation(target, QUERY_CONTEXT),
        supports_execute_context=_has_operation(target, EXECUTE_CONTEXT),
        supports_begin_tx=_has_operation(target, BEGIN_TX),
    )
