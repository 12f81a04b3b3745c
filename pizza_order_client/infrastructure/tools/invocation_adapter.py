"""
Tool invocation adapter implementing IToolInvocationAdapter over a ToolNamespace.

Used for direct (non-model) invocation, e.g. the startup smoke test.
"""

import logging
from typing import Dict, Any, Optional, TYPE_CHECKING
from pizza_order_client.abstractions.dto.tools import ToolInvocationResult
from pizza_order_client.domain.errors import UnresolvedLookupError

if TYPE_CHECKING:
    from pizza_order_client.interfaces.services.tools import IToolInvocationAdapter

from .tool_namespace import ToolNamespace

logger = logging.getLogger(__name__)


class ToolInvocationAdapter:
    """
    Resolves a short or qualified name through the namespace and runs the tool.
    Failures are reported in the result instead of raised.
    """

    def __init__(self, namespace: ToolNamespace):
        self.namespace = namespace

    def execute(self, name: str, params: Optional[Dict[str, Any]] = None) -> "ToolInvocationResult":
        try:
            tool = self.namespace.resolve(name)
        except UnresolvedLookupError as e:
            return ToolInvocationResult(ok=False, value=None, error=str(e), tool_name=name)

        qualified = self.namespace.qualified_name(tool)
        try:
            value = tool.run(params or {})
        except Exception as e:
            logger.debug(f"Direct invocation of {qualified} failed", exc_info=True)
            inner = e.__cause__ or e.__context__
            return ToolInvocationResult(
                ok=False,
                value=None,
                error=str(e),
                tool_name=qualified,
                inner_error=str(inner) if inner is not None else None,
            )

        return ToolInvocationResult(ok=True, value=value, error=None, tool_name=qualified)
