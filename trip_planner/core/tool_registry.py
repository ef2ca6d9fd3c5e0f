# Role: Tool name -> {description, JSON schema, handler, kind}. Exposes the catalog the reasoning engine sees
# and a dispatch() that never raises: handler exceptions come back as {"error": ...} results.

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

Handler = Callable[[Dict[str, Any]], Any]


class ToolKind(str, Enum):
    SLOT_REQUEST = "slot_request"  # UI-only, no handler; surfaces a signal
    LOOKUP = "lookup"  # external collaborator
    PURE = "pure"  # deterministic computation
    TERMINAL = "terminal"  # ends the loop with planReady


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    parameters: Dict[str, Any] = field(default_factory=lambda: {"type": "object", "properties": {}})
    kind: ToolKind = ToolKind.PURE
    handler: Optional[Handler] = None
    signal_type: Optional[str] = None

    def __post_init__(self) -> None:
        if self.kind == ToolKind.SLOT_REQUEST and not self.signal_type:
            raise ValueError(f"slot request tool {self.name!r} needs a signal_type")
        if self.kind != ToolKind.SLOT_REQUEST and self.handler is None:
            raise ValueError(f"tool {self.name!r} needs a handler")

    def declaration(self) -> Dict[str, Any]:
        return {"name": self.name, "description": self.description, "parameters": self.parameters}


class ToolRegistry:
    def __init__(self, specs: Optional[List[ToolSpec]] = None) -> None:
        self._specs: Dict[str, ToolSpec] = {}
        for spec in specs or []:
            self.register(spec)

    def register(self, spec: ToolSpec) -> None:
        # Key line: at most one handler per name.
        if spec.name in self._specs:
            raise ValueError(f"tool {spec.name!r} is already registered")
        self._specs[spec.name] = spec

    def get(self, name: str) -> Optional[ToolSpec]:
        return self._specs.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._specs

    def names(self) -> List[str]:
        return list(self._specs)

    def catalog(self) -> List[Dict[str, Any]]:
        return [spec.declaration() for spec in self._specs.values()]

    def dispatch(self, name: str, arguments: Dict[str, Any], request_id: str = "-") -> Any:
        """
        Run the handler for name. Unknown names and UI-only tools return None (nothing to run);
        handler failures return {"error": "..."}.
        """
        spec = self._specs.get(name)
        if spec is None:
            logger.warning("[chat][%s] Ignoring call to unregistered tool %r", request_id, name)
            return None
        if spec.handler is None:
            return None

        try:
            return spec.handler(arguments)
        except Exception as e:
            logger.error("[chat][%s] Tool %r failed: %r", request_id, name, e)
            return {"error": str(e) or e.__class__.__name__}
