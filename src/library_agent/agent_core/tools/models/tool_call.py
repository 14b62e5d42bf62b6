"""Data models for tool call requests."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class ToolCallRequest:
    """A finalized tool call assembled from one model turn."""

    id: str
    name: str
    raw_arguments: str = "{}"

    def to_wire(self) -> Dict[str, Any]:
        """Render as the ``tool_calls`` entry of an assistant message."""
        return {
            "id": self.id,
            "type": "function",
            "function": {"name": self.name, "arguments": self.raw_arguments},
        }

    def parse_arguments(self) -> Dict[str, Any]:
        """Decode ``raw_arguments`` into a JSON object.

        Raises:
            ValueError: If the text is not JSON or not a JSON object.
        """
        if not self.raw_arguments.strip():
            return {}
        parsed = json.loads(self.raw_arguments)
        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            raise ValueError("Function arguments must decode to a JSON object.")
        return parsed
