"""
Clinical tool registry.

The six tool groups (medication reconciliation, drug monitoring, drug
interactions, SOAP notes, five-rights checks and decision support) each
expose `register_tools(registry, reference)`. `main.build_registries` calls
them in turn to fill one `ToolRegistry`, which both the stdio server and the
HTTP adapter dispatch through.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List

from mcp import types


ToolHandler = Callable[[Dict[str, Any]], Awaitable[Dict[str, Any]]]


@dataclass
class RegisteredTool:
    spec: types.Tool
    handler: ToolHandler


class ToolRegistry:
    """
    Clinical tools by name. Each entry pairs the advertised `types.Tool`
    (schema generated from the input model) with its enveloping handler.
    """

    def __init__(self) -> None:
        self._tools: Dict[str, RegisteredTool] = {}

    def add_tool(self, tool: types.Tool, handler: ToolHandler) -> None:
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' already registered")
        self._tools[tool.name] = RegisteredTool(spec=tool, handler=handler)

    def list_tools(self) -> List[types.Tool]:
        return [rt.spec for rt in self._tools.values()]

    def names(self) -> List[str]:
        return list(self._tools)

    def get_handler(self, name: str) -> ToolHandler:
        if name not in self._tools:
            raise KeyError(f"Unknown tool '{name}'")
        return self._tools[name].handler

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)
