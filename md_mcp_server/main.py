from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

import anyio
from mcp import types
from mcp.server import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.stdio import stdio_server
from pydantic import AnyUrl

from .config import Settings, get_settings, server_info
from .prompts import PromptRegistry, build_prompt_registry
from .reference import load_reference_data
from .resources import RenderedResource, ResourceCatalog, build_resource_catalog
from .responses import is_error_envelope
from .tools import ToolRegistry
from .tools import (
    five_rights_tools,
    integration_tools,
    interaction_tools,
    medrec_tools,
    soap_tools,
    tdm_tools,
)

logger = logging.getLogger(__name__)

TOOL_GROUPS = (
    medrec_tools,
    tdm_tools,
    interaction_tools,
    soap_tools,
    five_rights_tools,
    integration_tools,
)


@dataclass(frozen=True)
class Registries:
    tools: ToolRegistry
    resources: ResourceCatalog
    prompts: PromptRegistry


def call_tool_result(payload: Dict[str, Any]) -> types.CallToolResult:
    """Wrap a tool envelope as a single JSON text block."""
    content = types.TextContent(type="text", text=json.dumps(payload))
    return types.CallToolResult(
        content=[content],
        structuredContent=payload,
        isError=is_error_envelope(payload),
    )


def resource_contents(rendered: RenderedResource) -> List[ReadResourceContents]:
    return [
        ReadResourceContents(content=rendered.text, mime_type="text/plain"),
        ReadResourceContents(content=json.dumps(rendered.metadata), mime_type="application/json"),
    ]


def build_registries() -> Registries:
    reference = load_reference_data()
    tools = ToolRegistry()
    for group in TOOL_GROUPS:
        group.register_tools(tools, reference)
    return Registries(
        tools=tools,
        resources=build_resource_catalog(reference),
        prompts=build_prompt_registry(),
    )


def create_server_with_registry(settings: Optional[Settings] = None) -> Tuple[Server, Registries]:
    """
    Create the MCP server and the registries backing it.

    The HTTP adapter dispatches straight to the registries, so it needs them
    alongside the server.
    """
    settings = settings or get_settings()
    info = server_info(settings)
    registries = build_registries()

    server = Server(info.name, version=info.version, instructions=info.instructions)

    @server.list_tools()
    async def list_tools() -> List[types.Tool]:
        return registries.tools.list_tools()

    # Arguments are validated by each tool's pydantic model, which reports
    # failures as an error envelope rather than a protocol error.
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: Dict[str, Any]) -> types.CallToolResult:
        handler = registries.tools.get_handler(name)
        return call_tool_result(await handler(arguments))

    @server.list_resources()
    async def list_resources() -> List[types.Resource]:
        return registries.resources.list_resources()

    @server.read_resource()
    async def read_resource(uri: AnyUrl) -> Iterable[ReadResourceContents]:
        return resource_contents(registries.resources.read(str(uri)))

    @server.list_prompts()
    async def list_prompts() -> List[types.Prompt]:
        return registries.prompts.list_prompts()

    @server.get_prompt()
    async def get_prompt(name: str, arguments: Optional[Dict[str, str]]) -> types.GetPromptResult:
        return registries.prompts.get_prompt(name, arguments)

    logger.info(
        "Registered %d tools, %d resources and %d prompts",
        len(registries.tools),
        len(registries.resources),
        len(registries.prompts),
    )
    return server, registries


def create_server(settings: Optional[Settings] = None) -> Server:
    """Stdio server with the clinical tools, reference resources and workflow prompts registered."""
    server, _ = create_server_with_registry(settings)
    return server


async def run_stdio_server(server: Server) -> None:
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def configure_logging(level: str) -> None:
    # stdout carries the stdio protocol, so logs go to stderr.
    logging.basicConfig(
        level=level.upper(),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main() -> None:
    """
    Console entry point.

    `MD_MCP_TRANSPORT` picks the carrier: "stdio" (default) serves one MCP
    client over stdin/stdout, "http" serves /mcp with bounded sessions.
    """
    settings = get_settings()
    configure_logging(settings.log_level)

    if settings.transport == "http":
        from .http_server import run_http_server

        anyio.run(run_http_server, settings.server_host, settings.server_port)
    else:
        logger.info("Starting %s %s on stdio", settings.server_name, settings.server_version)
        anyio.run(run_stdio_server, create_server(settings))


if __name__ == "__main__":
    main()
