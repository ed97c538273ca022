from __future__ import annotations

import json
import logging
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response, StreamingResponse
from mcp import types
from mcp.shared.version import SUPPORTED_PROTOCOL_VERSIONS

from .config import Settings, get_settings, server_info
from .main import Registries, call_tool_result, create_server_with_registry
from .sessions import SessionLimitError, SessionTable

logger = logging.getLogger(__name__)

SESSION_HEADER = "Mcp-Session-Id"

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
SESSION_ERROR = -32000


def rpc_result(message_id: Any, result: Dict[str, Any]) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": message_id, "result": result}


def rpc_error(message_id: Any, code: int, message: str) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": message_id, "error": {"code": code, "message": message}}


def sse_response(payload: Dict[str, Any], headers: Optional[Dict[str, str]] = None) -> StreamingResponse:
    """Answer with a single SSE `data:` frame carrying the JSON-RPC response."""

    async def generate_sse() -> AsyncIterator[str]:
        yield f"data: {json.dumps(payload)}\n\n"

    return StreamingResponse(
        generate_sse(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Disable nginx buffering
            **(headers or {}),
        },
    )


def negotiate_protocol_version(requested: Any) -> str:
    if requested in SUPPORTED_PROTOCOL_VERSIONS:
        return requested
    return types.LATEST_PROTOCOL_VERSION


def initialize_result(settings: Settings, params: Dict[str, Any]) -> Dict[str, Any]:
    info = server_info(settings)
    return {
        "protocolVersion": negotiate_protocol_version(params.get("protocolVersion")),
        "capabilities": {
            "tools": {"listChanged": False},
            "resources": {"subscribe": False, "listChanged": False},
            "prompts": {"listChanged": False},
        },
        "serverInfo": {"name": info.name, "version": info.version},
        "instructions": info.instructions,
    }


async def handle_mcp_request(
    registries: Registries,
    settings: Settings,
    method: str,
    params: Dict[str, Any],
    message_id: Any,
) -> Dict[str, Any]:
    """
    Dispatch one JSON-RPC request to the registries.

    Tool faults never reach this level: tool handlers return error envelopes.
    Registry lookups raise KeyError for unknown names, which maps to invalid
    params.
    """
    try:
        if method == "initialize":
            return rpc_result(message_id, initialize_result(settings, params))

        if method == "ping":
            return rpc_result(message_id, {})

        if method == "tools/list":
            tools = registries.tools.list_tools()
            return rpc_result(
                message_id,
                {"tools": [tool.model_dump(mode="json", by_alias=True, exclude_none=True) for tool in tools]},
            )

        if method == "tools/call":
            tool_name = params.get("name")
            if not tool_name:
                return rpc_error(message_id, INVALID_PARAMS, "Invalid params: 'name' is required")
            if tool_name not in registries.tools:
                return rpc_error(message_id, INVALID_PARAMS, f"Unknown tool: {tool_name}")
            handler = registries.tools.get_handler(tool_name)
            payload = await handler(params.get("arguments") or {})
            return rpc_result(
                message_id,
                call_tool_result(payload).model_dump(mode="json", by_alias=True, exclude_none=True),
            )

        if method == "resources/list":
            resources = registries.resources.list_resources()
            return rpc_result(
                message_id,
                {"resources": [r.model_dump(mode="json", by_alias=True, exclude_none=True) for r in resources]},
            )

        if method == "resources/read":
            uri = params.get("uri")
            if not uri:
                return rpc_error(message_id, INVALID_PARAMS, "Invalid params: 'uri' is required")
            rendered = registries.resources.read(str(uri))
            return rpc_result(
                message_id,
                {
                    "contents": [
                        {"uri": str(uri), "mimeType": "text/plain", "text": rendered.text},
                        {"uri": str(uri), "mimeType": "application/json", "text": json.dumps(rendered.metadata)},
                    ]
                },
            )

        if method == "prompts/list":
            prompts = registries.prompts.list_prompts()
            return rpc_result(
                message_id,
                {"prompts": [p.model_dump(mode="json", by_alias=True, exclude_none=True) for p in prompts]},
            )

        if method == "prompts/get":
            name = params.get("name")
            if not name:
                return rpc_error(message_id, INVALID_PARAMS, "Invalid params: 'name' is required")
            prompt = registries.prompts.get_prompt(name, params.get("arguments"))
            return rpc_result(message_id, prompt.model_dump(mode="json", by_alias=True, exclude_none=True))

        return rpc_error(message_id, METHOD_NOT_FOUND, f"Method not found: {method}")

    except KeyError as exc:
        return rpc_error(message_id, INVALID_PARAMS, f"Invalid params: {exc.args[0] if exc.args else exc}")
    except ValueError as exc:
        return rpc_error(message_id, INVALID_PARAMS, f"Invalid params: {exc}")
    except Exception as exc:
        logger.exception("Error handling MCP method %s", method)
        return rpc_error(message_id, INTERNAL_ERROR, f"Internal error: {exc}")


def create_http_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create FastAPI app that wraps the MCP registries for HTTP/SSE transport.

    MCP over HTTP/SSE:
    - Client sends POST requests with JSON-RPC messages in body
    - Server responds with an SSE stream holding one JSON-RPC response
    - Each SSE event format: "data: <json-rpc-response>\\n\\n"
    - `initialize` opens a session returned in the Mcp-Session-Id header;
      every later request must carry it
    """
    settings = settings or get_settings()
    info = server_info(settings)
    _, registries = create_server_with_registry(settings)
    sessions = SessionTable(settings.max_sessions)

    app = FastAPI(
        title="MD MCP Server",
        version=info.version,
        description="MCP server for structured clinical workflows",
    )
    app.state.sessions = sessions
    app.state.registries = registries

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=[SESSION_HEADER],
    )

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "ok", "service": info.name, "active_sessions": len(sessions)}

    @app.get("/")
    async def root():
        """Root endpoint with service info."""
        return {
            "service": info.name,
            "version": info.version,
            "protocol": "mcp",
            "transport": "http/sse",
            "endpoints": {
                "health": "/health",
                "mcp": "/mcp",
            },
        }

    @app.get("/mcp")
    async def mcp_stream_not_supported():
        # No server-initiated stream is offered.
        return JSONResponse(
            rpc_error(None, METHOD_NOT_FOUND, "Server-initiated streams are not supported"),
            status_code=405,
            headers={"Allow": "POST, DELETE"},
        )

    @app.delete("/mcp")
    async def close_session(request: Request):
        session_id = request.headers.get(SESSION_HEADER)
        if not session_id:
            return JSONResponse(
                rpc_error(None, SESSION_ERROR, f"Bad Request: {SESSION_HEADER} header is required"),
                status_code=400,
            )
        if not sessions.close(session_id):
            return JSONResponse(rpc_error(None, SESSION_ERROR, "Session not found"), status_code=404)
        return Response(status_code=204)

    @app.post("/mcp")
    async def mcp_message(request: Request):
        """
        MCP JSON-RPC endpoint.

        Supported MCP methods:
        - initialize: Server initialization handshake (opens a session)
        - ping
        - tools/list, tools/call
        - resources/list, resources/read
        - prompts/list, prompts/get
        """
        body = await request.body()
        if not body:
            return JSONResponse(rpc_error(None, INVALID_REQUEST, "Empty request body"), status_code=400)
        try:
            message = json.loads(body)
        except json.JSONDecodeError as exc:
            return JSONResponse(rpc_error(None, PARSE_ERROR, f"Parse error: {exc}"), status_code=400)

        if not isinstance(message, dict) or message.get("jsonrpc") != "2.0":
            message_id = message.get("id") if isinstance(message, dict) else None
            return JSONResponse(
                rpc_error(message_id, INVALID_REQUEST, "Invalid Request: jsonrpc must be '2.0'"),
                status_code=400,
            )

        method = message.get("method")
        message_id = message.get("id")
        params = message.get("params") or {}
        if not method or not isinstance(method, str):
            return JSONResponse(
                rpc_error(message_id, INVALID_REQUEST, "Invalid Request: method is required"),
                status_code=400,
            )
        if not isinstance(params, dict):
            return JSONResponse(
                rpc_error(message_id, INVALID_PARAMS, "Invalid params: params must be an object"),
                status_code=400,
            )

        if method == "initialize":
            client = params.get("clientInfo") or {}
            try:
                session = sessions.create(
                    client_name=client.get("name") if isinstance(client, dict) else None,
                    protocol_version=params.get("protocolVersion"),
                )
            except SessionLimitError as exc:
                logger.warning("Rejected initialize: %s", exc)
                return JSONResponse(rpc_error(message_id, SESSION_ERROR, str(exc)), status_code=503)
            response = await handle_mcp_request(registries, settings, method, params, message_id)
            return sse_response(response, headers={SESSION_HEADER: session.session_id})

        session_id = request.headers.get(SESSION_HEADER)
        if not session_id:
            return JSONResponse(
                rpc_error(message_id, SESSION_ERROR, f"Bad Request: {SESSION_HEADER} header is required"),
                status_code=400,
            )
        if sessions.get(session_id) is None:
            return JSONResponse(rpc_error(message_id, SESSION_ERROR, "Session not found"), status_code=404)

        # Notifications carry no id and get no response body.
        if "id" not in message:
            return Response(status_code=202)

        response = await handle_mcp_request(registries, settings, method, params, message_id)
        return sse_response(response, headers={SESSION_HEADER: session_id})

    return app


async def run_http_server(host: str = "0.0.0.0", port: int = 8000) -> None:
    """Run the HTTP server using uvicorn."""
    import uvicorn

    settings = get_settings()
    app = create_http_app(settings)
    config = uvicorn.Config(
        app,
        host=host,
        port=port,
        log_level=settings.log_level.lower(),
        access_log=True,
    )
    server = uvicorn.Server(config)
    logger.info("Starting %s %s on http://%s:%d/mcp", settings.server_name, settings.server_version, host, port)
    await server.serve()
