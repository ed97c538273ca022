"""
Integration Tests for the HTTP/SSE Transport

Tests for the JSON-RPC endpoint, sessions and error mapping.
"""
import json

import pytest

from md_mcp_server.http_server import SESSION_HEADER


def _rpc(method: str, params=None, message_id=1) -> dict:
    message = {"jsonrpc": "2.0", "method": method, "params": params or {}}
    if message_id is not None:
        message["id"] = message_id
    return message


def _sse_payload(response) -> dict:
    assert response.headers["content-type"].startswith("text/event-stream")
    return json.loads(response.text.removeprefix("data: ").strip())


async def _open_session(client) -> str:
    response = await client.post(
        "/mcp",
        json=_rpc("initialize", {"protocolVersion": "2025-06-18", "clientInfo": {"name": "pytest", "version": "1"}}),
    )
    assert response.status_code == 200
    return response.headers[SESSION_HEADER]


@pytest.mark.asyncio
class TestServiceEndpoints:
    """Tests for health and discovery endpoints."""

    async def test_health(self, async_client):
        response = await async_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "service": "md-mcp-server", "active_sessions": 0}

    async def test_root(self, async_client):
        data = (await async_client.get("/")).json()
        assert data["endpoints"]["mcp"] == "/mcp"

    async def test_get_mcp_not_allowed(self, async_client):
        response = await async_client.get("/mcp")
        assert response.status_code == 405


@pytest.mark.asyncio
class TestMessageValidation:
    """Tests for malformed JSON-RPC messages."""

    async def test_empty_body(self, async_client):
        response = await async_client.post("/mcp", content=b"")
        assert response.status_code == 400

    async def test_bad_json(self, async_client):
        response = await async_client.post("/mcp", content=b"{not json", headers={"Content-Type": "application/json"})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == -32700

    async def test_missing_jsonrpc_version(self, async_client):
        response = await async_client.post("/mcp", json={"id": 7, "method": "ping"})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == -32600
        assert response.json()["id"] == 7


@pytest.mark.asyncio
class TestSessions:
    """Tests for session handshake, lookup and teardown."""

    async def test_initialize_opens_session(self, async_client):
        response = await async_client.post("/mcp", json=_rpc("initialize", {"protocolVersion": "2025-06-18"}))
        payload = _sse_payload(response)

        assert response.headers[SESSION_HEADER]
        assert payload["result"]["serverInfo"]["name"] == "md-mcp-server"
        assert payload["result"]["protocolVersion"] == "2025-06-18"
        assert "tools" in payload["result"]["capabilities"]
        assert (await async_client.get("/health")).json()["active_sessions"] == 1

    async def test_session_limit(self, async_client):
        await _open_session(async_client)
        await _open_session(async_client)
        response = await async_client.post("/mcp", json=_rpc("initialize"))

        assert response.status_code == 503
        assert response.json()["error"]["code"] == -32000

    async def test_request_without_session(self, async_client):
        response = await async_client.post("/mcp", json=_rpc("tools/list"))
        assert response.status_code == 400

    async def test_unknown_session(self, async_client):
        response = await async_client.post("/mcp", json=_rpc("tools/list"), headers={SESSION_HEADER: "nope"})
        assert response.status_code == 404

    async def test_notification_is_accepted(self, async_client):
        session_id = await _open_session(async_client)
        response = await async_client.post(
            "/mcp",
            json=_rpc("notifications/initialized", message_id=None),
            headers={SESSION_HEADER: session_id},
        )
        assert response.status_code == 202

    async def test_delete_session(self, async_client):
        session_id = await _open_session(async_client)
        headers = {SESSION_HEADER: session_id}

        assert (await async_client.delete("/mcp", headers=headers)).status_code == 204
        assert (await async_client.delete("/mcp", headers=headers)).status_code == 404
        assert (await async_client.post("/mcp", json=_rpc("ping"), headers=headers)).status_code == 404

    async def test_delete_without_header(self, async_client):
        response = await async_client.delete("/mcp")
        assert response.status_code == 400


@pytest.mark.asyncio
class TestMcpMethods:
    """Tests for the MCP methods served over a session."""

    @pytest.fixture
    async def call(self, async_client):
        session_id = await _open_session(async_client)

        async def _call(method: str, params=None) -> dict:
            response = await async_client.post(
                "/mcp",
                json=_rpc(method, params, message_id=2),
                headers={SESSION_HEADER: session_id},
            )
            assert response.status_code == 200
            assert response.headers[SESSION_HEADER] == session_id
            return _sse_payload(response)

        return _call

    async def test_ping(self, call):
        assert (await call("ping"))["result"] == {}

    async def test_tools_list(self, call):
        tools = (await call("tools/list"))["result"]["tools"]

        assert len(tools) == 25
        assert all("inputSchema" in tool for tool in tools)

    async def test_tools_call(self, call):
        payload = await call(
            "tools/call",
            {
                "name": "screen_interactions",
                "arguments": {
                    "patient_id": "P-1",
                    "medications": [
                        {
                            "drug_name": name,
                            "dose": "5 mg",
                            "frequency": "daily",
                            "route": "oral",
                            "start_date": "2024-01-01T00:00:00Z",
                        }
                        for name in ("Warfarin", "Aspirin")
                    ],
                    "patient_characteristics": {"age": 70},
                },
            },
        )
        result = payload["result"]

        assert result["isError"] is False
        assert result["structuredContent"]["result"]["interactions_found"][0]["severity"] == "serious"
        assert json.loads(result["content"][0]["text"]) == result["structuredContent"]

    async def test_tool_error_envelope(self, call):
        result = (await call("tools/call", {"name": "gather_bpmh", "arguments": {}}))["result"]

        assert result["isError"] is True
        assert result["structuredContent"]["error"]["kind"] == "ValidationError"

    async def test_unknown_tool(self, call):
        error = (await call("tools/call", {"name": "x", "arguments": {}}))["error"]

        assert error["code"] == -32602
        assert error["message"] == "Unknown tool: x"

    async def test_resources(self, call):
        listed = (await call("resources/list"))["result"]["resources"]
        contents = (await call("resources/read", {"uri": listed[0]["uri"] + "?category=cbc"}))["result"]["contents"]

        assert len(listed) == 3
        assert [content["mimeType"] for content in contents] == ["text/plain", "application/json"]
        assert json.loads(contents[1]["text"])["categories"] == ["CBC"]

    async def test_unknown_resource(self, call):
        error = (await call("resources/read", {"uri": "mcp://md-mcp/unknown"}))["error"]
        assert error["code"] == -32602

    async def test_prompts(self, call):
        listed = (await call("prompts/list"))["result"]["prompts"]
        rendered = (await call("prompts/get", {"name": "soap_documentation_workflow", "arguments": {"encounter_id": "E-9"}}))[
            "result"
        ]

        assert len(listed) == 5
        assert rendered["description"] == "SOAP documentation workflow initiated for encounter E-9"
        assert rendered["_meta"]["workflow"] == "soap_documentation"

    async def test_prompt_missing_argument(self, call):
        error = (await call("prompts/get", {"name": "tdm_analysis_workflow", "arguments": {}}))["error"]
        assert error["code"] == -32602

    async def test_unknown_method(self, call):
        error = (await call("sampling/createMessage"))["error"]
        assert error["code"] == -32601
