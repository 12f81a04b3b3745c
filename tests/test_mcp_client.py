import json

import pytest
import responses

from pizza_order_client.domain.errors import ToolExecutionError, ToolProviderConnectionError
from pizza_order_client.infrastructure.mcp.streamable_http_client import (
    PROTOCOL_VERSION,
    StreamableHttpMcpClient,
    content_text,
    parse_sse_messages,
)

MCP_URL = "https://pizza.example/mcp"
SESSION_ID = "session-123"

MENU = [{"type": "text", "text": '[{"id":"pizza-1","name":"Margherita"}]'}]


class FakeMcpServer:
    """Dispatches JSON-RPC requests posted to the endpoint by method name."""

    def __init__(self, sse=False):
        self.sse = sse
        self.requests = []
        self.pages = {
            None: {"tools": [{"name": "get_pizzas", "description": "list pizzas", "inputSchema": {"type": "object"}}],
                   "nextCursor": "page-2"},
            "page-2": {"tools": [{"name": "place_order", "description": "order"}, "garbage"]},
        }
        self.tool_results = {
            "get_pizzas": {"content": MENU},
            "get_order": {"content": [], "structuredContent": {"orderId": "order-42"}},
            "cancel_order": {"content": [{"type": "text", "text": "order already delivered"}], "isError": True},
        }

    def __call__(self, request):
        message = json.loads(request.body)
        self.requests.append((message, dict(request.headers)))
        method = message.get("method")

        if "id" not in message:
            return (202, {}, "")
        if method == "initialize":
            result = {"protocolVersion": PROTOCOL_VERSION, "serverInfo": {"name": "pizza-mcp"}, "capabilities": {}}
            return self._reply(message, {"result": result}, {"Mcp-Session-Id": SESSION_ID})
        if method == "tools/list":
            cursor = (message.get("params") or {}).get("cursor")
            return self._reply(message, {"result": self.pages[cursor]})
        if method == "tools/call":
            name = message["params"]["name"]
            if name not in self.tool_results:
                return self._reply(message, {"error": {"code": -32602, "message": f"Unknown tool {name}"}})
            return self._reply(message, {"result": self.tool_results[name]})
        return self._reply(message, {"error": {"code": -32601, "message": "Method not found"}})

    def _reply(self, request, body, headers=None):
        payload = dict(body, jsonrpc="2.0", id=request["id"])
        headers = dict(headers or {})
        if self.sse:
            headers["Content-Type"] = "text/event-stream"
            notice = {"jsonrpc": "2.0", "method": "notifications/message", "params": {"level": "info"}}
            text = f"event: message\ndata: {json.dumps(notice)}\n\nevent: message\ndata: {json.dumps(payload)}\n\n"
            return (200, headers, text)
        headers["Content-Type"] = "application/json"
        return (200, headers, json.dumps(payload))


def _serve(server):
    responses.add_callback(responses.POST, MCP_URL, callback=server, content_type=None)
    responses.add(responses.DELETE, MCP_URL, status=200)
    return server


@responses.activate
def test_handshake_echoes_session_header():
    server = _serve(FakeMcpServer())

    with StreamableHttpMcpClient(MCP_URL) as client:
        assert client.connected
        assert client.session_id == SESSION_ID
        assert client.server_info["name"] == "pizza-mcp"

    (init, init_headers), (initialized, initialized_headers) = server.requests[:2]
    assert init["method"] == "initialize"
    assert init["params"]["clientInfo"]["name"] == "PizzaMCPClient"
    assert "Mcp-Session-Id" not in init_headers
    assert initialized["method"] == "notifications/initialized"
    assert initialized_headers["Mcp-Session-Id"] == SESSION_ID


@responses.activate
def test_close_terminates_session_with_delete():
    _serve(FakeMcpServer())

    with StreamableHttpMcpClient(MCP_URL):
        pass

    deletes = [c for c in responses.calls if c.request.method == "DELETE"]
    assert len(deletes) == 1
    assert deletes[0].request.headers["Mcp-Session-Id"] == SESSION_ID


@pytest.mark.parametrize("sse", [False, True])
@responses.activate
def test_list_tools_follows_pagination(sse):
    server = _serve(FakeMcpServer(sse=sse))

    with StreamableHttpMcpClient(MCP_URL) as client:
        tools = client.list_tools()

    assert [t.name for t in tools] == ["get_pizzas", "place_order", ""]
    assert tools[0].raw_schema == {"type": "object"}
    assert tools[1].raw_schema == {}
    list_calls = [m for m, _ in server.requests if m.get("method") == "tools/list"]
    assert [(m.get("params") or {}).get("cursor") for m in list_calls] == [None, "page-2"]


@responses.activate
def test_list_tools_requeries_every_time():
    server = _serve(FakeMcpServer())

    with StreamableHttpMcpClient(MCP_URL) as client:
        client.list_tools()
        server.pages = {None: {"tools": []}}
        assert client.list_tools() == []


@pytest.mark.parametrize("sse", [False, True])
@responses.activate
def test_call_tool_returns_content_unmodified(sse):
    server = _serve(FakeMcpServer(sse=sse))

    with StreamableHttpMcpClient(MCP_URL) as client:
        result = client.call_tool("get_pizzas", {})

    assert result == MENU
    call, headers = server.requests[-1]
    assert call["params"] == {"name": "get_pizzas", "arguments": {}}
    assert headers["Mcp-Session-Id"] == SESSION_ID


@responses.activate
def test_call_tool_prefers_structured_content():
    _serve(FakeMcpServer())

    with StreamableHttpMcpClient(MCP_URL) as client:
        assert client.call_tool("get_order", {"orderId": "order-42"}) == {"orderId": "order-42"}


@responses.activate
def test_call_tool_error_result_raises():
    _serve(FakeMcpServer())

    with StreamableHttpMcpClient(MCP_URL) as client:
        with pytest.raises(ToolExecutionError) as exc:
            client.call_tool("cancel_order", {"orderId": "order-1"})
        assert "order already delivered" in str(exc.value)

        with pytest.raises(ToolExecutionError) as exc:
            client.call_tool("refund", {})
        assert "Unknown tool refund" in str(exc.value)


@responses.activate
def test_unreachable_server_raises_connection_error():
    # Nothing registered: responses refuses the connection
    with pytest.raises(ToolProviderConnectionError) as exc:
        with StreamableHttpMcpClient(MCP_URL):
            pass
    assert exc.value.endpoint == MCP_URL
    assert isinstance(exc.value, ConnectionError)


@responses.activate
def test_http_error_during_handshake_raises_connection_error():
    responses.add(responses.POST, MCP_URL, status=503)

    client = StreamableHttpMcpClient(MCP_URL)
    with pytest.raises(ToolProviderConnectionError):
        client.connect()
    assert not client.connected


def test_calls_before_connect_are_rejected():
    client = StreamableHttpMcpClient(MCP_URL)
    with pytest.raises(ToolProviderConnectionError):
        client.list_tools()


def test_parse_sse_messages_joins_data_lines_and_skips_noise():
    body = (
        ": keep-alive\n\n"
        "event: message\n"
        'data: {"jsonrpc":"2.0",\n'
        'data: "id":1,"result":{}}\n'
        "\n"
        "data: not json\n\n"
        'data: {"jsonrpc":"2.0","id":2,"result":{"ok":true}}'
    )
    messages = parse_sse_messages(body)
    assert [m["id"] for m in messages] == [1, 2]


def test_content_text_renders_mixed_items():
    content = [
        {"type": "text", "text": "Margherita"},
        {"type": "image", "mimeType": "image/png", "data": "..."},
        {"type": "resource", "resource": {"uri": "menu://specials"}},
    ]
    assert content_text(content) == "Margherita\n[Image: image/png]\n[Resource: menu://specials]"
    assert content_text("plain") == "plain"
    assert content_text(None) == ""


@responses.activate
def test_list_tools_stops_on_repeated_cursor():
    server = _serve(FakeMcpServer())
    server.pages = {
        None: {"tools": [{"name": "get_pizzas"}], "nextCursor": "again"},
        "again": {"tools": [{"name": "get_toppings"}], "nextCursor": "again"},
    }

    with StreamableHttpMcpClient(MCP_URL) as client:
        with pytest.raises(ToolProviderConnectionError) as exc:
            client.list_tools()

    assert "again" in str(exc.value)
    assert len([m for m, _ in server.requests if m.get("method") == "tools/list"]) == 3
