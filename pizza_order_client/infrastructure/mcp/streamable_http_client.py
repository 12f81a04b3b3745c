"""
MCP client over the streamable HTTP transport.

Responsibilities:
- Perform the MCP handshake (initialize + notifications/initialized) with a single attempt
- Discover tools via tools/list (following nextCursor pagination, never cached)
- Invoke tools via tools/call
- Release the server session (HTTP DELETE) on close

Protocol notes:
- Every JSON-RPC message is POSTed to the single MCP endpoint.
- The server answers with application/json or with a text/event-stream body whose
  "data:" lines carry JSON-RPC messages; server notifications are skipped.
- The Mcp-Session-Id header returned by initialize is echoed on every later request.

Errors:
- Transport failures and handshake/list errors raise ToolProviderConnectionError.
- A JSON-RPC error or an isError result from tools/call raises ToolExecutionError.
"""

from __future__ import annotations

import itertools
import json
import logging
from typing import Any, Dict, List, Optional

import requests

from pizza_order_client import __version__
from pizza_order_client.abstractions.dto.tools import ToolDescriptor
from pizza_order_client.domain.errors import ToolExecutionError, ToolProviderConnectionError

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2025-03-26"
SESSION_HEADER = "Mcp-Session-Id"
PROTOCOL_HEADER = "MCP-Protocol-Version"


class StreamableHttpMcpClient:
    """
    Usage:
        with StreamableHttpMcpClient("https://host/mcp") as client:
            tools = client.list_tools()
            result = client.call_tool("get_pizzas", {})
    """

    def __init__(
        self,
        endpoint: str,
        timeout: float = 30.0,
        client_name: str = "PizzaMCPClient",
        http: Optional[requests.Session] = None,
    ) -> None:
        self.endpoint = endpoint
        self.timeout = timeout
        self.client_name = client_name
        self.session_id: Optional[str] = None
        self.protocol_version: Optional[str] = None
        self.server_info: Dict[str, Any] = {}
        self._owns_http = http is None
        self._http = http or requests.Session()
        self._ids = itertools.count(1)
        self._connected = False

    # ---------- Lifecycle ----------

    def __enter__(self) -> "StreamableHttpMcpClient":
        try:
            return self.connect()
        except BaseException:
            self.close()
            raise

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def connected(self) -> bool:
        return self._connected

    def connect(self) -> "StreamableHttpMcpClient":
        """Run the initialize handshake. Raises ToolProviderConnectionError on any failure."""
        if self._connected:
            return self
        result = self._request_or_connection_error("initialize", {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {},
            "clientInfo": {"name": self.client_name, "version": __version__},
        })
        if not isinstance(result, dict):
            raise ToolProviderConnectionError(
                f"Invalid initialize result from MCP server at {self.endpoint}", endpoint=self.endpoint
            )
        self.protocol_version = result.get("protocolVersion") or PROTOCOL_VERSION
        self.server_info = result.get("serverInfo") or {}
        try:
            self._notify("notifications/initialized")
        except requests.RequestException as e:
            raise ToolProviderConnectionError(
                f"MCP handshake with {self.endpoint} failed: {e}", endpoint=self.endpoint
            ) from e
        self._connected = True
        logger.info(f"Connected to MCP server {self.server_info.get('name', '?')} at {self.endpoint}")
        return self

    def close(self) -> None:
        """Terminate the server session (best effort) and release the HTTP session."""
        if self.session_id:
            try:
                self._http.delete(self.endpoint, headers=self._headers(), timeout=self.timeout)
            except requests.RequestException as e:
                logger.debug(f"Ignoring MCP session termination failure: {e}")
            self.session_id = None
        if self._owns_http:
            self._http.close()
        self._connected = False

    # ---------- Public API ----------

    def list_tools(self) -> List[ToolDescriptor]:
        """Query the server for its tools. Each call re-queries the server."""
        self._ensure_connected()
        descriptors: List[ToolDescriptor] = []
        cursor: Optional[str] = None
        seen_cursors = set()
        while True:
            params = {"cursor": cursor} if cursor else None
            result = self._request_or_connection_error("tools/list", params) or {}
            for raw in result.get("tools", []) or []:
                descriptors.append(self._to_descriptor(raw))
            cursor = result.get("nextCursor")
            if not cursor:
                break
            if cursor in seen_cursors:
                raise ToolProviderConnectionError(
                    f"MCP server at {self.endpoint} repeated tools/list cursor '{cursor}'",
                    endpoint=self.endpoint,
                )
            seen_cursors.add(cursor)
        logger.debug(f"Discovered {len(descriptors)} tools at {self.endpoint}")
        return descriptors

    def call_tool(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> Any:
        """
        Invoke a remote tool.

        Returns structuredContent when the server provides it, otherwise the raw
        content list. Raises ToolExecutionError when the server flags the call as failed.
        """
        self._ensure_connected()
        try:
            result = self._request("tools/call", {"name": name, "arguments": arguments or {}})
        except _JsonRpcError as e:
            raise ToolExecutionError(name, str(e)) from e
        except requests.RequestException as e:
            raise ToolProviderConnectionError(
                f"MCP server at {self.endpoint} unreachable: {e}", endpoint=self.endpoint
            ) from e
        result = result or {}
        if result.get("isError"):
            raise ToolExecutionError(name, content_text(result.get("content")) or "unknown error")
        if result.get("structuredContent") is not None:
            return result["structuredContent"]
        return result.get("content", [])

    # ---------- Private helpers ----------

    def _ensure_connected(self) -> None:
        if not self._connected:
            raise ToolProviderConnectionError(
                f"Not connected to MCP server at {self.endpoint}", endpoint=self.endpoint
            )

    @staticmethod
    def _to_descriptor(raw: Any) -> ToolDescriptor:
        # Malformed entries are passed through; the tool adapter decides what to reject
        if not isinstance(raw, dict):
            return ToolDescriptor(name="", description="", raw_schema={"invalid": raw})
        return ToolDescriptor(
            name=raw.get("name") or "",
            description=raw.get("description") or "",
            raw_schema=raw.get("inputSchema") if "inputSchema" in raw else {},
        )

    def _headers(self) -> Dict[str, str]:
        h = {"Accept": "application/json, text/event-stream", "Content-Type": "application/json"}
        if self.session_id:
            h[SESSION_HEADER] = self.session_id
        if self.protocol_version:
            h[PROTOCOL_HEADER] = self.protocol_version
        return h

    def _request_or_connection_error(self, method: str, params: Optional[Dict[str, Any]] = None) -> Any:
        try:
            return self._request(method, params)
        except (requests.RequestException, _JsonRpcError, ValueError) as e:
            raise ToolProviderConnectionError(
                f"MCP request '{method}' to {self.endpoint} failed: {e}", endpoint=self.endpoint
            ) from e

    def _request(self, method: str, params: Optional[Dict[str, Any]] = None) -> Any:
        request_id = next(self._ids)
        payload: Dict[str, Any] = {"jsonrpc": "2.0", "id": request_id, "method": method}
        if params:
            payload["params"] = params
        logger.debug(f"MCP -> {method} (id={request_id})")

        resp = self._http.post(self.endpoint, json=payload, headers=self._headers(), timeout=self.timeout)
        resp.raise_for_status()
        session_id = resp.headers.get(SESSION_HEADER)
        if session_id:
            self.session_id = session_id

        message = self._parse_response(resp, request_id)
        logger.debug(f"MCP <- {method} (id={request_id})")
        if "error" in message:
            err = message["error"] or {}
            raise _JsonRpcError(err.get("code"), err.get("message") or "unknown error")
        return message.get("result")

    def _notify(self, method: str, params: Optional[Dict[str, Any]] = None) -> None:
        payload: Dict[str, Any] = {"jsonrpc": "2.0", "method": method}
        if params:
            payload["params"] = params
        resp = self._http.post(self.endpoint, json=payload, headers=self._headers(), timeout=self.timeout)
        resp.raise_for_status()

    def _parse_response(self, resp: requests.Response, request_id: int) -> Dict[str, Any]:
        content_type = (resp.headers.get("Content-Type") or "").lower()
        if "text/event-stream" in content_type:
            for message in parse_sse_messages(resp.text):
                if message.get("id") == request_id:
                    return message
            raise ValueError(f"No JSON-RPC response with id {request_id} in event stream")
        data = json.loads(resp.text or "null")
        if isinstance(data, list):
            # JSON-RPC batch: pick our response
            for message in data:
                if isinstance(message, dict) and message.get("id") == request_id:
                    return message
            raise ValueError(f"No JSON-RPC response with id {request_id} in batch")
        if not isinstance(data, dict):
            raise ValueError("JSON-RPC response must be an object")
        return data


class _JsonRpcError(Exception):
    def __init__(self, code: Any, message: str) -> None:
        super().__init__(f"{message} (code {code})")
        self.code = code


def parse_sse_messages(body: str) -> List[Dict[str, Any]]:
    """
    Parse a text/event-stream body into the JSON objects carried by its events.

    Events are separated by blank lines; the "data:" lines of one event are joined
    with newlines. Events whose data is not a JSON object are skipped.
    """
    messages: List[Dict[str, Any]] = []
    data_lines: List[str] = []

    def flush() -> None:
        if not data_lines:
            return
        raw = "\n".join(data_lines)
        data_lines.clear()
        try:
            obj = json.loads(raw)
        except ValueError:
            logger.debug(f"Skipping non-JSON SSE event: {raw[:80]}")
            return
        if isinstance(obj, dict):
            messages.append(obj)

    for line in (body or "").splitlines():
        if not line.strip():
            flush()
        elif line.startswith("data:"):
            data_lines.append(line[5:].lstrip(" "))
    flush()
    return messages


def content_text(content: Any) -> str:
    """Join the text items of an MCP content list; other item types get a short placeholder."""
    if isinstance(content, str):
        return content
    if not isinstance(content, list):
        return ""
    parts: List[str] = []
    for item in content:
        if not isinstance(item, dict):
            continue
        kind = item.get("type")
        if kind == "text":
            parts.append(item.get("text", ""))
        elif kind == "image":
            parts.append(f"[Image: {item.get('mimeType', 'image')}]")
        elif kind == "resource":
            resource = item.get("resource") or {}
            parts.append(resource.get("text") or f"[Resource: {resource.get('uri', '')}]")
    return "\n".join(parts)


__all__ = ["StreamableHttpMcpClient", "parse_sse_messages", "content_text", "PROTOCOL_VERSION"]
