"""MCP transport binding: tool listing and tool calls over stdio."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from . import __version__
from .core.dispatcher import ToolDispatcher, ToolResponse

logger = logging.getLogger(__name__)

SERVER_NAME = "pgmcp"
SERVER_INSTRUCTIONS = (
    "MCP server for PostgreSQL databases with full CRUD and schema inspection capabilities"
)


class ToolFailure(Exception):
    """Carries a failure envelope out of a tool call so the transport flags it as an error."""

    def __init__(self, response: ToolResponse):
        super().__init__(response.text)
        self.response = response


def list_tool_definitions() -> list[types.Tool]:
    """MCP tool definitions for the whole catalog."""

    return [
        types.Tool(
            name=spec.name,
            description=spec.description,
            inputSchema=spec.input_schema(),
        )
        for spec in ToolDispatcher.catalog()
    ]


def create_server(dispatcher: ToolDispatcher) -> Server:
    """Build a low-level MCP server whose tool calls go through `dispatcher`."""

    server: Server = Server(SERVER_NAME, version=__version__, instructions=SERVER_INSTRUCTIONS)

    @server.list_tools()
    async def handle_list_tools() -> list[types.Tool]:
        return list_tool_definitions()

    @server.call_tool()
    async def handle_call_tool(
        name: str, arguments: Optional[dict[str, Any]]
    ) -> list[types.TextContent]:
        # Database calls block, so each dispatch runs on a worker thread.
        response = await asyncio.to_thread(dispatcher.dispatch, name, arguments)
        if not response.ok:
            raise ToolFailure(response)
        return [types.TextContent(type="text", text=response.text)]

    return server


async def serve_stdio(dispatcher: ToolDispatcher) -> None:
    """Serve the dispatcher over stdin/stdout until the client disconnects."""

    server = create_server(dispatcher)
    async with stdio_server() as (read_stream, write_stream):
        logger.info("Serving %d tools over stdio", len(ToolDispatcher.catalog()))
        await server.run(read_stream, write_stream, server.create_initialization_options())
