from __future__ import annotations

import asyncio
import json
import os
import sys
from typing import Any, Dict

from mcp import ClientSession
from mcp.client.streamable_http import streamablehttp_client


MCP_URL = os.getenv("MCP_URL", "http://127.0.0.1:9000/mcp")


def _headers() -> Dict[str, str]:
    token = os.getenv("MCP_SERVER_TOKEN", "").strip()
    return {"Authorization": f"Bearer {token}"} if token else {}


async def main() -> None:
    if len(sys.argv) < 2:
        print("Usage: python scripts/call_tool.py <tool_name> ['<json-args>']")
        raise SystemExit(1)

    tool_name = sys.argv[1]
    raw_args = sys.argv[2] if len(sys.argv) > 2 else "{}"

    try:
        params: Dict[str, Any] = json.loads(raw_args)
    except json.JSONDecodeError as exc:
        print("Failed to parse JSON arguments")
        print(repr(exc))
        raise SystemExit(1)

    async with streamablehttp_client(MCP_URL, headers=_headers()) as (read_stream, write_stream, _):
        async with ClientSession(read_stream, write_stream) as session:
            await session.initialize()
            result = await session.call_tool(tool_name, params)
            for block in result.content:
                print(getattr(block, "text", block))
            if result.isError:
                raise SystemExit(2)


if __name__ == "__main__":
    asyncio.run(main())
