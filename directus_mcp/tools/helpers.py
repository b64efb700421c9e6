from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Sequence, Tuple, Type

import mcp.types as types
from pydantic import BaseModel, ValidationError

from ..client import DirectusClientError, DirectusError, DirectusServerError

logger = logging.getLogger("directus_mcp.tools")

RawHandler = Callable[[Any, Dict[str, Any]], Awaitable[Any]]
ToolHandler = Callable[[Any, Optional[Dict[str, Any]]], Awaitable[types.CallToolResult]]
SuccessMessage = Callable[[Dict[str, Any]], str]


@dataclass(frozen=True)
class Tool:
    """
    Declarative description of one MCP tool.

    `handler` is the wrapped callable: it takes the backend client and the raw
    arguments, and always returns a CallToolResult (errors included).
    """

    name: str
    description: str
    input_schema: Type[BaseModel]
    toolsets: Tuple[str, ...]
    handler: ToolHandler
    success_message: Optional[SuccessMessage] = None

    def to_mcp_tool(self) -> types.Tool:
        return types.Tool(
            name=self.name,
            description=self.description,
            inputSchema=self.input_schema.model_json_schema(),
        )


def text_result(text: str, is_error: bool = False) -> types.CallToolResult:
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=text)],
        isError=is_error,
    )


def to_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


def validate_arguments(input_schema: Type[BaseModel], arguments: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Validate raw arguments and keep only the keys the caller actually set."""
    model = input_schema.model_validate(arguments or {})
    return model.model_dump(exclude_unset=True)


def format_validation_error(tool_name: str, exc: ValidationError) -> str:
    problems = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ())) or "arguments"
        problems.append(f"{loc}: {err.get('msg', 'invalid value')}")
    return f"Invalid arguments for {tool_name}: " + "; ".join(problems)


def format_error(exc: Exception) -> str:
    """Consistent error text for backend failures."""
    if isinstance(exc, DirectusClientError):
        status = exc.status_code
        if status == 401:
            return f"Error: Authentication failed. Check DIRECTUS_TOKEN. ({exc})"
        if status == 403:
            return f"Error: Permission denied. The token's role cannot perform this action. ({exc})"
        if status == 404:
            return f"Error: Resource not found. Check the ID is correct. ({exc})"
        if status == 429:
            return "Error: Rate limit exceeded. Wait a moment and retry."
        code = f" [{exc.code}]" if exc.code else ""
        return f"Error: Directus returned {status}{code}: {exc}"
    if isinstance(exc, DirectusServerError):
        if exc.status_code is not None:
            return f"Error: Directus server error {exc.status_code}: {exc}"
        return f"Error: {exc}"
    if isinstance(exc, DirectusError):
        return f"Error: {exc}"
    return f"Error: {type(exc).__name__}: {exc}"


def _wrap_handler(
    name: str,
    input_schema: Type[BaseModel],
    handler: RawHandler,
    success_message: Optional[SuccessMessage] = None,
) -> ToolHandler:
    async def run(client: Any, arguments: Optional[Dict[str, Any]] = None) -> types.CallToolResult:
        try:
            args = validate_arguments(input_schema, arguments)
            # handlers may pop keys (id) off their copy
            result = await handler(client, dict(args))
        except ValidationError as exc:
            logger.info(f"Rejected arguments for {name}", extra={"tool": name, "status": "invalid"})
            return text_result(format_validation_error(name, exc), is_error=True)
        except DirectusError as exc:
            logger.warning(f"Directus call failed: {exc}", extra={"tool": name, "status": "backend_error"})
            return text_result(format_error(exc), is_error=True)
        except Exception as exc:
            logger.error(
                f"Unexpected error: {exc}",
                extra={"tool": name, "status": "error"},
                exc_info=True,
            )
            return text_result(format_error(exc), is_error=True)

        if success_message is not None:
            return text_result(success_message(args))
        return text_result(to_json(result))

    return run


def create_tool(
    *,
    name: str,
    description: str,
    input_schema: Type[BaseModel],
    toolsets: Sequence[str],
    handler: RawHandler,
) -> Tool:
    """Build a tool whose result text is the JSON-serialized backend response."""
    return Tool(
        name=name,
        description=description,
        input_schema=input_schema,
        toolsets=tuple(toolsets),
        handler=_wrap_handler(name, input_schema, handler),
    )


def create_action_tool(
    *,
    name: str,
    description: str,
    input_schema: Type[BaseModel],
    toolsets: Sequence[str],
    handler: RawHandler,
    success_message: SuccessMessage,
) -> Tool:
    """Build a tool that reports a fixed confirmation instead of the response body."""
    return Tool(
        name=name,
        description=description,
        input_schema=input_schema,
        toolsets=tuple(toolsets),
        handler=_wrap_handler(name, input_schema, handler, success_message),
        success_message=success_message,
    )
