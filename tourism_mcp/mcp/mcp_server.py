import inspect
import json
import logging
import re
from typing import Any, Callable, Dict, List, Optional, Union, get_args, get_origin

from pydantic import ValidationError

from .protocol import (
    INVALID_PARAMS,
    METHOD_NOT_FOUND,
    CallToolRequest,
    CallToolResult,
    InitializeResult,
    JsonRpcRequest,
    JsonRpcResponse,
    ServerInfo,
    create_tool_definition,
    error_response,
)

logger = logging.getLogger(__name__)

_JSON_TYPES = {
    str: "string",
    int: "integer",
    float: "number",
    bool: "boolean",
    list: "array",
    dict: "object",
}


def _json_schema(annotation: Any) -> Dict[str, Any]:
    """Map a parameter annotation onto a JSON schema fragment."""
    origin = get_origin(annotation)
    if origin is Union:
        # Optional[X] is Union[X, None]
        args = [a for a in get_args(annotation) if a is not type(None)]
        if len(args) == 1:
            return _json_schema(args[0])
        return {"type": "string"}
    if origin in (list, List):
        schema: Dict[str, Any] = {"type": "array"}
        args = get_args(annotation)
        if args:
            schema["items"] = _json_schema(args[0])
        return schema
    if origin in (dict, Dict):
        return {"type": "object"}
    return {"type": _JSON_TYPES.get(annotation, "string")}


def _param_docs(doc: str) -> Dict[str, str]:
    """Pull ``name: text`` lines out of a Google-style ``Args:`` block."""
    docs: Dict[str, str] = {}
    in_args = False
    for line in doc.splitlines():
        stripped = line.strip()
        if stripped in ("Args:", "Arguments:"):
            in_args = True
            continue
        if in_args:
            if not stripped:
                break
            match = re.match(r"^(\w+)(?:\s*\([^)]*\))?:\s*(.+)$", stripped)
            if match:
                docs[match.group(1)] = match.group(2)
    return docs


def _summary(doc: str) -> str:
    """Tool description: the docstring up to its ``Args:`` block."""
    return doc.split("Args:")[0].strip()


class MCPServer:
    """A simple in-process MCP Server to host tools."""

    def __init__(self, name: str = "tourism-mcp", version: str = "0.1.0", instructions: Optional[str] = None):
        self.name = name
        self.version = version
        self.instructions = instructions
        self.tools: Dict[str, Callable] = {}
        self.tool_definitions: List[Dict[str, Any]] = []

    def register_tool(self, func: Callable, name: str = None, description: str = None):
        """Register a python function as a tool."""
        if name is None:
            name = func.__name__
        doc = inspect.getdoc(func) or ""
        if description is None:
            description = _summary(doc)
        param_docs = _param_docs(doc)

        # Inspect function signature to generate schema
        sig = inspect.signature(func)
        parameters = {
            "type": "object",
            "properties": {},
            "required": []
        }

        for param_name, param in sig.parameters.items():
            prop = _json_schema(param.annotation)
            prop["description"] = param_docs.get(param_name, f"Parameter {param_name}")
            if param.default is inspect.Parameter.empty:
                parameters["required"].append(param_name)
            elif param.default is not None:
                prop["default"] = param.default
            parameters["properties"][param_name] = prop

        if name in self.tools:
            logger.warning(f"Tool {name} registered twice, replacing the earlier definition")
            self.tool_definitions = [t for t in self.tool_definitions if t["name"] != name]
        self.tools[name] = func
        self.tool_definitions.append(create_tool_definition(name, description, parameters))

    def list_tools(self) -> List[Dict[str, Any]]:
        return self.tool_definitions

    def call_tool(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> CallToolResult:
        if name not in self.tools:
            return CallToolResult(
                content=[{"type": "text", "text": f"Tool not found: {name}"}],
                isError=True
            )

        try:
            func = self.tools[name]
            result = func(**(arguments or {}))
            text = result if isinstance(result, str) else json.dumps(result, default=str, ensure_ascii=False)
            return CallToolResult(
                content=[{"type": "text", "text": text}],
                isError=False
            )
        except Exception as e:
            logger.exception(f"Tool {name} failed")
            return CallToolResult(
                content=[{"type": "text", "text": f"Error executing tool {name}: {str(e)}"}],
                isError=True
            )

    def metadata(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "instructions": self.instructions,
            "tools": self.list_tools(),
        }

    def handle_request(self, request: JsonRpcRequest) -> Optional[JsonRpcResponse]:
        """Dispatch one JSON-RPC message. Notifications get no reply."""
        method = request.method
        params = request.params or {}

        if method == "initialize":
            result = InitializeResult(
                serverInfo=ServerInfo(name=self.name, version=self.version),
                instructions=self.instructions,
            ).to_dict()
        elif method == "ping":
            result = {}
        elif method == "tools/list":
            result = {"tools": self.list_tools()}
        elif method == "tools/call":
            try:
                call = CallToolRequest(**params)
            except ValidationError as e:
                return error_response(request.id, INVALID_PARAMS, f"Invalid tools/call params: {e}")
            result = self.call_tool(call.name, call.arguments).to_dict()
        elif request.is_notification:
            # notifications/initialized and friends
            return None
        else:
            return error_response(request.id, METHOD_NOT_FOUND, f"Method not found: {method}")

        if request.is_notification:
            return None
        return JsonRpcResponse(id=request.id, result=result)
