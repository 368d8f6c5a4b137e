import json
import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from tourism_mcp.config import Config, setup_logging
from tourism_mcp.main import build_mastercard_client, build_server
from tourism_mcp.mcp.mcp_server import MCPServer
from tourism_mcp.mcp.protocol import INVALID_REQUEST, PARSE_ERROR, JsonRpcRequest, error_response

logger = logging.getLogger(__name__)


def create_app(server: Optional[MCPServer] = None) -> FastAPI:
    """HTTP transport for the tourism MCP server: one JSON-RPC message per POST."""
    if server is None:
        server = build_server(mastercard=build_mastercard_client())

    app = FastAPI(title=server.name, version=server.version)
    app.state.mcp_server = server

    # Add CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/mcp/meta")
    async def meta():
        """Server name, version, instructions and tool list."""
        return server.metadata()

    @app.post("/mcp")
    async def mcp_endpoint(request: Request):
        body = await request.body()
        try:
            payload = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return JSONResponse(error_response(None, PARSE_ERROR, f"Parse error: {e}").to_dict())

        if not isinstance(payload, dict):
            return JSONResponse(
                error_response(None, INVALID_REQUEST, "Invalid request: expected a JSON object").to_dict()
            )
        try:
            rpc_request = JsonRpcRequest(**payload)
        except ValidationError as e:
            request_id = payload.get("id") if isinstance(payload.get("id"), (str, int)) else None
            return JSONResponse(error_response(request_id, INVALID_REQUEST, f"Invalid request: {e}").to_dict())

        logger.info(f"MCP {rpc_request.method}", extra={"request_id": rpc_request.id})
        # Tools block on I/O (the ATM API), so dispatch runs off the event loop
        response = await run_in_threadpool(server.handle_request, rpc_request)
        if response is None:
            # Notification: acknowledged, nothing to return
            return Response(status_code=202)
        return JSONResponse(json.loads(json.dumps(response.to_dict(), default=str)))

    return app


app = create_app()

if __name__ == "__main__":
    setup_logging(Config.LOG_LEVEL)
    uvicorn.run("web_server:app", host="0.0.0.0", port=5000, reload=True)
