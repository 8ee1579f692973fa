"""FastAPI application exposing the pdfinspect tools over HTTP."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import Body, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware

from pdfinspect.config import AppConfig
from pdfinspect.errors import AccessDenied, InvalidInput
from pdfinspect.tools.handlers import TOOLS, ToolContext

LOGGER = logging.getLogger(__name__)

app = FastAPI(title="pdfinspect", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
app.state.context = ToolContext()


def configure_app(config: AppConfig) -> None:
    """Install the root set and fetch settings from ``config`` on the app."""
    app.state.context = ToolContext(
        confinement=config.build_confinement(),
        fetch_timeout=config.fetch_timeout,
        max_fetch_bytes=config.max_fetch_bytes,
    )


def _context(request: Request) -> ToolContext:
    return request.app.state.context


@app.get("/tools")
async def list_tools() -> dict[str, Any]:
    return {
        "tools": [
            {
                "name": tool.name,
                "description": tool.description,
                "input_schema": tool.input_schema(),
            }
            for tool in TOOLS.values()
        ]
    }


@app.get("/roots")
async def list_roots(request: Request) -> dict[str, Any]:
    return {"roots": list(_context(request).confinement.roots)}


@app.post("/tools/{name}")
async def call_tool(name: str, request: Request, payload: Any = Body(None)) -> dict[str, Any]:
    tool = TOOLS.get(name)
    if tool is None:
        raise HTTPException(status_code=404, detail=f"Unknown tool: {name}")

    context = _context(request)
    try:
        return await asyncio.to_thread(tool.handler, payload, context)
    except InvalidInput as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except AccessDenied as exc:
        LOGGER.warning("Access denied for %s: %s", name, exc)
        raise HTTPException(status_code=403, detail=str(exc)) from exc
