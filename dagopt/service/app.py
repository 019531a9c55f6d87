"""Optimizer FastAPI application.

Endpoints:
- ``POST /optimize``: optimize one block given as text lines.
- ``POST /optimize_batch``: optimize several named blocks; each block is
  an independent run, so one failing block does not affect the others.
- ``GET /health``

Run with ``uvicorn dagopt.service.app:app``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from dagopt.compiler.dag import DagInvariantError
from dagopt.compiler.optimizer import optimize_lines
from dagopt.compiler.quad import NoInstructionsError

LOG = logging.getLogger("dagopt.service")

# ---------------------------------------------------------------------------
# Request / response models
# ---------------------------------------------------------------------------


class OptimizeRequest(BaseModel):
    lines: List[str]
    # Return the node arena and bindings alongside the result
    include_dag: bool = False


class OptimizeResponse(BaseModel):
    input: List[str]
    optimized: List[str]
    instructions: List[Dict[str, str]]
    dag: Optional[Dict[str, Any]] = None


class BatchRequest(BaseModel):
    blocks: Dict[str, List[str]]


class BatchResponse(BaseModel):
    # block name -> {"optimized": [...]} or {"error": "..."}
    results: Dict[str, Dict[str, Any]]


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------


def create_app() -> FastAPI:
    app = FastAPI(title="dagopt")

    @app.post("/optimize", response_model=OptimizeResponse)
    async def optimize(req: OptimizeRequest):
        """Optimize a single block."""
        try:
            result = optimize_lines(req.lines)
        except NoInstructionsError as exc:
            raise HTTPException(400, str(exc))
        except DagInvariantError as exc:
            LOG.error("internal error: %s", exc)
            raise HTTPException(500, f"Internal optimizer error: {exc}")
        return result.to_dict(include_dag=req.include_dag)

    @app.post("/optimize_batch", response_model=BatchResponse)
    async def optimize_batch(req: BatchRequest):
        """Optimize several blocks, reporting failures per block."""
        results: Dict[str, Dict[str, Any]] = {}
        for name, lines in req.blocks.items():
            try:
                result = optimize_lines(lines)
            except (NoInstructionsError, DagInvariantError) as exc:
                LOG.error("%s: %s", name, exc)
                results[name] = {"error": str(exc)}
                continue
            results[name] = {"optimized": result.to_dict()["optimized"]}
        return {"results": results}

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
