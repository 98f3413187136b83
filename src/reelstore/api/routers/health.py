"""Health check endpoints.

- /health/live  - Liveness probe (always OK if the process is running)
- /health/ready - Readiness probe (checks database connectivity)
"""

from __future__ import annotations

import time
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from reelstore.api.deps import Services, get_services

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/live")
async def liveness() -> dict[str, str]:
    return {"status": "healthy"}


@router.get("/ready")
async def readiness(services: Services = Depends(get_services)) -> JSONResponse:
    start = time.perf_counter()
    healthy = await services.database.health_check()
    latency_ms = (time.perf_counter() - start) * 1000

    body: dict[str, Any] = {
        "status": "healthy" if healthy else "unhealthy",
        "components": [
            {
                "name": "database",
                "status": "healthy" if healthy else "unhealthy",
                "latency_ms": round(latency_ms, 2),
            },
            {"name": "chunk_store", "type": services.chunk_store.storage_type},
        ],
    }
    return JSONResponse(status_code=200 if healthy else 503, content=body)
