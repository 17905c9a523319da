import asyncio
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from config.clients import Clients
from controller.controller_dependencies import get_clients
from model.api import HealthResponse
from util.constants import InternalURIs

health_router = APIRouter()


@health_router.get("/healthz")
async def healthz():
    return {"ok": True}


@health_router.get(InternalURIs.HEALTH, response_model=HealthResponse)
async def health(clients: Clients = Depends(get_clients)):
    checks = {
        "redis": clients.fast_tier().check_health(),
        "mongodb": clients.embedding_store().check_health(),
        "openai": clients.openai().check_health(),
        "pinecone": clients.durable.check_health(),
        "slack": clients.slack().check_health(),
    }
    results = await asyncio.gather(*checks.values())
    body = HealthResponse(ok=all(results), services=dict(zip(checks.keys(), results)))
    code = status.HTTP_200_OK if body.ok else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(status_code=code, content=body.model_dump())
