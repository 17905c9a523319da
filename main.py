from fastapi_limiter import FastAPILimiter
import routes
from contextlib import asynccontextmanager
from util.enums import Environment, Color
from fastapi import FastAPI, Request
from config.clients import Clients
from config.settings import settings
from fastapi.responses import JSONResponse
from util.logger import init_logger
from util.tasks import drain
import logging

logger = logging.getLogger(__name__)


async def _real_ip(request: Request) -> str:
    if settings.TRUST_PROXY:
        fwd = request.headers.get("x-forwarded-for")
        if fwd:
            return fwd.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


@asynccontextmanager
async def lifespan(fastApi: FastAPI):
    init_logger()
    print(f"{Color.GREEN}Initializing...{Color.RESET}")
    clients = await Clients.create()
    try:
        # TierError here (other than "already exists") aborts startup
        await clients.ensure_indexes()
        await FastAPILimiter.init(clients.redis, identifier=_real_ip)
    except Exception as e:
        logger.critical("startup.failed err=%s: %s", type(e).__name__, e)
        await clients.aclose()
        raise
    fastApi.state.clients = clients
    print(f"{Color.BLUE}Server Started{Color.RESET}")

    try:
        yield
    finally:
        await drain()
        await clients.aclose()
        print(f"{Color.RED}Server Shutdown{Color.RESET}")


app: FastAPI = FastAPI(lifespan=lifespan)


@app.exception_handler(429)
async def ratelimit_handler(request: Request, exc):
    return JSONResponse(
        status_code=429,
        content={
            "ok": False,
            "error": "rate_limited",
            "message": "Too many requests. Try again in 60s.",
        },
        headers={"Retry-After": "60"},
    )


routes.register_routes(app)

if __name__ == "__main__":
    import uvicorn

    reload = settings.APP_ENV == Environment.DEV
    uvicorn.run("main:app", host="0.0.0.0", port=3000, reload=reload)
