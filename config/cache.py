from redis.asyncio import Redis, from_url
from config.settings import settings


async def create_redis(url: str = settings.REDIS_URL) -> Redis:
    """
    Build the process-wide Redis client. Owned by config.clients.Clients.
    """
    client = from_url(
        url,
        decode_responses=False,  # vectors travel as raw float32 bytes
        socket_keepalive=True,
        health_check_interval=30,
    )
    # Fail fast on startup if Redis is unreachable.
    await client.ping()
    return client
