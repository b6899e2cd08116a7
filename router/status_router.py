import http
from fastapi import APIRouter
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError

from logger import logger

from utils.token_cache import get_redis_client

StatusRouter = APIRouter(tags=["health_checks"])


# normal status check
@StatusRouter.get("/status", status_code=http.HTTPStatus.OK)
async def status_check():
    return JSONResponse(status_code=http.HTTPStatus.OK, content={"status": "OK"})


# deep check with the token cache connection
@StatusRouter.get("/deepstatus", status_code=http.HTTPStatus.OK)
async def deep_status_check():
    redis_client = get_redis_client()
    try:
        is_cache_ok = bool(await redis_client.ping())
    except RedisError as e:
        logger.error(msg=f"Token cache not reachable: {e}")
        is_cache_ok = False
    finally:
        await redis_client.aclose()

    if not is_cache_ok:
        return JSONResponse(
            status_code=http.HTTPStatus.SERVICE_UNAVAILABLE,
            content={"error": "token cache not connected"},
        )

    return JSONResponse(status_code=http.HTTPStatus.OK, content={"cache": is_cache_ok})
