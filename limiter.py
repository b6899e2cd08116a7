import http
import os

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse

# per client ip, disabled with RATE_LIMIT_ENABLED=false
limiter = Limiter(
    key_func=get_remote_address,
    enabled=os.environ.get("RATE_LIMIT_ENABLED", "true").lower() != "false",
)


def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=http.HTTPStatus.TOO_MANY_REQUESTS,
        content={
            "data": {},
            "message": "Too many requests. Slow down!",
            "status": False,
        },
    )
