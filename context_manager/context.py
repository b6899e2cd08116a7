from contextvars import ContextVar
from typing import Optional

from fastapi import Request

from logger import logger

# defining the context variables to store different types of required data

context_user_data: ContextVar[str] = ContextVar("user_data", default="")
context_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


# whenever an api is hit, define the context variables for it
async def build_request_context(request: Request):
    account_id = request.headers.get("X-Account-Id", "")
    request_id = request.headers.get("X-Request-Id")

    context_user_data.set(account_id)
    context_request_id.set(request_id)

    logger.info(extra=account_id, msg="REQUEST_INITIATED")

