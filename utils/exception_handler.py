from typing import List, Dict
from pydantic import ValidationError
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse

from context_manager.context import context_user_data
from logger import logger

from utils.exceptions import (
    InvalidWeightError,
    MalformedQuoteError,
    RateEngineError,
    UnsupportedZoneError,
)


# format the validation errors into our desired output
def format_validation_errors(errors: List[dict]) -> Dict:
    formatted_errors = {}

    for error in errors:
        # field is the innermost part of the location
        field = str(error["loc"][-1]) if len(error["loc"]) > 1 else "Unknown"
        message = error["msg"]

        formatted_errors.setdefault(field, []).append(message)

    return {
        "data": {"fields": formatted_errors},
        "message": "Validation error occurred.",
        "status": False,
    }


async def handle_validation_error(
    request: Request, exc: ValidationError
) -> JSONResponse:
    logger.error(
        extra=context_user_data.get(),
        msg=f"Validation error on {request.url.path}: {exc.errors()}",
    )
    return JSONResponse(status_code=422, content=format_validation_errors(exc.errors()))


# pricing errors that escape a service end up here
async def rate_engine_exception_handler(
    request: Request, exc: RateEngineError
) -> JSONResponse:
    data = {}
    if isinstance(exc, MalformedQuoteError):
        data = {"path": exc.path, "courierId": exc.courier_id}
    elif isinstance(exc, UnsupportedZoneError):
        data = {"zone": str(exc.zone), "courierId": exc.courier_id}

    status_code = 422
    if not isinstance(
        exc, (InvalidWeightError, MalformedQuoteError, UnsupportedZoneError)
    ):
        status_code = 502

    logger.error(
        extra=context_user_data.get(),
        msg=f"{type(exc).__name__} on {request.url.path}: {exc.message}",
    )

    return JSONResponse(
        status_code=status_code,
        content={"data": data, "message": exc.message, "status": False},
    )


# Custom internal server error handler
async def custom_http_exception_handler(
    request: Request, exc: HTTPException
) -> JSONResponse:
    if exc.status_code == 500:
        logger.error(msg=f"Internal server error: {exc.detail}")
        return JSONResponse(
            status_code=500,
            content={
                "detail": "An internal server error occurred. Please try again later."
            },
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
    )
