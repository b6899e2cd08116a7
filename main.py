import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from slowapi.errors import RateLimitExceeded

from logger import logger
from limiter import limiter, rate_limit_handler
from utils.exception_handler import (
    format_validation_errors,
    handle_validation_error,
    custom_http_exception_handler,
    rate_engine_exception_handler,
)
from utils.exceptions import RateEngineError

from router import CommonRouter, StatusRouter

app = FastAPI(title="Rate Engine")

# Routers
app.include_router(CommonRouter)
app.include_router(StatusRouter)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_handler)

# Exception handlers
app.add_exception_handler(ValidationError, handle_validation_error)
app.add_exception_handler(HTTPException, custom_http_exception_handler)
app.add_exception_handler(RateEngineError, rate_engine_exception_handler)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# -------------------------------
# Validation error handler
# -------------------------------
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    raw = (await request.body()).decode("utf-8", "ignore")
    logger.error("422 on %s\nBody: %s\nErrors: %s", request.url, raw, exc.errors())
    return JSONResponse(
        status_code=422,
        content=format_validation_errors(exc.errors()),
    )


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
