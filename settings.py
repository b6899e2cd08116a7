"""
Rate Engine Configuration

Values are read from the environment (a local .env file is loaded first).
"""

import os
from dotenv import load_dotenv

load_dotenv()

# Redis configuration from environment variables
REDIS_HOST = os.environ.get("REDIS_HOST", "localhost")
REDIS_PORT = os.environ.get("REDIS_PORT", "6379")
REDIS_PASSWORD = os.environ.get("REDIS_PASSWORD", "")
REDIS_DB = os.environ.get("REDIS_DB", "0")

# Build Redis URL
if os.environ.get("REDIS_URL"):
    REDIS_URL = os.environ["REDIS_URL"]
elif REDIS_PASSWORD:
    REDIS_URL = f"redis://:{REDIS_PASSWORD}@{REDIS_HOST}:{REDIS_PORT}/{REDIS_DB}"
else:
    REDIS_URL = f"redis://{REDIS_HOST}:{REDIS_PORT}/{REDIS_DB}"

# Courier source fan-out
COURIER_SOURCE_TIMEOUT_SECONDS = float(
    os.environ.get("COURIER_SOURCE_TIMEOUT_SECONDS", "10")
)

# Token cache TTLs (seconds), overridable per source with TOKEN_TTL_<SOURCE>
DEFAULT_TOKEN_TTL_SECONDS = int(os.environ.get("DEFAULT_TOKEN_TTL_SECONDS", "3600"))
TOKEN_TTL_SECONDS = {
    "shiprocket": 86400,  # shiprocket tokens are valid for 10 days, refresh daily
}


def get_token_ttl(source: str) -> int:
    """TTL in seconds for tokens issued by the given courier source."""
    override = os.environ.get(f"TOKEN_TTL_{source.upper()}")
    if override:
        return int(override)
    return TOKEN_TTL_SECONDS.get(source.lower(), DEFAULT_TOKEN_TTL_SECONDS)


# Pricing
VOLUMETRIC_DIVISOR = int(os.environ.get("VOLUMETRIC_DIVISOR", "5000"))
PLAN_DIFF_TOLERANCE = float(os.environ.get("PLAN_DIFF_TOLERANCE", "0.01"))

# Courier APIs
SHIPROCKET_BASE_URL = os.environ.get(
    "SHIPROCKET_BASE_URL", "https://apiv2.shiprocket.in/v1/external"
)
