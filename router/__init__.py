from .api_router import CommonRouter
from .status_router import StatusRouter

__all__ = ["CommonRouter", "StatusRouter"]
