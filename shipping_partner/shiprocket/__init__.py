from .shiprocket import Shiprocket

__all__ = ["Shiprocket"]
