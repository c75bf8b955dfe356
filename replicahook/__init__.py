from .webhook import create_app, review, validate_resource
from .defaulting import replicas
from .manager import Manager, TLSConfig


__all__ = [
    "create_app",
    "review",
    "validate_resource",
    "replicas",
    "Manager",
    "TLSConfig",
]
