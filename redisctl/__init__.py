"""redisctl - Redis Cloud and Redis Enterprise management with tracked async operations."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("redisctl")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"  # Fallback for development without install
