"""Version 1 API routers."""

from . import compare

__all__ = ["compare"]
