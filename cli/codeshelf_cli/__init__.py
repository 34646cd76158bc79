"""Command-line interface for the Codeshelf project store."""

from .cli import main
from .client import ApiClient, ApiError

__all__ = ["ApiClient", "ApiError", "main"]
