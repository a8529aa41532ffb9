"""Utility modules for logging, JSON and HTTP handling."""

from dotnet_build_tools.utils.logging import setup_logging, get_logger
from dotnet_build_tools.utils.json_utils import JsonHandler
from dotnet_build_tools.utils.http import fetch_text, fetch_bytes

__all__ = [
    "setup_logging",
    "get_logger",
    "JsonHandler",
    "fetch_text",
    "fetch_bytes",
]
