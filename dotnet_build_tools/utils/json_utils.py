"""orjson wrappers for release-index payloads and CLI output."""

from typing import Any

import orjson


class JsonHandler:
    """JSON encoding and decoding through orjson."""

    @staticmethod
    def dumps(data: Any, pretty: bool = False) -> str:
        """Serialize to a str with sorted keys, indented when ``pretty``."""
        options = orjson.OPT_SORT_KEYS
        if pretty:
            options |= orjson.OPT_INDENT_2
        return orjson.dumps(data, option=options).decode("utf-8")

    @staticmethod
    def safe_loads(payload: str | bytes, default: Any = None) -> Any:
        """
        Parse a downloaded JSON document.

        Args:
            payload: Response body as text or raw bytes
            default: Returned when the payload is not valid JSON

        Returns:
            Parsed object or ``default``
        """
        try:
            return orjson.loads(payload)
        except (orjson.JSONDecodeError, TypeError):
            return default
