"""Business exception base shared by the domain and infrastructure layers.

The core layer only renders these; the domain never depends on core.
"""
from __future__ import annotations

from typing import Any, Optional


class BusinessException(Exception):
    """Base class for every error surfaced to callers with a stable code."""

    def __init__(
        self,
        code: int | str,
        message: str,
        error_type: str = "BusinessError",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.error_type = error_type
        self.details = details
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"
