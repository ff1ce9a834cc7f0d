from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ApiError(Exception):
    code: str
    message: str
    status_code: int
    details: dict[str, Any] | None = field(default=None)


def configuration_error(message: str = "Server configuration error") -> ApiError:
    return ApiError("CONFIGURATION_ERROR", message, 500)


def not_found(resource: str) -> ApiError:
    return ApiError("NOT_FOUND", f"{resource} not found", 404)
