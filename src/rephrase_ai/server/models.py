"""Pydantic models for the REST server."""

from __future__ import annotations

from pydantic import BaseModel


class ApiError(BaseModel):
    # Mirrors the success envelope, which always carries `result_type`.
    result_type: str = ""
    error: str
