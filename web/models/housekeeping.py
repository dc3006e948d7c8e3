"""Housekeeping blob models."""

from typing import Any, Optional

from pydantic import BaseModel


class SaveRequest(BaseModel):
    """Save request; ``data`` is stored verbatim."""

    type: Optional[str] = None
    data: Any = None
    timestamp: Optional[str] = None
