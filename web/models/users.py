"""User models."""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class UserPayload(BaseModel):
    """User profile. Fields other than ``email`` are opaque and kept as sent."""

    model_config = ConfigDict(extra="allow")

    email: Optional[str] = None
