"""Room configuration models."""

from typing import Any, Optional

from pydantic import BaseModel


class RoomConfigUpdate(BaseModel):
    """Room capacity update. ``totalRooms`` is range-checked by the route."""

    totalRooms: Any = None
    reason: Optional[str] = None
    updatedBy: Optional[str] = None
