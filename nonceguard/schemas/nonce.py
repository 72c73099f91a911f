import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class Nonce(BaseModel):
    """
    A single-use, time-bound token bound to an (action, user) pair.

    Instances handed out by a store are copies; mutating one never changes
    what the store holds.
    """

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID | None = None  # Assigned on first save
    user_id: uuid.UUID
    token: str = Field(..., min_length=88, max_length=88)
    action: str | None  # Column is nullable; such rows never pass check_nonce
    salt: str
    is_used: bool = False
    is_valid: bool = True
    created_at: int  # Epoch seconds
    expires_at: datetime  # Naive UTC, whole seconds
