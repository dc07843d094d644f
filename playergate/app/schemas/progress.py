# playergate/app/schemas/progress.py
from typing import Optional

from pydantic import BaseModel, Field


class ProgressUpdate(BaseModel):
    # Opaque client blobs (JSON text), stored as-is
    best_scores: str = Field(..., min_length=1)
    levels_unlocked: Optional[str] = None


class ProgressResponse(BaseModel):
    best_scores: str = "{}"
    levels_unlocked: str = "[]"

    class Config:
        from_attributes = True


class MessageResponse(BaseModel):
    message: str
