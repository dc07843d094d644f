# playergate/app/models/progress.py
from sqlalchemy import Column, Integer, Text, ForeignKey, DateTime
from sqlalchemy.sql import func

from playergate.app.db.base import Base


class GameProgress(Base):
    __tablename__ = "game_progress"

    id = Column(Integer, primary_key=True, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), unique=True, nullable=False)

    # Opaque blobs owned by the game client (JSON text in practice).
    # The server never parses them.
    best_scores = Column(Text, nullable=False, default="{}")
    levels_unlocked = Column(Text, nullable=False, default="[]")

    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now()
    )
