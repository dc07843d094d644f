# playergate/app/services/progress.py
"""
Game progress store.

Opaque key-value storage addressed only by numeric account id. The
blobs are whatever the game client sends; they are never parsed here.
"""
import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func

from playergate.app.core.errors import storage_errors
from playergate.app.db.upsert import dialect_insert
from playergate.app.models.progress import GameProgress

logger = logging.getLogger(__name__)


class ProgressStore:

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, account_id: int) -> Optional[GameProgress]:
        with storage_errors():
            result = await self.session.execute(
                select(GameProgress).where(GameProgress.account_id == account_id)
            )
            return result.scalars().first()

    async def put(self, account_id: int, best_scores: str, levels_unlocked: Optional[str] = None) -> None:
        """Insert or replace the progress row; levels_unlocked=None keeps the stored value."""
        stmt = dialect_insert(self.session, GameProgress.__table__).values(
            account_id=account_id,
            best_scores=best_scores,
            levels_unlocked="[]" if levels_unlocked is None else levels_unlocked,
        )

        updates = {"best_scores": best_scores, "updated_at": func.now()}
        if levels_unlocked is not None:
            updates["levels_unlocked"] = levels_unlocked
        stmt = stmt.on_conflict_do_update(index_elements=["account_id"], set_=updates)

        with storage_errors():
            try:
                await self.session.execute(stmt)
                await self.session.commit()
            except Exception:
                await self.session.rollback()
                raise
        logger.info("Progress saved for account %s", account_id)
