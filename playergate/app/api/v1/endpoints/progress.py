# playergate/app/api/v1/endpoints/progress.py
from fastapi import APIRouter, Depends

from playergate.app.api import deps
from playergate.app.core.errors import NotAuthorized
from playergate.app.schemas.progress import MessageResponse, ProgressResponse, ProgressUpdate
from playergate.app.services.progress import ProgressStore

router = APIRouter()


def _check_owner(account_id: int, current_account_id: int) -> None:
    if account_id != current_account_id:
        raise NotAuthorized("Cannot access another account's progress")


@router.get("/{account_id}", response_model=ProgressResponse)
async def read_progress(
        account_id: int,
        store: ProgressStore = Depends(deps.get_progress_store),
        current_account_id: int = Depends(deps.get_current_account_id),
):
    _check_owner(account_id, current_account_id)

    progress = await store.get(account_id)
    if progress is None:
        # No progress yet, return defaults
        return ProgressResponse()
    return progress


@router.put("/{account_id}", response_model=MessageResponse)
async def save_progress(
        account_id: int,
        progress_in: ProgressUpdate,
        store: ProgressStore = Depends(deps.get_progress_store),
        current_account_id: int = Depends(deps.get_current_account_id),
):
    _check_owner(account_id, current_account_id)

    await store.put(account_id, progress_in.best_scores, progress_in.levels_unlocked)
    return {"message": "Progress saved successfully"}
