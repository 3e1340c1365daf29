"""GET /api/stats: the caller's note statistics."""

from fastapi import APIRouter, Depends

from notestash.routes.deps import get_current_user, get_store
from notestash.schemas.stats import StatsResponse
from notestash.schemas.user import UserRecord
from notestash.services.stats_service import stats_service
from notestash.store import KeyValueStore

router = APIRouter(prefix="/api", tags=["Stats"])


@router.get("/stats", response_model=StatsResponse, summary="Statistics for the caller's notes")
async def get_stats(
    current_user: UserRecord = Depends(get_current_user),
    store: KeyValueStore = Depends(get_store),
) -> StatsResponse:
    return await stats_service.get_user_stats(store, current_user.id)
