from fastapi import APIRouter, Depends

from flight_agent.dependencies import get_history, get_user_id
from flight_agent.schemas.chat import PreferencesUpdate
from flight_agent.services.history_service import HistoryService

router = APIRouter()


@router.get("")
async def get_preferences(
    history: HistoryService = Depends(get_history),
    user_id: str = Depends(get_user_id),
):
    prefs = await history.get_preferences(user_id)
    return prefs.model_dump(by_alias=True)


@router.patch("")
async def update_preferences(
    req: PreferencesUpdate,
    history: HistoryService = Depends(get_history),
    user_id: str = Depends(get_user_id),
):
    """Update airline/stop/price limits and the scoring weights."""
    prefs = await history.update_preferences(user_id, req)
    return prefs.model_dump(by_alias=True)
