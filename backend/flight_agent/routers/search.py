"""Search router — manual search, stateless ranking, search history and saved searches."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from flight_agent.dependencies import get_agent, get_history, get_user_id
from flight_agent.schemas.flight import RankedOffer, RankRequest
from flight_agent.schemas.search import ManualSearchRequest, SaveSearchRequest
from flight_agent.services.chat_agent import ChatAgent
from flight_agent.services.history_service import HistoryService
from flight_agent.services.scoring_engine import Weights, rank_offers

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/manual")
async def manual_search(
    req: ManualSearchRequest,
    agent: ChatAgent = Depends(get_agent),
    user_id: str = Depends(get_user_id),
):
    """Search from the structured form and rank with the user's weights."""
    return await agent.manual_search(user_id, req)


@router.post("/rank", response_model=list[RankedOffer])
async def rank(req: RankRequest):
    """Rank caller-supplied offers; default weights when none are given."""
    weights = Weights.from_dict(req.weights.model_dump()) if req.weights else Weights()
    return rank_offers(req.offers, weights)


@router.get("/history")
async def search_history(
    history: HistoryService = Depends(get_history),
    user_id: str = Depends(get_user_id),
):
    searches = await history.list_searches(user_id)
    return {"searches": searches, "count": len(searches)}


@router.get("/saved")
async def list_saved_searches(
    history: HistoryService = Depends(get_history),
    user_id: str = Depends(get_user_id),
):
    saved = await history.list_saved(user_id)
    return {"searches": saved, "count": len(saved)}


@router.post("/saved", status_code=201)
async def save_search(
    req: SaveSearchRequest,
    history: HistoryService = Depends(get_history),
    user_id: str = Depends(get_user_id),
):
    """Save a route for price tracking."""
    return await history.save_search(user_id, req.model_dump(by_alias=True, exclude_none=True))


@router.delete("/saved/{search_id}")
async def delete_saved_search(
    search_id: str,
    history: HistoryService = Depends(get_history),
    user_id: str = Depends(get_user_id),
):
    deleted = await history.delete_saved(user_id, search_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Saved search not found")
    return {"deleted": search_id}
