"""Chat router — natural-language flight search turns and transcript management."""

import logging

from fastapi import APIRouter, Depends

from flight_agent.dependencies import get_agent, get_history, get_user_id
from flight_agent.schemas.chat import ChatRequest
from flight_agent.services.chat_agent import ChatAgent
from flight_agent.services.history_service import HistoryService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("")
async def send_message(
    req: ChatRequest,
    agent: ChatAgent = Depends(get_agent),
    user_id: str = Depends(get_user_id),
):
    """Parse the message, search, rank and explain the top result."""
    return await agent.handle_message(user_id, req.message)


@router.get("/messages")
async def list_messages(
    history: HistoryService = Depends(get_history),
    user_id: str = Depends(get_user_id),
):
    messages = await history.list_messages(user_id)
    return {"messages": messages, "count": len(messages)}


@router.delete("/messages")
async def clear_chat(
    history: HistoryService = Depends(get_history),
    user_id: str = Depends(get_user_id),
):
    """Clear the transcript; search memory is kept for follow-up context."""
    await history.clear_chat(user_id)
    return {"cleared": ["messages"]}


@router.delete("/history")
async def clear_all_history(
    history: HistoryService = Depends(get_history),
    user_id: str = Depends(get_user_id),
):
    await history.clear_all(user_id)
    return {"cleared": ["messages", "search_history"]}
