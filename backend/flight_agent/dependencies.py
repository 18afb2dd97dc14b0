from fastapi import Header

from flight_agent.services.chat_agent import ChatAgent, chat_agent
from flight_agent.services.history_service import HistoryService, history_service


async def get_user_id(x_user_id: str = Header("default")) -> str:
    """Chat state is scoped per user; the UI sends its user id in X-User-Id."""
    return x_user_id.strip() or "default"


def get_history() -> HistoryService:
    return history_service


def get_agent() -> ChatAgent:
    return chat_agent
