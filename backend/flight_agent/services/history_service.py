"""History service — chat messages, search history, saved searches and preferences per user."""

import asyncio
import logging
import uuid
from collections import defaultdict
from datetime import datetime, timezone

from flight_agent.config import settings
from flight_agent.schemas.chat import Preferences, PreferencesUpdate
from flight_agent.services.storage import create_store

logger = logging.getLogger(__name__)

MESSAGES_KEY = "flight-chat-messages"
SEARCH_HISTORY_KEY = "flight-search-history"
SAVED_SEARCHES_KEY = "flight-saved-searches"
PREFERENCES_KEY = "flight-preferences"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class HistoryService:
    """Reads and writes the persisted records behind one user's chat session.

    Updates are read-modify-write on whole records, so each key gets an
    asyncio lock; concurrent turns in this process never drop entries.
    Lists keep only their newest `max_*` entries.
    """

    def __init__(
        self,
        store,
        max_messages: int | None = None,
        max_searches: int | None = None,
        max_saved: int | None = None,
    ):
        self.store = store
        self.max_messages = settings.history_max_messages if max_messages is None else max_messages
        self.max_searches = settings.history_max_searches if max_searches is None else max_searches
        self.max_saved = settings.history_max_saved if max_saved is None else max_saved
        self._locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    @staticmethod
    def _key(prefix: str, user_id: str) -> str:
        return f"{prefix}:{user_id}"

    async def _get_list(self, prefix: str, user_id: str) -> list:
        value = await self.store.get(self._key(prefix, user_id))
        return value if isinstance(value, list) else []

    async def _append(self, prefix: str, user_id: str, item: dict, limit: int) -> dict:
        key = self._key(prefix, user_id)
        async with self._locks[key]:
            items = await self._get_list(prefix, user_id)
            items.append(item)
            if limit > 0:
                items = items[-limit:]
            await self.store.set(key, items)
        return item

    async def _delete(self, prefix: str, user_id: str) -> None:
        key = self._key(prefix, user_id)
        async with self._locks[key]:
            await self.store.delete(key)

    # Chat messages

    async def list_messages(self, user_id: str) -> list[dict]:
        return await self._get_list(MESSAGES_KEY, user_id)

    async def add_message(
        self,
        user_id: str,
        role: str,
        content: str,
        flight_data: dict | None = None,
    ) -> dict:
        message = {
            "id": str(uuid.uuid4()),
            "role": role,
            "content": content,
            "flightData": flight_data,
            "timestamp": _now_iso(),
        }
        return await self._append(MESSAGES_KEY, user_id, message, self.max_messages)

    async def clear_chat(self, user_id: str) -> None:
        """Drop the chat transcript but keep search memory for follow-ups."""
        await self._delete(MESSAGES_KEY, user_id)

    async def clear_all(self, user_id: str) -> None:
        await self._delete(MESSAGES_KEY, user_id)
        await self._delete(SEARCH_HISTORY_KEY, user_id)
        logger.info(f"Cleared chat and search history for {user_id}")

    # Search history

    async def list_searches(self, user_id: str) -> list[dict]:
        return await self._get_list(SEARCH_HISTORY_KEY, user_id)

    async def recent_searches(self, user_id: str, limit: int = 3) -> list[dict]:
        searches = await self.list_searches(user_id)
        return searches[-limit:] if limit > 0 else []

    async def record_search(self, user_id: str, query: dict, result_count: int) -> dict:
        entry = {**query, "timestamp": _now_iso(), "resultCount": result_count}
        return await self._append(SEARCH_HISTORY_KEY, user_id, entry, self.max_searches)

    # Saved searches

    async def list_saved(self, user_id: str) -> list[dict]:
        return await self._get_list(SAVED_SEARCHES_KEY, user_id)

    async def save_search(self, user_id: str, search: dict) -> dict:
        entry = {**search, "id": str(uuid.uuid4()), "savedAt": _now_iso()}
        return await self._append(SAVED_SEARCHES_KEY, user_id, entry, self.max_saved)

    async def delete_saved(self, user_id: str, search_id: str) -> bool:
        key = self._key(SAVED_SEARCHES_KEY, user_id)
        async with self._locks[key]:
            saved = await self.list_saved(user_id)
            remaining = [s for s in saved if s.get("id") != search_id]
            if len(remaining) == len(saved):
                return False
            await self.store.set(key, remaining)
        return True

    # Preferences

    async def get_preferences(self, user_id: str) -> Preferences:
        raw = await self.store.get(self._key(PREFERENCES_KEY, user_id))
        if not isinstance(raw, dict):
            return Preferences()
        return Preferences.model_validate(raw)

    async def update_preferences(self, user_id: str, update: PreferencesUpdate) -> Preferences:
        """Apply a partial update; explicit nulls reset the optional limits."""
        key = self._key(PREFERENCES_KEY, user_id)
        async with self._locks[key]:
            current = await self.get_preferences(user_id)
            data = current.model_dump()
            for field, value in update.model_dump(exclude_unset=True).items():
                if value is None and field not in ("max_stops", "max_price"):
                    continue
                data[field] = value
            prefs = Preferences.model_validate(data)
            await self.store.set(key, prefs.model_dump(by_alias=True))
        return prefs


history_service = HistoryService(create_store())
