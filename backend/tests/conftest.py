# tests/conftest.py
import asyncio

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from flight_agent.errors import FlightSearchError
from flight_agent.services.chat_agent import ChatAgent
from flight_agent.services.explanation_service import ExplanationService
from flight_agent.services.flight_search_client import FlightSearchClient
from flight_agent.services.history_service import HistoryService
from flight_agent.services.nlp_parser import FlightRequestParser
from flight_agent.services.storage import MemoryStore


SAMPLE_OFFERS = [
    {"price": 100, "duration": 120, "stops": 0, "airline": "Delta", "flightNumber": "DL1",
     "departure": {"time": "08:00", "airport": "JFK"}, "arrival": {"time": "10:00", "airport": "CDG"}},
    {"price": "$200", "duration": 180, "stops": 1, "airline": "United", "flightNumber": "UA2",
     "departure": {"time": "09:00", "airport": "JFK"}, "arrival": {"time": "12:00", "airport": "CDG"}},
    {"price": 300, "duration": 60, "stops": 2, "airline": "Air France", "flightNumber": "AF3",
     "departure": {"time": "11:00", "airport": "JFK"}, "arrival": {"time": "12:00", "airport": "CDG"}},
]


class FakeLLM:
    """Returns queued replies in order; an Exception in the queue is raised instead."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls: list[dict] = []

    async def complete(self, system: str, user: str, **kwargs) -> str:
        self.calls.append({"system": system, "user": user, **kwargs})
        if not self.replies:
            raise RuntimeError("no reply queued")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


class FakeSearchClient(FlightSearchClient):
    def __init__(self, offers=None, error: str | None = None):
        super().__init__(base_url="http://flights.test", api_key="")
        self.offers = list(offers or [])
        self.error = error
        self.calls: list[dict] = []

    async def search(self, origin, destination, departure_date, adults=1, return_date=None):
        self.calls.append(self.build_query(origin, destination, departure_date, adults, return_date))
        if self.error:
            raise FlightSearchError(self.error)
        return list(self.offers)


@pytest.fixture
def offers():
    return [dict(o) for o in SAMPLE_OFFERS]


@pytest.fixture
def history():
    return HistoryService(MemoryStore())


@pytest.fixture
def llm():
    return FakeLLM()


@pytest.fixture
def search_client(offers):
    return FakeSearchClient(offers)


@pytest.fixture
def agent(history, llm, search_client):
    return ChatAgent(
        history,
        parser=FlightRequestParser(llm),
        search_client=search_client,
        explainer=ExplanationService(llm),
    )


class FakeRedis:
    """Async stand-in for redis.asyncio.Redis holding decoded string values."""

    def __init__(self):
        self.data: dict[str, str] = {}
        self.closed = False

    async def ping(self):
        return True

    async def get(self, key):
        await asyncio.sleep(0)
        return self.data.get(key)

    async def set(self, key, value):
        await asyncio.sleep(0)
        self.data[key] = value
        return True

    async def delete(self, key):
        self.data.pop(key, None)
        return 1

    async def aclose(self):
        self.closed = True


class DownRedis(FakeRedis):
    async def ping(self):
        raise RedisConnectionError("Connection refused")

    async def get(self, key):
        raise RedisConnectionError("Connection refused")

    async def set(self, key, value):
        raise RedisConnectionError("Connection refused")


@pytest.fixture
def fake_redis():
    return FakeRedis()
