"""Chat agent — one conversational turn: parse, search, rank, explain."""

import logging
from datetime import date

from flight_agent.errors import FlightSearchError
from flight_agent.schemas.search import ManualSearchRequest, ParsedFlightRequest
from flight_agent.services.explanation_service import explanation_service
from flight_agent.services.flight_search_client import flight_search_client
from flight_agent.services.history_service import HistoryService, history_service
from flight_agent.services.nlp_parser import flight_request_parser
from flight_agent.services.scoring_engine import Weights, rank_offers

logger = logging.getLogger(__name__)

REPHRASE_MESSAGE = (
    "I'm having trouble understanding that request. Could you try rephrasing? "
    "For example: 'Find flights from New York to London on 2026-06-15'"
)

SEARCH_ERROR_TIPS = (
    "\n\nPlease try:\n"
    "• Using full city names (e.g., \"Los Angeles\" not \"LA\")\n"
    "• Major airports (e.g., \"JFK\", \"LAX\", \"LHR\")\n"
    "• Date format: YYYY-MM-DD (e.g., 2026-06-15)"
)

NO_RESULTS_TIPS = (
    "\n\nTips:\n"
    "• Try using full city names (e.g., \"New York\" instead of \"NYC\")\n"
    "• Use nearby airports (e.g., \"JFK\", \"LaGuardia\", \"Newark\")\n"
    "• Try different dates\n"
    "• Ensure the date is in the future"
)


class ChatAgent:
    """Coordinates the parser, flight provider, scoring engine and explainer for a user."""

    def __init__(self, history: HistoryService, parser=None, search_client=None, explainer=None):
        self.history = history
        self.parser = parser or flight_request_parser
        self.search_client = search_client or flight_search_client
        self.explainer = explainer or explanation_service

    async def handle_message(self, user_id: str, text: str, today: date | None = None) -> dict:
        """
        Run one chat turn for `text`.

        Returns dict with: messages (assistant messages added this turn),
        flights (ranked {offer, score} list, possibly empty) and params
        (the parsed search, or None when no search ran).
        """
        text = text.strip()
        turn = {"messages": [], "flights": [], "params": None}

        # Context is read before the new message lands so it is not repeated
        messages = await self.history.list_messages(user_id)
        searches = await self.history.list_searches(user_id)
        await self.history.add_message(user_id, "user", text)

        parsed = await self.parser.parse(text, messages, searches, today=today)
        if parsed is None:
            await self._reply(user_id, turn, REPHRASE_MESSAGE)
            return turn

        if parsed.friendly_response:
            await self._reply(user_id, turn, parsed.friendly_response)

        if parsed.intent == "clarification_needed":
            return turn

        missing = parsed.missing_fields()
        if missing:
            bullets = "".join(f"• {field}\n" for field in missing)
            await self._reply(user_id, turn, f"I need more information:\n{bullets}Please provide these details.")
            return turn

        params = parsed.model_dump(by_alias=True)
        turn["params"] = params
        await self._reply(
            user_id, turn,
            f"🔍 Searching for flights from {parsed.origin} to {parsed.destination} on {parsed.date}...",
        )

        try:
            offers = await self._search(user_id, parsed)
        except FlightSearchError as e:
            await self._reply(user_id, turn, f"Error searching flights: {e}{SEARCH_ERROR_TIPS}")
            return turn

        if not offers:
            await self._reply(
                user_id, turn,
                f"No flights found for {parsed.origin} → {parsed.destination} on {parsed.date}.{NO_RESULTS_TIPS}",
            )
            return turn

        ranked = await self.rank_for_user(user_id, offers)
        turn["flights"] = ranked

        explanation = await self.explainer.explain(ranked[0]["offer"], ranked[0]["score"])
        content = f"Found {len(offers)} flight options! Ranked by your preferences (price, time, comfort)."
        if explanation:
            content += f"\n\n✨ Top Pick: {explanation}"
        await self._reply(user_id, turn, content, flight_data={"flights": ranked, "params": params})
        return turn

    async def manual_search(self, user_id: str, form: ManualSearchRequest) -> dict:
        """Search from the structured form, skipping the LLM parser and explainer."""
        turn = {"messages": [], "flights": [], "params": form.model_dump(by_alias=True)}

        summary = f"Search flights from {form.origin} to {form.destination} on {form.date}"
        if form.return_date:
            summary += f" (return {form.return_date})"
        await self.history.add_message(user_id, "user", summary)
        await self._reply(user_id, turn, f"🔍 Searching for flights from {form.origin} to {form.destination}...")

        request = ParsedFlightRequest(
            origin=form.origin,
            destination=form.destination,
            date=form.date,
            return_date=form.return_date,
            adults=form.adults,
        )
        try:
            offers = await self._search(user_id, request)
        except FlightSearchError as e:
            await self._reply(user_id, turn, f"Error: {e}")
            return turn

        if not offers:
            await self._reply(
                user_id, turn,
                f"No flights found for {form.origin} → {form.destination} on {form.date}.{NO_RESULTS_TIPS}",
            )
            return turn

        ranked = await self.rank_for_user(user_id, offers)
        turn["flights"] = ranked
        await self._reply(
            user_id, turn,
            f"Found {len(offers)} flight options!",
            flight_data={"flights": ranked, "params": turn["params"]},
        )
        return turn

    async def rank_for_user(self, user_id: str, offers: list[dict]) -> list[dict]:
        prefs = await self.history.get_preferences(user_id)
        weights = Weights.from_dict(prefs.priority_weights.model_dump())
        return rank_offers(offers, weights)

    async def _search(self, user_id: str, request: ParsedFlightRequest) -> list[dict]:
        offers = await self.search_client.search(
            request.origin,
            request.destination,
            request.date,
            adults=request.adults,
            return_date=request.return_date,
        )
        query = self.search_client.build_query(
            request.origin, request.destination, request.date, request.adults, request.return_date,
        )
        await self.history.record_search(user_id, query, len(offers))
        return offers

    async def _reply(self, user_id: str, turn: dict, content: str, flight_data: dict | None = None) -> None:
        message = await self.history.add_message(user_id, "assistant", content, flight_data=flight_data)
        turn["messages"].append(message)


chat_agent = ChatAgent(history_service)
