"""NLP parser service — turns a chat message plus conversation memory into flight search parameters."""

import json
import logging
import re
from datetime import date, timedelta

from pydantic import ValidationError

from flight_agent.config import settings
from flight_agent.schemas.search import ParsedFlightRequest
from flight_agent.services.llm_client import llm_client

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You extract flight search parameters from user requests and reply with JSON only."

PARSE_PROMPT = """You are a flight search assistant with memory of previous conversations and searches. Extract flight search parameters from the user's request using context when available.
{context}

CRITICAL INSTRUCTIONS FOR RAG:
- If user references previous searches (e.g., "cheaper options", "earlier", "tomorrow", "same route"), USE the previous search parameters as baseline
- Understand follow-up questions: "show me direct flights only", "what about next week?", "find something cheaper"
- For "from" and "to", use standard airport codes (JFK, LAX, LHR) or city names (New York, Los Angeles, London)
- For dates, ALWAYS use YYYY-MM-DD format. Today is {today}. Current year is {year}.
- Calculate relative dates: "tomorrow" = {tomorrow}, "next week" = add 7 days, etc.

Return ONLY a JSON object:
{{
  "from": "airport/city (infer from context if not specified)",
  "to": "airport/city (infer from context if not specified)",
  "date": "YYYY-MM-DD",
  "returnDate": "YYYY-MM-DD or null",
  "adults": 1,
  "tripType": "round-trip" or "one-way",
  "intent": "search" or "clarification_needed" or "refinement",
  "isFollowUp": true/false,
  "missingInfo": [],
  "friendlyResponse": "acknowledge context if follow-up, e.g. 'Looking for cheaper flights from NYC to Paris...'"
}}

Current user request: "{message}"

EXAMPLES WITH CONTEXT:
1. First search: "NYC to Paris June 15" -> normal search
2. Follow-up: "what about tomorrow?" -> Use NYC -> Paris, calculate tomorrow's date, isFollowUp: true
3. Follow-up: "show me direct flights" -> Use previous search, intent: "refinement", mention it's filtering previous search
4. Follow-up: "cheaper options" -> Use previous search, isFollowUp: true, explain searching for cheaper alternatives

If missing critical info AND can't infer from context, set intent to "clarification_needed"."""

_JSON_BLOCK_RE = re.compile(r"\{.*\}", re.DOTALL)


def build_conversation_context(
    messages: list[dict],
    searches: list[dict],
    message_limit: int = 10,
    search_limit: int = 3,
) -> str:
    """Render recent chat turns and searches so the LLM can resolve follow-ups."""
    context = ""

    recent_messages = messages[-message_limit:] if message_limit > 0 else []
    if recent_messages:
        context += "\n\nRECENT CONVERSATION:\n"
        for msg in recent_messages:
            role = msg.get("role")
            # Result cards carry no useful text for the parser
            if role == "user" or (role == "assistant" and not msg.get("flightData")):
                speaker = "User" if role == "user" else "Assistant"
                context += f"{speaker}: {msg.get('content', '')}\n"

    recent_searches = searches[-search_limit:] if search_limit > 0 else []
    if recent_searches:
        context += "\n\nPREVIOUS SEARCHES (use these for context if user makes follow-up requests):\n"
        for idx, search in enumerate(recent_searches, start=1):
            context += f"{idx}. {search.get('from')} → {search.get('to')} on {search.get('date')}"
            if search.get("returnDate"):
                context += f" (return {search['returnDate']})"
            if search.get("resultCount") is not None:
                context += f" [{search['resultCount']} results found]"
            context += "\n"

    return context


class FlightRequestParser:
    """Parses chat messages into structured flight searches via an injected LLM."""

    def __init__(self, llm=None):
        self.llm = llm or llm_client

    def build_prompt(self, message: str, context: str, today: date | None = None) -> str:
        today = today or date.today()
        return PARSE_PROMPT.format(
            context=context,
            today=today.isoformat(),
            year=today.year,
            tomorrow=(today + timedelta(days=1)).isoformat(),
            message=message,
        )

    async def parse(
        self,
        message: str,
        messages: list[dict] | None = None,
        searches: list[dict] | None = None,
        today: date | None = None,
    ) -> ParsedFlightRequest | None:
        """
        Extract search parameters from `message`.

        Returns None when the LLM is unavailable or its reply holds no usable
        JSON object; the caller asks the user to rephrase.
        """
        context = build_conversation_context(
            messages or [],
            searches or [],
            message_limit=settings.context_message_limit,
            search_limit=settings.context_search_limit,
        )
        prompt = self.build_prompt(message, context, today)

        try:
            raw = await self.llm.complete(
                system=SYSTEM_PROMPT,
                user=prompt,
                max_tokens=settings.parse_max_tokens,
                temperature=settings.parse_temperature,
            )
        except Exception as e:
            logger.error(f"Flight request parse failed: {e}")
            return None

        match = _JSON_BLOCK_RE.search(raw or "")
        if not match:
            logger.warning(f"No JSON object in parser reply: {raw[:500]!r}")
            return None

        try:
            data = json.loads(match.group(0))
            if not isinstance(data, dict):
                raise ValueError("parser reply is not a JSON object")
            parsed = ParsedFlightRequest.model_validate(data)
        except (json.JSONDecodeError, ValueError, ValidationError) as e:
            logger.warning(f"Invalid parser reply: {e}\nRaw: {raw[:500]}")
            return None

        logger.info(
            f"Parsed flight request: {parsed.origin} -> {parsed.destination} on {parsed.date} "
            f"(intent={parsed.intent}, follow_up={parsed.is_follow_up})"
        )
        return parsed


flight_request_parser = FlightRequestParser()
