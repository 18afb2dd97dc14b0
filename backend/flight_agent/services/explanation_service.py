"""Explanation service — asks the LLM why the top-ranked flight is a good pick."""

import logging

from flight_agent.config import settings
from flight_agent.services.formatting import format_duration, format_price, format_stops
from flight_agent.services.llm_client import llm_client

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a flight booking assistant. Explain in 1-2 sentences why this flight is a good choice.
Return a brief, friendly explanation focusing on the strongest aspects. Be specific about trade-offs if any.
Respond with ONLY the explanation text, no JSON, no preamble."""


class ExplanationService:
    def __init__(self, llm=None):
        self.llm = llm or llm_client

    async def explain(self, offer: dict, score: dict) -> str | None:
        """Return a short justification for `offer`, or None if the LLM fails."""
        try:
            text = await self.llm.complete(
                system=SYSTEM_PROMPT,
                user=self._build_prompt(offer, score),
                max_tokens=settings.explain_max_tokens,
                temperature=settings.explain_temperature,
            )
        except Exception as e:
            logger.error(f"Explanation generation failed: {e}")
            return None
        return text.strip() or None

    def _build_prompt(self, offer: dict, score: dict) -> str:
        breakdown = score.get("breakdown") or {}
        departure = offer.get("departure") or offer.get("depart")
        if not isinstance(departure, dict):
            departure = {}
        return f"""Flight Details:
- Airline: {offer.get('airline') or 'N/A'}
- Price: {format_price(offer.get('price'))}
- Duration: {format_duration(offer.get('duration'))}
- Stops: {format_stops(offer.get('stops'))}
- Departure: {departure.get('time') or 'N/A'}

Multi-Criteria Scores (out of 100):
- Price Score: {breakdown.get('price', 'N/A')}
- Time Score: {breakdown.get('time', 'N/A')}
- Comfort Score: {breakdown.get('comfort', 'N/A')}
- Overall Score: {score.get('total', 0)}"""


explanation_service = ExplanationService()
