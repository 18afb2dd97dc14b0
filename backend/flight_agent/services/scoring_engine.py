"""Scoring engine — multi-criteria price/time/comfort scoring and ranking of flight offers."""

from collections.abc import Mapping, Sequence
from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal
import math

from flight_agent.errors import InvalidOffersError, InvalidWeightsError
from flight_agent.services.normalizer import (
    DURATION_SENTINEL,
    PRICE_SENTINEL,
    extract_numeric_price,
)

NEUTRAL_SCORE = 50.0

# Comfort by number of connections; three or more share the last value.
COMFORT_BY_STOPS = {0: 100.0, 1: 70.0, 2: 40.0}
COMFORT_MANY_STOPS = 20.0


@dataclass
class Weights:
    price: float = 0.4
    time: float = 0.3
    comfort: float = 0.3

    @classmethod
    def from_dict(cls, data: Mapping | None) -> "Weights":
        if not data:
            return cls()
        defaults = cls()
        return cls(
            price=float(data.get("price", defaults.price)),
            time=float(data.get("time", defaults.time)),
            comfort=float(data.get("comfort", defaults.comfort)),
        )

    def to_dict(self) -> dict:
        return asdict(self)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero (2.5 -> 3, -2.5 -> -3)."""
    if not math.isfinite(value):
        raise ValueError(f"cannot round {value!r} to an integer")
    return int(Decimal(repr(value)).to_integral_value(rounding=ROUND_HALF_UP))


def _check_offers(offers) -> None:
    if isinstance(offers, (str, bytes, Mapping)) or not isinstance(offers, Sequence):
        raise InvalidOffersError(
            f"offers must be a sequence of offers, got {type(offers).__name__}"
        )


def _field(offer, key):
    return offer.get(key) if isinstance(offer, Mapping) else None


def _duration(offer):
    """Itinerary minutes, or None when missing, zero or not a number."""
    value = _field(offer, "duration")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value or None


def _check_weights(weights: Weights) -> None:
    for name, value in weights.to_dict().items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidWeightsError(f"weight {name!r} must be a number, got {value!r}")
        if (isinstance(value, float) and not math.isfinite(value)) or value < 0:
            raise InvalidWeightsError(f"weight {name!r} must be a finite non-negative number, got {value!r}")


def _bounds(values: list[float], sentinel: float) -> tuple[float, float]:
    if not values:
        return sentinel, sentinel
    return min(values), max(values)


def _inverted(value: float, low: float, high: float) -> float:
    """0-100 where `low` scores 100 and `high` scores 0, clamped to that range."""
    if high <= low:
        return NEUTRAL_SCORE
    raw = 100 * (1 - (value - low) / (high - low))
    return max(0.0, min(100.0, raw))


def comfort_score(stops) -> float:
    if isinstance(stops, float) and stops.is_integer():
        stops = int(stops)
    if isinstance(stops, bool) or not isinstance(stops, int):
        stops = 0
    return COMFORT_BY_STOPS.get(stops, COMFORT_MANY_STOPS)


def score_offer(offer: Mapping, all_offers: Sequence[Mapping], weights: Weights | None = None) -> dict:
    """
    Score one offer against the result set it belongs to.

    Price and duration are min/max normalized over `all_offers`, so the same
    offer can score differently in a different result set. Returns
    {"total": int, "breakdown": {"price", "time", "comfort"}}; an empty
    result set yields {"total": 0, "breakdown": {}}.
    """
    _check_offers(all_offers)
    if weights is None:
        weights = Weights()
    _check_weights(weights)
    if offer is None or not all_offers:
        return {"total": 0, "breakdown": {}}

    prices = [extract_numeric_price(_field(o, "price")) for o in all_offers]
    prices = [p for p in prices if p < PRICE_SENTINEL]
    durations = [d for d in map(_duration, all_offers) if d]

    min_price, max_price = _bounds(prices, PRICE_SENTINEL)
    min_duration, max_duration = _bounds(durations, DURATION_SENTINEL)

    price = extract_numeric_price(_field(offer, "price"))
    duration = _duration(offer) or DURATION_SENTINEL

    price_score = _inverted(price, min_price, max_price)
    time_score = _inverted(duration, min_duration, max_duration)
    comfort = comfort_score(_field(offer, "stops"))

    total = (
        price_score * weights.price
        + time_score * weights.time
        + comfort * weights.comfort
    )

    if not math.isfinite(total):
        raise InvalidWeightsError("weights are too large to combine into a finite score")

    return {
        "total": round_half_up(total),
        "breakdown": {
            "price": round_half_up(price_score),
            "time": round_half_up(time_score),
            "comfort": round_half_up(comfort),
        },
    }


def rank_offers(offers: Sequence[Mapping], weights: Weights | None = None) -> list[dict]:
    """
    Score every offer against the full set and sort by total, best first.

    The sort is stable, so equal totals keep their input order. Returns a
    new list of {"offer": offer, "score": score}; the input is untouched.
    """
    _check_offers(offers)
    if weights is None:
        weights = Weights()
    _check_weights(weights)

    ranked = [
        {"offer": offer, "score": score_offer(offer, offers, weights)}
        for offer in offers
    ]
    ranked.sort(key=lambda r: r["score"]["total"], reverse=True)
    return ranked
