import copy

import pytest

from flight_agent.errors import InvalidOffersError, InvalidWeightsError
from flight_agent.services.scoring_engine import (
    Weights,
    comfort_score,
    rank_offers,
    round_half_up,
    score_offer,
)

SCENARIO = [
    {"price": 100, "duration": 120, "stops": 0},
    {"price": 200, "duration": 180, "stops": 1},
    {"price": 300, "duration": 60, "stops": 2},
]


def test_scenario_scores_are_pinned():
    weights = Weights(price=0.4, time=0.3, comfort=0.3)

    assert score_offer(SCENARIO[0], SCENARIO, weights) == {
        "total": 85, "breakdown": {"price": 100, "time": 50, "comfort": 100},
    }
    assert score_offer(SCENARIO[1], SCENARIO, weights) == {
        "total": 41, "breakdown": {"price": 50, "time": 0, "comfort": 70},
    }
    assert score_offer(SCENARIO[2], SCENARIO, weights) == {
        "total": 42, "breakdown": {"price": 0, "time": 100, "comfort": 40},
    }


def test_scenario_ranking_puts_cheapest_direct_flight_first():
    ranked = rank_offers(SCENARIO, Weights(price=0.4, time=0.3, comfort=0.3))

    assert [r["offer"] for r in ranked] == [SCENARIO[0], SCENARIO[2], SCENARIO[1]]
    assert [r["score"]["total"] for r in ranked] == [85, 42, 41]


def test_default_weights():
    assert Weights() == Weights(price=0.4, time=0.3, comfort=0.3)
    assert rank_offers(SCENARIO) == rank_offers(SCENARIO, Weights())


def test_identical_prices_and_durations_are_neutral():
    offers = [
        {"price": 250, "duration": 90, "stops": 0},
        {"price": "$250", "duration": 90, "stops": 1},
    ]
    for offer in offers:
        breakdown = score_offer(offer, offers)["breakdown"]
        assert breakdown["price"] == 50
        assert breakdown["time"] == 50


@pytest.mark.parametrize(
    "stops,expected",
    [(0, 100), (1, 70), (2, 40), (3, 20), (5, 20), (None, 100), (1.0, 70)],
)
def test_comfort_lookup(stops, expected):
    assert comfort_score(stops) == expected
    offer = {"price": 100, "duration": 60, "stops": stops}
    assert score_offer(offer, [offer])["breakdown"]["comfort"] == expected


def test_unparseable_price_scores_zero_and_does_not_skew_bounds():
    offers = [
        {"price": "N/A", "duration": 100},
        {"price": 100, "duration": 100},
        {"price": 200, "duration": 100},
    ]

    assert score_offer(offers[0], offers) == {
        "total": 45, "breakdown": {"price": 0, "time": 50, "comfort": 100},
    }
    assert score_offer(offers[1], offers)["breakdown"]["price"] == 100
    assert score_offer(offers[2], offers)["breakdown"]["price"] == 0


def test_all_prices_unparseable_is_neutral():
    offers = [{"price": "call us", "duration": 60}, {"price": None, "duration": 90}]
    for offer in offers:
        assert score_offer(offer, offers)["breakdown"]["price"] == 50


def test_missing_duration_ranks_last_on_time():
    offers = [
        {"price": 100, "duration": 60},
        {"price": 100, "duration": 120},
        {"price": 100},
    ]
    assert [score_offer(o, offers)["breakdown"]["time"] for o in offers] == [100, 0, 0]


def test_malformed_offers_do_not_raise():
    offers = [
        {"price": 100, "duration": "2h", "stops": "one"},
        {"price": 150, "duration": 90, "stops": 1},
        None,
    ]
    ranked = rank_offers(offers)
    assert len(ranked) == 3
    assert ranked[-1]["offer"] is None
    assert ranked[-1]["score"] == {"total": 0, "breakdown": {}}


def test_half_scores_round_away_from_zero():
    offers = [{"price": 100}, {"price": 900}, {"price": 800}]

    assert score_offer(offers[2], offers) == {
        "total": 50, "breakdown": {"price": 13, "time": 50, "comfort": 100},
    }


def test_round_half_up():
    assert round_half_up(0.5) == 1
    assert round_half_up(2.5) == 3
    assert round_half_up(49.5) == 50
    assert round_half_up(49.49) == 49
    assert round_half_up(-2.5) == -3


def test_total_matches_weighted_breakdown():
    weights = Weights(price=0.5, time=0.2, comfort=0.3)
    for offer in SCENARIO:
        score = score_offer(offer, SCENARIO, weights)
        b = score["breakdown"]
        expected = b["price"] * weights.price + b["time"] * weights.time + b["comfort"] * weights.comfort
        assert abs(score["total"] - expected) <= 1


def test_empty_inputs():
    assert score_offer(SCENARIO[0], []) == {"total": 0, "breakdown": {}}
    assert rank_offers([]) == []


def test_rank_is_stable_for_equal_totals():
    weights = Weights(price=0.5, time=0.5, comfort=0)
    cheap_slow = {"id": "x", "price": 100, "duration": 200, "stops": 0}
    pricey_fast = {"id": "y", "price": 200, "duration": 100, "stops": 0}

    ranked = rank_offers([pricey_fast, cheap_slow], weights)
    assert [r["offer"]["id"] for r in ranked] == ["y", "x"]
    assert ranked[0]["score"]["total"] == ranked[1]["score"]["total"] == 50

    ranked = rank_offers([cheap_slow, pricey_fast], weights)
    assert [r["offer"]["id"] for r in ranked] == ["x", "y"]


def test_rank_is_idempotent_and_leaves_input_untouched():
    offers = copy.deepcopy(SCENARIO)
    before = copy.deepcopy(offers)

    first = rank_offers(offers)
    second = rank_offers(offers)

    assert first == second
    assert offers == before
    assert all("score" not in o for o in offers)


def test_accepts_tuples():
    assert rank_offers(tuple(SCENARIO)) == rank_offers(SCENARIO)


@pytest.mark.parametrize("bad", [None, "offers", {"price": 100}, 42, iter(SCENARIO)])
def test_non_sequence_fails_fast(bad):
    with pytest.raises(InvalidOffersError):
        rank_offers(bad)
    with pytest.raises(TypeError):
        score_offer(SCENARIO[0], bad)


def test_weights_from_dict():
    assert Weights.from_dict(None) == Weights()
    assert Weights.from_dict({"price": 1, "time": 0}) == Weights(price=1.0, time=0.0, comfort=0.3)
    assert Weights(price=0.2).to_dict() == {"price": 0.2, "time": 0.3, "comfort": 0.3}


def test_offer_with_no_fields_gets_sentinel_scores():
    offers = [{"price": 100, "duration": 60, "stops": 0}, {}]

    assert score_offer({}, offers) == {
        "total": 65, "breakdown": {"price": 50, "time": 50, "comfort": 100},
    }

    offers = [{"price": 100, "duration": 60}, {"price": 200, "duration": 120}, {}]
    assert score_offer({}, offers) == {
        "total": 30, "breakdown": {"price": 0, "time": 0, "comfort": 100},
    }


def test_non_finite_values_rank_last_on_their_axis():
    offers = [
        {"price": 100, "duration": 60},
        {"price": 200, "duration": 120},
        {"price": float("nan"), "duration": float("nan")},
        {"price": float("inf"), "duration": float("inf")},
    ]

    for offer in offers[2:]:
        assert score_offer(offer, offers)["breakdown"] == {"price": 0, "time": 0, "comfort": 100}
    assert score_offer(offers[0], offers)["breakdown"]["price"] == 100


def test_very_large_weights_still_rank():
    weights = Weights(price=1e30, time=1e30, comfort=1e30)

    ranked = rank_offers(SCENARIO, weights)

    assert [r["offer"] for r in ranked] == [SCENARIO[0], SCENARIO[2], SCENARIO[1]]
    totals = [r["score"]["total"] for r in ranked]
    assert all(isinstance(t, int) for t in totals)
    assert totals[0] > totals[1] > totals[2]
    assert ranked[0]["score"]["breakdown"] == {"price": 100, "time": 50, "comfort": 100}


@pytest.mark.parametrize(
    "weights",
    [
        Weights(price=-0.1),
        Weights(time=float("nan")),
        Weights(comfort=float("inf")),
        Weights(price=1e308, time=1e308, comfort=1e308),
    ],
)
def test_unusable_weights_are_rejected(weights):
    with pytest.raises(InvalidWeightsError):
        rank_offers(SCENARIO, weights)


def test_round_half_up_has_no_precision_limit():
    assert round_half_up(1e30) == 10**30
    assert round_half_up(2.5e32) == 25 * 10**31
    with pytest.raises(ValueError):
        round_half_up(float("nan"))
