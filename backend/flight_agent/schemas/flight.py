from pydantic import BaseModel, Field


class ScoreBreakdown(BaseModel):
    price: int
    time: int
    comfort: int


class FlightScore(BaseModel):
    total: int
    breakdown: ScoreBreakdown | dict = Field(default_factory=dict)


class RankedOffer(BaseModel):
    offer: dict
    score: FlightScore


class PriorityWeights(BaseModel):
    price: float = Field(0.4, ge=0, allow_inf_nan=False)
    time: float = Field(0.3, ge=0, allow_inf_nan=False)
    comfort: float = Field(0.3, ge=0, allow_inf_nan=False)


class RankRequest(BaseModel):
    offers: list[dict]
    weights: PriorityWeights | None = None
