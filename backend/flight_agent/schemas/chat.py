from pydantic import BaseModel, Field

from flight_agent.schemas.flight import PriorityWeights


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1)


class Preferences(BaseModel):
    preferred_airlines: list[str] = Field(default_factory=list, alias="preferredAirlines")
    max_stops: int | None = Field(None, alias="maxStops")
    max_price: float | None = Field(None, alias="maxPrice")
    direct_only: bool = Field(False, alias="directOnly")
    priority_weights: PriorityWeights = Field(default_factory=PriorityWeights, alias="priorityWeights")

    model_config = {"populate_by_name": True}


class PreferencesUpdate(BaseModel):
    preferred_airlines: list[str] | None = Field(None, alias="preferredAirlines")
    max_stops: int | None = Field(None, alias="maxStops")
    max_price: float | None = Field(None, alias="maxPrice")
    direct_only: bool | None = Field(None, alias="directOnly")
    priority_weights: PriorityWeights | None = Field(None, alias="priorityWeights")

    model_config = {"populate_by_name": True}
