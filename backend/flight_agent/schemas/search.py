from pydantic import BaseModel, Field, field_validator


class ParsedFlightRequest(BaseModel):
    """Structured search parameters extracted from a chat message by the LLM."""

    origin: str | None = Field(None, alias="from")
    destination: str | None = Field(None, alias="to")
    date: str | None = None
    return_date: str | None = Field(None, alias="returnDate")
    adults: int = 1
    trip_type: str | None = Field(None, alias="tripType")
    intent: str = "search"
    is_follow_up: bool = Field(False, alias="isFollowUp")
    missing_info: list[str] = Field(default_factory=list, alias="missingInfo")
    friendly_response: str | None = Field(None, alias="friendlyResponse")

    model_config = {"populate_by_name": True}

    @field_validator("adults", mode="before")
    @classmethod
    def _default_adults(cls, v):
        return v or 1

    @field_validator("intent", mode="before")
    @classmethod
    def _default_intent(cls, v):
        return v or "search"

    @field_validator("is_follow_up", mode="before")
    @classmethod
    def _default_follow_up(cls, v):
        return False if v is None else v

    @field_validator("missing_info", mode="before")
    @classmethod
    def _default_missing(cls, v):
        return v or []

    def missing_fields(self) -> list[str]:
        missing = []
        if not self.origin:
            missing.append("Origin city or airport")
        if not self.destination:
            missing.append("Destination city or airport")
        if not self.date:
            missing.append("Travel date (YYYY-MM-DD)")
        return missing


class ManualSearchRequest(BaseModel):
    origin: str = Field(..., alias="from", min_length=1)
    destination: str = Field(..., alias="to", min_length=1)
    date: str = Field(..., min_length=1)
    return_date: str | None = Field(None, alias="returnDate")
    adults: int = Field(1, ge=1)

    model_config = {"populate_by_name": True}


class SaveSearchRequest(BaseModel):
    origin: str = Field(..., alias="from")
    destination: str = Field(..., alias="to")
    date: str
    return_date: str | None = Field(None, alias="returnDate")
    adults: int = Field(1, ge=1)
    target_price: float | None = Field(None, alias="targetPrice")

    model_config = {"populate_by_name": True}
