"""Exceptions raised by the flight agent services."""


class FlightAgentError(Exception):
    """Base error for flight agent failures."""


class InvalidOffersError(FlightAgentError, TypeError):
    """Raised when a ranking call is given something other than a sequence of offers."""


class LLMUnavailableError(FlightAgentError):
    """Raised when every configured LLM provider failed."""


class FlightSearchError(FlightAgentError):
    """Raised when the flight-search provider fails or is not configured."""


class InvalidWeightsError(FlightAgentError, ValueError):
    """Raised when preference weights are negative, non-finite or overflow the total."""
