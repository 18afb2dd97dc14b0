from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Redis (empty = in-process memory store)
    redis_url: str = ""

    # OpenAI
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"

    # Anthropic
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-5-20250929"

    # Flight search provider
    flight_api_base_url: str = ""
    flight_api_key: str = ""
    flight_api_timeout: float = 30.0

    # LLM sampling
    parse_temperature: float = 0.3
    parse_max_tokens: int = 500
    explain_temperature: float = 0.7
    explain_max_tokens: int = 100

    # Conversation context sent to the parser
    context_message_limit: int = 10
    context_search_limit: int = 3

    # Per-user history caps (newest entries kept)
    history_max_messages: int = 200
    history_max_searches: int = 50
    history_max_saved: int = 50

    # CORS
    cors_origins: str = "http://localhost:5173"

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",")]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


settings = Settings()
