"""Display helpers shared by chat messages and LLM prompts."""


def format_duration(minutes) -> str:
    if not minutes:
        return "N/A"
    try:
        minutes = int(minutes)
    except (TypeError, ValueError):
        return str(minutes)
    return f"{minutes // 60}h {minutes % 60}m"


def format_price(price) -> str:
    if not price:
        return "N/A"
    if isinstance(price, (int, float)) and not isinstance(price, bool):
        if isinstance(price, float) and price.is_integer():
            price = int(price)
        return f"${price}"
    return str(price)


def format_stops(stops) -> str:
    if not stops:
        return "Direct"
    return f"{stops} stop(s)"
