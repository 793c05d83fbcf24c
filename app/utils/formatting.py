from typing import Any, Optional

from app.core.config import settings


NOT_AVAILABLE = "N/A"


def format_currency(amount: Optional[float]) -> str:
    """
    Prefixes the configured currency glyph.
    Example: 1200.0 -> '₹1200', 99.5 -> '₹99.50'
    """
    amount = amount or 0
    if float(amount).is_integer():
        return f"{settings.currency_symbol}{int(amount)}"
    return f"{settings.currency_symbol}{amount:.2f}"


def or_default(value: Any, default: str = NOT_AVAILABLE) -> Any:
    """Missing fields are shown with a placeholder instead of failing the view."""
    if value is None or value == "":
        return default
    return value


def display_name(username: Optional[str], email: Optional[str]) -> str:
    if username:
        return username
    if email:
        return email.split("@")[0]
    return "User"
