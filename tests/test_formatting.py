from app.utils.formatting import display_name, format_currency, or_default


def test_currency_prefix() -> None:
    assert format_currency(450) == "₹450"
    assert format_currency(99.5) == "₹99.50"
    assert format_currency(None) == "₹0"


def test_missing_values_get_placeholder() -> None:
    assert or_default(None) == "N/A"
    assert or_default("") == "N/A"
    assert or_default(None, "Not provided") == "Not provided"
    assert or_default("asha") == "asha"


def test_display_name_falls_back_to_email() -> None:
    assert display_name("asha", "a@example.com") == "asha"
    assert display_name(None, "ravi.k@example.com") == "ravi.k"
    assert display_name(None, None) == "User"
