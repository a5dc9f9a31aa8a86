"""
Number formatting and parsing for objective values (Italian conventions).
"""
import re

FORMAT_LABELS = {
    "number": "Numero",
    "currency": "Valuta (€)",
    "percentage": "Percentuale (%)",
    "decimal": "Decimale (2 cifre)",
}


def _italian(value, decimals: int) -> str:
    """1234567.5 -> '1.234.567,5'"""
    text = f"{value:,.{decimals}f}"
    return text.replace(",", "_").replace(".", ",").replace("_", ".")


def _rounded(value, fmt: str) -> float:
    # Currency and percentages are shown whole, everything else with one decimal
    if fmt in ("currency", "percentage"):
        return float(round(value))
    return round(value, 1)


def _short(value: float) -> str:
    text = f"{value:.1f}"
    return text[:-2] if text.endswith(".0") else text


def format_number(value, fmt: str = "number") -> str:
    if value is None:
        return "0"
    try:
        value = float(value)
    except (TypeError, ValueError):
        return "0"
    if value != value:  # NaN
        return "0"

    value = _rounded(value, fmt)

    if fmt == "currency":
        return f"{_italian(value, 0)} €"
    if fmt == "percentage":
        return f"{_italian(value, 0)}%"
    if fmt == "decimal":
        return _italian(value, 1)

    if abs(value) >= 1_000_000:
        return _short(round(value / 1_000_000, 1)) + "M"
    if abs(value) >= 1000:
        return _short(round(value / 1000, 1)) + "K"
    return _italian(value, 1)


def format_number_compact(value, fmt: str = "number") -> str:
    """Short form for scorecards and chart labels."""
    if value is None:
        return "0"
    try:
        value = float(value)
    except (TypeError, ValueError):
        return "0"
    if value != value:
        return "0"

    value = _rounded(value, fmt)

    if fmt == "currency":
        if abs(value) >= 1_000_000:
            return f"€{round(value / 1_000_000)}M"
        if abs(value) >= 1000:
            return f"€{round(value / 1000)}K"
        return f"€{_italian(value, 0)}"
    if fmt == "percentage":
        return f"{round(value)}%"
    if fmt == "decimal":
        if abs(value) >= 1000:
            return _short(round(value / 1000, 1)) + "K"
        return f"{value:.1f}"
    return format_number(value, fmt)


def parse_formatted_number(text, fmt: str = "number") -> float:
    """
    Parse a number typed or pasted by a user.

    Accepts Italian (1.000.000,50) and English (1,000,000.50) separators, a
    currency or percent sign, and returns 0 for anything unparsable.
    A single dot followed by three or more digits is a thousands separator.
    """
    if text is None:
        return 0.0
    if isinstance(text, (int, float)):
        return float(text)

    cleaned = str(text).strip()
    if not cleaned:
        return 0.0
    if cleaned.startswith('"') and cleaned.endswith('"'):
        cleaned = cleaned[1:-1].strip()

    cleaned = re.sub(r"[€%]", "", cleaned)
    cleaned = re.sub(r"[^\d.,-]", "", cleaned)

    last_dot = cleaned.rfind(".")
    last_comma = cleaned.rfind(",")

    if last_dot > last_comma and last_dot > 0 and last_comma != -1:
        # English: 1,000.50
        cleaned = cleaned.replace(",", "")
    elif last_comma > last_dot and last_comma > 0 and last_dot != -1:
        # Italian: 1.000,50
        cleaned = cleaned[:last_comma].replace(".", "") + "." + cleaned[last_comma + 1:]
    elif last_comma == -1 and last_dot != -1:
        if cleaned.count(".") > 1 or len(cleaned.split(".")[1]) > 2:
            cleaned = cleaned.replace(".", "")
    elif last_dot == -1 and last_comma != -1:
        if cleaned.count(",") == 1 and len(cleaned.split(",")[1]) <= 2:
            cleaned = cleaned.replace(",", ".")
        else:
            cleaned = cleaned.replace(",", "")

    try:
        return float(cleaned)
    except ValueError:
        return 0.0


def format_label(fmt: str) -> str:
    return FORMAT_LABELS.get(fmt, FORMAT_LABELS["number"])
