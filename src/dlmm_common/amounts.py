"""Integer amount utilities for base-unit token quantities.

All bin amounts are int (base units). Formatting to human units is exact
integer arithmetic; only prices go through float.
"""


def format_amount(amount: int, decimals: int) -> str:
    """Format base units with ``decimals`` places: (1500000, 6) -> '1.500000'."""
    if decimals <= 0:
        return str(amount)
    sign = "-" if amount < 0 else ""
    whole, frac = divmod(abs(amount), 10**decimals)
    return f"{sign}{whole}.{frac:0{decimals}d}"


def calculate_real_price(price: float | str, token_x_decimals: int, token_y_decimals: int) -> float:
    """Adjust a raw per-base-unit price by the decimal difference of the pair."""
    return float(price) * 10 ** (token_x_decimals - token_y_decimals)


def format_price(price: float | str | None, token_x_decimals: int, token_y_decimals: int) -> str:
    """Display price with magnitude-based precision; '-' when unknown."""
    if not price or price == "-":
        return "-"
    real_price = calculate_real_price(price, token_x_decimals, token_y_decimals)
    places = 2
    if real_price < 0.1:
        places = 6
    elif real_price < 10:
        places = 4
    return f"{real_price:.{places}f}"


def truncate_address(address: str, length: int = 8) -> str:
    """'3msVd34R5Kxo...' style shortening: keep head and tail around '...'."""
    if len(address) <= length:
        return address
    prefix = (length + 1) // 2
    suffix = length - prefix
    tail = address[len(address) - suffix:] if suffix else ""
    return f"{address[:prefix]}...{tail}"
