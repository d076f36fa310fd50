from decimal import Decimal, ROUND_HALF_UP

PAISE = Decimal("0.01")


def to_decimal(x) -> Decimal:
    if x is None or x == "":
        return Decimal("0")
    if isinstance(x, Decimal):
        return x
    try:
        return Decimal(str(x))
    except ArithmeticError:
        return Decimal("0")


def money(x) -> Decimal:
    return to_decimal(x).quantize(PAISE, rounding=ROUND_HALF_UP)


def _group_indian(digits: str) -> str:
    # 1234567 -> 12,34,567
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    parts = []
    while len(head) > 2:
        parts.insert(0, head[-2:])
        head = head[:-2]
    if head:
        parts.insert(0, head)
    return ",".join(parts) + "," + tail


def format_inr(amount, decimals: int = 2, symbol: bool = True) -> str:
    """Indian digit grouping, e.g. 123456.5 -> '₹1,23,456.50'."""
    q = Decimal(1).scaleb(-decimals) if decimals else Decimal(1)
    value = to_decimal(amount).quantize(q, rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    text = f"{abs(value):.{decimals}f}"
    whole, _, frac = text.partition(".")
    out = _group_indian(whole) + (f".{frac}" if frac else "")
    return f"{sign}{'₹' if symbol else ''}{out}"
