from typing import Optional, Tuple

DEFAULT_PACK_QUANTITY = 12
MAX_CASES = 9999


def pack_or_default(pack_quantity) -> int:
    try:
        pq = int(float(pack_quantity or 0))
    except (TypeError, ValueError):
        pq = 0
    return pq if pq > 0 else DEFAULT_PACK_QUANTITY


def total_bottles(cases: int, bottles: int, pack_quantity: int) -> int:
    if pack_quantity <= 0:
        raise ValueError("pack_quantity must be > 0")
    if cases < 0 or bottles < 0:
        raise ValueError("cases and bottles must be >= 0")
    return cases * pack_quantity + bottles


def split_bottles(total: int, pack_quantity: int) -> Tuple[Optional[int], int]:
    """(cases, loose bottles). Without a pack quantity there is no case count."""
    total = int(total or 0)
    if not pack_quantity or pack_quantity <= 0:
        return None, total
    return total // pack_quantity, total % pack_quantity


def normalize_cases_bottles(cases: int, bottles: int, pack_quantity: int) -> Tuple[int, int]:
    # Loose bottles that make up whole cases always carry over.
    if pack_quantity <= 0:
        raise ValueError("pack_quantity must be > 0")
    extra, loose = divmod(max(0, bottles), pack_quantity)
    return max(0, cases) + extra, loose


def clamp_quantity(value, lo: int = 0, hi: int = MAX_CASES) -> int:
    """Lenient parse of a typed quantity: junk becomes 0, then clamp."""
    try:
        n = int(value)
    except (TypeError, ValueError):
        try:
            n = int(float(value))
        except (TypeError, ValueError):
            n = 0
    return max(lo, min(hi, n))
