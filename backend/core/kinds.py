import re
from typing import Optional

# Display order of the category roll-up in every report.
KIND_ORDER = [
    "Whisky",
    "Beer",
    "Brandy",
    "Wine",
    "Vodka",
    "Rum",
    "Gin",
    "Liqueur",
    "Tequila",
    "Spirit",
    "Ready to drink",
]

_ALIASES = {
    "WHISKY": "Whisky",
    "WHISKEY": "Whisky",
    "BEER": "Beer",
    "BRANDY": "Brandy",
    "WINE": "Wine",
    "VODKA": "Vodka",
    "RUM": "Rum",
    "GIN": "Gin",
    "LIQUEUR": "Liqueur",
    "LIQUOR": "Liqueur",
    "TEQUILA": "Tequila",
    "SPIRIT": "Spirit",
    "READY TO DRINK": "Ready to drink",
    "RTD": "Ready to drink",
}

OTHER = "Other"

_SIZE_SUFFIX = re.compile(
    r"\s+(90ml|180ml|375ml|750ml|1000ml|2000ml|60ml|500ml|650ml|330ml|275ml).*$",
    re.IGNORECASE,
)


def canonical_kind(raw: Optional[str]) -> str:
    return _ALIASES.get((raw or "").strip().upper(), OTHER)


def base_name(product_name: Optional[str]) -> str:
    """Brand name without the trailing size ("Royal Stag 750ml" -> "Royal Stag")."""
    return _SIZE_SUFFIX.sub("", product_name or "").strip()
