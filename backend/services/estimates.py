"""
Indent estimate: what an order of brands will cost once margins, cess and
taxes are added on top of the invoice price.

    invoice value      = sum(bottles * invoice price)
    MRP rounding off   = sum(bottles * special margin)
    net invoice value  = invoice value + MRP rounding off
    retail excise TOT  = invoice value * 10%   (only once ten-times lifted)
    special excise cess= sum(bottles * cess per bottle)
    TCS                = (net + retail excise TOT) * 1%
    grand total        = net + retail excise TOT + cess + TCS

`TcsMode.LEGACY` reproduces older printouts: TCS = invoice value * 1.175%.
"""

from decimal import Decimal
from typing import Iterable, List, Optional

from core.config import settings
from core.money import money, to_decimal
from core.quantities import clamp_quantity, normalize_cases_bottles, total_bottles
from schemas.brands import MasterBrand
from schemas.estimates import (
    EstimateLineItem,
    EstimateLineOut,
    EstimateSummary,
    TcsMode,
)


def line_from_brand(brand: MasterBrand) -> EstimateLineItem:
    # A freshly added brand starts at one case.
    return EstimateLineItem(
        brand_id=brand.id,
        brand_name=brand.name,
        brand_number=brand.brand_number,
        size_code=brand.size_code,
        size_ml=brand.size_ml,
        pack_quantity=brand.pack_quantity,
        cases=1,
        bottles=0,
        invoice_price=brand.invoice_price,
        special_margin=brand.special_margin,
        special_excise_cess=brand.special_excise_cess,
    )


def add_line(lines: List[EstimateLineItem], brand: MasterBrand) -> List[EstimateLineItem]:
    if any(it.brand_id == brand.id for it in lines):
        return lines
    return [*lines, line_from_brand(brand)]


def set_quantity(line: EstimateLineItem, field: str, value) -> EstimateLineItem:
    """Apply a typed cases/bottles value; bottles stay below one case."""
    if field == "cases":
        return line.model_copy(update={"cases": clamp_quantity(value)})
    if field == "bottles":
        return line.model_copy(update={"bottles": clamp_quantity(value, 0, line.pack_quantity - 1)})
    raise ValueError(f"unknown quantity field: {field}")


def line_bottles(line: EstimateLineItem) -> int:
    cases, bottles = normalize_cases_bottles(line.cases, line.bottles, line.pack_quantity)
    return total_bottles(cases, bottles, line.pack_quantity)


def compute_estimate(
    items: Iterable[EstimateLineItem],
    ten_times_lifted: bool = False,
    tcs_mode: TcsMode = TcsMode.CURRENT,
    tcs_rate: Optional[float] = None,
    retail_excise_rate: Optional[float] = None,
) -> EstimateSummary:
    items = list(items)
    ret_rate = to_decimal(settings.retail_excise_rate if retail_excise_rate is None else retail_excise_rate)
    if tcs_rate is None:
        tcs_rate = settings.legacy_tcs_rate if tcs_mode == TcsMode.LEGACY else settings.tcs_rate
    rate = to_decimal(tcs_rate)

    invoice_value = Decimal("0")
    rounding_off = Decimal("0")
    cess = Decimal("0")
    bottles_total = 0
    lines_out: List[EstimateLineOut] = []

    for it in items:
        n = line_bottles(it)
        amount = n * to_decimal(it.invoice_price)
        bottles_total += n
        invoice_value += amount
        rounding_off += n * to_decimal(it.special_margin)
        cess += n * to_decimal(it.special_excise_cess)
        cases, loose = normalize_cases_bottles(it.cases, it.bottles, it.pack_quantity)
        lines_out.append(
            EstimateLineOut(
                brand_id=it.brand_id,
                brand_name=it.brand_name,
                brand_number=it.brand_number,
                size=f"{it.pack_quantity}/{it.size_ml}ml",
                cases=cases,
                bottles=loose,
                total_bottles=n,
                invoice_price=float(money(it.invoice_price)),
                amount=float(money(amount)),
            )
        )

    net = invoice_value + rounding_off
    retail_tax = invoice_value * ret_rate if ten_times_lifted else Decimal("0")
    if tcs_mode == TcsMode.LEGACY:
        tcs = invoice_value * rate
    else:
        tcs = (net + retail_tax) * rate
    grand_total = net + retail_tax + cess + tcs

    return EstimateSummary(
        lines=lines_out,
        total_bottles=bottles_total,
        invoice_value=float(money(invoice_value)),
        mrp_rounding_off=float(money(rounding_off)),
        net_invoice_value=float(money(net)),
        retail_excise_turnover_tax=float(money(retail_tax)),
        special_excise_cess=float(money(cess)),
        tcs=float(money(tcs)),
        grand_total=float(money(grand_total)),
        tcs_mode=tcs_mode,
    )
