from fastapi import APIRouter

from core.quantities import normalize_cases_bottles, total_bottles
from schemas.quantities import QuantityIn, QuantityOut

router = APIRouter()


@router.post("/convert", response_model=QuantityOut)
def convert(body: QuantityIn):
    """Cases + loose bottles -> total bottles, with loose bottles carried into cases."""
    cases, bottles = normalize_cases_bottles(body.cases, body.bottles, body.pack_quantity)
    return QuantityOut(
        total_bottles=total_bottles(cases, bottles, body.pack_quantity),
        cases=cases,
        bottles=bottles,
        pack_quantity=body.pack_quantity,
    )
