from typing import List

from fastapi import APIRouter

from core.kinds import KIND_ORDER

router = APIRouter()


@router.get("/", response_model=List[str])
def list_kinds():
    # fixed display order used by every report
    return list(KIND_ORDER)
