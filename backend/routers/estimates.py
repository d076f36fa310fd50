from fastapi import APIRouter, HTTPException, status

from schemas.estimates import EstimateRequest, EstimateSummary
from services.estimates import compute_estimate

router = APIRouter()


@router.post("/", response_model=EstimateSummary)
def create_estimate(body: EstimateRequest):
    """Indent estimate for the given lines. Nothing is stored."""
    try:
        return compute_estimate(body.items, body.ten_times_lifted, body.tcs_mode)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
