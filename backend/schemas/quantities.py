from pydantic import BaseModel, field_validator

from core.quantities import DEFAULT_PACK_QUANTITY


class QuantityIn(BaseModel):
    cases: int = 0
    bottles: int = 0
    pack_quantity: int = DEFAULT_PACK_QUANTITY

    @field_validator("cases", "bottles")
    @classmethod
    def _non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("must be >= 0")
        return v

    @field_validator("pack_quantity")
    @classmethod
    def _positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("pack_quantity must be > 0")
        return v


class QuantityOut(BaseModel):
    total_bottles: int
    cases: int
    bottles: int
    pack_quantity: int
