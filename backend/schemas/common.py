"""
Shared field types for DTOs built from upstream JSON.

The shop API is not consistent: the same field arrives as camelCase from one
endpoint and snake_case from another, numbers arrive as strings, and missing
values arrive as null. These annotated types absorb that.
"""

from typing import Annotated, Optional, Union

from pydantic import AliasChoices, BeforeValidator, Field


def _zero_if_blank(v):
    if v is None or v == "":
        return 0
    return v


def _int_or_zero(v):
    if v is None or v == "":
        return 0
    try:
        return int(float(v))
    except (TypeError, ValueError):
        return 0


def _coerce_id(v):
    if isinstance(v, str) and v.strip().isdigit():
        return int(v.strip())
    return v


Money = Annotated[float, BeforeValidator(_zero_if_blank)]
Count = Annotated[int, BeforeValidator(_int_or_zero)]
EntityId = Annotated[Union[int, str], BeforeValidator(_coerce_id)]
OptionalId = Annotated[Optional[Union[int, str]], BeforeValidator(_coerce_id)]


def alias(*names: str, default=None):
    """Field accepting any of `names` on input; serialises under the field's own name."""
    return Field(default=default, validation_alias=AliasChoices(*names))
