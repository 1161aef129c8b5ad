# src/cies/knowledge/schema.py

import math
import re
from typing import List, Optional, Union

from pydantic import BaseModel, Field, StrictBool, StrictFloat, StrictInt, field_validator

# Lowercase-leading identifier; uppercase-leading tokens are variables in the text grammar
PREDICATE_PATTERN = re.compile(r"^[a-z][a-zA-Z0-9_]*$")

FactValue = Union[StrictBool, StrictInt, StrictFloat, str]


class FactValidationError(ValueError):
    """Raised when a fact would corrupt the append-only text grammar."""


class Fact(BaseModel):
    predicate: str = Field(..., description="Relation name (e.g., 'source_type')")
    arguments: List[FactValue] = Field(
        ..., min_length=1, description="Ordered argument values"
    )
    comment: Optional[str] = Field(None, description="Trailing '% comment' text")

    @field_validator("predicate")
    @classmethod
    def validate_predicate(cls, v: str) -> str:
        if not PREDICATE_PATTERN.match(v):
            raise ValueError(
                f"predicate '{v}' must be a lowercase-leading identifier"
            )
        return v

    @field_validator("arguments")
    @classmethod
    def validate_arguments(cls, v: List[FactValue]) -> List[FactValue]:
        for arg in v:
            if isinstance(arg, float) and not math.isfinite(arg):
                raise ValueError("numeric arguments must be finite")
        return v

    @property
    def arity(self) -> int:
        return len(self.arguments)

    class Config:
        frozen = True
