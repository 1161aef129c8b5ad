# src/cies/knowledge/filters.py

from enum import Enum
from typing import Any, Callable, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, Field

from cies.knowledge.codec import normalize_value
from cies.knowledge.schema import Fact, FactValue


class FilterOperation(str, Enum):
    EQUALS = "equals"
    BETWEEN = "between"
    CONTAINS = "contains"


class ArgumentFilter(BaseModel):
    """
    Condition on a single positional argument of a fact.

    Equality uses the same normalized comparison as store deduplication,
    so ``'98'``, ``98`` and ``98.0`` are all equal.
    """

    index: int = Field(..., ge=0, description="Zero-based argument position")
    operation: FilterOperation
    value: Optional[Union[bool, int, float, str]] = None
    min_value: Optional[float] = None
    max_value: Optional[float] = None

    @classmethod
    def equals(cls, index: int, value: FactValue) -> "ArgumentFilter":
        return cls(index=index, operation=FilterOperation.EQUALS, value=value)

    @classmethod
    def between(
        cls,
        index: int,
        min_value: Optional[float] = None,
        max_value: Optional[float] = None,
    ) -> "ArgumentFilter":
        return cls(
            index=index,
            operation=FilterOperation.BETWEEN,
            min_value=min_value,
            max_value=max_value,
        )

    @classmethod
    def contains(cls, index: int, text: str) -> "ArgumentFilter":
        return cls(index=index, operation=FilterOperation.CONTAINS, value=text)

    def matches(self, fact: Fact) -> bool:
        if self.index >= fact.arity:
            return False
        arg = fact.arguments[self.index]

        if self.operation == FilterOperation.EQUALS:
            if self.value is None:
                return False
            return normalize_value(arg) == normalize_value(self.value)

        if self.operation == FilterOperation.BETWEEN:
            if isinstance(arg, bool) or not isinstance(arg, (int, float)):
                return False
            if self.min_value is not None and arg < self.min_value:
                return False
            if self.max_value is not None and arg > self.max_value:
                return False
            return True

        return str(self.value).lower() in str(arg).lower()

    class Config:
        frozen = True


# A condition is either an ArgumentFilter or a plain (index, predicate) pair
Condition = Union[ArgumentFilter, Tuple[int, Callable[[Any], bool]]]


def matches_all(fact: Fact, conditions: Optional[Sequence[Condition]]) -> bool:
    """Check a fact against every condition; no conditions matches everything."""
    for condition in conditions or ():
        if isinstance(condition, ArgumentFilter):
            if not condition.matches(fact):
                return False
            continue

        index, check = condition
        if index >= fact.arity or not check(fact.arguments[index]):
            return False
    return True
