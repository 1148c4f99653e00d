"""Entity collections used by completion aggregation."""

from .entity_sets import (
    ExpectedSet,
    ObservedSet,
    missing_elements,
    same_elements,
    split_names,
)

__all__ = [
    "ExpectedSet",
    "ObservedSet",
    "missing_elements",
    "same_elements",
    "split_names",
]
