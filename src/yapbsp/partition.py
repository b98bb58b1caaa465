"""Location enums and the split result shared by all partitioning code."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar('T')


class HyperplaneLocation(Enum):
    """Position of a point relative to an oriented line or plane."""
    MINUS = -1
    ON = 0
    PLUS = 1


class SplitLocation(Enum):
    """Position of a split object relative to the splitter."""
    MINUS = 'minus'
    PLUS = 'plus'
    BOTH = 'both'
    NEITHER = 'neither'


class RegionLocation(Enum):
    """Position of a point relative to a region."""
    INSIDE = 'inside'
    OUTSIDE = 'outside'
    BOUNDARY = 'boundary'


class RegionCutRule(Enum):
    """How the children of a freshly cut leaf are classified.

    ``MINUS_INSIDE`` is the rule for inserting region boundaries whose
    normals point away from the region.  ``INHERIT`` gives both children
    the location the leaf had before the cut.
    """
    MINUS_INSIDE = 'minus_inside'
    PLUS_INSIDE = 'plus_inside'
    INHERIT = 'inherit'


def location_from_sign(sign: int) -> HyperplaneLocation:
    if sign < 0:
        return HyperplaneLocation.MINUS
    if sign > 0:
        return HyperplaneLocation.PLUS
    return HyperplaneLocation.ON


@dataclass(frozen=True)
class Split(Generic[T]):
    """Result of splitting an object with a line or plane.

    Either side is ``None`` when nothing of the object lies there.  Both
    sides are ``None`` when the object lies on the splitter.
    """

    minus: Optional[T]
    plus: Optional[T]

    @property
    def location(self) -> SplitLocation:
        if self.minus is not None:
            return SplitLocation.BOTH if self.plus is not None else SplitLocation.MINUS
        if self.plus is not None:
            return SplitLocation.PLUS
        return SplitLocation.NEITHER

    def __iter__(self):
        # allow ``minus, plus = obj.split(...)``
        yield self.minus
        yield self.plus


__all__ = [
    'HyperplaneLocation',
    'SplitLocation',
    'RegionLocation',
    'RegionCutRule',
    'Split',
    'location_from_sign',
]
