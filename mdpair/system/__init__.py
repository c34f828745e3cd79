"""System geometry and position snapshots."""

from .box import Box
from .positions import PositionSet, as_position_set

__all__ = ["Box", "PositionSet", "as_position_set"]
