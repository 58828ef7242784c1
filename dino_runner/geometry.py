"""Screen-space boxes used for collision tests."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Box:
    """Axis-aligned rectangle with a bottom-left origin."""

    left: float
    bottom: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def top(self) -> float:
        return self.bottom + self.height

    def overlaps(self, other: "Box") -> bool:
        # Shared edges do not count as contact.
        return (
            self.left < other.right
            and self.right > other.left
            and self.bottom < other.top
            and self.top > other.bottom
        )


def percent_to_absolute(percent: float, extent: float) -> float:
    """Convert a percentage-of-extent coordinate into absolute units."""
    return percent / 100.0 * extent
