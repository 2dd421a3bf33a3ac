"""Flare Backend — Bottom sheet drag state machine

The sheet height is a single offset bounded to [min_height, max_height].
Gesture events are the only writers; rendering reads `offset` and
`background_color()` and never writes back.

    IDLE --drag_start--> DRAGGING --drag_update(delta)--> DRAGGING
    DRAGGING --drag_end--> IDLE (offset snapped to the nearer bound)
"""

import logging
import math
from enum import Enum

from config import (
    VIEWPORT_HEIGHT, SHEET_MIN_FRACTION, SHEET_MAX_FRACTION,
    SHEET_LIGHT_RGB, SHEET_DARK_RGB,
)

logger = logging.getLogger("flare.sheet")


class SheetState(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


def snap_tween(start: float, end: float, steps: int = 12) -> list[float]:
    """Ease-out frames from `start` to `end`; the last frame is exactly `end`."""
    steps = max(1, steps)
    frames = []
    for i in range(1, steps):
        t = i / steps
        eased = 1 - (1 - t) ** 3
        frames.append(start + (end - start) * eased)
    frames.append(end)
    return frames


class BottomSheetController:
    def __init__(self, min_height: float, max_height: float, offset: float | None = None):
        if not (math.isfinite(min_height) and math.isfinite(max_height)) or min_height > max_height:
            raise ValueError(f"invalid sheet bounds [{min_height}, {max_height}]")
        self.min_height = min_height
        self.max_height = max_height
        self._state = SheetState.IDLE
        self._anchor = min_height
        self._offset = min_height
        if offset is not None:
            self._offset = self._clamp(offset)

    @classmethod
    def for_viewport(cls, height: float = VIEWPORT_HEIGHT) -> "BottomSheetController":
        """Sheet collapsed to 51% of the viewport, expandable to 93%."""
        return cls(height * SHEET_MIN_FRACTION, height * SHEET_MAX_FRACTION)

    @property
    def offset(self) -> float:
        return self._offset

    @property
    def state(self) -> SheetState:
        return self._state

    def _clamp(self, value: float) -> float:
        if math.isnan(value):
            return self._offset
        return max(self.min_height, min(self.max_height, value))

    def on_drag_start(self) -> None:
        self._anchor = self._offset
        self._state = SheetState.DRAGGING

    def on_drag_update(self, delta: float) -> float:
        """Move the sheet by the gesture's vertical translation since drag start.

        Positive deltas (finger moving down) shrink the sheet. The result is
        clamped; non-finite deltas and updates outside a drag are ignored.
        """
        if self._state is not SheetState.DRAGGING:
            logger.debug("drag update ignored while idle")
            return self._offset
        if not math.isfinite(delta):
            logger.debug(f"non-finite drag delta ignored: {delta}")
            return self._offset
        self._offset = self._clamp(self._anchor - delta)
        return self._offset

    def snap_target(self) -> float:
        midpoint = (self.min_height + self.max_height) / 2
        return self.max_height if self._offset >= midpoint else self.min_height

    def on_drag_end(self, steps: int = 12) -> list[float]:
        """Release the drag and snap to the nearer bound.

        Returns the tween frames toward the target; the offset itself jumps to
        the target immediately. An exact midpoint snaps open.
        """
        if self._state is not SheetState.DRAGGING:
            return [self._offset]
        start = self._offset
        target = self.snap_target()
        self._offset = target
        self._state = SheetState.IDLE
        return snap_tween(start, target, steps)

    def expansion(self) -> float:
        """How far open the sheet is, 0.0 (collapsed) to 1.0 (expanded)."""
        span = self.max_height - self.min_height
        if span == 0:
            return 0.0
        return (self._offset - self.min_height) / span

    def background_color(self) -> str:
        pct = self.expansion()
        r, g, b = (
            round((1 - pct) * light + pct * dark)
            for light, dark in zip(SHEET_LIGHT_RGB, SHEET_DARK_RGB)
        )
        return f"#{r:02X}{g:02X}{b:02X}"
