"""
Globe Entry Animation

Two-phase state machine for the globe's vertical position:

    DROPPING  eased drop from DROP_START_HEIGHT to DROP_TARGET_HEIGHT over
              DROP_DURATION seconds (ease-out cubic)
    FLOATING  gentle sine bob around the target height

The transition DROPPING -> FLOATING happens once, on the frame where the drop
progress reaches 1, and is never reversed. In both phases a scroll-coupled rise
is added once the page has scrolled past RISE_SCROLL_THRESHOLD pixels.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from globe_constellation.clock import FrameContext, sanitize_delta
from globe_constellation.config import (
    DROP_DURATION,
    DROP_START_HEIGHT,
    DROP_TARGET_HEIGHT,
    FLOAT_AMPLITUDE,
    FLOAT_RATE,
    RISE_RATE,
    RISE_SCROLL_THRESHOLD,
)


class EntryPhase(Enum):
    DROPPING = "dropping"
    FLOATING = "floating"


@dataclass
class EntryAnimationState:
    phase: EntryPhase = EntryPhase.DROPPING
    elapsed_time: float = 0.0
    start_height: float = DROP_START_HEIGHT
    target_height: float = DROP_TARGET_HEIGHT
    float_phase: float = 0.0


def ease_out_cubic(t: float) -> float:
    """Starts fast, ends slow."""
    return 1.0 - (1.0 - t) ** 3


def scroll_rise(scroll_offset: float) -> float:
    """Upward offset once scrolling passes the threshold; 0 before it."""
    if not math.isfinite(scroll_offset):
        return 0.0
    return max(0.0, (scroll_offset - RISE_SCROLL_THRESHOLD) * RISE_RATE)


class EntryAnimator:
    """
    Drives the globe's vertical position from frame to frame.

    Args:
        duration: Drop duration in seconds
        float_rate: Float phase increase per second
        float_amplitude: Float bob amplitude in render units
    """

    def __init__(
        self,
        state: Optional[EntryAnimationState] = None,
        duration: float = DROP_DURATION,
        float_rate: float = FLOAT_RATE,
        float_amplitude: float = FLOAT_AMPLITUDE,
    ):
        self.state = state or EntryAnimationState()
        self.duration = duration
        self.float_rate = float_rate
        self.float_amplitude = float_amplitude
        self.position_y = self.state.start_height

    @property
    def phase(self) -> EntryPhase:
        return self.state.phase

    @property
    def progress(self) -> float:
        """Drop progress in [0, 1]."""
        if self.duration <= 0.0:
            return 1.0
        return min(self.state.elapsed_time / self.duration, 1.0)

    def update(self, ctx: FrameContext) -> float:
        """
        Advance one frame.

        Args:
            ctx: Frame inputs (delta and scroll offset are used)

        Returns:
            New vertical position of the globe
        """
        delta = sanitize_delta(ctx.delta)
        state = self.state
        rise = scroll_rise(ctx.scroll_offset)

        if state.phase is EntryPhase.DROPPING:
            state.elapsed_time += delta
            progress = self.progress
            eased = ease_out_cubic(progress)
            drop_y = state.start_height - (state.start_height - state.target_height) * eased
            self.position_y = drop_y + rise

            if progress >= 1.0:
                state.phase = EntryPhase.FLOATING
        else:
            state.float_phase += delta * self.float_rate
            float_y = math.sin(state.float_phase) * self.float_amplitude
            self.position_y = state.target_height + float_y + rise

        return self.position_y
