"""
Globe Scene

Per-frame orchestration of the constellation visualization:

    element sets (static) -> SGP4 propagation at simulation time
        -> geodetic projection onto the satellite shell
        -> hemisphere culling against the viewpoint
        -> scroll-driven explosion
        -> flat float32 position buffer for the renderer

The entry animation runs alongside and only moves the globe vertically. The
element set source is read once on a worker thread; until it completes every
frame renders an empty point cloud.
"""

from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from globe_constellation.beacon import BeaconEffect, BeaconFrame
from globe_constellation.clock import FrameContext, SimulationClock, datetime_to_jd_fr, sanitize_delta
from globe_constellation.config import (
    DEFAULT_VIEWPOINT,
    GLOBE_SCALE,
    POINT_COLOR,
    POINT_SIZE,
    SceneConfig,
)
from globe_constellation.culling import cull_points, to_globe_frame
from globe_constellation.entry_animation import EntryAnimator
from globe_constellation.explosion import explode
from globe_constellation.logging_config import get_logger
from globe_constellation.projector import GeodeticProjector, GlobeSurface, greenwich_sidereal_time
from globe_constellation.propagator import Propagator
from globe_constellation.signals import FrameScheduler, ScrollSignal
from globe_constellation.tle_loader import (
    ElementSetSource,
    ElementSetSourceError,
    OrbitalElementSet,
    load_element_sets,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class RenderFrame:
    """Everything the external renderer needs for one frame."""

    positions: np.ndarray  # flat float32 buffer, x0 y0 z0 x1 y1 z1 ...
    globe_offset_y: float
    globe_scale: float
    simulation_time: datetime
    beacon: Optional[BeaconFrame] = None
    point_size: float = POINT_SIZE
    point_color: str = POINT_COLOR

    @property
    def point_count(self) -> int:
        return len(self.positions) // 3


class GlobeScene:
    """
    Satellite constellation around the hero globe.

    Args:
        config: Scene configuration (default: read from the environment)
        source: Element set source (default: config.TLE_SOURCE)
        clock: Simulation clock (default: starts now)
        surface: Globe coordinate lookup used by the beacon
        element_sets: Preloaded element sets; skips the asynchronous load
    """

    def __init__(
        self,
        config: Optional[SceneConfig] = None,
        source: Optional[ElementSetSource] = None,
        clock: Optional[SimulationClock] = None,
        surface: Optional[GlobeSurface] = None,
        element_sets: Sequence[OrbitalElementSet] = (),
    ):
        self.config = config or SceneConfig()
        self.source = source or ElementSetSource(self.config.TLE_SOURCE, self.config.FETCH_TIMEOUT)
        self.clock = clock or SimulationClock()
        self.surface = surface if surface is not None else GlobeSurface()
        self.projector = GeodeticProjector()
        self.animator = EntryAnimator()
        self.beacon = BeaconEffect(self.surface)
        self.propagator = Propagator(element_sets)
        self.viewpoint: Tuple[float, float, float] = DEFAULT_VIEWPOINT
        self.globe_scale = GLOBE_SCALE
        self.last_frame: Optional[RenderFrame] = None

        self._executor: Optional[ThreadPoolExecutor] = None
        self._pending: Optional[Future] = None
        self._subscriptions: List[Callable[[], None]] = []
        self._scroll_offset = 0.0
        self._elapsed = 0.0

    @property
    def satellite_count(self) -> int:
        return len(self.propagator)

    @property
    def loading(self) -> bool:
        return self._pending is not None

    def start_loading(self) -> None:
        """Read and parse the element set source off the frame loop."""
        if self._pending is not None:
            return
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="tle-loader")
        self._pending = self._executor.submit(
            load_element_sets, self.source, self.config.MAX_SATELLITES
        )

    def set_element_sets(self, element_sets: Sequence[OrbitalElementSet]) -> None:
        self.propagator = Propagator(element_sets)

    def _collect_loaded(self) -> None:
        future = self._pending
        if future is None or not future.done():
            return
        self._pending = None

        if future.cancelled():
            return

        try:
            element_sets = future.result()
        except ElementSetSourceError as e:
            logger.error("Element set load failed, rendering no satellites", error=str(e))
            element_sets = ()
        except Exception as e:
            logger.error(
                "Element set load raised unexpectedly, rendering no satellites",
                error=str(e),
                exc_info=True,
            )
            element_sets = ()

        self.set_element_sets(element_sets)

    def _satellite_points(self, when: datetime, ctx: FrameContext, globe_y: float) -> np.ndarray:
        if not self.satellite_count:
            return np.empty(0, dtype=np.float32)

        positions_km, _, propagated = self.propagator.propagate_all(when)
        gmst = greenwich_sidereal_time(*datetime_to_jd_fr(when))
        points, finite = self.projector.project(positions_km, gmst)
        points = points[propagated & finite]

        viewpoint = to_globe_frame(ctx.viewpoint, (0.0, globe_y, 0.0), self.globe_scale)
        visible = points[cull_points(points, viewpoint)]

        logger.debug(
            "Frame point cloud",
            satellites=self.satellite_count,
            failed=int(len(propagated) - np.count_nonzero(propagated)),
            projected=len(points),
            visible=len(visible),
        )
        return explode(visible, ctx.scroll_offset).astype(np.float32).ravel()

    def render_frame(self, ctx: FrameContext) -> RenderFrame:
        """
        Advance the scene by one frame.

        Args:
            ctx: Frame inputs

        Returns:
            RenderFrame for the external renderer
        """
        self._collect_loaded()

        when = self.clock.advance(ctx.delta)
        globe_y = self.animator.update(ctx)

        frame = RenderFrame(
            positions=self._satellite_points(when, ctx, globe_y),
            globe_offset_y=globe_y,
            globe_scale=self.globe_scale,
            simulation_time=when,
            beacon=self.beacon.update(ctx.elapsed),
        )
        self.last_frame = frame
        return frame

    def _on_scroll(self, offset: float) -> None:
        self._scroll_offset = offset

    def _on_frame(self, delta: float) -> None:
        self._elapsed += sanitize_delta(delta)
        self.render_frame(
            FrameContext(
                delta=delta,
                scroll_offset=self._scroll_offset,
                viewpoint=self.viewpoint,
                elapsed=self._elapsed,
            )
        )

    def connect(self, scheduler: FrameScheduler, scroll: ScrollSignal) -> None:
        """Register the per-frame callback and the scroll listener."""
        self._scroll_offset = scroll.offset
        self._subscriptions.append(scroll.subscribe(self._on_scroll))
        self._subscriptions.append(scheduler.subscribe(self._on_frame))

    def teardown(self) -> None:
        """Release host registrations and stop any pending load. Safe to call twice."""
        released = bool(self._subscriptions) or self._executor is not None

        while self._subscriptions:
            self._subscriptions.pop()()

        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None

        if released:
            logger.info("Globe scene torn down")
