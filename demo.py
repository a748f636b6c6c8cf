"""
Globe Constellation Demonstration

Runs the satellite globe scene headless for a number of frames and reports what
the renderer would receive:
- Asynchronous element set loading (frames render empty until it completes)
- Globe entry animation (drop, then float)
- Scroll-driven explosion of the satellite shell and globe rise
- Beacon appearing once the globe surface is ready
- Optional single-satellite track at the final simulation time

Usage:
    python demo.py [--frames N] [--scroll PX] [--source PATH_OR_URL]
                   [--track CATALOG] [--plot] [--verbose]

Arguments:
    --frames: Number of frames to simulate (default 300, at 60 fps)
    --scroll: Scroll offset reached by the last frame, ramped linearly
    --source: Element set file or URL (default: GLOBE_TLE_SOURCE)
    --track: Catalog number to propagate and report individually
    --plot: Save a 3D scatter plot of the final point cloud
    --verbose: Enable debug logging
"""

import argparse
import logging
import time

import matplotlib.pyplot as plt
import numpy as np

from globe_constellation.clock import FrameContext, datetime_to_jd_fr
from globe_constellation.config import SceneConfig
from globe_constellation.explosion import explosion_factor
from globe_constellation.logging_config import configure_logging, get_logger
from globe_constellation.projector import eci_to_geodetic, greenwich_sidereal_time
from globe_constellation.propagator import PropagationFailure
from globe_constellation.scene import GlobeScene, RenderFrame
from globe_constellation.signals import FrameScheduler, ScrollSignal
from globe_constellation.tle_loader import ElementSetSource, find_element_set

logger = get_logger(__name__)

FRAME_DELTA = 1.0 / 60.0
SURFACE_READY_AFTER = 1.0  # seconds, globe texture load stand-in
REPORT_EVERY = 30  # frames


def wait_for_elements(scene: GlobeScene, timeout: float = 5.0) -> None:
    """
    Give the loader thread a head start so the demo shows satellites.

    The frame loop itself never waits; this only delays the first tick.
    """
    deadline = time.monotonic() + timeout
    while scene.loading and time.monotonic() < deadline:
        scene.render_frame(FrameContext(delta=0.0))
        time.sleep(0.01)


def report_track(scene: GlobeScene, catalog_number: str) -> None:
    """
    Propagate one satellite at the current simulation time and log its position.

    Parameters
    ----------
    scene : GlobeScene
        Scene whose element sets and clock are used
    catalog_number : str
        Catalog number of the satellite to report
    """
    element_set = find_element_set(scene.propagator.element_sets, catalog_number)
    if element_set is None:
        logger.warning("Satellite not loaded", catalog_number=catalog_number)
        return

    result = scene.propagator.propagate(element_set, scene.clock.now)
    if isinstance(result, PropagationFailure):
        logger.warning(
            "Propagation failed",
            catalog_number=catalog_number,
            error_code=result.error_code,
            message=result.message,
        )
        return

    gmst = greenwich_sidereal_time(*datetime_to_jd_fr(scene.clock.now))
    lat, lon, alt = eci_to_geodetic(result.position_km, gmst)
    logger.info(
        f"{element_set.name}: lat={lat:.2f} lon={lon:.2f} alt={alt:.1f}km "
        f"r={result.radius_km:.1f}km"
    )


def visualize_point_cloud(frame: RenderFrame, output_file: str = "globe_point_cloud.png") -> None:
    """
    Save a 3D scatter plot of a frame's point cloud.

    Parameters
    ----------
    frame : RenderFrame
        Frame to plot
    output_file : str
        PNG path
    """
    points = frame.positions.reshape(-1, 3)

    fig = plt.figure(figsize=(10, 10))
    ax = fig.add_subplot(111, projection="3d")
    ax.scatter(points[:, 0], points[:, 2], points[:, 1], s=2, color=frame.point_color)

    if frame.beacon is not None:
        bx, by, bz = frame.beacon.position
        ax.scatter([bx], [bz], [by], s=40, color="#ff0044")

    ax.set_xlabel("X")
    ax.set_ylabel("Z")
    ax.set_zlabel("Y")
    ax.set_title(
        f"{frame.point_count} visible satellites at {frame.simulation_time:%Y-%m-%d %H:%M:%S}"
    )

    plt.savefig(output_file, dpi=150, bbox_inches="tight")
    logger.info(f"Saved point cloud plot to {output_file}")
    plt.close()


def main() -> None:
    """Main demonstration entry point."""
    parser = argparse.ArgumentParser(description="Globe Constellation Demonstration")
    parser.add_argument("--frames", type=int, default=300, help="Frames to simulate")
    parser.add_argument("--scroll", type=float, default=0.0, help="Final scroll offset (px)")
    parser.add_argument("--source", help="Element set file or URL")
    parser.add_argument("--track", help="Catalog number to report individually")
    parser.add_argument("--plot", action="store_true", help="Save point cloud plot")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    args = parser.parse_args()

    config = SceneConfig()
    if args.verbose:
        configure_logging(level=logging.DEBUG, force=True)
    else:
        configure_logging(level=getattr(logging, config.LOG_LEVEL, logging.INFO), force=True)

    source = ElementSetSource(args.source or config.TLE_SOURCE, config.FETCH_TIMEOUT)
    scene = GlobeScene(config=config, source=source)
    scheduler = FrameScheduler()
    scroll = ScrollSignal()

    scene.connect(scheduler, scroll)
    scene.start_loading()
    wait_for_elements(scene)
    logger.info("Satellites loaded", count=scene.satellite_count)

    scroll_offsets = np.linspace(0.0, args.scroll, max(args.frames, 1))

    try:
        for index in range(args.frames):
            scroll.scroll_to(float(scroll_offsets[index]))
            if index * FRAME_DELTA >= SURFACE_READY_AFTER:
                scene.surface.mark_ready()

            scheduler.tick(FRAME_DELTA)

            frame = scene.last_frame
            if index % REPORT_EVERY == 0 or index == args.frames - 1:
                logger.info(
                    f"frame={index:4d} points={frame.point_count:5d} "
                    f"globe_y={frame.globe_offset_y:7.2f} phase={scene.animator.phase.value} "
                    f"explosion={explosion_factor(scroll.offset):.2f} "
                    f"beacon={'on' if frame.beacon else 'off'}"
                )
    finally:
        scene.teardown()

    if args.track:
        report_track(scene, args.track)

    if args.plot and scene.last_frame is not None:
        visualize_point_cloud(scene.last_frame)

    logger.info("Demonstration complete")


if __name__ == "__main__":
    main()
