"""
Satellite Constellation Globe Package

This package computes the satellite point cloud drawn around the hero globe:
SGP4 propagation of a static element set collection, geodetic projection onto
a render-space shell, hemisphere culling, a scroll-driven explosion effect and
the globe's entry animation.

Modules:
    tle_loader: Element set parsing and source loading
    propagator: SGP4 propagation of the loaded collection
    clock: Simulation clock and per-frame context
    projector: TEME to geodetic to render-space conversion
    culling: Visible hemisphere test
    explosion: Scroll to radial expansion mapping
    entry_animation: Globe drop-in and float state machine
    beacon: Pulsing surface marker
    scene: Per-frame orchestration and renderer output

References:
    Vallado, D. A., Crawford, P., Hujsak, R., & Kelso, T. S. (2006).
    Revisiting Spacetrack Report #3. AIAA 2006-6753.
"""

__version__ = "1.0.0"
