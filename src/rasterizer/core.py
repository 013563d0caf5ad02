"""Scalar rasterizer: the bit-accurate reference for one triangle.

Pipeline per call:
    1. get_bounding_box(); an invalid box means zero hits and no iteration
    2. Walk the subsample lattice from lower-left to upper-right inclusive,
       stepping by ss_i (x outer, y inner)
    3. Offset each candidate by its scaled jitter (keyed on the unjittered
       position) and run the edge test on the jittered point
    4. For every hit, address the pixel/subsample of the *unjittered* candidate
       and forward a flat-shaded Fragment (vertex 0 attributes) to the buffer

The buffer is optional. Without one the function is a coverage-only query and
still returns the exact hit count.

Usage:
    from src.rasterizer import rasterize_triangle, ZBuffer

    zbuf = ZBuffer(screen, cfg)
    hits = rasterize_triangle(tri, zbuf, screen, cfg)
    hits_only = rasterize_triangle(tri, None, screen, cfg)
"""

import logging
from typing import Iterator, Optional, Protocol, Tuple

from .bbox import get_bounding_box
from .edge import sample_test
from .jitter import scaled_jitter
from .primitives import Fragment, Hit, RasterConfig, Sample, Screen, Triangle

logger = logging.getLogger(__name__)


class FragmentSink(Protocol):
    """Depth/color buffer that receives fragment writes.

    Depth testing and blending are decided by the implementation; the
    rasterizer ignores any return value.
    """

    def process_fragment(self, pixel: Sample, subsample: Sample, fragment: Fragment) -> None:
        ...


def decompose_sample(sample: Sample, config: RasterConfig) -> Tuple[Sample, Sample]:
    """Split a lattice position into (pixel index, subsample index).

    pixel = sample >> r_shift, subsample = (sample - (pixel << r_shift)) // ss_i
    """
    r_shift, ss_i = config.r_shift, config.ss_i
    px = sample.x >> r_shift
    py = sample.y >> r_shift
    pixel = Sample(px, py)
    subsample = Sample(
        (sample.x - (px << r_shift)) // ss_i,
        (sample.y - (py << r_shift)) // ss_i,
    )
    return pixel, subsample


def recompose_sample(pixel: Sample, subsample: Sample, config: RasterConfig) -> Sample:
    """Inverse of decompose_sample() for lattice positions."""
    return Sample(
        (pixel.x << config.r_shift) + subsample.x * config.ss_i,
        (pixel.y << config.r_shift) + subsample.y * config.ss_i,
    )


def iter_hits(triangle: Triangle, screen: Screen, config: RasterConfig) -> Iterator[Hit]:
    """Yield every covered subsample of ``triangle`` in visitation order.

    Parameters
    ----------
    triangle : Triangle
        Triangle in fixed-point screen coordinates
    screen : Screen
        Screen extent (fixed point)
    config : RasterConfig
        Subsampling configuration

    Yields
    ------
    Hit
        Unjittered lattice position, jittered test point and the
        pixel/subsample address of the hit
    """
    bbox = get_bounding_box(triangle, screen, config)
    if not bbox.valid:
        return

    ll, ur = bbox.lower_left, bbox.upper_right
    ss_i, ss_w_lg2 = config.ss_i, config.ss_w_lg2

    for x in range(ll.x, ur.x + 1, ss_i):
        for y in range(ll.y, ur.y + 1, ss_i):
            sample = Sample(x, y)
            jitter = scaled_jitter(sample, ss_w_lg2)
            jittered = Sample(x + jitter.x, y + jitter.y)

            if sample_test(triangle, jittered):
                pixel, subsample = decompose_sample(sample, config)
                yield Hit(sample=sample, jittered=jittered, pixel=pixel, subsample=subsample)


def rasterize_triangle(
    triangle: Triangle,
    zbuff: Optional[FragmentSink],
    screen: Screen,
    config: RasterConfig,
) -> int:
    """Rasterize one triangle and return the number of covered subsamples.

    Parameters
    ----------
    triangle : Triangle
        Triangle in fixed-point screen coordinates; vertex 0 supplies the
        fragment depth and color
    zbuff : FragmentSink, optional
        Buffer receiving (pixel, subsample, fragment) for every hit; None for
        a coverage-only query
    screen : Screen
        Screen extent (fixed point)
    config : RasterConfig
        Subsampling configuration

    Returns
    -------
    int
        Hit count (>= 0)
    """
    fragment = Fragment.from_vertex(triangle.v0)
    hit_count = 0

    for hit in iter_hits(triangle, screen, config):
        hit_count += 1
        if zbuff is not None:
            zbuff.process_fragment(hit.pixel, hit.subsample, fragment)

    logger.debug(f"Rasterized {triangle}: {hit_count} hits")
    return hit_count
