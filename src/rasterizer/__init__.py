"""Bit-accurate triangle rasterizer reference model.

Golden model for the hardware rasterizer stage: same fixed-point rounding,
same jitter hash and same per-sample hit decisions as the RTL.

Modules:
    - primitives: Vertex, Triangle, Screen, RasterConfig, BoundingBox, Sample, Fragment
    - bbox: grid-aligned, screen-clipped bounding box with off-screen reject
    - jitter: 40-bit -> 8-bit XOR-fold jitter hash
    - edge: edge-function coverage test (asymmetric tie-break)
    - core: scalar per-triangle rasterization and fragment emission
    - vectorized: numpy coverage over the whole bounding box (parity path)
    - zbuffer: reference depth/color fragment sink

Invariants:
    - All positions are fixed-point ints scaled by 2**r_shift
    - No state crosses rasterize calls; jitter and edge test are pure
    - Invalid bounding box => zero hits, zero fragment writes

Used by:
    - scripts/rasterize.py: vector file -> image + summary
    - ci/golden_tests/compare.py: hit-count regression against expected values
"""

from .bbox import get_bounding_box
from .core import (
    FragmentSink,
    decompose_sample,
    iter_hits,
    rasterize_triangle,
    recompose_sample,
)
from .edge import sample_test
from .jitter import hash_40to8, jitter_sample, scaled_jitter
from .primitives import (
    BoundingBox,
    Fragment,
    Hit,
    RasterConfig,
    Sample,
    Screen,
    Triangle,
    Vertex,
)
from .vectorized import CoverageGrid, coverage_mask
from .zbuffer import ZBuffer

__all__ = [
    'BoundingBox',
    'CoverageGrid',
    'Fragment',
    'FragmentSink',
    'Hit',
    'RasterConfig',
    'Sample',
    'Screen',
    'Triangle',
    'Vertex',
    'ZBuffer',
    'coverage_mask',
    'decompose_sample',
    'get_bounding_box',
    'hash_40to8',
    'iter_hits',
    'jitter_sample',
    'rasterize_triangle',
    'recompose_sample',
    'sample_test',
    'scaled_jitter',
]
