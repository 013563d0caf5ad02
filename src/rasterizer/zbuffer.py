"""Reference depth/color buffer (fragment sink) backed by numpy.

Storage is per subsample: depth (H, W, S, S) int64 and color (H, W, S, S, 3)
int64, where S = RasterConfig.subsamples_per_axis and H/W are the screen extent
in whole pixels. Indexing is [pixel_y, pixel_x, sub_y, sub_x].

process_fragment() runs the depth comparison and conditional write. Fragments
addressed outside the pixel grid are dropped and counted: the bounding box is
inclusive of screen.width/height, so lattice points on the far screen edge map
to one pixel past the last column/row.

resolve() box-filters the subsamples of each pixel into an 8-bit RGB image.
Unwritten subsamples contribute the clear color.
"""

import logging
from typing import Callable, Dict, Tuple

import numpy as np

from .primitives import Fragment, RasterConfig, Sample, Screen

logger = logging.getLogger(__name__)

DEPTH_TESTS: Dict[str, Callable] = {
    'less': np.less,
    'less_equal': np.less_equal,
    'greater': np.greater,
    'always': lambda new, old: True,
}

CLEAR_DEPTH_MAX = np.iinfo(np.int64).max


class ZBuffer:
    """Subsampled depth/color buffer.

    Attributes
    ----------
    depth : np.ndarray
        (H, W, S, S) int64
    color : np.ndarray
        (H, W, S, S, 3) int64
    written : np.ndarray
        (H, W, S, S) bool, True where at least one fragment passed
    writes : int
        Fragments that passed the depth test
    rejected : int
        Fragments that failed the depth test
    dropped : int
        Fragments addressed outside the pixel grid
    """

    def __init__(
        self,
        screen: Screen,
        config: RasterConfig,
        clear_depth: int = CLEAR_DEPTH_MAX,
        clear_color: Tuple[int, int, int] = (0, 0, 0),
        depth_test: str = 'less',
    ):
        if depth_test not in DEPTH_TESTS:
            raise ValueError(
                f"Unknown depth test '{depth_test}'. Use one of {sorted(DEPTH_TESTS)}."
            )
        self.screen = screen
        self.config = config
        self.depth_test = depth_test
        self._compare = DEPTH_TESTS[depth_test]
        self.clear_depth = int(clear_depth)
        self.clear_color = tuple(int(c) for c in clear_color)

        self.height = screen.pixel_height(config.r_shift)
        self.width = screen.pixel_width(config.r_shift)
        self.ss = config.subsamples_per_axis

        shape = (self.height, self.width, self.ss, self.ss)
        self.depth = np.empty(shape, dtype=np.int64)
        self.color = np.empty(shape + (3,), dtype=np.int64)
        self.written = np.empty(shape, dtype=bool)
        self.clear()

    def clear(self) -> None:
        """Reset depth, color and counters."""
        self.depth.fill(self.clear_depth)
        self.color[...] = self.clear_color
        self.written.fill(False)
        self.writes = 0
        self.rejected = 0
        self.dropped = 0

    def in_bounds(self, pixel: Sample, subsample: Sample) -> bool:
        return (
            0 <= pixel.x < self.width and 0 <= pixel.y < self.height
            and 0 <= subsample.x < self.ss and 0 <= subsample.y < self.ss
        )

    def process_fragment(self, pixel: Sample, subsample: Sample, fragment: Fragment) -> None:
        """Depth-test a fragment and write it on pass."""
        if not self.in_bounds(pixel, subsample):
            self.dropped += 1
            return

        idx = (pixel.y, pixel.x, subsample.y, subsample.x)
        if not self._compare(fragment.z, self.depth[idx]):
            self.rejected += 1
            return

        self.depth[idx] = fragment.z
        self.color[idx] = (fragment.r, fragment.g, fragment.b)
        self.written[idx] = True
        self.writes += 1

    def written_mask(self) -> np.ndarray:
        """(H, W) count of written subsamples per pixel."""
        return self.written.sum(axis=(2, 3))

    def resolve(self) -> np.ndarray:
        """Average subsamples into an (H, W, 3) uint8 image (row = pixel y)."""
        if self.ss == 0 or self.height == 0 or self.width == 0:
            return np.zeros((self.height, self.width, 3), dtype=np.uint8)
        mean = self.color.mean(axis=(2, 3))
        return np.clip(np.rint(mean), 0, 255).astype(np.uint8)

    def stats(self) -> Dict[str, int]:
        return {
            'writes': self.writes,
            'rejected': self.rejected,
            'dropped': self.dropped,
            'covered_subsamples': int(np.count_nonzero(self.written)),
        }
