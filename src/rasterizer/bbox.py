"""Bounding-box setup for a single triangle.

Steps:
    1. Tight min/max of the three vertex positions
    2. Round all four coordinates down onto the subsample grid
    3. Clip lower-left to (0, 0) and upper-right to (screen.width, screen.height)
    4. Reject (valid=False) triangles that lie entirely off screen

The reject test looks at the clipped box: an upper-right corner still below
zero, or a lower-left corner still beyond the screen edge, can only come from
an unclipped box that never overlapped the screen. A box that clips down to a
single point stays valid.
"""

import logging

from src.utils.fixed_point import floor_to_grid, fp_max, fp_min

from .primitives import BoundingBox, RasterConfig, Sample, Screen, Triangle

logger = logging.getLogger(__name__)


def get_bounding_box(triangle: Triangle, screen: Screen, config: RasterConfig) -> BoundingBox:
    """Compute the grid-aligned, screen-clipped bounding box of a triangle.

    Parameters
    ----------
    triangle : Triangle
        Triangle in fixed-point screen coordinates
    screen : Screen
        Screen extent in fixed-point units
    config : RasterConfig
        Supplies r_shift and ss_w_lg2 for grid alignment

    Returns
    -------
    BoundingBox
        Always returned; ``valid`` is False when the triangle is off screen
    """
    v0 = triangle.v0
    ll_x, ll_y = v0.x, v0.y
    ur_x, ur_y = v0.x, v0.y
    for v in (triangle.v1, triangle.v2):
        ll_x = fp_min(ll_x, v.x)
        ll_y = fp_min(ll_y, v.y)
        ur_x = fp_max(ur_x, v.x)
        ur_y = fp_max(ur_y, v.y)

    r_shift, ss_w_lg2 = config.r_shift, config.ss_w_lg2
    ll_x = floor_to_grid(ll_x, r_shift, ss_w_lg2)
    ll_y = floor_to_grid(ll_y, r_shift, ss_w_lg2)
    ur_x = floor_to_grid(ur_x, r_shift, ss_w_lg2)
    ur_y = floor_to_grid(ur_y, r_shift, ss_w_lg2)

    ll_x = fp_max(ll_x, 0)
    ll_y = fp_max(ll_y, 0)
    ur_x = fp_min(ur_x, screen.width)
    ur_y = fp_min(ur_y, screen.height)

    valid = not (
        ur_x < 0 or ur_y < 0
        or ll_x > screen.width or ll_y > screen.height
    )
    if not valid:
        logger.debug(
            f"Triangle off screen: box ({ll_x}, {ll_y})-({ur_x}, {ur_y}) "
            f"vs screen {screen.width}x{screen.height}"
        )

    return BoundingBox(
        lower_left=Sample(ll_x, ll_y),
        upper_right=Sample(ur_x, ur_y),
        valid=valid,
    )
