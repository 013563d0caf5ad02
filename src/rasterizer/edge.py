"""Edge-function coverage test.

The triangle is translated so the sample sits at the origin; each directed edge
i -> (i + 1) % 3 then reduces to the 2D cross product of its two endpoints.
A sample is covered when the origin is on the accepting side of all three
edges, which for this convention means clockwise triangles in a y-up frame.

Tie-break (top-left style fill rule): edges 0->1 and 2->0 accept a zero cross
product, edge 1->2 does not. Ownership of on-edge samples follows the vertex
labels: a shared edge is claimed by exactly one triangle when it is the 1->2
edge of one and an inclusive edge of the other. Do not change the table below
without re-validating against the hardware.
"""

import operator

from .primitives import Sample, Triangle

# (start vertex, end vertex, comparison against 0 that accepts the sample)
EDGE_TABLE = (
    (0, 1, operator.le),  # 0->1: cross <= 0
    (1, 2, operator.lt),  # 1->2: cross < 0
    (2, 0, operator.le),  # 2->0: cross <= 0
)


def edge_cross(ax, ay, bx, by):
    """2D cross product a x b (ints or numpy arrays)."""
    return ax * by - bx * ay


def sample_test(triangle: Triangle, sample: Sample) -> bool:
    """Return True if ``sample`` is covered by ``triangle``.

    Parameters
    ----------
    triangle : Triangle
        Triangle in fixed-point screen coordinates
    sample : Sample
        Jittered sample position

    Returns
    -------
    bool
        True when all three edge tests accept the sample
    """
    shifted = [(v.x - sample.x, v.y - sample.y) for v in triangle.vertices]

    for start, end, accepts in EDGE_TABLE:
        ax, ay = shifted[start]
        bx, by = shifted[end]
        if not accepts(edge_cross(ax, ay, bx, by), 0):
            return False
    return True
