"""Value types shared by the rasterizer pipeline.

All types are frozen dataclasses: triangles, screen and config are read-only for
the duration of a rasterize call, and boxes/samples/fragments are created and
discarded inside it.

Coordinates (Vertex.x/y, Sample, BoundingBox corners, Screen extents) are
fixed-point integers scaled by 2**r_shift. Pixel and subsample addresses in
Fragment writes are plain integer indices.
"""

from dataclasses import dataclass
from typing import Iterator, Tuple

from src.utils.fixed_point import check_subsample_grid, grid_spacing, subsample_grid


@dataclass(frozen=True)
class Vertex:
    """Screen-space vertex: fixed-point position, depth and RGB color."""

    x: int
    y: int
    z: int = 0
    r: int = 0
    g: int = 0
    b: int = 0


@dataclass(frozen=True)
class Triangle:
    """Three vertices; order defines the winding seen by the edge test."""

    v0: Vertex
    v1: Vertex
    v2: Vertex

    @property
    def vertices(self) -> Tuple[Vertex, Vertex, Vertex]:
        return (self.v0, self.v1, self.v2)

    def __iter__(self) -> Iterator[Vertex]:
        return iter(self.vertices)

    def __getitem__(self, i: int) -> Vertex:
        return self.vertices[i]

    def rotated(self) -> 'Triangle':
        """Relabel (v0, v1, v2) -> (v1, v2, v0); winding is preserved."""
        return Triangle(self.v1, self.v2, self.v0)

    def reversed(self) -> 'Triangle':
        """Swap v1 and v2, flipping the winding."""
        return Triangle(self.v0, self.v2, self.v1)

    @classmethod
    def from_points(
        cls,
        p0: Tuple[int, int],
        p1: Tuple[int, int],
        p2: Tuple[int, int],
        z: int = 0,
        rgb: Tuple[int, int, int] = (0, 0, 0),
    ) -> 'Triangle':
        """Build a flat-shaded triangle from three (x, y) points."""
        r, g, b = rgb
        return cls(*(Vertex(int(x), int(y), z, r, g, b) for x, y in (p0, p1, p2)))


@dataclass(frozen=True)
class Screen:
    """Screen extent in fixed-point units; the origin is (0, 0)."""

    width: int
    height: int

    def __post_init__(self):
        if self.width < 0 or self.height < 0:
            raise ValueError(
                f"Screen extent must be non-negative, got {self.width}x{self.height}"
            )

    def pixel_width(self, r_shift: int) -> int:
        return self.width >> r_shift

    def pixel_height(self, r_shift: int) -> int:
        return self.height >> r_shift


@dataclass(frozen=True)
class RasterConfig:
    """Subsampling configuration.

    Attributes
    ----------
    r_shift : int
        Fractional bits of the fixed-point coordinates
    ss_w_lg2 : int
        log2 of the subsample grid fineness (fractional bits kept on the grid)
    ss_i : int
        Step between adjacent subsample positions, in fixed-point units

    Raises
    ------
    ValueError
        If 0 <= ss_w_lg2 <= r_shift does not hold, if ss_i <= 0, or if ss_i is
        not a multiple of the grid spacing no larger than one pixel.
    """

    r_shift: int
    ss_w_lg2: int
    ss_i: int

    def __post_init__(self):
        check_subsample_grid(self.r_shift, self.ss_w_lg2, self.ss_i)

    @property
    def grid_spacing(self) -> int:
        return grid_spacing(self.r_shift, self.ss_w_lg2)

    @property
    def subsamples_per_axis(self) -> int:
        return (1 << self.r_shift) // self.ss_i

    @classmethod
    def from_subsamples(cls, r_shift: int, ss: int) -> 'RasterConfig':
        """Derive the grid from a subsamples-per-pixel count (1, 4, 16, 64, ...).

        Examples
        --------
        >>> RasterConfig.from_subsamples(10, 16)
        RasterConfig(r_shift=10, ss_w_lg2=2, ss_i=256)
        """
        ss_w_lg2, ss_i = subsample_grid(r_shift, ss)
        return cls(r_shift=r_shift, ss_w_lg2=ss_w_lg2, ss_i=ss_i)


@dataclass(frozen=True)
class Sample:
    """A fixed-point (x, y) position, or an (x, y) index pair."""

    x: int
    y: int


@dataclass(frozen=True)
class BoundingBox:
    """Grid-aligned, screen-clipped box; skip it entirely when ``valid`` is False."""

    lower_left: Sample
    upper_right: Sample
    valid: bool


@dataclass(frozen=True)
class Fragment:
    """Flat-shaded depth and color written at a hit location."""

    z: int
    r: int
    g: int
    b: int

    @classmethod
    def from_vertex(cls, v: Vertex) -> 'Fragment':
        return cls(z=v.z, r=v.r, g=v.g, b=v.b)


@dataclass(frozen=True)
class Hit:
    """One covered subsample, as reported by iter_hits()."""

    sample: Sample
    jittered: Sample
    pixel: Sample
    subsample: Sample
