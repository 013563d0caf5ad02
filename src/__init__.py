"""Raster Gold: bit-accurate software reference model of a triangle rasterizer.

Used as an oracle when verifying the hardware rasterizer: given one triangle in
fixed-point screen coordinates and a subsampling configuration, it enumerates
every covered subsample (with the hardware's jitter hash) and forwards
flat-shaded fragments to a depth/color buffer.

Architecture layers (strict one-way dependency):
    scripts/, ci/ → src/rasterizer/ → src/utils/

Key invariants:
    - Coordinates are fixed-point integers scaled by 2**r_shift
    - One triangle per rasterize call; no state crosses calls
    - YAML-only configs and vector files
"""

__version__ = "1.0.0"
