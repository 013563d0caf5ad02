"""Fixed-point integer helpers for the rasterizer datapath.

Coordinates are signed integers scaled by 2**r_shift. The subsample grid keeps
only the top ``ss_w_lg2`` fractional bits, so aligning a coordinate to the grid
means clearing the low ``r_shift - ss_w_lg2`` bits.

Provides:
    - fp_min(), fp_max(): integer min/max (no saturation)
    - floor_to_grid(): round toward -inf onto the subsample grid
    - grid_spacing(): distance between adjacent grid lines
    - check_subsample_grid(), subsample_grid(): subsampling config rules

Invariants:
    - 0 <= kept_frac_bits <= total_frac_bits
    - floor_to_grid() is idempotent and never increases its input

Usage:
    from src.utils import fixed_point
    x_grid = fixed_point.floor_to_grid(x, cfg.r_shift, cfg.ss_w_lg2)
"""

from typing import Tuple


def fp_min(a: int, b: int) -> int:
    """Return the smaller of two fixed-point values."""
    return b if a >= b else a


def fp_max(a: int, b: int) -> int:
    """Return the larger of two fixed-point values."""
    return a if a >= b else b


def _check_frac_bits(total_frac_bits: int, kept_frac_bits: int) -> None:
    if total_frac_bits < 0 or kept_frac_bits < 0:
        raise ValueError(
            f"Fractional bit counts must be non-negative, got "
            f"total={total_frac_bits}, kept={kept_frac_bits}"
        )
    if kept_frac_bits > total_frac_bits:
        raise ValueError(
            f"Cannot keep {kept_frac_bits} fractional bits out of {total_frac_bits}"
        )


def grid_spacing(total_frac_bits: int, kept_frac_bits: int) -> int:
    """Distance between adjacent subsample grid lines in fixed-point units.

    Parameters
    ----------
    total_frac_bits : int
        Fractional bits of the coordinate format (r_shift)
    kept_frac_bits : int
        Fractional bits kept by the grid (ss_w_lg2)

    Returns
    -------
    int
        2 ** (total_frac_bits - kept_frac_bits)
    """
    _check_frac_bits(total_frac_bits, kept_frac_bits)
    return 1 << (total_frac_bits - kept_frac_bits)


def floor_to_grid(value: int, total_frac_bits: int, kept_frac_bits: int) -> int:
    """Round a fixed-point value down onto the subsample grid.

    Parameters
    ----------
    value : int
        Signed fixed-point coordinate
    total_frac_bits : int
        Fractional bits of the coordinate format (r_shift)
    kept_frac_bits : int
        Fractional bits kept by the grid (ss_w_lg2)

    Returns
    -------
    int
        ``value`` with its low ``total_frac_bits - kept_frac_bits`` bits cleared

    Raises
    ------
    ValueError
        If kept_frac_bits > total_frac_bits or either is negative

    Notes
    -----
    Python integers use two's-complement semantics for ``&`` with a negative
    mask, so negative inputs round toward -inf exactly like the hardware.

    Examples
    --------
    >>> floor_to_grid(0b10111, 4, 2)
    20
    >>> floor_to_grid(-1, 4, 2)
    -4
    """
    _check_frac_bits(total_frac_bits, kept_frac_bits)
    mask = -1 << (total_frac_bits - kept_frac_bits)
    return value & mask


def check_subsample_grid(r_shift: int, ss_w_lg2: int, ss_i: int) -> None:
    """Validate a (r_shift, ss_w_lg2, ss_i) subsampling configuration.

    Raises
    ------
    ValueError
        If 0 <= ss_w_lg2 <= r_shift does not hold, if ss_i <= 0, or if ss_i is
        not a multiple of the grid spacing no larger than one pixel
    """
    if r_shift < 0:
        raise ValueError(f"r_shift must be >= 0, got {r_shift}")
    if not (0 <= ss_w_lg2 <= r_shift):
        raise ValueError(f"ss_w_lg2 must be in [0, r_shift={r_shift}], got {ss_w_lg2}")
    if ss_i <= 0:
        raise ValueError(f"ss_i must be positive, got {ss_i}")
    spacing = grid_spacing(r_shift, ss_w_lg2)
    if ss_i % spacing != 0:
        raise ValueError(
            f"ss_i={ss_i} is not a multiple of the grid spacing {spacing} "
            f"(r_shift={r_shift}, ss_w_lg2={ss_w_lg2})"
        )
    if ss_i > (1 << r_shift):
        raise ValueError(f"ss_i={ss_i} exceeds one pixel ({1 << r_shift} units)")


def subsample_grid(r_shift: int, ss: int) -> Tuple[int, int]:
    """Derive (ss_w_lg2, ss_i) from a subsamples-per-pixel count.

    ``ss`` must be a power of four (1, 4, 16, 64, ...): sqrt(ss) subsamples
    per axis, each ss_i = 2**(r_shift - ss_w_lg2) units apart.

    Examples
    --------
    >>> subsample_grid(10, 16)
    (2, 256)
    """
    if ss < 1 or ss & (ss - 1) or (ss.bit_length() - 1) % 2:
        raise ValueError(f"Subsample count must be a power of four, got {ss}")
    ss_w_lg2 = (ss.bit_length() - 1) // 2
    if ss_w_lg2 > r_shift:
        raise ValueError(
            f"{ss} subsamples need {ss_w_lg2} fractional bits, r_shift is {r_shift}"
        )
    return ss_w_lg2, 1 << (r_shift - ss_w_lg2)
