"""Deterministic per-sample jitter hash.

The hardware jitters every candidate sample by a small pseudo-random offset
before the coverage test. The offset is a pure function of the sample's grid
coordinates, so the reference model and the RTL make identical hit decisions.

Hash construction (per axis):
    1. Drop the finest JITTER_GRID_SHIFT bits of each coordinate
    2. Pack into a 40-bit word: (y << 20) | x for the x offset,
       (x << 20) | y for the y offset
    3. Split into five byte lanes (lane 0 = least significant byte)
    4. XOR-fold 5 -> 4 -> 2 -> 1 lanes
    5. Mask to 8 - ss_w_lg2 bits (0xFF >> ss_w_lg2)

The packing is an OR, not an add: when x needs more than 20 bits its high bits
merge into y's. Only the low 40 bits of the packed word take part in the hash.

The fold telescopes: lane4_to_8 == lane[0] ^ lane[4]. hash_40to8() keeps the
explicit tree so each stage maps onto a register in the hardware description.
"""

from typing import List

from .primitives import Sample

# Fine fractional bits discarded before hashing (fixed in hardware, not r_shift)
JITTER_GRID_SHIFT = 4

# Applied jitter = hash << JITTER_SCALE_SHIFT
JITTER_SCALE_SHIFT = 2

WORD_BITS = 40
LANE_BITS = 8
PACK_SHIFT = 20

_WORD_MASK = (1 << WORD_BITS) - 1
_LANE_MASK = (1 << LANE_BITS) - 1


def pack_word(hi: int, lo: int) -> int:
    """Pack two grid coordinates into a 40-bit hash word: (hi << 20) | lo."""
    return ((hi << PACK_SHIFT) | lo) & _WORD_MASK


def split_lanes(word: int) -> List[int]:
    """Split a 40-bit word into five 8-bit lanes, least significant first."""
    return [(word >> (LANE_BITS * i)) & _LANE_MASK for i in range(WORD_BITS // LANE_BITS)]


def hash_40to8(word: int, shift: int) -> int:
    """Reduce a 40-bit word to an 8-bit hash and mask it to 8 - shift bits.

    Parameters
    ----------
    word : int
        Packed 40-bit value (higher bits are ignored)
    shift : int
        ss_w_lg2; the result is masked with 0xFF >> shift

    Returns
    -------
    int
        Hash in [0, 0xFF >> shift]
    """
    lanes40 = split_lanes(word)

    lanes32 = [lanes40[i] ^ lanes40[i + 1] for i in range(4)]
    lanes16 = [lanes32[0] ^ lanes32[2], lanes32[1] ^ lanes32[3]]
    lane8 = lanes16[0] ^ lanes16[1]

    return lane8 & (0x00FF >> shift)


def jitter_sample(sample: Sample, ss_w_lg2: int) -> Sample:
    """Jitter offset for a grid-aligned sample, before scaling.

    Parameters
    ----------
    sample : Sample
        Unjittered candidate position (fixed point)
    ss_w_lg2 : int
        log2 of the subsample grid fineness

    Returns
    -------
    Sample
        Unsigned offsets, each in [0, 0xFF >> ss_w_lg2]

    Examples
    --------
    >>> jitter_sample(Sample(0x1230, 0x450), 0)
    Sample(x=35, y=69)
    """
    x = sample.x >> JITTER_GRID_SHIFT
    y = sample.y >> JITTER_GRID_SHIFT

    return Sample(
        hash_40to8(pack_word(y, x), ss_w_lg2),
        hash_40to8(pack_word(x, y), ss_w_lg2),
    )


def scaled_jitter(sample: Sample, ss_w_lg2: int) -> Sample:
    """Jitter offset as added to the sample position (hash << 2)."""
    j = jitter_sample(sample, ss_w_lg2)
    return Sample(j.x << JITTER_SCALE_SHIFT, j.y << JITTER_SCALE_SHIFT)
