"""SHA-256 hashing for golden-output provenance.

Provides:
    - sha256_file(): Hash file contents (vector files, resolved images)
    - sha256_array(): Hash numpy array values (depth/color buffers, hit masks)
    - sha256_string(), hash_dict(): Hash strings and configs

Used by the golden tooling to fingerprint rasterizer output: two runs with
identical hit decisions produce identical buffer hashes, so a hash mismatch
pinpoints a behavioural change without shipping whole buffers.

Deterministic hashing:
    - Arrays hashed as dtype + shape + C-order bytes
    - Files read in chunks (1 MB default) for memory efficiency
    - Results are hex strings (64 chars)

Usage:
    from src.utils import hashing
    depth_sha = hashing.sha256_array(zbuf.depth)

Note: Module named `hashing.py` rather than `hash.py` to avoid shadowing builtin `hash()`.
"""

import hashlib
import json
from pathlib import Path
from typing import Union

import numpy as np


def sha256_file(path: Union[str, Path], chunk_size: int = 1 << 20) -> str:
    """Compute SHA-256 hash of file contents.

    Parameters
    ----------
    path : Union[str, Path]
        File path
    chunk_size : int
        Read chunk size in bytes, default 1 MB

    Returns
    -------
    str
        SHA-256 hex digest (64 characters)

    Raises
    ------
    FileNotFoundError
        If file doesn't exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    sha256 = hashlib.sha256()
    with open(path, 'rb') as f:
        while True:
            chunk = f.read(chunk_size)
            if not chunk:
                break
            sha256.update(chunk)

    return sha256.hexdigest()


def sha256_array(a: np.ndarray) -> str:
    """Compute SHA-256 hash of array values.

    Parameters
    ----------
    a : np.ndarray
        Array to hash (any shape, dtype)

    Returns
    -------
    str
        SHA-256 hex digest (64 characters)

    Notes
    -----
    Hash covers dtype and shape as well as values, so a (2, 3) and a (3, 2)
    array with the same bytes hash differently. Memory layout does not matter.

    Examples
    --------
    >>> sha256_array(np.zeros((2, 2), dtype=np.int64)) == sha256_array(np.zeros((2, 2), dtype=np.int64))
    True
    """
    a = np.ascontiguousarray(a)
    sha256 = hashlib.sha256()
    sha256.update(str(a.dtype.str).encode('utf-8'))
    sha256.update(str(a.shape).encode('utf-8'))
    sha256.update(a.tobytes())
    return sha256.hexdigest()


def sha256_string(s: str) -> str:
    """Compute SHA-256 hash of string."""
    sha256 = hashlib.sha256()
    sha256.update(s.encode('utf-8'))
    return sha256.hexdigest()


def hash_dict(d: dict) -> str:
    """Compute SHA-256 hash of a JSON-serializable dictionary (sorted keys)."""
    return sha256_string(json.dumps(d, sort_keys=True))
