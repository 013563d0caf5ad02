"""Test hashing functions for provenance.

Tests for src.utils.hashing:
    - sha256_file() matches a known digest
    - sha256_array() covers dtype, shape and values, not memory layout
    - hash_dict() is key-order independent

Run:
    pytest tests/test_hash.py -v
"""

import numpy as np
import pytest

from src.utils import hashing

EMPTY_SHA256 = 'e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855'
ABC_SHA256 = 'ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad'


def test_sha256_file_known(tmp_path):
    p = tmp_path / 'abc.txt'
    p.write_bytes(b'abc')
    assert hashing.sha256_file(p) == ABC_SHA256
    assert hashing.sha256_file(p, chunk_size=1) == ABC_SHA256


def test_sha256_file_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        hashing.sha256_file(tmp_path / 'missing')


def test_sha256_string():
    assert hashing.sha256_string('') == EMPTY_SHA256
    assert hashing.sha256_string('abc') == ABC_SHA256


def test_sha256_array_consistent():
    a = np.arange(24, dtype=np.int64).reshape(4, 6)
    assert hashing.sha256_array(a) == hashing.sha256_array(a.copy())
    # Non-contiguous view with the same values
    assert hashing.sha256_array(np.asfortranarray(a)) == hashing.sha256_array(a)
    assert len(hashing.sha256_array(a)) == 64


def test_sha256_array_distinguishes():
    a = np.arange(24, dtype=np.int64).reshape(4, 6)
    b = a.copy()
    b[3, 5] += 1
    assert hashing.sha256_array(a) != hashing.sha256_array(b)
    assert hashing.sha256_array(a) != hashing.sha256_array(a.reshape(6, 4))
    assert hashing.sha256_array(a) != hashing.sha256_array(a.astype(np.int32))


def test_hash_dict_order_independent():
    assert hashing.hash_dict({'a': 1, 'b': [1, 2]}) == hashing.hash_dict({'b': [1, 2], 'a': 1})
    assert hashing.hash_dict({'a': 1}) != hashing.hash_dict({'a': 2})
