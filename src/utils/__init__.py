"""Cross-cutting utilities (lowest dependency layer).

This package provides shared primitives for:
    - Fixed-point arithmetic and subsample-grid rules (fixed_point)
    - Config/vector schema validation (validators)
    - Atomic I/O (fs)
    - Hashing for golden-output provenance (hashing)
    - Unified logging (logging_config)

No module in utils/ may import from upper layers (rasterizer, scripts, ci).

Convenience imports:
    from src.utils import fixed_point, fs, validators
    from src.utils.logging_config import setup_logging, get_logger
"""

# Re-export commonly used modules for convenience
from . import fixed_point
from . import fs
from . import hashing
from . import logging_config
from . import validators

# Common functions for direct import
from .logging_config import get_logger, push_context, setup_logging

__all__ = [
    # Modules
    'fixed_point',
    'fs',
    'hashing',
    'logging_config',
    'validators',
    # Direct exports
    'setup_logging',
    'get_logger',
    'push_context',
]
