"""
Client-side codec and math for the Percolator perpetuals slab
"""

import logging

from .errors import (
    DecodeError,
    DegenerateInputError,
    EncodeError,
    PercolatorError,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "PercolatorError",
    "DecodeError",
    "EncodeError",
    "DegenerateInputError",
]
