"""Core multibody data structures for JAX Multibody.

This module provides the immutable kinematic tree and the body and joint
records it is built from.
"""

from .body import Body
from .id_index import IdIndex
from .joint import Joint, JointType
from .multibody import ROOT_PARENT, MultiBody
from .validation import find_problems, validate_multibody

__all__ = [
    "Body",
    "IdIndex",
    "Joint",
    "JointType",
    "MultiBody",
    "ROOT_PARENT",
    "find_problems",
    "validate_multibody",
]
