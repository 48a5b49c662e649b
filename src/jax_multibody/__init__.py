"""
JAX Multibody: kinematic tree representation of articulated rigid-body systems.

The MultiBody structure stores bodies, joints, their connectivity and joint
placements as immutable JAX pytrees, ready to be consumed by jit-compiled
kinematics and dynamics algorithms.
"""

import jax
jax.config.update("jax_enable_x64", True)

from . import transforms
from . import core
from .core import Body, Joint, JointType, MultiBody, ROOT_PARENT
from .errors import MalformedTreeError, MultiBodyError, OutOfRangeError, UnknownIdError

__version__ = "0.1.0"
__all__ = [
    "transforms",
    "core",
    "Body",
    "Joint",
    "JointType",
    "MultiBody",
    "ROOT_PARENT",
    "MultiBodyError",
    "OutOfRangeError",
    "UnknownIdError",
    "MalformedTreeError",
]
