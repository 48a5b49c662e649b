"""Body record of a multibody system."""

from typing import Optional

import jax
import jax.numpy as jnp
from flax import struct

Array = jax.Array


@struct.dataclass
class Body:
    """A rigid link of the kinematic tree.

    The tree only cares about the body's identity; the mass payload is carried
    for the dynamics algorithms that consume the structure.

    Attributes:
        mass: Scalar mass.
        com: Array of shape (3,), centre of mass in the body frame.
        inertia: Array of shape (3, 3), rotational inertia about the centre
                 of mass, expressed in the body frame.
        id: Caller-assigned stable id. Static field for JIT compilation.
        name: Human readable name. Static field for JIT compilation.
    """
    mass: Array
    com: Array
    inertia: Array
    id: int = struct.field(pytree_node=False, default=-1)
    name: str = struct.field(pytree_node=False, default="")

    @classmethod
    def create(
        cls,
        id: int,
        name: str = "",
        mass: float = 0.0,
        com: Optional[Array] = None,
        inertia: Optional[Array] = None,
    ) -> "Body":
        com = jnp.zeros(3) if com is None else jnp.asarray(com, dtype=float)
        inertia = jnp.zeros((3, 3)) if inertia is None else jnp.asarray(inertia, dtype=float)

        if com.shape != (3,):
            raise ValueError(f"com must have shape (3,), got {com.shape}")
        if inertia.shape != (3, 3):
            raise ValueError(f"inertia must have shape (3, 3), got {inertia.shape}")

        return cls(
            mass=jnp.asarray(mass, dtype=float),
            com=com,
            inertia=inertia,
            id=int(id),
            name=name,
        )
