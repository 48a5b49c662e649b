"""Joint record of a multibody system.

A joint connects a predecessor body to a successor body and contributes
``params`` entries to the configuration vector and ``dof`` entries to the
velocity vector. Twists and motion subspaces use the ``[vx, vy, vz, wx, wy, wz]``
ordering of the transforms package.
"""

import enum
from typing import Dict, Optional, Tuple

import jax
import jax.numpy as jnp
from flax import struct

from ..transforms import se3, so3

Array = jax.Array


class JointType(str, enum.Enum):
    REV = "rev"
    PRISM = "prism"
    SPHERICAL = "spherical"
    PLANAR = "planar"
    CYLINDRICAL = "cylindrical"
    FREE = "free"
    FIXED = "fixed"


# (params, dof) per joint type
_JOINT_SIZES: Dict[JointType, Tuple[int, int]] = {
    JointType.REV: (1, 1),
    JointType.PRISM: (1, 1),
    JointType.SPHERICAL: (4, 3),
    JointType.PLANAR: (3, 3),
    JointType.CYLINDRICAL: (2, 2),
    JointType.FREE: (7, 6),
    JointType.FIXED: (0, 0),
}

_AXIS_JOINTS = (JointType.REV, JointType.PRISM, JointType.CYLINDRICAL)


@struct.dataclass
class Joint:
    """A joint of the kinematic tree.

    Attributes:
        type: JointType of the joint. Static field for JIT compilation.
        axis: Unit axis of shape (3,) used by revolute, prismatic and
              cylindrical joints.
        forward: False when the joint is traversed against its natural
                 direction; its motion is then reversed.
        id: Caller-assigned stable id. Static field for JIT compilation.
        name: Human readable name. Static field for JIT compilation.
    """
    type: JointType = struct.field(pytree_node=False)
    axis: Array
    forward: bool = struct.field(pytree_node=False, default=True)
    id: int = struct.field(pytree_node=False, default=-1)
    name: str = struct.field(pytree_node=False, default="")

    @classmethod
    def create(
        cls,
        type,
        axis: Optional[Array] = None,
        forward: bool = True,
        id: int = -1,
        name: str = "",
    ) -> "Joint":
        joint_type = JointType(type)
        axis = jnp.array([0.0, 0.0, 1.0]) if axis is None else jnp.asarray(axis, dtype=float)

        if axis.shape != (3,):
            raise ValueError(f"axis must have shape (3,), got {axis.shape}")

        norm = float(jnp.linalg.norm(axis))
        if norm < 1e-12:
            if joint_type in _AXIS_JOINTS:
                raise ValueError(f"{joint_type.value} joint needs a non-zero axis")
        else:
            axis = axis / norm

        return cls(type=joint_type, axis=axis, forward=bool(forward), id=int(id), name=name)

    @property
    def params(self) -> int:
        """Number of configuration parameters."""
        return _JOINT_SIZES[self.type][0]

    @property
    def dof(self) -> int:
        """Number of degrees of freedom."""
        return _JOINT_SIZES[self.type][1]

    @property
    def direction(self) -> float:
        return 1.0 if self.forward else -1.0

    def zero_param(self) -> Array:
        """Neutral configuration of the joint."""
        if self.type is JointType.SPHERICAL:
            return jnp.array([1.0, 0.0, 0.0, 0.0])
        if self.type is JointType.FREE:
            return jnp.array([1.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0])
        return jnp.zeros(self.params)

    def zero_dof(self) -> Array:
        return jnp.zeros(self.dof)

    def motion_subspace(self) -> Array:
        """
        Motion subspace S of the joint, such that twist = S @ alpha.

        FREE joints order their velocity as angular then linear, matching the
        quaternion-then-translation layout of their parameters.

        Returns:
            (6, dof) matrix
        """
        zeros = jnp.zeros(3)
        eye = jnp.eye(6)

        if self.type is JointType.REV:
            S = jnp.concatenate([zeros, self.axis])[:, None]
        elif self.type is JointType.PRISM:
            S = jnp.concatenate([self.axis, zeros])[:, None]
        elif self.type is JointType.CYLINDRICAL:
            S = jnp.stack([
                jnp.concatenate([zeros, self.axis]),
                jnp.concatenate([self.axis, zeros]),
            ], axis=1)
        elif self.type is JointType.PLANAR:
            # rotation about z, then translation along x and y
            S = eye[:, jnp.array([5, 0, 1])]
        elif self.type is JointType.SPHERICAL:
            S = eye[:, 3:]
        elif self.type is JointType.FREE:
            S = eye[:, jnp.array([3, 4, 5, 0, 1, 2])]
        else:
            S = jnp.zeros((6, 0))

        return self.direction * S

    def pose(self, q: Array) -> Array:
        """
        Transform produced by the joint at configuration q.

        Args:
            q: Array of shape (params,). Layout per type: REV/PRISM [q],
               CYLINDRICAL [angle, displacement], PLANAR [angle_z, x, y],
               SPHERICAL [w, x, y, z], FREE [w, x, y, z, tx, ty, tz].

        Returns:
            (4, 4) transformation matrix
        """
        q = jnp.asarray(q, dtype=float).reshape(-1)
        if q.shape[0] != self.params:
            raise ValueError(
                f"{self.type.value} joint expects {self.params} parameters, got {q.shape[0]}"
            )

        s = self.direction

        if self.type is JointType.REV:
            return se3.from_rotation(so3.exp(self.axis * (s * q[0])))
        if self.type is JointType.PRISM:
            return se3.from_translation(self.axis * (s * q[0]))
        if self.type is JointType.CYLINDRICAL:
            return se3.from_position_and_rotation(
                self.axis * (s * q[1]), so3.exp(self.axis * (s * q[0]))
            )
        if self.type is JointType.PLANAR:
            R = so3.exp(jnp.array([0.0, 0.0, 1.0]) * (s * q[0]))
            p = s * jnp.stack([q[1], q[2], jnp.zeros_like(q[0])])
            return se3.from_position_and_rotation(p, R)
        if self.type is JointType.FIXED:
            return se3.identity()

        # quaternion parameterized joints
        if self.type is JointType.SPHERICAL:
            T = se3.from_rotation(so3.from_quaternion(q))
        else:
            T = se3.from_position_and_rotation(q[4:], so3.from_quaternion(q[:4]))
        return T if self.forward else se3.inverse(T)
