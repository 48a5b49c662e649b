"""SE(3) rigid transforms as homogeneous matrices.

A rigid transform is a (..., 4, 4) array [[R, p], [0, 1]]. The multibody
stores its joint placements (``transforms_from`` / ``transforms_to``) in this
form, and joint poses are returned in it as well.
"""

from typing import Tuple

import jax
import jax.numpy as jnp

from . import so3

Array = jax.Array


def identity(batch_shape: Tuple[int, ...] = ()) -> Array:
    """Identity transform(s) of the given batch shape."""
    return jnp.broadcast_to(jnp.eye(4), batch_shape + (4, 4))


def from_position_and_rotation(p: Array, R: Array) -> Array:
    """
    Construct SE(3) transform from position and rotation.

    Args:
        p: (..., 3) position vector
        R: (..., 3, 3) rotation matrix

    Returns:
        (..., 4, 4) homogeneous transformation matrix
    """
    p = jnp.asarray(p, dtype=float)
    R = jnp.asarray(R, dtype=float)

    batch_shape = jnp.broadcast_shapes(p.shape[:-1], R.shape[:-2])
    p = jnp.broadcast_to(p, batch_shape + (3,))
    R = jnp.broadcast_to(R, batch_shape + (3, 3))

    T = jnp.zeros(batch_shape + (4, 4), dtype=p.dtype)
    T = T.at[..., :3, :3].set(R)
    T = T.at[..., :3, 3].set(p)
    T = T.at[..., 3, 3].set(1.0)

    return T


def from_translation(p: Array) -> Array:
    """Pure translation transform."""
    return from_position_and_rotation(p, jnp.eye(3))


def from_rotation(R: Array) -> Array:
    """Pure rotation transform."""
    return from_position_and_rotation(jnp.zeros(3), R)


def from_xyz_rpy(xyz: Array, rpy: Array) -> Array:
    """Transform from a translation and roll-pitch-yaw angles."""
    return from_position_and_rotation(jnp.asarray(xyz, dtype=float), so3.from_rpy(rpy))


def multiply(T1: Array, T2: Array) -> Array:
    """Composition T1 @ T2 (apply T2 first, then T1)."""
    return jnp.matmul(T1, T2)


def inverse(T: Array) -> Array:
    """
    Inverse of a rigid transform using its block structure:
    T^-1 = [[R^T, -R^T @ t], [0, 1]]
    """
    R_inv = so3.inverse(get_rotation(T))
    t_inv = -jnp.einsum("...ij,...j->...i", R_inv, get_position(T))

    return from_position_and_rotation(t_inv, R_inv)


def apply(T: Array, points: Array) -> Array:
    """
    Apply a transform to (..., 3) points.

    Args:
        T: (..., 4, 4) transformation matrix
        points: (..., 3) points

    Returns:
        (..., 3) transformed points
    """
    return jnp.einsum("...ij,...j->...i", get_rotation(T), points) + get_position(T)


def get_position(T: Array) -> Array:
    """Translation part (..., 3)."""
    return T[..., :3, 3]


def get_rotation(T: Array) -> Array:
    """Rotation part (..., 3, 3)."""
    return T[..., :3, :3]


def is_rigid(T: Array, atol: float = 1e-6) -> bool:
    """True when every matrix in T is a proper rigid transform."""
    T = jnp.asarray(T)
    if T.shape[-2:] != (4, 4):
        return False

    R = get_rotation(T)
    eye = jnp.broadcast_to(jnp.eye(3), R.shape)
    orthonormal = jnp.allclose(jnp.matmul(R, so3.inverse(R)), eye, atol=atol)
    proper = jnp.allclose(jnp.linalg.det(R), 1.0, atol=atol)
    bottom = jnp.allclose(T[..., 3, :], jnp.array([0.0, 0.0, 0.0, 1.0]), atol=atol)

    return bool(orthonormal and proper and bottom)
