"""SO(3) rotation helpers in JAX.

Rotations are stored as (..., 3, 3) matrices. These helpers cover what the
joint models need: axis-angle exponentials for revolute motion, unit
quaternions for spherical and free joints, and roll-pitch-yaw for building
fixed joint placements.
"""

import jax
import jax.numpy as jnp

Array = jax.Array


def skew_symmetric(v: Array) -> Array:
    """
    Cross-product matrix [v]_x such that [v]_x @ u == cross(v, u).

    Args:
        v: (..., 3) array of vectors

    Returns:
        (..., 3, 3) array of skew-symmetric matrices
    """
    x, y, z = v[..., 0], v[..., 1], v[..., 2]
    zero = jnp.zeros_like(x)

    return jnp.stack([
        jnp.stack([zero, -z, y], axis=-1),
        jnp.stack([z, zero, -x], axis=-1),
        jnp.stack([-y, x, zero], axis=-1),
    ], axis=-2)


def exp(log_r: Array) -> Array:
    """
    Axis-angle vector to rotation matrix (Rodrigues' formula).

    Args:
        log_r: (..., 3) axis scaled by the rotation angle

    Returns:
        (..., 3, 3) array of rotation matrices
    """
    angle = jnp.linalg.norm(log_r, axis=-1, keepdims=True)
    small_angle = angle < 1e-8

    # Taylor expansion near zero keeps the result finite
    cos_angle = jnp.where(small_angle, 1.0 - 0.5 * angle**2, jnp.cos(angle))
    sin_angle = jnp.where(small_angle, angle - angle**3 / 6.0, jnp.sin(angle))

    safe_angle = jnp.where(small_angle, 1.0, angle)
    axis = jnp.where(small_angle, log_r, log_r / safe_angle)

    K = skew_symmetric(axis)
    I = jnp.broadcast_to(jnp.eye(3, dtype=log_r.dtype), log_r.shape[:-1] + (3, 3))

    return I + sin_angle[..., None] * K + (1.0 - cos_angle)[..., None] * jnp.matmul(K, K)


def inverse(R: Array) -> Array:
    """Inverse of a rotation matrix, i.e. its transpose."""
    return jnp.swapaxes(R, -1, -2)


def normalize_quaternion(quaternions: Array) -> Array:
    """Normalize (..., 4) quaternions to unit length."""
    return quaternions / jnp.linalg.norm(quaternions, axis=-1, keepdims=True)


def from_quaternion(quaternions: Array) -> Array:
    """
    Convert quaternions to rotation matrices.

    Args:
        quaternions: (..., 4) array in (w, x, y, z) order, normalized here

    Returns:
        (..., 3, 3) array of rotation matrices
    """
    w, x, y, z = jnp.moveaxis(normalize_quaternion(quaternions), -1, 0)

    xx, yy, zz = x * x, y * y, z * z
    wx, wy, wz = w * x, w * y, w * z
    xy, xz, yz = x * y, x * z, y * z

    return jnp.stack([
        jnp.stack([1 - 2 * (yy + zz), 2 * (xy - wz), 2 * (xz + wy)], axis=-1),
        jnp.stack([2 * (xy + wz), 1 - 2 * (xx + zz), 2 * (yz - wx)], axis=-1),
        jnp.stack([2 * (xz - wy), 2 * (yz + wx), 1 - 2 * (xx + yy)], axis=-1),
    ], axis=-2)


def from_rpy(rpy: Array) -> Array:
    """
    Roll-pitch-yaw angles to rotation matrix, R = Rz(yaw) @ Ry(pitch) @ Rx(roll).

    Args:
        rpy: (3,) array of [roll, pitch, yaw] in radians

    Returns:
        (3, 3) rotation matrix
    """
    rpy = jnp.asarray(rpy, dtype=float)
    roll, pitch, yaw = rpy[0], rpy[1], rpy[2]

    R_x = exp(jnp.array([1.0, 0.0, 0.0]) * roll)
    R_y = exp(jnp.array([0.0, 1.0, 0.0]) * pitch)
    R_z = exp(jnp.array([0.0, 0.0, 1.0]) * yaw)

    return R_z @ R_y @ R_x
