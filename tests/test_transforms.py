"""Tests for the transforms module."""

import jax
import jax.numpy as jnp
import numpy as np
from hypothesis import given, settings
from hypothesis import strategies as st

from jax_multibody.transforms import se3, so3


def test_quaternion_identity():
    matrix = so3.from_quaternion(jnp.array([1.0, 0.0, 0.0, 0.0]))
    np.testing.assert_allclose(matrix, jnp.eye(3), rtol=1e-6, atol=1e-6)


def test_so3_exp_identity():
    np.testing.assert_allclose(so3.exp(jnp.zeros(3)), jnp.eye(3), atol=1e-12)


def test_so3_exp_matches_quaternion():
    """90 degrees about y, both ways."""
    from_axis_angle = so3.exp(jnp.array([0.0, jnp.pi / 2, 0.0]))
    from_quat = so3.from_quaternion(jnp.array([0.7071068, 0.0, 0.7071068, 0.0]))
    np.testing.assert_allclose(from_axis_angle, from_quat, atol=1e-6)


def test_so3_skew_symmetric():
    v = jnp.array([1.0, 2.0, 3.0])
    u = jnp.array([-0.5, 0.25, 2.0])
    np.testing.assert_allclose(so3.skew_symmetric(v) @ u, jnp.cross(v, u), atol=1e-12)


def test_so3_batch_operations():
    log_r = jnp.array([[0.1, 0.0, 0.0], [0.0, 0.2, 0.0], [0.0, 0.0, 0.3]])
    R = so3.exp(log_r)

    assert R.shape == (3, 3, 3)
    for i in range(3):
        np.testing.assert_allclose(R[i] @ so3.inverse(R[i]), jnp.eye(3), atol=1e-12)


def test_from_rpy_single_axes():
    np.testing.assert_allclose(
        so3.from_rpy([0.0, 0.0, jnp.pi / 2]),
        so3.exp(jnp.array([0.0, 0.0, jnp.pi / 2])),
        atol=1e-12,
    )
    np.testing.assert_allclose(
        so3.from_rpy([0.3, 0.0, 0.0]),
        so3.exp(jnp.array([0.3, 0.0, 0.0])),
        atol=1e-12,
    )


def test_se3_from_position_and_rotation():
    p = jnp.array([1.0, 2.0, 3.0])
    T = se3.from_position_and_rotation(p, jnp.eye(3))

    np.testing.assert_allclose(se3.get_position(T), p)
    np.testing.assert_allclose(se3.get_rotation(T), jnp.eye(3))
    np.testing.assert_allclose(T[3], [0.0, 0.0, 0.0, 1.0])


def test_se3_compose_and_apply():
    t1 = se3.from_translation(jnp.array([1.0, 0.0, 0.0]))
    t2 = se3.from_position_and_rotation(
        jnp.array([0.0, 1.0, 0.0]), so3.exp(jnp.array([0.0, 0.0, jnp.pi / 2]))
    )

    transformed = se3.apply(se3.multiply(t1, t2), jnp.array([1.0, 0.0, 0.0]))
    np.testing.assert_allclose(transformed, [1.0, 2.0, 0.0], atol=1e-12)


def test_se3_identity_batch():
    T = se3.identity((5,))
    assert T.shape == (5, 4, 4)
    assert se3.is_rigid(T)


def test_se3_from_xyz_rpy():
    T = se3.from_xyz_rpy([0.1, 0.2, 0.3], [0.0, 0.0, jnp.pi])
    np.testing.assert_allclose(se3.apply(T, jnp.array([1.0, 0.0, 0.0])), [-0.9, 0.2, 0.3], atol=1e-12)
    assert se3.is_rigid(T)


def test_se3_is_rigid_rejects_scaling():
    assert not se3.is_rigid(2.0 * jnp.eye(4))
    assert not se3.is_rigid(jnp.eye(3))


def test_se3_jit_compatibility():
    jitted_inverse = jax.jit(se3.inverse)
    T = se3.from_xyz_rpy([1.0, -2.0, 0.5], [0.1, 0.2, 0.3])
    np.testing.assert_allclose(jitted_inverse(T), se3.inverse(T), atol=1e-12)


@given(
    st.lists(st.floats(-3.0, 3.0), min_size=3, max_size=3),
    st.lists(st.floats(-10.0, 10.0), min_size=3, max_size=3),
)
@settings(max_examples=25, deadline=None)
def test_se3_inverse_property(rpy, xyz):
    T = se3.from_xyz_rpy(xyz, rpy)
    T_inv = se3.inverse(T)

    np.testing.assert_allclose(se3.multiply(T, T_inv), jnp.eye(4), atol=1e-9)
    np.testing.assert_allclose(se3.multiply(T_inv, T), jnp.eye(4), atol=1e-9)
