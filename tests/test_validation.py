"""Tests for the optional tree validation pass."""

import logging

import jax.numpy as jnp
import pytest

from jax_multibody import ROOT_PARENT, Body, Joint, MalformedTreeError, MultiBody
from jax_multibody.core import find_problems
from jax_multibody.transforms import se3


def make(pred, succ, parent, body_ids=None, joint_ids=None):
    body_ids = body_ids or list(range(len(parent)))
    joint_ids = joint_ids or list(range(len(pred)))
    bodies = [Body.create(id=i) for i in body_ids]
    joints = [Joint.create("rev", id=i) for i in joint_ids]
    return MultiBody.create(bodies, joints, pred, succ, parent)


def test_world_rooted_chain_is_valid():
    multibody = make([ROOT_PARENT, 0, 1], [0, 1, 2], [ROOT_PARENT, 0, 1])
    assert find_problems(multibody) == []
    multibody.validate()


def test_placeholder_rooted_tree_is_valid():
    """Joint 0 may hang from a placeholder root body instead of the world."""
    multibody = make([0, 1, 1], [1, 2, 3], [ROOT_PARENT, 0, 1, 1])
    assert find_problems(multibody) == []


def test_create_does_not_validate_by_default():
    # dangling parent index is accepted when the caller is trusted
    multibody = make([ROOT_PARENT, 0], [0, 1], [ROOT_PARENT, 7])
    assert multibody.nr_bodies == 2

    with pytest.raises(MalformedTreeError):
        multibody.validate()


def test_create_with_validation_raises():
    bodies = [Body.create(id=i) for i in range(2)]
    joints = [Joint.create("rev", id=i) for i in range(2)]

    with pytest.raises(MalformedTreeError) as excinfo:
        MultiBody.create(bodies, joints, [ROOT_PARENT, 0], [0, 5], [ROOT_PARENT, 0], validate=True)
    assert isinstance(excinfo.value, ValueError)
    assert any("successor 5" in p for p in excinfo.value.problems)


@pytest.mark.parametrize("pred,succ,parent,fragment", [
    ([ROOT_PARENT, 3], [0, 1], [ROOT_PARENT, 0], "predecessor 3"),
    ([ROOT_PARENT, ROOT_PARENT], [0, 1], [ROOT_PARENT, 0], "predecessor -1"),
    ([ROOT_PARENT, 0], [0, 1], [ROOT_PARENT, -4], "parent -4"),
    ([ROOT_PARENT, 0], [0, 1], [ROOT_PARENT, 1], "its own parent"),
    ([ROOT_PARENT, 0], [0, 1], [ROOT_PARENT, ROOT_PARENT], "exactly one root"),
    ([ROOT_PARENT, 0], [1, 0], [ROOT_PARENT, 0], "does not attach root"),
    ([ROOT_PARENT, 0, 0], [0, 1, 1], [ROOT_PARENT, 0, 1], "successor of 2 joints"),
    ([ROOT_PARENT, 0, 0], [0, 1, 2], [ROOT_PARENT, 0, 1], "expected one joint from parent 1"),
    ([0, 1], [1, 0], [ROOT_PARENT, 0], "successor is the root body 0"),
    ([0, 1], [1, 0], [ROOT_PARENT, 0], "links body 1 to body 0 whose parent is -1"),
    ([0, 1], [1, 0], [ROOT_PARENT, 0], "expected 1 joints below a placeholder root"),
    ([0], [1], [ROOT_PARENT, 0, 1], "expected 2 joints below a placeholder root"),
    ([ROOT_PARENT, 0, 1], [0, 1, 2], [ROOT_PARENT, 0, 0], "links body 1 to body 2 whose parent is 0"),
])
def test_structural_problems(pred, succ, parent, fragment):
    multibody = make(pred, succ, parent)
    problems = find_problems(multibody)

    assert any(fragment in p for p in problems), problems


def test_parent_cycle_detected():
    # bodies 1 and 2 point at each other and never reach the root
    multibody = make([ROOT_PARENT, 2, 1], [0, 1, 2], [ROOT_PARENT, 2, 1])
    problems = find_problems(multibody)

    assert any("cycle" in p for p in problems), problems


def test_duplicate_ids_detected():
    multibody = make(
        [ROOT_PARENT, 0], [0, 1], [ROOT_PARENT, 0], body_ids=[3, 3], joint_ids=[8, 8]
    )
    problems = find_problems(multibody)

    assert "body id 3 is used more than once" in problems
    assert "joint id 8 is used more than once" in problems


def test_problems_are_logged(caplog):
    multibody = make([ROOT_PARENT, 0], [0, 1], [ROOT_PARENT, 9])

    with caplog.at_level(logging.WARNING, logger="jax_multibody.core.validation"):
        with pytest.raises(MalformedTreeError):
            multibody.validate()

    assert "parent 9" in caplog.text


def test_joint_cycle_below_placeholder_root_rejected():
    """A joint leading back into the placeholder root closes a cycle."""
    bodies = [Body.create(id=10), Body.create(id=11)]
    joints = [Joint.create("rev", id=0), Joint.create("rev", id=1)]

    with pytest.raises(MalformedTreeError):
        MultiBody.create(bodies, joints, [0, 1], [1, 0], [ROOT_PARENT, 0], validate=True)


def test_non_rigid_placements_detected():
    bodies = [Body.create(id=i) for i in range(2)]
    joints = [Joint.create("rev", id=i) for i in range(2)]
    scaled = se3.from_translation(jnp.array([1.0, 0.0, 0.0])).at[:3, :3].multiply(2.0)

    multibody = MultiBody.create(
        bodies, joints, [ROOT_PARENT, 0], [0, 1], [ROOT_PARENT, 0],
        transforms_from=[jnp.eye(4), scaled],
        transforms_to=[jnp.eye(4), jnp.eye(4)],
    )
    problems = find_problems(multibody)

    assert "joint 1: transform_from is not a rigid transform" in problems
    assert not any("transform_to" in p for p in problems)
    with pytest.raises(MalformedTreeError):
        multibody.validate()
