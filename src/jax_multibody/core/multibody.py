"""MultiBody: kinematic tree of an articulated rigid-body system.

The tree is stored as parallel indexed collections rather than linked nodes:

* ``bodies[b]`` and ``parents[b]`` for every body ``b``;
* ``joints[j]``, ``predecessors[j]``, ``successors[j]``, ``transforms_from[j]``
  and ``transforms_to[j]`` for every joint ``j``.

Same representation as Featherstone's, except joint 0 is a real joint: the
root joint attaching the tree to its base. The parent of the root body, and
the predecessor of a root joint attached to the world, is ``ROOT_PARENT``.

Every indexed accessor comes in two flavours. The plain one (``body``,
``parent``, ...) is the fast path for algorithms that already guarantee the
index is valid; its precondition is only asserted, so it disappears under
``python -O``. Traced indices (``vmap``, ``fori_loop``) skip the
assertion. The ``s_`` prefixed one (``s_body``, ``s_parent``, ...) always
checks and raises ``OutOfRangeError`` or ``UnknownIdError``. Code taking
indices or ids from users should call the checked surface.
"""

import logging
import operator
from typing import Optional, Sequence, Tuple

import jax
import jax.numpy as jnp
from flax import struct

from ..errors import OutOfRangeError, UnknownIdError
from ..transforms import se3
from .body import Body
from .id_index import IdIndex
from .joint import Joint

Array = jax.Array

logger = logging.getLogger(__name__)

ROOT_PARENT = -1


def _checked_index(what: str, num: int, size: int) -> int:
    num = operator.index(num)
    if not 0 <= num < size:
        raise OutOfRangeError(what, num, size)
    return num


def _assert_index(what: str, num, size: int) -> None:
    # traced indices (vmap, fori_loop, scan) have no concrete value to compare
    if isinstance(num, jax.core.Tracer):
        return
    assert 0 <= num < size, f"{what} index {num} out of range"


def _stack_transforms(transforms, nr_joints: int, label: str) -> Array:
    if transforms is None:
        # five-collection form: joints sit at the body centres
        return jnp.array(se3.identity((nr_joints,)))

    if isinstance(transforms, (list, tuple)):
        if len(transforms) == 0:
            stacked = jnp.zeros((0, 4, 4))
        else:
            stacked = jnp.stack([jnp.asarray(T, dtype=float) for T in transforms])
    else:
        stacked = jnp.asarray(transforms, dtype=float)

    if stacked.shape != (nr_joints, 4, 4):
        raise ValueError(f"{label} must have shape ({nr_joints}, 4, 4), got {stacked.shape}")
    return stacked


@struct.dataclass
class MultiBody:
    """Immutable PyTree representation of a kinematic tree.

    Bodies, joints and transforms are pytree leaves; the topology, the id maps
    and the cached totals are static so they can drive Python-level tree
    traversals inside ``jax.jit``.

    Attributes:
        bodies: Bodies of the system, addressed by dense index.
        joints: Joints of the system, addressed by dense index.
        transforms_from: Array of shape (nr_joints, 4, 4), transformation
                         from the centre of the predecessor body to each joint.
        transforms_to: Array of shape (nr_joints, 4, 4), transformation from
                       each joint to the centre of the successor body.
        predecessors: Predecessor body index of each joint.
        successors: Successor body index of each joint.
        parents: Parent body index of each body, ROOT_PARENT for the root.
        body_id_to_index: Body id -> body index.
        joint_id_to_index: Joint id -> joint index.
        nr_params: Total number of configuration parameters.
        nr_dof: Total number of degrees of freedom.
    """
    bodies: Tuple[Body, ...]
    joints: Tuple[Joint, ...]
    transforms_from: Array
    transforms_to: Array
    predecessors: Tuple[int, ...] = struct.field(pytree_node=False)
    successors: Tuple[int, ...] = struct.field(pytree_node=False)
    parents: Tuple[int, ...] = struct.field(pytree_node=False)
    body_id_to_index: IdIndex = struct.field(pytree_node=False)
    joint_id_to_index: IdIndex = struct.field(pytree_node=False)
    nr_params: int = struct.field(pytree_node=False)
    nr_dof: int = struct.field(pytree_node=False)

    @classmethod
    def create(
        cls,
        bodies: Sequence[Body] = (),
        joints: Sequence[Joint] = (),
        pred: Sequence[int] = (),
        succ: Sequence[int] = (),
        parent: Sequence[int] = (),
        transforms_from: Optional[Sequence[Array]] = None,
        transforms_to: Optional[Sequence[Array]] = None,
        *,
        validate: bool = False,
    ) -> "MultiBody":
        """Build a multibody from already assembled parallel collections.

        Called without arguments this returns the empty placeholder tree.

        Args:
            bodies: Bodies of the multibody system.
            joints: Joints of the multibody system.
            pred: Predecessor body index of each joint.
            succ: Successor body index of each joint.
            parent: Parent body index of each body.
            transforms_from: Transformation from the centre of the predecessor
                body, one (4, 4) per joint. Identity when omitted.
            transforms_to: Transformation to the centre of the successor body,
                one (4, 4) per joint. Identity when omitted.
            validate: Check that the indices describe a well-formed tree and
                raise MalformedTreeError otherwise. The caller is trusted when
                False.

        Raises:
            ValueError: If the collection lengths disagree.
        """
        bodies = tuple(bodies)
        joints = tuple(joints)
        pred = tuple(int(p) for p in pred)
        succ = tuple(int(s) for s in succ)
        parent = tuple(int(p) for p in parent)

        nr_joints = len(joints)
        if len(parent) != len(bodies):
            raise ValueError(f"expected {len(bodies)} parent indices, got {len(parent)}")
        if len(pred) != nr_joints:
            raise ValueError(f"expected {nr_joints} predecessor indices, got {len(pred)}")
        if len(succ) != nr_joints:
            raise ValueError(f"expected {nr_joints} successor indices, got {len(succ)}")

        multibody = cls(
            bodies=bodies,
            joints=joints,
            transforms_from=_stack_transforms(transforms_from, nr_joints, "transforms_from"),
            transforms_to=_stack_transforms(transforms_to, nr_joints, "transforms_to"),
            predecessors=pred,
            successors=succ,
            parents=parent,
            body_id_to_index=IdIndex(b.id for b in bodies),
            joint_id_to_index=IdIndex(j.id for j in joints),
            nr_params=sum(j.params for j in joints),
            nr_dof=sum(j.dof for j in joints),
        )
        logger.debug(
            "Built multibody: %d bodies, %d joints, %d params, %d dof",
            multibody.nr_bodies, multibody.nr_joints, multibody.nr_params, multibody.nr_dof,
        )

        if validate:
            multibody.validate()
        return multibody

    def validate(self) -> None:
        """Raise MalformedTreeError unless the structure is a well-formed tree."""
        from .validation import validate_multibody

        validate_multibody(self)

    # Sizes

    @property
    def nr_bodies(self) -> int:
        return len(self.bodies)

    @property
    def nr_joints(self) -> int:
        return len(self.joints)

    # Trusted accessors, index validity is the caller's responsibility

    def body(self, num: int) -> Body:
        """Body at position num."""
        _assert_index("body", num, len(self.bodies))
        return self.bodies[num]

    def joint(self, num: int) -> Joint:
        """Joint at position num."""
        _assert_index("joint", num, len(self.joints))
        return self.joints[num]

    def predecessor(self, num: int) -> int:
        """Predecessor body index of joint num."""
        _assert_index("joint", num, len(self.predecessors))
        return self.predecessors[num]

    def successor(self, num: int) -> int:
        """Successor body index of joint num."""
        _assert_index("joint", num, len(self.successors))
        return self.successors[num]

    def parent(self, num: int) -> int:
        """Parent body index of body num."""
        _assert_index("body", num, len(self.parents))
        return self.parents[num]

    def transform_from(self, num: int) -> Array:
        """Transformation from the centre of the predecessor body for joint num."""
        _assert_index("joint", num, self.transforms_from.shape[0])
        return self.transforms_from[num]

    def transform_to(self, num: int) -> Array:
        """Transformation to the centre of the successor body for joint num."""
        _assert_index("joint", num, self.transforms_to.shape[0])
        return self.transforms_to[num]

    def body_index_by_id(self, id: int) -> int:
        """Index of the body with the given id."""
        return self.body_id_to_index[id]

    def joint_index_by_id(self, id: int) -> int:
        """Index of the joint with the given id."""
        return self.joint_id_to_index[id]

    # Checked accessors

    def s_body(self, num: int) -> Body:
        """Checked version of body(). Raises OutOfRangeError."""
        return self.bodies[_checked_index("body", num, len(self.bodies))]

    def s_joint(self, num: int) -> Joint:
        """Checked version of joint(). Raises OutOfRangeError."""
        return self.joints[_checked_index("joint", num, len(self.joints))]

    def s_predecessor(self, num: int) -> int:
        """Checked version of predecessor(). Raises OutOfRangeError."""
        return self.predecessors[_checked_index("joint", num, len(self.predecessors))]

    def s_successor(self, num: int) -> int:
        """Checked version of successor(). Raises OutOfRangeError."""
        return self.successors[_checked_index("joint", num, len(self.successors))]

    def s_parent(self, num: int) -> int:
        """Checked version of parent(). Raises OutOfRangeError."""
        return self.parents[_checked_index("body", num, len(self.parents))]

    def s_transform_from(self, num: int) -> Array:
        """Checked version of transform_from(). Raises OutOfRangeError."""
        return self.transforms_from[_checked_index("joint", num, self.transforms_from.shape[0])]

    def s_transform_to(self, num: int) -> Array:
        """Checked version of transform_to(). Raises OutOfRangeError."""
        return self.transforms_to[_checked_index("joint", num, self.transforms_to.shape[0])]

    def s_body_index_by_id(self, id: int) -> int:
        """Checked version of body_index_by_id(). Raises UnknownIdError."""
        try:
            return self.body_id_to_index[id]
        except KeyError:
            raise UnknownIdError("body", id) from None

    def s_joint_index_by_id(self, id: int) -> int:
        """Checked version of joint_index_by_id(). Raises UnknownIdError."""
        try:
            return self.joint_id_to_index[id]
        except KeyError:
            raise UnknownIdError("joint", id) from None

    # Array views for vectorized algorithms

    @property
    def predecessor_array(self) -> Array:
        return jnp.array(self.predecessors, dtype=jnp.int32)

    @property
    def successor_array(self) -> Array:
        return jnp.array(self.successors, dtype=jnp.int32)

    @property
    def parent_array(self) -> Array:
        return jnp.array(self.parents, dtype=jnp.int32)

    # Configuration layout

    def joint_pos_in_param(self) -> Tuple[int, ...]:
        """Start of each joint's slice in the configuration vector."""
        offsets, pos = [], 0
        for joint in self.joints:
            offsets.append(pos)
            pos += joint.params
        return tuple(offsets)

    def joint_pos_in_dof(self) -> Tuple[int, ...]:
        """Start of each joint's slice in the velocity vector."""
        offsets, pos = [], 0
        for joint in self.joints:
            offsets.append(pos)
            pos += joint.dof
        return tuple(offsets)

    def zero_param(self) -> Array:
        """Neutral configuration vector of shape (nr_params,)."""
        if not self.joints:
            return jnp.zeros(0)
        return jnp.concatenate([joint.zero_param() for joint in self.joints])

    def zero_dof(self) -> Array:
        """Zero velocity vector of shape (nr_dof,)."""
        return jnp.zeros(self.nr_dof)
