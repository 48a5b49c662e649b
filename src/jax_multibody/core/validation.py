"""Optional structural validation of a MultiBody.

MultiBody.create trusts its caller; these checks are run on request
(``MultiBody.create(..., validate=True)`` or ``MultiBody.validate()``).
"""

import logging
from typing import List

from ..errors import MalformedTreeError
from ..transforms import se3
from .multibody import ROOT_PARENT, MultiBody

logger = logging.getLogger(__name__)


def find_problems(multibody: MultiBody) -> List[str]:
    """Return a description of every broken tree invariant, empty if none."""
    problems: List[str] = []
    nr_bodies = multibody.nr_bodies

    def valid_body(b: int) -> bool:
        return 0 <= b < nr_bodies

    # index ranges
    for j, (p, s) in enumerate(zip(multibody.predecessors, multibody.successors)):
        if not valid_body(p) and not (j == 0 and p == ROOT_PARENT):
            problems.append(f"joint {j}: predecessor {p} is not a body index")
        if not valid_body(s):
            problems.append(f"joint {j}: successor {s} is not a body index")

    for b, p in enumerate(multibody.parents):
        if not valid_body(p) and p != ROOT_PARENT:
            problems.append(f"body {b}: parent {p} is not a body index")
        elif p == b:
            problems.append(f"body {b}: is its own parent")

    # joint placements
    for j in range(multibody.nr_joints):
        if not se3.is_rigid(multibody.transforms_from[j]):
            problems.append(f"joint {j}: transform_from is not a rigid transform")
        if not se3.is_rigid(multibody.transforms_to[j]):
            problems.append(f"joint {j}: transform_to is not a rigid transform")

    # ids
    for id_ in multibody.body_id_to_index.duplicates():
        problems.append(f"body id {id_} is used more than once")
    for id_ in multibody.joint_id_to_index.duplicates():
        problems.append(f"joint id {id_} is used more than once")

    if problems or nr_bodies == 0:
        return problems

    # root
    roots = [b for b, p in enumerate(multibody.parents) if p == ROOT_PARENT]
    if len(roots) != 1:
        problems.append(f"expected exactly one root body, found {roots}")
    elif multibody.nr_joints > 0:
        root = roots[0]
        pred0, succ0 = multibody.predecessors[0], multibody.successors[0]
        attached = pred0 if pred0 != ROOT_PARENT else succ0
        if attached != root:
            problems.append(f"root joint 0 does not attach root body {root}")
        if pred0 != ROOT_PARENT:
            # placeholder root body: joint 0 leaves it and nothing enters it
            for j, s in enumerate(multibody.successors):
                if s == root:
                    problems.append(f"joint {j}: successor is the root body {root}")
            if multibody.nr_joints != nr_bodies - 1:
                problems.append(
                    f"expected {nr_bodies - 1} joints below a placeholder root, found {multibody.nr_joints}"
                )

    # every parent link is backed by exactly one joint
    incoming = [0] * nr_bodies
    for s in multibody.successors:
        incoming[s] += 1
    for b, n in enumerate(incoming):
        if n > 1:
            problems.append(f"body {b} is the successor of {n} joints")

    for b, p in enumerate(multibody.parents):
        if p == ROOT_PARENT:
            continue
        edges = [
            j for j, (pj, sj) in enumerate(zip(multibody.predecessors, multibody.successors))
            if sj == b and pj == p
        ]
        if len(edges) != 1:
            problems.append(f"body {b}: expected one joint from parent {p}, found {len(edges)}")

    # every joint but the root joint stands for a parent edge
    for j in range(1, multibody.nr_joints):
        p, s = multibody.predecessors[j], multibody.successors[j]
        if multibody.parents[s] != p:
            problems.append(f"joint {j}: links body {p} to body {s} whose parent is {multibody.parents[s]}")

    # parent chains must reach the root
    for b in range(nr_bodies):
        seen = set()
        current = b
        while current != ROOT_PARENT:
            if current in seen:
                problems.append(f"body {b}: parent chain has a cycle")
                break
            seen.add(current)
            current = multibody.parents[current]

    return problems


def validate_multibody(multibody: MultiBody) -> None:
    """Raise MalformedTreeError if the multibody is not a well-formed tree."""
    problems = find_problems(multibody)
    for problem in problems:
        logger.warning("Malformed multibody: %s", problem)
    if problems:
        raise MalformedTreeError(problems)
