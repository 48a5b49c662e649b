"""Exceptions raised by the checked accessors and the validation pass."""

from typing import List, Sequence


class MultiBodyError(Exception):
    """Base class for multibody errors."""


class OutOfRangeError(MultiBodyError, IndexError):
    """A dense body or joint index fell outside its valid span."""

    def __init__(self, what: str, index: int, size: int):
        self.what = what
        self.index = index
        self.size = size
        super().__init__(f"{what} index {index} out of range [0, {size})")


class UnknownIdError(MultiBodyError, KeyError):
    """An id was never registered in the corresponding id map."""

    def __init__(self, what: str, id_: int):
        self.what = what
        self.id = id_
        super().__init__(f"no {what} with id {id_}")

    def __str__(self) -> str:
        # KeyError quotes its argument, keep the message readable
        return self.args[0]


class MalformedTreeError(MultiBodyError, ValueError):
    """The index arrays do not describe a well-formed kinematic tree."""

    def __init__(self, problems: Sequence[str]):
        self.problems: List[str] = list(problems)
        lines = "\n  ".join(self.problems)
        super().__init__(f"malformed kinematic tree ({len(self.problems)} problem(s)):\n  {lines}")
