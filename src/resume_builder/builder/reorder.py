"""Single-element move over a sequence."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TypeVar

from resume_builder.exceptions import RangeError

T = TypeVar("T")


def move(items: Sequence[T], from_index: int, to_index: int) -> tuple[T, ...]:
    """Move the element at ``from_index`` so it ends up at ``to_index``.

    The element is removed first and ``to_index`` is applied to the shortened
    sequence, so ``move([A, B, C], 0, 2)`` gives ``(B, C, A)`` and
    ``move([A, B, C], 2, 0)`` gives ``(C, A, B)``. Every other element keeps
    its relative order.

    Raises:
        RangeError: either index is outside ``[0, len(items))``.
    """
    length = len(items)
    for index in (from_index, to_index):
        if not 0 <= index < length:
            raise RangeError(index, length)

    result = list(items)
    if from_index == to_index:
        return tuple(result)
    item = result.pop(from_index)
    result.insert(to_index, item)
    return tuple(result)
