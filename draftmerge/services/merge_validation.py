"""Validation of reviewer merge instructions before any write happens."""
from __future__ import annotations

from typing import Any, List, Mapping, Sequence, Set, Union

from draftmerge.core.errors import MergeInstructionError
from draftmerge.services.types import MergeChoice, MergeInstruction

RawInstruction = Union[MergeInstruction, Mapping[str, Any]]


def _field(raw: RawInstruction, name: str) -> Any:
    if isinstance(raw, Mapping):
        return raw.get(name)
    return getattr(raw, name, None)


def parse_merge_instructions(
    raw_instructions: Sequence[RawInstruction],
    pair_count: int,
) -> List[MergeInstruction]:
    """Check that instructions cover pairs ``0..pair_count-1`` exactly once.

    Raises ``MergeInstructionError`` naming the first offending instruction.
    Returns the instructions in their input order with typed choices.
    """
    if len(raw_instructions) != pair_count:
        raise MergeInstructionError(
            f"Expected {pair_count} instructions, got {len(raw_instructions)}"
        )

    seen: Set[int] = set()
    parsed: List[MergeInstruction] = []
    for position, raw in enumerate(raw_instructions):
        pair_index = _field(raw, "pair_index")
        # bool is an int subclass but never a valid index
        if (
            not isinstance(pair_index, int)
            or isinstance(pair_index, bool)
            or not 0 <= pair_index < pair_count
        ):
            raise MergeInstructionError(
                f"Invalid pair_index: {pair_index!r}", position=position, pair_index=pair_index
            )
        if pair_index in seen:
            raise MergeInstructionError(
                f"Duplicate pair_index: {pair_index}", position=position, pair_index=pair_index
            )
        seen.add(pair_index)

        choice = _field(raw, "choice")
        try:
            choice = MergeChoice(choice)
        except ValueError:
            raise MergeInstructionError(
                f"Invalid choice {choice!r} for pair_index {pair_index}",
                position=position,
                pair_index=pair_index,
            ) from None

        parsed.append(MergeInstruction(pair_index=pair_index, choice=choice))

    return parsed
