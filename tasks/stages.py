"""
Stage tracker rules.

A task walks through an ordered list of stage names. Moving the current
stage pointer forward marks every stage before the target as completed;
moving it back reopens every stage after the target. The target itself is
only touched when the move stays in place and the caller flags it as the
last stage (complete it) or the first stage (reopen it).

Nothing here touches the database; services.move_to_stage writes the
complete and reopen sets of the resulting StageMove inside a transaction.
"""
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

from .exceptions import InvalidStageError


@dataclass(frozen=True)
class StageMove:
    target: str
    complete: Tuple[str, ...] = field(default_factory=tuple)
    reopen: Tuple[str, ...] = field(default_factory=tuple)


def plan_stage_move(
    stages: Sequence[str],
    current_stage: Optional[str],
    target_stage: str,
    is_last_stage: bool = False,
    is_first_stage: bool = False,
) -> StageMove:
    if target_stage not in stages:
        raise InvalidStageError(f"Invalid stage '{target_stage}'")

    stages = list(stages)
    target_index = stages.index(target_stage)
    # a pointer outside the list behaves like "before the first stage"
    current_index = stages.index(current_stage) if current_stage in stages else -1

    if target_index > current_index:
        return StageMove(target_stage, complete=tuple(stages[:target_index]))
    if target_index < current_index:
        return StageMove(target_stage, reopen=tuple(stages[target_index + 1:]))
    if is_last_stage:
        return StageMove(target_stage, complete=(target_stage,))
    if is_first_stage:
        return StageMove(target_stage, reopen=(target_stage,))
    return StageMove(target_stage)
