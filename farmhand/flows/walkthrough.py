"""
One-task-at-a-time walkthrough over a StructuredPlan.

The state is a cursor over the flattened action list plus a set of completed
action keys (step_index, action_index). It lives only in memory and is never
persisted. Every metric is recomputed from the completed set on read.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional, Set, Tuple

from farmhand.models.plan import Action, Step, StructuredPlan

logger = logging.getLogger(__name__)

ActionKey = Tuple[int, int]

DEFAULT_ADVANCE_DELAY = 0.35
NO_ACTIONS_MESSAGE = "No actionable steps were extracted from this response. Tap Back and regenerate the plan."


@dataclass(frozen=True)
class WalkthroughTask:
    key: ActionKey
    step: Step
    action: Action

    @property
    def step_index(self) -> int:
        return self.key[0]

    @property
    def action_index(self) -> int:
        return self.key[1]


def flatten_plan(plan: Optional[StructuredPlan]) -> List[WalkthroughTask]:
    if plan is None:
        return []
    return [
        WalkthroughTask(key=(step_index, action_index), step=step, action=action)
        for step_index, step in enumerate(plan.steps)
        for action_index, action in enumerate(step.actions)
    ]


class WalkthroughState:
    def __init__(self, plan: Optional[StructuredPlan] = None, advance_delay: float = DEFAULT_ADVANCE_DELAY):
        self.advance_delay = advance_delay
        self.plan: Optional[StructuredPlan] = None
        self.tasks: List[WalkthroughTask] = []
        self.completed: Set[ActionKey] = set()
        self.current_index = 0
        self._generation = 0
        self.reset(plan)

    # ── Mutations ─────────────────────────────────────────────────────

    def reset(self, plan: Optional[StructuredPlan] = None) -> None:
        """Swaps in a (new) plan: no completed actions, cursor on the first task."""
        self._generation += 1
        self.plan = plan
        self.tasks = flatten_plan(plan)
        self.completed = set()
        self.current_index = 0

    async def toggle_current(self) -> bool:
        """
        Flips the current task. A task that becomes complete moves the cursor on
        by one after advance_delay, unless it was the last task or the state
        changed meanwhile. Returns the new completion value.
        """
        if self.is_inert:
            return False
        index = self.current_index
        key = self.tasks[index].key
        if key in self.completed:
            self.completed.discard(key)
            return False

        self.completed.add(key)
        if index < self.total_action_count - 1:
            generation = self._generation
            if self.advance_delay > 0:
                await asyncio.sleep(self.advance_delay)
            if generation == self._generation and self.current_index == index and key in self.completed:
                self.current_index = index + 1
            else:
                logger.debug("Skipping auto-advance from task %d, walkthrough changed", index)
        return True

    def complete_and_advance(self) -> None:
        """Marks the current task done and moves on; stays put on the last task."""
        if self.is_inert:
            return
        self.completed.add(self.tasks[self.current_index].key)
        if self.current_index < self.total_action_count - 1:
            self.current_index += 1

    def go_to(self, index: int) -> None:
        if self.is_inert:
            self.current_index = 0
            return
        self.current_index = max(0, min(index, self.total_action_count - 1))

    def go_back(self) -> None:
        self.go_to(self.current_index - 1)

    def go_forward(self) -> None:
        self.go_to(self.current_index + 1)

    def mark_step_done(self, step_index: int) -> None:
        self.completed.update(t.key for t in self.tasks if t.step_index == step_index)

    def jump_to_next_incomplete(self) -> Optional[int]:
        """Moves the cursor to the first open task of the first unfinished step."""
        step_index = self.next_incomplete_step()
        if step_index is None:
            return None
        for index, task in enumerate(self.tasks):
            if task.step_index == step_index and task.key not in self.completed:
                self.go_to(index)
                return index
        return None

    # ── Derived state ─────────────────────────────────────────────────

    @property
    def is_inert(self) -> bool:
        return not self.tasks

    @property
    def fallback_message(self) -> Optional[str]:
        return NO_ACTIONS_MESSAGE if self.is_inert else None

    @property
    def total_action_count(self) -> int:
        return len(self.tasks)

    @property
    def completed_action_count(self) -> int:
        return sum(1 for t in self.tasks if t.key in self.completed)

    @property
    def progress_percent(self) -> int:
        total = self.total_action_count
        if total == 0:
            return 0
        return int(100 * self.completed_action_count / total + 0.5)

    @property
    def current_task(self) -> Optional[WalkthroughTask]:
        if self.is_inert:
            return None
        return self.tasks[self.current_index]

    @property
    def is_last_task(self) -> bool:
        return not self.is_inert and self.current_index == self.total_action_count - 1

    @property
    def is_finished(self) -> bool:
        return not self.is_inert and self.completed_action_count == self.total_action_count

    def is_completed(self, key: ActionKey) -> bool:
        return key in self.completed and any(t.key == key for t in self.tasks)

    def step_action_count(self, step_index: int) -> int:
        return sum(1 for t in self.tasks if t.step_index == step_index)

    def step_completed_count(self, step_index: int) -> int:
        return sum(1 for t in self.tasks if t.step_index == step_index and t.key in self.completed)

    def is_step_complete(self, step_index: int) -> bool:
        total = self.step_action_count(step_index)
        return total > 0 and self.step_completed_count(step_index) == total

    def next_incomplete_step(self) -> Optional[int]:
        if self.plan is None:
            return None
        for step_index in range(len(self.plan.steps)):
            if not self.is_step_complete(step_index):
                return step_index
        return None
