"""Walks a user through a validated decision tree.

The whole mutable state is a history stack of visited step ids; the current
step is the last entry. The stack list belongs to the caller: pass one in and
the walker mutates it in place, so a session record can hold it directly.
"""
from typing import Iterable, List, Optional
from diagtree.models.tree import START_STEP_ID, DecisionTree, Step

class TraversalError(Exception):
    pass

class InvalidTransition(TraversalError, ValueError):
    """Raised by ``choose`` for a target the current step does not lead to.

    History is left untouched, so the caller can offer the same step again.
    """
    def __init__(self, step_id: str, target_id: str):
        super().__init__(f"Cannot move from step '{step_id}' to '{target_id}'")
        self.step_id = step_id
        self.target_id = target_id

class UnknownCurrentStep(TraversalError, LookupError):
    """The top of the history no longer resolves in the tree.

    Raised by ``current``, ``choose`` and ``back``. Only ``restart`` recovers.
    """
    def __init__(self, step_id: str):
        super().__init__(f"Step '{step_id}' does not exist in this tree; restart required")
        self.step_id = step_id

class TreeWalker:
    def __init__(self, tree: DecisionTree, history: Optional[List[str]] = None):
        self.tree = tree
        if history is None:
            history = [START_STEP_ID]
        elif not history:
            history.append(START_STEP_ID)
        self._history = history

    @classmethod
    def replay(cls, tree: DecisionTree, targets: Iterable[str]) -> "TreeWalker":
        walker = cls(tree)
        for target_id in targets:
            walker.choose(target_id)
        return walker

    @property
    def history(self) -> List[str]:
        return list(self._history)

    @property
    def step_number(self) -> int:
        return len(self._history)

    @property
    def can_go_back(self) -> bool:
        return len(self._history) > 1

    @property
    def is_complete(self) -> bool:
        return self.current().is_terminal

    def current(self) -> Step:
        step_id = self._history[-1]
        step = self.tree.get_step(step_id)
        if step is None:
            raise UnknownCurrentStep(step_id)
        return step

    def legal_targets(self) -> List[str]:
        return self.current().successors()

    def choose(self, target_id: str) -> Step:
        step = self.current()
        # A target must be declared by the current step and exist in the tree
        if target_id not in step.successors() or not self.tree.has_step(target_id):
            raise InvalidTransition(step.id, target_id)
        self._history.append(target_id)
        return self.tree.get_step(target_id)

    def back(self) -> Step:
        # A stale stack stays stale until restart
        self.current()
        if len(self._history) > 1:
            self._history.pop()
        return self.current()

    def restart(self) -> None:
        self._history[:] = [START_STEP_ID]

    def rebind(self, tree: DecisionTree) -> None:
        """Points the walker at another tree, keeping history as is."""
        self.tree = tree
