"""Transaction lifecycle state machine: single source of truth for the phase."""

import logging
from typing import Dict, FrozenSet, List

from guestbook_core.models.transaction import TERMINAL_STATES, LifecycleState

logger = logging.getLogger(__name__)

TRANSITIONS: Dict[LifecycleState, FrozenSet[LifecycleState]] = {
    LifecycleState.IDLE: frozenset({LifecycleState.SUBMITTING}),
    LifecycleState.SUBMITTING: frozenset({LifecycleState.CONFIRMING, LifecycleState.FAILED}),
    LifecycleState.CONFIRMING: frozenset({LifecycleState.SUCCEEDED, LifecycleState.FAILED}),
    LifecycleState.SUCCEEDED: frozenset({LifecycleState.IDLE}),
    LifecycleState.FAILED: frozenset({LifecycleState.IDLE}),
}


class TransactionLifecycle:
    """
    States:
      IDLE → SUBMITTING → CONFIRMING → SUCCEEDED → IDLE
                  ↘ FAILED      ↘ FAILED      → IDLE

    history records every state observed since the last reset.
    """

    def __init__(self):
        self._state = LifecycleState.IDLE
        self.history: List[LifecycleState] = [LifecycleState.IDLE]

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def is_terminal(self) -> bool:
        return self._state in TERMINAL_STATES

    @property
    def in_flight(self) -> bool:
        return self._state in (LifecycleState.SUBMITTING, LifecycleState.CONFIRMING)

    def transition(self, target: LifecycleState) -> None:
        """Move forward along the graph. Illegal moves are programming errors."""
        if target not in TRANSITIONS[self._state]:
            raise RuntimeError(
                f"Illegal lifecycle transition {self._state.value} -> {target.value}"
            )
        logger.debug("Transaction %s -> %s", self._state.value, target.value)
        self._state = target
        if target == LifecycleState.IDLE:
            self.history = [LifecycleState.IDLE]
        else:
            self.history.append(target)

    def reset(self) -> None:
        """Return to IDLE after a terminal state. No-op when already IDLE."""
        if self._state == LifecycleState.IDLE:
            return
        self.transition(LifecycleState.IDLE)
