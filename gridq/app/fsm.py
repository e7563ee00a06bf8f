"""Finite State Machine for training run states."""

from enum import Enum, auto
from typing import Dict, Callable, Optional


class TrainingState(Enum):
    """States of a training run."""
    IDLE = auto()
    TRAINING = auto()
    PAUSED = auto()
    FINISHED = auto()
    ERROR = auto()


class TrainingStateMachine:
    """State machine for managing a training run."""

    def __init__(self):
        self.current_state = TrainingState.IDLE
        self._enter_callbacks: Dict[TrainingState, Callable[[Optional[Dict]], None]] = {}
        self._exit_callbacks: Dict[TrainingState, Callable[[Optional[Dict]], None]] = {}

        # Define valid state transitions
        self._valid_transitions = {
            TrainingState.IDLE: {TrainingState.TRAINING},
            TrainingState.TRAINING: {TrainingState.PAUSED, TrainingState.FINISHED,
                                     TrainingState.ERROR, TrainingState.IDLE},
            TrainingState.PAUSED: {TrainingState.TRAINING, TrainingState.IDLE},
            TrainingState.FINISHED: {TrainingState.TRAINING, TrainingState.IDLE},
            TrainingState.ERROR: {TrainingState.IDLE},
        }

    def on_state_enter(self, state: TrainingState, callback: Callable[[Optional[Dict]], None]):
        """Register callback for state entry."""
        self._enter_callbacks[state] = callback

    def on_state_exit(self, state: TrainingState, callback: Callable[[Optional[Dict]], None]):
        """Register callback for state exit."""
        self._exit_callbacks[state] = callback

    def can_transition(self, to_state: TrainingState) -> bool:
        """Check if transition to target state is valid."""
        return to_state in self._valid_transitions.get(self.current_state, set())

    def transition(self, to_state: TrainingState, context: Optional[Dict] = None) -> bool:
        """Attempt to transition to target state."""
        if not self.can_transition(to_state):
            return False

        from_state = self.current_state
        if from_state in self._exit_callbacks:
            self._exit_callbacks[from_state](context)

        self.current_state = to_state

        if to_state in self._enter_callbacks:
            self._enter_callbacks[to_state](context)

        return True

    # Convenience methods for common transitions

    def start_training(self, context: Optional[Dict] = None) -> bool:
        return self.transition(TrainingState.TRAINING, context)

    def pause(self, context: Optional[Dict] = None) -> bool:
        return self.transition(TrainingState.PAUSED, context)

    def resume(self, context: Optional[Dict] = None) -> bool:
        """Resume training from paused state."""
        if self.current_state == TrainingState.PAUSED:
            return self.transition(TrainingState.TRAINING, context)
        return False

    def finish(self, context: Optional[Dict] = None) -> bool:
        return self.transition(TrainingState.FINISHED, context)

    def reset_to_idle(self, context: Optional[Dict] = None) -> bool:
        if self.current_state == TrainingState.IDLE:
            return True
        return self.transition(TrainingState.IDLE, context)

    def fail_error(self, context: Optional[Dict] = None) -> bool:
        return self.transition(TrainingState.ERROR, context)

    # State checking methods

    def is_idle(self) -> bool:
        return self.current_state == TrainingState.IDLE

    def is_training(self) -> bool:
        return self.current_state == TrainingState.TRAINING

    def is_paused(self) -> bool:
        return self.current_state == TrainingState.PAUSED

    def can_start(self) -> bool:
        """Check if a new run can be started."""
        return self.current_state in {TrainingState.IDLE, TrainingState.FINISHED}

    def get_state_description(self) -> str:
        """Get human-readable state description."""
        descriptions = {
            TrainingState.IDLE: "Ready - Click Train to start learning",
            TrainingState.TRAINING: "Training agent with Q-Learning",
            TrainingState.PAUSED: "Training paused",
            TrainingState.FINISHED: "Training finished",
            TrainingState.ERROR: "Error occurred during training",
        }
        return descriptions.get(self.current_state, "Unknown state")
