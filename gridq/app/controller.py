"""Application controller connecting the UI to the Q-learning engine."""

import logging
from typing import Iterator, List, Optional

from PySide6.QtCore import QObject, QTimer, Signal

from ..domain.qlearning import QLearningTrainer
from ..domain.qtable import ActionValueTable
from ..domain.types import (
    Coord, Episode, QLearningConfig, StepRecord, TrainingEvent, TrainingResult
)
from .fsm import TrainingStateMachine, TrainingState

logger = logging.getLogger(__name__)

# Fields that only change how fast the host pulls from the engine
PACING_FIELDS = {"training_mode", "step_delay_ms", "episode_delay_ms"}


class TrainingController(QObject):
    """
    Controller that drives training from a QTimer on the GUI thread.

    The trainer's generator is pulled one step per tick in visual mode and
    one whole episode per tick in background mode, so rendering and input
    handling interleave with learning without any worker thread.

    Signals:
        state_changed: Emitted when the run state changes
        agent_moved: Emitted with the agent's (x, y) after every step
        episode_completed: Emitted with each finished Episode
        training_progress: Emitted with (episodes done, episodes requested)
        training_completed: Emitted with the TrainingResult of a run
        grid_updated: Emitted when the grid needs to be redrawn
        error_occurred: Emitted when an error occurs
    """

    state_changed = Signal(object)  # TrainingState
    agent_moved = Signal(int, int)
    episode_completed = Signal(object)  # Episode
    training_progress = Signal(int, int)
    training_completed = Signal(object)  # TrainingResult
    grid_updated = Signal()
    error_occurred = Signal(str)

    def __init__(self, config: Optional[QLearningConfig] = None):
        super().__init__()

        self._config = config or QLearningConfig()
        self._trainer = QLearningTrainer(self._config)
        self._state_machine = TrainingStateMachine()

        # Active run
        self._events: Optional[Iterator[TrainingEvent]] = None
        self._run_episodes: List[Episode] = []
        self._episode_target = 0
        self._agent_coord: Coord = self._config.start

        self._timer = QTimer(self)
        self._timer.timeout.connect(self._on_timer_tick)

        self._setup_state_callbacks()

    def _setup_state_callbacks(self):
        for state in TrainingState:
            self._state_machine.on_state_enter(state, self._emit_state_changed)

    def _emit_state_changed(self, context=None):
        self.state_changed.emit(self._state_machine.current_state)

    # Properties

    @property
    def config(self) -> QLearningConfig:
        return self._config

    @property
    def trainer(self) -> QLearningTrainer:
        return self._trainer

    @property
    def table(self) -> ActionValueTable:
        return self._trainer.table

    @property
    def grid_size(self) -> int:
        return self._config.grid_size

    @property
    def start_coord(self) -> Coord:
        return self._config.start

    @property
    def goal_coord(self) -> Coord:
        return self._config.goal

    @property
    def agent_coord(self) -> Coord:
        """Where the agent currently stands."""
        return self._agent_coord

    @property
    def current_state(self) -> TrainingState:
        return self._state_machine.current_state

    @property
    def state_description(self) -> str:
        return self._state_machine.get_state_description()

    @property
    def history(self) -> List[Episode]:
        return self._trainer.history

    # Training control

    def can_start_training(self) -> bool:
        return self._state_machine.can_start()

    def start_training(self, episodes: Optional[int] = None) -> bool:
        """Start a run of ``episodes`` episodes on the current table."""
        if not self.can_start_training():
            return False

        if episodes is None:
            episodes = self._config.max_episodes
        if episodes < 1:
            self.error_occurred.emit(f"Episode count must be at least 1, got {episodes}")
            return False
        self._events = self._trainer.iter_training(episodes)
        self._run_episodes = []
        self._episode_target = episodes
        self._move_agent(self._config.start)

        self._state_machine.start_training()
        self._timer.start(self._tick_interval())
        logger.info("Started %s training for %d episodes", self._config.training_mode, episodes)
        return True

    def pause_training(self) -> bool:
        self._timer.stop()
        return self._state_machine.pause()

    def resume_training(self) -> bool:
        if not self._state_machine.resume():
            return False
        self._timer.start(self._tick_interval())
        return True

    def stop_training(self) -> bool:
        """Stop the run at the current step; learned values are kept."""
        self._timer.stop()
        if self._events is None:
            return self._state_machine.reset_to_idle()

        self._trainer.request_stop()
        for event in self._events:
            # The trainer finishes at the next boundary without taking a step
            self._handle_event(event)
        result = self._finish_run()
        self._state_machine.reset_to_idle()
        self.training_completed.emit(result)
        self.grid_updated.emit()
        return True

    def reset_algorithm(self) -> bool:
        """Discard the run and every learned value."""
        self._timer.stop()
        self._events = None
        self._run_episodes = []
        self._trainer.reset()
        self._move_agent(self._config.start)
        self.grid_updated.emit()
        return self._state_machine.reset_to_idle()

    def advance(self) -> bool:
        """
        Pull the next chunk of training: one step in visual mode, one
        episode in background mode.

        Returns False once the run is over.
        """
        if self._events is None:
            return False

        try:
            if self._config.training_mode == "visual":
                self._handle_event(next(self._events))
            else:
                while not isinstance(self._handle_event(next(self._events)), Episode):
                    pass
        except StopIteration:
            self._complete_training()
            return False
        except Exception as e:
            logger.exception("Training step failed")
            self._timer.stop()
            self._events = None
            self._state_machine.fail_error()
            self.error_occurred.emit(f"Training failed: {e}")
            return False
        return True

    def _on_timer_tick(self):
        self.advance()

    def _tick_interval(self) -> int:
        if self._config.training_mode == "visual":
            return self._config.step_delay_ms
        return 0

    def _handle_event(self, event: TrainingEvent) -> TrainingEvent:
        if isinstance(event, StepRecord):
            self._move_agent(event.next_state)
            if self._timer.isActive():
                self._timer.setInterval(self._tick_interval())
        else:
            self._run_episodes.append(event)
            self.episode_completed.emit(event)
            self.training_progress.emit(len(self._run_episodes), self._episode_target)
            self._move_agent(self._config.start)
            if self._config.training_mode == "visual" and self._timer.isActive():
                self._timer.setInterval(self._config.episode_delay_ms)
            self.grid_updated.emit()
        return event

    def _move_agent(self, coord: Coord):
        self._agent_coord = coord
        self.agent_moved.emit(coord[0], coord[1])

    def _finish_run(self) -> TrainingResult:
        self._events = None
        return self._trainer.summarize(self._run_episodes)

    def _complete_training(self):
        self._timer.stop()
        result = self._finish_run()
        self._state_machine.finish()
        self.training_completed.emit(result)
        self.grid_updated.emit()

    # Configuration

    def update_config(self, **kwargs) -> bool:
        """
        Update configuration.

        Pacing fields may change at any time. Engine fields rebuild the
        trainer, which discards learned values, and are refused while a run
        is in progress.
        """
        try:
            new_config = self._config.replace(**kwargs)
        except ValueError as e:
            self.error_occurred.emit(f"Invalid configuration: {e}")
            return False

        engine_changed = any(
            getattr(new_config, key) != getattr(self._config, key)
            for key in kwargs if key not in PACING_FIELDS
        )
        if engine_changed and self._events is not None:
            self.error_occurred.emit("Stop training before changing learning parameters")
            return False

        self._config = new_config
        if engine_changed:
            self._trainer = QLearningTrainer(new_config)
            self._move_agent(new_config.start)
            self.grid_updated.emit()
        elif self._timer.isActive():
            self._timer.setInterval(self._tick_interval())
        return True

    def cleanup(self):
        """Stop timers before the application shuts down."""
        self._timer.stop()
        self._events = None
