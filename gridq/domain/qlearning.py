"""Q-Learning algorithm implementation for grid world navigation."""

import logging
import time
from typing import Generator, Iterator, List, Optional

from .qtable import ActionValueTable
from .types import (
    ACTIONS, ACTION_DELTAS, Action, Coord, Episode, PathfindingResult,
    QLearningConfig, StepRecord, TrainingEvent, TrainingResult, is_cell,
    is_grid_int, validate_action
)
from ..utils.rng import SeededRNG

logger = logging.getLogger(__name__)


class GridWorld:
    """Square grid with a fixed goal cell.

    Moving off the grid is a no-op on that axis; entering the goal earns
    ``reward_goal`` and every other move costs ``reward_step``.
    """

    def __init__(self, grid_size: int, goal: Coord,
                 reward_goal: float = 10.0, reward_step: float = -0.1):
        if not is_grid_int(grid_size) or grid_size <= 0:
            raise ValueError(f"Grid size must be a positive integer, got {grid_size!r}")
        self.grid_size = grid_size
        self.goal = tuple(goal)
        if not self.is_valid_coord(self.goal):
            raise ValueError(f"Goal {self.goal} lies outside the {grid_size}x{grid_size} grid")
        self.reward_goal = reward_goal
        self.reward_step = reward_step

    @classmethod
    def from_config(cls, config: QLearningConfig) -> "GridWorld":
        return cls(config.grid_size, config.goal, config.reward_goal, config.reward_step)

    def is_valid_coord(self, coord: Coord) -> bool:
        """Check if coordinate is an integer cell within grid bounds."""
        if not is_cell(coord):
            return False
        x, y = coord
        return 0 <= x < self.grid_size and 0 <= y < self.grid_size

    def states(self) -> Iterator[Coord]:
        """Every cell of the grid, row by row."""
        for y in range(self.grid_size):
            for x in range(self.grid_size):
                yield (x, y)

    def _clamp(self, value: int) -> int:
        return max(0, min(self.grid_size - 1, value))

    def step(self, state: Coord, action: Action) -> tuple[Coord, float]:
        """
        Apply action to state and return (next_state, reward).

        Args:
            state: Current coordinate, must lie inside the grid
            action: One of ACTIONS

        Raises:
            ValueError: If the state is off the grid or the action is unknown
        """
        if not self.is_valid_coord(state):
            raise ValueError(f"State {state!r} is not a cell of the {self.grid_size}x{self.grid_size} grid")
        dx, dy = ACTION_DELTAS[validate_action(action)]
        next_state = (self._clamp(state[0] + dx), self._clamp(state[1] + dy))

        reward = self.reward_goal if next_state == self.goal else self.reward_step
        return next_state, reward


class EpsilonGreedyPolicy:
    """Explore with probability epsilon, otherwise exploit the table."""

    def select(self, state: Coord, table: ActionValueTable,
               epsilon: float, rng: SeededRNG) -> Action:
        if not 0.0 <= epsilon <= 1.0:
            raise ValueError(f"epsilon must be in [0, 1], got {epsilon}")
        if rng.random() < epsilon:
            return rng.choice(ACTIONS)
        return table.best_action(state, rng)

    def greedy(self, state: Coord, table: ActionValueTable, rng: SeededRNG) -> Action:
        """Best known action, no exploration."""
        return table.best_action(state, rng)


class QLearner:
    """One-step temporal-difference (Q-learning) update."""

    def update(self, table: ActionValueTable, state: Coord, action: Action,
               reward: float, next_state: Coord, alpha: float, gamma: float) -> float:
        """Update Q(state, action) in place and return the new value."""
        current_q = table.get(state, action)
        target = reward + gamma * table.max_value(next_state)
        new_q = current_q + alpha * (target - current_q)
        table.set(state, action, new_q)
        return new_q


class EpisodeRunner:
    """Drives one episode from the start cell until the goal or the step budget."""

    def __init__(self, world: GridWorld, policy: EpsilonGreedyPolicy,
                 learner: QLearner, rng: SeededRNG):
        self.world = world
        self.policy = policy
        self.learner = learner
        self.rng = rng

    def iter_steps(self, table: ActionValueTable, start: Coord, goal: Coord,
                   max_steps: int, epsilon: float, alpha: float, gamma: float,
                   number: int = 1) -> Generator[StepRecord, None, Episode]:
        """
        Run one episode lazily.

        Yields a StepRecord after every step and returns the Episode once the
        agent stands on the goal or ``max_steps`` steps were taken. The goal
        test happens before each step, so an episode starting on the goal
        takes no steps. The update for the move into the goal is applied
        before the episode ends.
        """
        start, goal = tuple(start), tuple(goal)
        if not self.world.is_valid_coord(start):
            raise ValueError(f"Start {start} lies outside the grid")
        if max_steps < 0:
            raise ValueError(f"max_steps must be non-negative, got {max_steps}")

        started_at = time.time()
        current = start
        total_reward = 0.0
        steps = 0

        while steps < max_steps and current != goal:
            action = self.policy.select(current, table, epsilon, self.rng)
            next_state, reward = self.world.step(current, action)
            self.learner.update(table, current, action, reward, next_state, alpha, gamma)

            steps += 1
            total_reward += reward
            logger.debug("Step %d: (%d,%d) --%s--> (%d,%d) | R=%.1f",
                         steps, current[0], current[1], action,
                         next_state[0], next_state[1], reward)

            record = StepRecord(
                step=steps,
                state=current,
                action=action,
                reward=reward,
                next_state=next_state,
                total_reward=total_reward
            )
            current = next_state
            yield record

        reached_goal = current == goal
        if reached_goal:
            logger.debug("Episode %d: agent reached the goal in %d steps", number, steps)

        return Episode(
            number=number,
            steps=steps,
            total_reward=total_reward,
            reached_goal=reached_goal,
            epsilon_used=epsilon,
            elapsed_time=time.time() - started_at
        )

    def run(self, table: ActionValueTable, start: Coord, goal: Coord,
            max_steps: int, epsilon: float, alpha: float, gamma: float,
            number: int = 1) -> Episode:
        """Run one episode to completion and return its outcome."""
        steps = self.iter_steps(table, start, goal, max_steps, epsilon, alpha, gamma, number)
        while True:
            try:
                next(steps)
            except StopIteration as finished:
                return finished.value


class QLearningTrainer:
    """Runs Q-learning episodes sequentially against one shared table.

    The trainer owns its ActionValueTable and random source, so separate
    trainers never influence each other. Every training method is a
    generator or drains one; the host decides how fast to pull.
    """

    def __init__(self, config: Optional[QLearningConfig] = None,
                 table: Optional[ActionValueTable] = None,
                 rng: Optional[SeededRNG] = None,
                 log_interval: int = 50):
        self.config = config or QLearningConfig()
        self.table = table if table is not None else ActionValueTable()
        self.rng = rng if rng is not None else SeededRNG(self.config.seed)
        self.log_interval = log_interval

        self.world = GridWorld.from_config(self.config)
        self.policy = EpsilonGreedyPolicy()
        self.learner = QLearner()
        self.runner = EpisodeRunner(self.world, self.policy, self.learner, self.rng)

        self.epsilon = self.config.epsilon
        self.episodes_completed = 0
        self.history: List[Episode] = []
        self.stopping_reason = ""
        self._stop_requested = False

    def reset(self):
        """Forget everything learned and start a fresh run."""
        self.table.reset()
        self.epsilon = self.config.epsilon
        self.episodes_completed = 0
        self.history.clear()
        self.stopping_reason = ""
        self._stop_requested = False

    def request_stop(self):
        """Ask the running generator to finish at the next step boundary."""
        self._stop_requested = True

    def decay_epsilon(self):
        """Decay epsilon for less exploration over time."""
        self.epsilon = max(self.config.epsilon_min,
                           self.epsilon * self.config.epsilon_decay)

    def iter_training(self, count: Optional[int] = None) -> Iterator[TrainingEvent]:
        """
        Train for ``count`` episodes (config.max_episodes by default).

        Yields every StepRecord as it happens and each Episode once it is
        finished. A stop request is honoured between steps and between
        episodes; updates already applied are kept.
        """
        self._stop_requested = False
        self.stopping_reason = ""
        return self._training_events(self.config.max_episodes if count is None else count)

    def _training_events(self, count: int) -> Iterator[TrainingEvent]:
        config = self.config
        for _ in range(count):
            if self._stop_requested:
                self.stopping_reason = "Training stopped by user"
                logger.info("Training stopped after %d episodes", self.episodes_completed)
                return

            steps = self.runner.iter_steps(
                self.table, config.start, config.goal, config.max_steps_per_episode,
                self.epsilon, config.learning_rate, config.discount_factor,
                number=self.episodes_completed + 1
            )
            while True:
                try:
                    record = next(steps)
                except StopIteration as finished:
                    episode = finished.value
                    break
                yield record
                if self._stop_requested:
                    steps.close()
                    self.stopping_reason = "Training stopped by user"
                    logger.info("Training stopped during episode %d", self.episodes_completed + 1)
                    return

            self._record_episode(episode)
            yield episode

    def _record_episode(self, episode: Episode):
        self.history.append(episode)
        self.episodes_completed += 1
        self.decay_epsilon()

        if self.log_interval and self.episodes_completed % self.log_interval == 0:
            recent = self.history[-self.log_interval:]
            recent_success = sum(1 for ep in recent if ep.reached_goal) / len(recent)
            logger.info("Episode %d: Success rate: %.1f%%, Epsilon: %.3f",
                        self.episodes_completed, recent_success * 100, self.epsilon)

    def episodes(self, count: Optional[int] = None) -> Iterator[Episode]:
        """Yield each finished episode."""
        for event in self.iter_training(count):
            if isinstance(event, Episode):
                yield event

    def rewards(self, count: Optional[int] = None) -> Iterator[float]:
        """Yield the total reward of each finished episode."""
        for episode in self.episodes(count):
            yield episode.total_reward

    def train(self, count: Optional[int] = None) -> TrainingResult:
        """Train for ``count`` episodes and summarize the run."""
        episodes_list = list(self.episodes(count))
        return self.summarize(episodes_list)

    def summarize(self, episodes_list: List[Episode]) -> TrainingResult:
        """Aggregate a list of episodes into a TrainingResult."""
        total_reward = sum(ep.total_reward for ep in episodes_list)
        average_reward = total_reward / len(episodes_list) if episodes_list else 0.0
        result = TrainingResult(
            episodes=episodes_list,
            total_episodes=len(episodes_list),
            successful_episodes=sum(1 for ep in episodes_list if ep.reached_goal),
            average_reward=average_reward,
            final_epsilon=self.epsilon,
            stopped_early=bool(self.stopping_reason),
            stopping_reason=self.stopping_reason or "Completed normally"
        )
        logger.info("Training finished: %d episodes, success rate %.1f%%, average reward %.2f",
                    result.total_episodes, result.success_rate * 100, result.average_reward)
        return result

    def greedy_path(self, start: Optional[Coord] = None,
                    max_steps: Optional[int] = None) -> PathfindingResult:
        """Follow the learned greedy policy without updating the table.

        Ties are broken by a rollout-only random source seeded from the
        config; the trainer's own stream is left untouched.
        """
        state = tuple(start) if start is not None else self.config.start
        max_steps = self.config.max_steps_per_episode if max_steps is None else max_steps
        goal = self.config.goal
        rollout_rng = SeededRNG(self.config.seed)

        path = [state]
        total_reward = 0.0
        while len(path) - 1 < max_steps and state != goal:
            action = self.policy.greedy(state, self.table, rollout_rng)
            state, reward = self.world.step(state, action)
            total_reward += reward
            path.append(state)

        return PathfindingResult(
            path=path,
            total_reward=total_reward,
            steps_taken=len(path) - 1,
            found=state == goal,
            training_episodes=self.episodes_completed
        )

    def snapshot(self):
        """Dump of the learned table for diagnostic display."""
        return self.table.snapshot()
