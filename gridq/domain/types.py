"""Core type definitions for the grid world Q-learning engine."""

from dataclasses import dataclass, field, fields, replace as dataclass_replace
from typing import Optional, Tuple, Literal, Dict, Union
import numpy as np

# Coordinate type for grid positions
Coord = Tuple[int, int]

# Actions the agent can take
Action = Literal["up", "down", "left", "right"]

# Fixed action set; this order is the iteration order for max-over-actions
ACTIONS: Tuple[Action, ...] = ("up", "down", "left", "right")

# Screen convention: y grows downward
ACTION_DELTAS: Dict[Action, Coord] = {
    "up": (0, -1),
    "down": (0, 1),
    "left": (-1, 0),
    "right": (1, 0),
}

# Training modes used by the desktop viewer
TrainingMode = Literal["background", "visual"]


def validate_action(action: str) -> Action:
    """Return the action unchanged, raising ValueError if it is not one of ACTIONS."""
    if action not in ACTION_DELTAS:
        raise ValueError(f"Unknown action {action!r}, expected one of {ACTIONS}")
    return action


def is_grid_int(value) -> bool:
    """True for plain or numpy integers; bools and floats are not grid indices."""
    return isinstance(value, (int, np.integer)) and not isinstance(value, (bool, np.bool_))


def is_cell(coord) -> bool:
    """True if coord is an (x, y) pair of integers."""
    try:
        return len(coord) == 2 and all(is_grid_int(c) for c in coord)
    except TypeError:
        return False


def coord_key(coord: Coord) -> str:
    """String key used when dumping coordinates ("x,y")."""
    return f"{coord[0]},{coord[1]}"


@dataclass
class QValues:
    """Stores Q-values for all actions at a state."""
    up: float = 0.0
    down: float = 0.0
    left: float = 0.0
    right: float = 0.0

    def get(self, action: Action) -> float:
        return getattr(self, validate_action(action))

    def set(self, action: Action, value: float) -> None:
        setattr(self, validate_action(action), float(value))

    def as_array(self) -> np.ndarray:
        """Return Q-values as numpy array in ACTIONS order."""
        return np.array([self.up, self.down, self.left, self.right])

    def as_dict(self) -> Dict[str, float]:
        return {action: getattr(self, action) for action in ACTIONS}

    def max_value(self) -> float:
        """Get the maximum Q-value."""
        return max(self.up, self.down, self.left, self.right)

    def best_actions(self) -> Tuple[Action, ...]:
        """All actions attaining the maximum Q-value, in ACTIONS order."""
        values = self.as_array()
        return tuple(ACTIONS[i] for i in np.flatnonzero(values == values.max()))


@dataclass
class QLearningConfig:
    """Configuration for the Q-learning engine and its hosts."""
    grid_size: int = 5
    start: Coord = (0, 0)
    goal: Coord = (4, 4)
    learning_rate: float = 0.1  # alpha
    discount_factor: float = 0.9  # gamma
    epsilon: float = 0.2
    epsilon_decay: float = 1.0  # 1.0 keeps epsilon constant
    epsilon_min: float = 0.0
    max_episodes: int = 200
    max_steps_per_episode: int = 30
    reward_goal: float = 10.0
    reward_step: float = -0.1
    seed: Optional[int] = None
    # Host pacing only, never used by the engine itself
    training_mode: TrainingMode = "visual"
    step_delay_ms: int = 200
    episode_delay_ms: int = 50

    def __post_init__(self):
        self.start = tuple(self.start)
        self.goal = tuple(self.goal)

        if not is_grid_int(self.grid_size) or self.grid_size <= 0:
            raise ValueError(f"grid_size must be a positive integer, got {self.grid_size!r}")
        for name in ("start", "goal"):
            coord = getattr(self, name)
            if not is_cell(coord):
                raise ValueError(f"{name} must be a pair of integers, got {coord!r}")
            if not all(0 <= c < self.grid_size for c in coord):
                raise ValueError(
                    f"{name} {coord} lies outside the {self.grid_size}x{self.grid_size} grid"
                )
        for name in ("learning_rate", "discount_factor", "epsilon_decay"):
            value = getattr(self, name)
            if not 0.0 < value <= 1.0:
                raise ValueError(f"{name} must be in (0, 1], got {value}")
        if not 0.0 <= self.epsilon <= 1.0:
            raise ValueError(f"epsilon must be in [0, 1], got {self.epsilon}")
        if not 0.0 <= self.epsilon_min <= self.epsilon:
            raise ValueError(
                f"epsilon_min must be in [0, epsilon={self.epsilon}], got {self.epsilon_min}"
            )
        if self.max_episodes < 1:
            raise ValueError(f"max_episodes must be at least 1, got {self.max_episodes}")
        if self.max_steps_per_episode < 1:
            raise ValueError(
                f"max_steps_per_episode must be at least 1, got {self.max_steps_per_episode}"
            )
        if self.training_mode not in ("background", "visual"):
            raise ValueError(f"Unknown training_mode {self.training_mode!r}")
        if self.step_delay_ms < 0 or self.episode_delay_ms < 0:
            raise ValueError("Delays must be non-negative")

    def replace(self, **changes) -> "QLearningConfig":
        """Return a validated copy with the given fields changed."""
        known = {f.name for f in fields(self)}
        unknown = set(changes) - known
        if unknown:
            raise ValueError(f"Unknown config fields: {sorted(unknown)}")
        return dataclass_replace(self, **changes)


@dataclass(frozen=True)
class StepRecord:
    """One transition taken during an episode."""
    step: int
    state: Coord
    action: Action
    reward: float
    next_state: Coord
    total_reward: float


@dataclass
class Episode:
    """Represents a single training episode."""
    number: int
    steps: int
    total_reward: float
    reached_goal: bool
    epsilon_used: float
    elapsed_time: float = 0.0  # Time taken for this episode in seconds


# Items produced by step-by-step training
TrainingEvent = Union[StepRecord, Episode]


@dataclass
class TrainingResult:
    """Result of a training run."""
    episodes: list[Episode] = field(default_factory=list)
    total_episodes: int = 0
    successful_episodes: int = 0
    average_reward: float = 0.0
    final_epsilon: float = 0.0
    stopped_early: bool = False
    stopping_reason: str = ""

    @property
    def rewards(self) -> list[float]:
        """Total reward per episode, in order."""
        return [ep.total_reward for ep in self.episodes]

    @property
    def success_rate(self) -> float:
        """Calculate success rate."""
        return self.successful_episodes / self.total_episodes if self.total_episodes > 0 else 0.0


@dataclass
class PathfindingResult:
    """Result of following the learned greedy policy."""
    path: list[Coord] = field(default_factory=list)
    total_reward: float = 0.0
    steps_taken: int = 0
    found: bool = False
    training_episodes: int = 0

    @property
    def success(self) -> bool:
        """Whether the goal was reached."""
        return self.found and len(self.path) > 0
