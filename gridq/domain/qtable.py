"""Action-value table for tabular Q-learning."""

from typing import Dict

from .types import Action, Coord, QValues, coord_key, validate_action
from ..utils.rng import SeededRNG


class ActionValueTable:
    """Mapping from grid coordinate to the Q-values of every action.

    States are created lazily: querying a state that has never been seen
    inserts an all-zero QValues entry for it.
    """

    def __init__(self):
        self._values: Dict[Coord, QValues] = {}

    def q_values(self, state: Coord) -> QValues:
        """Get the QValues of a state, creating them on first access."""
        state = tuple(state)
        entry = self._values.get(state)
        if entry is None:
            entry = QValues()
            self._values[state] = entry
        return entry

    def get(self, state: Coord, action: Action) -> float:
        """Get Q-value for state-action pair."""
        validate_action(action)
        return self.q_values(state).get(action)

    def set(self, state: Coord, action: Action, value: float) -> None:
        """Set Q-value for state-action pair."""
        validate_action(action)
        self.q_values(state).set(action, value)

    def max_value(self, state: Coord) -> float:
        """Maximum Q-value over all actions of a state."""
        return self.q_values(state).max_value()

    def best_action(self, state: Coord, rng: SeededRNG) -> Action:
        """Action with the highest Q-value, ties broken uniformly at random."""
        return rng.choice(self.q_values(state).best_actions())

    def reset(self) -> None:
        """Forget every learned value."""
        self._values.clear()

    def snapshot(self) -> Dict[str, Dict[str, float]]:
        """Dump the table as plain dicts keyed by "x,y", sorted by coordinate."""
        return {
            coord_key(state): self._values[state].as_dict()
            for state in sorted(self._values)
        }

    def __contains__(self, state) -> bool:
        return tuple(state) in self._values

    def __len__(self) -> int:
        return len(self._values)
