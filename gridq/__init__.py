"""GridQ - tabular Q-learning on a 2-D grid world.

This package implements an epsilon-greedy Q-learning agent that learns to walk
from a start cell to a goal cell, with a Qt viewer that animates the agent and
charts the reward of every episode.
"""

__version__ = "1.0.0"
__author__ = "GridQ Demo"
