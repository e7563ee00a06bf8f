"""
Headless training for the grid world Q-learning agent.
Trains without a display, prints the reward of every episode and finishes by
walking the learned greedy path.
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from .domain.qlearning import QLearningTrainer
from .domain.types import QLearningConfig


def build_parser() -> argparse.ArgumentParser:
    defaults = QLearningConfig()
    parser = argparse.ArgumentParser(description="Headless grid world Q-learning")
    parser.add_argument("--episodes", type=int, default=defaults.max_episodes, help="Number of episodes to train")
    parser.add_argument("--grid-size", type=int, default=defaults.grid_size, help="Width and height of the grid")
    parser.add_argument("--start", type=int, nargs=2, metavar=("X", "Y"), default=defaults.start, help="Start cell")
    parser.add_argument("--goal", type=int, nargs=2, metavar=("X", "Y"), default=defaults.goal, help="Goal cell")
    parser.add_argument("--alpha", type=float, default=defaults.learning_rate, help="Learning rate")
    parser.add_argument("--gamma", type=float, default=defaults.discount_factor, help="Discount factor")
    parser.add_argument("--epsilon", type=float, default=defaults.epsilon, help="Exploration rate")
    parser.add_argument("--max-steps", type=int, default=defaults.max_steps_per_episode, help="Step budget per episode")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible runs")
    parser.add_argument("--dump-table", action="store_true", help="Print the final Q table as JSON")
    parser.add_argument("--verbose", action="store_true", help="Log every step")
    return parser


def config_from_args(args: argparse.Namespace) -> QLearningConfig:
    """Build a validated config from parsed arguments."""
    return QLearningConfig(
        grid_size=args.grid_size,
        start=tuple(args.start),
        goal=tuple(args.goal),
        learning_rate=args.alpha,
        discount_factor=args.gamma,
        epsilon=args.epsilon,
        max_episodes=args.episodes,
        max_steps_per_episode=args.max_steps,
        seed=args.seed,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(name)s %(levelname)s %(message)s",
    )

    try:
        config = config_from_args(args)
    except ValueError as e:
        print(f"Invalid configuration: {e}")
        return 1

    print("Grid World Q-Learning")
    print("=" * 50)
    print(f"Grid: {config.grid_size}x{config.grid_size}")
    print(f"Start: {config.start} -> Goal: {config.goal}")
    print(f"Alpha: {config.learning_rate}, Gamma: {config.discount_factor}, Epsilon: {config.epsilon}")
    print(f"Episodes: {config.max_episodes}, Max steps: {config.max_steps_per_episode}")

    trainer = QLearningTrainer(config)
    episodes = []
    try:
        for episode in trainer.episodes():
            episodes.append(episode)
            marker = "goal" if episode.reached_goal else "budget"
            print(f"Episode {episode.number:4d}: reward {episode.total_reward:7.2f} "
                  f"steps {episode.steps:3d} ({marker})")
    except KeyboardInterrupt:
        print("\nTraining interrupted by user")
        return 1

    result = trainer.summarize(episodes)
    print("\nTraining completed!")
    print(f"   Total episodes: {result.total_episodes}")
    print(f"   Successful episodes: {result.successful_episodes}")
    print(f"   Success rate: {result.success_rate:.1%}")
    print(f"   Average reward: {result.average_reward:.2f}")

    path_result = trainer.greedy_path()
    if path_result.success:
        print(f"Greedy path reaches the goal in {path_result.steps_taken} steps: "
              + " -> ".join(f"({x},{y})" for x, y in path_result.path))
    else:
        print(f"Greedy path does not reach the goal within {config.max_steps_per_episode} steps")

    if args.dump_table:
        print("\nFinal Q table:")
        print(json.dumps(trainer.snapshot(), indent=2))

    return 0


if __name__ == "__main__":
    sys.exit(main())
