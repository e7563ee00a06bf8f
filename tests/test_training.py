import json

import pytest

from gridq.domain.qlearning import QLearningTrainer
from gridq.domain.types import Episode, QLearningConfig, StepRecord


@pytest.fixture
def config():
    return QLearningConfig(
        grid_size=5, start=(0, 0), goal=(4, 4),
        learning_rate=0.1, discount_factor=0.9, epsilon=0.2,
        max_steps_per_episode=30, seed=42,
    )


def test_learning_progress_and_greedy_path(config):
    trainer = QLearningTrainer(config)
    result = trainer.train(200)

    rewards = result.rewards
    assert len(rewards) == 200
    first = sum(rewards[:10]) / 10
    last = sum(rewards[-10:]) / 10
    assert last > first

    path = trainer.greedy_path()
    assert path.found
    assert path.steps_taken <= 2 * (config.grid_size - 1)
    assert path.path[0] == (0, 0)
    assert path.path[-1] == (4, 4)


def test_same_seed_replays_exactly(config):
    first = QLearningTrainer(config)
    second = QLearningTrainer(config)
    assert list(first.rewards(25)) == list(second.rewards(25))
    assert first.snapshot() == second.snapshot()


def test_trainers_are_independent(config):
    trained = QLearningTrainer(config)
    untouched = QLearningTrainer(config)
    trained.train(10)
    assert len(untouched.table) == 0
    assert untouched.episodes_completed == 0


def test_rewards_yield_one_value_per_episode(config):
    trainer = QLearningTrainer(config)
    rewards = list(trainer.rewards(12))
    assert len(rewards) == 12
    assert rewards == [ep.total_reward for ep in trainer.history]


def test_table_persists_across_runs(config):
    trainer = QLearningTrainer(config)
    trainer.train(3)
    snapshot = trainer.snapshot()
    result = trainer.train(2)
    assert [ep.number for ep in result.episodes] == [4, 5]
    assert trainer.episodes_completed == 5
    assert set(snapshot) <= set(trainer.snapshot())


def test_iter_training_interleaves_steps_and_episodes(config):
    trainer = QLearningTrainer(config)
    events = list(trainer.iter_training(3))
    episodes = [e for e in events if isinstance(e, Episode)]
    assert len(episodes) == 3
    assert isinstance(events[-1], Episode)

    steps_in_episode = 0
    for event in events:
        if isinstance(event, StepRecord):
            steps_in_episode += 1
        else:
            assert event.steps == steps_in_episode
            steps_in_episode = 0


def test_stop_between_episodes(config):
    trainer = QLearningTrainer(config)
    seen = []
    for episode in trainer.episodes(50):
        seen.append(episode)
        if len(seen) == 5:
            trainer.request_stop()
    assert len(seen) == 5
    assert trainer.episodes_completed == 5

    result = trainer.summarize(seen)
    assert result.stopped_early
    assert result.stopping_reason == "Training stopped by user"


def test_stop_mid_episode_keeps_updates(config):
    trainer = QLearningTrainer(config)
    events = trainer.iter_training(5)
    first = next(events)
    assert isinstance(first, StepRecord)
    trainer.request_stop()
    assert list(events) == []
    assert trainer.history == []
    assert trainer.table.get(first.state, first.action) != 0.0


def test_stop_before_first_pull(config):
    trainer = QLearningTrainer(config)
    events = trainer.iter_training(5)
    trainer.request_stop()
    assert list(events) == []
    assert len(trainer.table) == 0


def test_epsilon_decay(config):
    config = config.replace(epsilon=0.5, epsilon_decay=0.5, epsilon_min=0.1)
    trainer = QLearningTrainer(config)
    result = trainer.train(4)
    assert [ep.epsilon_used for ep in result.episodes] == pytest.approx([0.5, 0.25, 0.125, 0.1])
    assert result.final_epsilon == pytest.approx(0.1)


def test_constant_epsilon_by_default(config):
    trainer = QLearningTrainer(config)
    result = trainer.train(5)
    assert all(ep.epsilon_used == 0.2 for ep in result.episodes)


def test_summary_statistics(config):
    trainer = QLearningTrainer(config)
    result = trainer.train(20)
    assert result.total_episodes == 20
    assert result.successful_episodes == sum(ep.reached_goal for ep in result.episodes)
    assert result.average_reward == pytest.approx(sum(result.rewards) / 20)
    assert not result.stopped_early
    assert result.stopping_reason == "Completed normally"
    assert all(ep.steps <= 30 for ep in result.episodes)


def test_reset_forgets_everything(config):
    trainer = QLearningTrainer(config)
    trainer.train(5)
    trainer.reset()
    assert len(trainer.table) == 0
    assert trainer.history == []
    assert trainer.episodes_completed == 0
    assert trainer.epsilon == config.epsilon


def test_greedy_path_does_not_learn(config):
    trainer = QLearningTrainer(config)
    trainer.train(5)
    before = trainer.snapshot()
    result = trainer.greedy_path(max_steps=5)
    assert result.steps_taken <= 5
    for key, values in before.items():
        assert trainer.snapshot()[key] == values


def test_greedy_path_from_goal(config):
    trainer = QLearningTrainer(config)
    result = trainer.greedy_path(start=(4, 4))
    assert result.found
    assert result.path == [(4, 4)]
    assert result.steps_taken == 0


def test_snapshot_is_json_serializable(config):
    trainer = QLearningTrainer(config)
    trainer.train(3)
    dumped = json.loads(json.dumps(trainer.snapshot()))
    assert dumped == trainer.snapshot()


def test_greedy_path_leaves_training_stream_alone(config):
    inspected = QLearningTrainer(config)
    untouched = QLearningTrainer(config)
    inspected.train(10)
    untouched.train(10)

    inspected.greedy_path()
    inspected.greedy_path()

    assert list(inspected.rewards(10)) == list(untouched.rewards(10))
    assert inspected.snapshot() == untouched.snapshot()


def test_greedy_path_is_repeatable(config):
    trainer = QLearningTrainer(config)
    trainer.train(3)
    assert trainer.greedy_path().path == trainer.greedy_path().path
