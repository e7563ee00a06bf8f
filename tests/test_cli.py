import json

from gridq.cli import build_parser, config_from_args, main


def test_parser_defaults_match_config():
    config = config_from_args(build_parser().parse_args([]))
    assert config.grid_size == 5
    assert config.start == (0, 0)
    assert config.goal == (4, 4)
    assert config.max_episodes == 200


def test_run_prints_episodes_and_table(capsys):
    code = main(["--episodes", "15", "--seed", "3", "--dump-table"])
    out = capsys.readouterr().out
    assert code == 0
    assert "Episode    1:" in out
    assert "Episode   15:" in out
    assert "Total episodes: 15" in out

    dumped = out.split("Final Q table:\n", 1)[1]
    table = json.loads(dumped)
    assert "0,0" in table
    assert set(table["0,0"]) == {"up", "down", "left", "right"}


def test_custom_grid(capsys):
    code = main(["--episodes", "5", "--grid-size", "3", "--goal", "2", "0", "--seed", "1"])
    assert code == 0
    assert "Start: (0, 0) -> Goal: (2, 0)" in capsys.readouterr().out


def test_invalid_configuration_exits_with_error(capsys):
    assert main(["--grid-size", "3", "--goal", "5", "5"]) == 1
    assert "Invalid configuration" in capsys.readouterr().out
    assert main(["--epsilon", "2"]) == 1
