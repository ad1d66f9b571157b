"""
Tests for the command-line entry point.
"""

import dataclasses

import pytest
from unittest.mock import patch, MagicMock

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import main
from config import PipelineOptions
from pipeline import PipelineResult, PipelineState


@pytest.fixture
def mock_pipeline():
    with patch('main.HyperlapsePipeline') as mock_cls:
        instance = MagicMock()
        instance.run.return_value = PipelineResult(state=PipelineState.DONE, exit_code=0)
        mock_cls.return_value = instance
        yield mock_cls


class TestArguments:

    def test_help_exits_zero(self, config, capsys):
        with pytest.raises(SystemExit) as exc:
            main.main(["--help"], config=config)

        assert exc.value.code == 0
        out = capsys.readouterr().out
        assert "--skip-fetch" in out
        assert "--only-coordinates" in out

    def test_short_help(self, config):
        with pytest.raises(SystemExit) as exc:
            main.main(["-h"], config=config)

        assert exc.value.code == 0

    @pytest.mark.parametrize("argv, expected", [
        ([], PipelineOptions()),
        (["-s"], PipelineOptions(skip_fetch=True)),
        (["--skip-fetch"], PipelineOptions(skip_fetch=True)),
        (["-c"], PipelineOptions(only_coordinates=True)),
        (["--only-coordinates"], PipelineOptions(only_coordinates=True)),
    ])
    def test_flags_become_options(self, config, mock_pipeline, argv, expected):
        assert main.main(argv, config=config) == 0

        args, _ = mock_pipeline.call_args
        assert args[1] == expected


class TestApiKey:

    def test_missing_key_exits_one(self, config, mock_pipeline, capsys):
        config = dataclasses.replace(config, api_key="")

        assert main.main([], config=config) == 1

        mock_pipeline.assert_not_called()
        assert "GOOGLE_API_KEY" in capsys.readouterr().out

    def test_skip_fetch_needs_no_key(self, config, mock_pipeline):
        config = dataclasses.replace(config, api_key="")

        assert main.main(["--skip-fetch"], config=config) == 0


def test_exit_code_comes_from_pipeline(config, mock_pipeline):
    mock_pipeline.return_value.run.return_value = PipelineResult(state=PipelineState.ABORTED, exit_code=1)

    assert main.main([], config=config) == 1


def test_print_progress(capsys):
    main.print_progress(3, 3, "  Fetching: ")

    out = capsys.readouterr().out
    assert "100.0% (3/3)" in out
    assert out.endswith("\n")
