"""
Tests for the command-line interface.
"""

import pytest

from ..cli import main


class TestSimulate:

    def test_simulate_prints_game(self, capsys):
        main(["simulate", "--players", "3", "--seed", "5", "--max-turns", "5000"])

        out = capsys.readouterr().out
        assert "starts (weakest towers:" in out
        assert "T1 - " in out
        assert "Winner: Bot " in out

    def test_simulate_with_pacts(self, capsys):
        main(["simulate", "--players", "2", "--seed", "8", "--pacts", "--breach", "penalty", "--max-turns", "5000"])

        assert "Winner: Bot " in capsys.readouterr().out

    def test_simulate_bad_player_count(self, capsys):
        with pytest.raises(SystemExit):
            main(["simulate", "--players", "6"])
        assert "Error:" in capsys.readouterr().out

    def test_no_command(self):
        with pytest.raises(SystemExit):
            main([])
