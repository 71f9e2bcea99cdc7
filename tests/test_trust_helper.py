"""Tests for the remote trust helper."""

import pytest

from certctl import trust_helper


@pytest.mark.unit
class TestTrustHelper:
    def test_choice_4_updates_trust(self, fake_run):
        assert trust_helper.main(["4"]) == 0
        assert fake_run.commands == [["update-ca-trust"]]

    def test_failure_status_is_returned(self, fake_run):
        fake_run.returncode = 2

        assert trust_helper.main(["4"]) == 2

    def test_missing_command(self, fake_run):
        fake_run.exception = FileNotFoundError("update-ca-trust")

        assert trust_helper.main(["4"]) == 127

    @pytest.mark.parametrize("args", [[], ["1"], ["4", "extra"]])
    def test_other_choices_are_rejected(self, fake_run, capsys, args):
        assert trust_helper.main(args) == 1
        assert "Invalid choice. Exiting." in capsys.readouterr().out
        assert fake_run.commands == []
