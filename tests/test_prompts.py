"""Unit tests for decision gates (create_npl.prompts)."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from create_npl.prompts import DecisionGate, decide, rich_confirm

pytestmark = pytest.mark.unit


class TestDecide:
    def test_auto_mode_returns_default_without_asking(self, scripted_confirm):
        confirm = scripted_confirm()
        assert decide("Overwrite?", False, True, confirm) is False
        assert decide("Create?", True, True, confirm) is True
        assert confirm.questions == []

    def test_interactive_uses_answer(self, scripted_confirm):
        confirm = scripted_confirm(False)
        assert decide("Create config?", True, False, confirm) is False
        assert confirm.questions == [("Create config?", True)]

    def test_auto_mode_prints_notice(self, capsys):
        decide("Overwrite existing directory?", True, True)
        out = capsys.readouterr().out
        assert "Auto mode" in out
        assert "Overwrite existing directory?" in out

    def test_rich_confirm_passes_default(self):
        with patch("create_npl.prompts.Confirm.ask", return_value=True) as ask:
            assert rich_confirm("Proceed?", False) is True
        assert ask.call_args.kwargs["default"] is False


class TestDecisionGate:
    def test_outcome_records_gate(self, scripted_confirm):
        gate = DecisionGate(auto_mode=False, confirm=scripted_confirm(True))
        outcome = gate.decide("generateClient", "Generate?", default=True)
        assert outcome.gate == "generateClient"
        assert outcome.value is True

    def test_auto_default_overrides_in_auto_mode(self, scripted_confirm):
        gate = DecisionGate(auto_mode=True, confirm=scripted_confirm())
        outcome = gate.decide("overwrite", "Overwrite?", default=False, auto_default=True)
        assert outcome.value is True

    def test_auto_default_ignored_interactively(self, scripted_confirm):
        confirm = scripted_confirm(False)
        gate = DecisionGate(auto_mode=False, confirm=confirm)
        outcome = gate.decide("overwrite", "Overwrite?", default=False, auto_default=True)
        assert outcome.value is False
        assert confirm.questions == [("Overwrite?", False)]
