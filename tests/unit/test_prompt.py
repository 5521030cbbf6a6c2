"""Tests for credential_cascade/prompt.py."""

import io
import subprocess
import sys
from unittest.mock import MagicMock, patch

import click
import pytest

from credential_cascade.enums import PromptMode
from credential_cascade.exceptions import PromptError
from credential_cascade.prompt import PromptOptions, ask


class TestPromptOptionsFromEnv:
    """Tests for reading git's prompt environment."""

    def test_defaults(self):
        options = PromptOptions.from_env({})

        assert options.mode == PromptMode.HIDDEN
        assert options.askpass is None

    @pytest.mark.parametrize("value", ["0", "false", "no", "off"])
    def test_terminal_prompt_disabled(self, value):
        options = PromptOptions.from_env({"GIT_TERMINAL_PROMPT": value})

        assert options.mode == PromptMode.DISABLED

    def test_terminal_prompt_enabled(self):
        options = PromptOptions.from_env({"GIT_TERMINAL_PROMPT": "1"})

        assert options.mode == PromptMode.HIDDEN

    def test_git_askpass_preferred_over_ssh_askpass(self):
        options = PromptOptions.from_env({"GIT_ASKPASS": "/bin/git-pass", "SSH_ASKPASS": "/bin/ssh-pass"})

        assert options.askpass == "/bin/git-pass"

    def test_empty_askpass_skipped(self):
        options = PromptOptions.from_env({"GIT_ASKPASS": "", "SSH_ASKPASS": "/bin/ssh-pass"})

        assert options.askpass == "/bin/ssh-pass"

    def test_reads_process_environment_by_default(self, monkeypatch):
        monkeypatch.setenv("GIT_TERMINAL_PROMPT", "0")
        monkeypatch.delenv("GIT_ASKPASS", raising=False)
        monkeypatch.delenv("SSH_ASKPASS", raising=False)

        assert PromptOptions.from_env().mode == PromptMode.DISABLED

    def test_with_mode_returns_copy(self):
        options = PromptOptions(mode=PromptMode.HIDDEN, askpass="/bin/pass")

        visible = options.with_mode(PromptMode.VISIBLE)

        assert visible.mode == PromptMode.VISIBLE
        assert visible.askpass == "/bin/pass"
        assert options.mode == PromptMode.HIDDEN


class TestAskTerminal:
    """Tests for prompting on the terminal."""

    def test_disabled_raises_with_prompt_text(self):
        with pytest.raises(PromptError) as exc_info:
            ask("Username: ", PromptOptions(mode=PromptMode.DISABLED))

        assert exc_info.value.prompt == "Username: "
        assert "Prompting is disabled" in str(exc_info.value)

    @patch("credential_cascade.prompt.click.prompt")
    def test_visible_prompt_echoes(self, mock_prompt):
        mock_prompt.return_value = "alice"

        answer = ask("Username: ", PromptOptions(mode=PromptMode.VISIBLE))

        assert answer == "alice"
        assert mock_prompt.call_args.args == ("Username: ",)
        assert mock_prompt.call_args.kwargs["hide_input"] is False
        assert mock_prompt.call_args.kwargs["err"] is True

    @patch("credential_cascade.prompt.click.prompt")
    def test_hidden_prompt_masks(self, mock_prompt):
        mock_prompt.return_value = "s3cret"

        answer = ask("Password: ", PromptOptions(mode=PromptMode.HIDDEN))

        assert answer == "s3cret"
        assert mock_prompt.call_args.kwargs["hide_input"] is True

    @patch("credential_cascade.prompt.click.prompt")
    def test_empty_answer_allowed(self, mock_prompt):
        mock_prompt.return_value = ""

        assert ask("Password: ", PromptOptions()) == ""

    @patch("credential_cascade.prompt.click.prompt", side_effect=click.Abort())
    def test_abort_raises_prompt_error(self, mock_prompt):
        with pytest.raises(PromptError) as exc_info:
            ask("Password: ", PromptOptions())

        assert exc_info.value.message == "Prompt was aborted"


class TestAskPass:
    """Tests for prompting through an askpass program."""

    @patch("credential_cascade.prompt.subprocess.run")
    @patch("credential_cascade.prompt.click.prompt")
    def test_askpass_used_instead_of_terminal(self, mock_prompt, mock_run):
        mock_run.return_value = MagicMock(returncode=0, stdout="s3cret\n")

        answer = ask("Password: ", PromptOptions(askpass="/usr/bin/askpass"))

        assert answer == "s3cret"
        mock_prompt.assert_not_called()
        assert mock_run.call_args.args[0] == ["/usr/bin/askpass", "Password: "]
        assert mock_run.call_args.kwargs["stdin"] == subprocess.DEVNULL

    @patch("credential_cascade.prompt.subprocess.run")
    def test_askpass_failure(self, mock_run):
        mock_run.return_value = MagicMock(returncode=1, stdout="")

        with pytest.raises(PromptError) as exc_info:
            ask("Password: ", PromptOptions(askpass="/usr/bin/askpass"))

        assert "status 1" in exc_info.value.message

    @patch("credential_cascade.prompt.subprocess.run", side_effect=FileNotFoundError("askpass"))
    def test_askpass_missing(self, mock_run):
        with pytest.raises(PromptError) as exc_info:
            ask("Password: ", PromptOptions(askpass="/usr/bin/askpass"))

        assert "could not be run" in exc_info.value.message

    def test_askpass_ignored_when_disabled(self):
        with patch("credential_cascade.prompt.subprocess.run") as mock_run:
            with pytest.raises(PromptError):
                ask("Password: ", PromptOptions(mode=PromptMode.DISABLED, askpass="/usr/bin/askpass"))

        mock_run.assert_not_called()

    @patch("credential_cascade.prompt.subprocess.run")
    def test_askpass_first_line_only(self, mock_run):
        """Only the first line of askpass output is the answer."""
        mock_run.return_value = MagicMock(returncode=0, stdout="first\nsecond\n")

        answer = ask("Password: ", PromptOptions(askpass="/usr/bin/askpass"))

        assert answer == "first"

    @patch("credential_cascade.prompt.subprocess.run")
    def test_askpass_without_output(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0, stdout="")

        assert ask("Password: ", PromptOptions(askpass="/usr/bin/askpass")) == ""


class TestTerminalInput:
    """Tests for reading visible answers from the controlling terminal."""

    def test_visible_answer_read_from_terminal(self):
        """The terminal is read even when stdin has been used up."""
        terminal = io.StringIO("alice\n")
        original_stdin = sys.stdin

        with patch("credential_cascade.prompt.click.open_file", return_value=terminal) as mock_open:
            answer = ask("Username: ", PromptOptions(mode=PromptMode.VISIBLE))

        assert answer == "alice"
        assert mock_open.call_args.args == ("/dev/tty", "r")
        assert sys.stdin is original_stdin
        assert terminal.closed

    def test_stdin_restored_after_abort(self):
        terminal = io.StringIO("")
        original_stdin = sys.stdin

        with patch("credential_cascade.prompt.click.open_file", return_value=terminal):
            with pytest.raises(PromptError):
                ask("Username: ", PromptOptions(mode=PromptMode.VISIBLE))

        assert sys.stdin is original_stdin

    def test_falls_back_to_stdin_without_terminal(self, monkeypatch):
        monkeypatch.setattr(sys, "stdin", io.StringIO("bob\n"))

        with patch("credential_cascade.prompt.click.open_file", side_effect=OSError("No such device")):
            answer = ask("Username: ", PromptOptions(mode=PromptMode.VISIBLE))

        assert answer == "bob"
