"""Tests for credential_cascade/helper/program.py."""

import pytest

from credential_cascade.enums import ActionKind, ProgramKind
from credential_cascade.exceptions import ConfigurationError
from credential_cascade.helper.program import SHELL, Program


class TestFromCustomDefinition:
    """Tests for parsing credential.helper style definitions."""

    def test_short_name_expands_to_git_subcommand(self):
        program = Program.from_custom_definition("store --file ~/.creds")

        assert program.kind == ProgramKind.EXTERNAL_NAME
        assert program.args == ["git", "credential-store", "--file", "~/.creds"]

    def test_quoted_arguments_are_split_like_a_shell(self):
        program = Program.from_custom_definition("store --file 'my creds'")

        assert program.args == ["git", "credential-store", "--file", "my creds"]

    def test_absolute_path(self):
        program = Program.from_custom_definition("/usr/local/bin/helper --verbose")

        assert program.kind == ProgramKind.EXTERNAL_PATH
        assert program.args == ["/usr/local/bin/helper", "--verbose"]

    def test_shell_script(self):
        """The snippet runs through the shell with the action as $1."""
        program = Program.from_custom_definition("!echo password=x")

        assert program.kind == ProgramKind.EXTERNAL_SHELL_SCRIPT
        assert program.args == [SHELL, "-c", 'echo password=x "$@"', "echo password=x"]

    def test_surrounding_whitespace_stripped(self):
        program = Program.from_custom_definition("  cache  ")

        assert program.definition == "cache"
        assert str(program) == "cache"

    @pytest.mark.parametrize("definition", ["", "   ", "!"])
    def test_empty_definition_rejected(self, definition):
        with pytest.raises(ConfigurationError):
            Program.from_custom_definition(definition)

    def test_unbalanced_quotes_rejected(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Program.from_custom_definition("store --file 'unterminated")

        assert "Invalid credential helper definition" in exc_info.value.message

    def test_stderr_enabled_by_default(self):
        assert Program.from_custom_definition("cache").stderr is True


class TestCommand:
    """Tests for building the command line."""

    @pytest.mark.parametrize(
        "kind,verb",
        [(ActionKind.GET, "get"), (ActionKind.STORE, "store"), (ActionKind.ERASE, "erase")],
    )
    def test_external_helper_gets_action_verb(self, kind, verb):
        program = Program.from_custom_definition("cache --timeout 60")

        assert program.command(kind) == ["git", "credential-cache", "--timeout", "60", verb]

    @pytest.mark.parametrize(
        "kind,verb",
        [(ActionKind.GET, "fill"), (ActionKind.STORE, "approve"), (ActionKind.ERASE, "reject")],
    )
    def test_builtin_uses_git_credential_verbs(self, kind, verb):
        program = Program.builtin()

        assert program.kind == ProgramKind.BUILTIN
        assert program.command(kind) == ["git", "credential", verb]

    def test_command_does_not_modify_args(self):
        program = Program.from_custom_definition("cache")

        program.command(ActionKind.GET)

        assert program.args == ["git", "credential-cache"]
