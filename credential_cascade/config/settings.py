"""
Configuration system using Pydantic for type-safe settings management.

Settings decide which helper programs the cascade runs, in which order, and
how the user is prompted for anything the helpers don't know. They are read
from a YAML file and/or ``CREDENTIAL_CASCADE_*`` environment variables.

Example configuration::

    helpers:
      - cache --timeout 3600
      - store --file ${HOME}/.git-credentials
    use_platform_helper: true
    stderr: false
    helper_timeout: 30
    prompt:
      enabled: true
      askpass: ${GIT_ASKPASS:-}
"""

from __future__ import annotations

import functools
import os
import re
from collections.abc import Mapping
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from credential_cascade.cascade import Cascade
from credential_cascade.enums import PromptMode
from credential_cascade.exceptions import ConfigurationError
from credential_cascade.helper.invoke import invoke_helper
from credential_cascade.helper.program import Program
from credential_cascade.prompt import PromptOptions


class PromptConfig(BaseModel):
    """Interactive prompt configuration."""

    enabled: bool = Field(default=True, description="Ask the user for fields no helper supplied")
    askpass: str | None = Field(default=None, description="Askpass program to use instead of the terminal")


class CascadeSettings(BaseSettings):
    """Credential cascade settings.

    Combines helper selection, helper process options and prompt settings,
    and can build a ready-to-use ``Cascade`` from them.
    """

    model_config = SettingsConfigDict(
        env_prefix="CREDENTIAL_CASCADE_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    helpers: list[str] = Field(
        default_factory=list,
        description="Helper definitions in git credential.helper syntax, highest precedence first",
    )
    use_platform_helper: bool = Field(
        default=False,
        description="Consult the platform's usual helper (osxkeychain, libsecret, manager-core) first",
    )
    stderr: bool = Field(default=True, description="Let helpers write to stderr")
    helper_timeout: float | None = Field(default=None, gt=0, description="Seconds to wait for each helper")
    prompt: PromptConfig = Field(default_factory=PromptConfig)
    log_level: str = Field(default="WARNING", description="Minimum log level")

    @field_validator("helpers")
    @classmethod
    def validate_helpers(cls, v: list[str]) -> list[str]:
        """Reject empty helper definitions.

        Args:
            v: Helper definitions

        Returns:
            Stripped definitions

        Raises:
            ValueError: If a definition is blank
        """
        stripped = [helper.strip() for helper in v]
        if any(not helper for helper in stripped):
            raise ValueError("Helper definitions must not be empty")
        return stripped

    def programs(self) -> list[Program]:
        """Build the helper programs, platform helper first when enabled.

        Raises:
            ConfigurationError: If a helper definition can't be parsed
        """
        programs = Cascade.platform_builtin() if self.use_platform_helper else []
        programs.extend(Program.from_custom_definition(helper) for helper in self.helpers)
        return programs

    def build_cascade(self) -> Cascade:
        """Build a cascade from these settings."""
        invoker = functools.partial(invoke_helper, timeout=self.helper_timeout)
        return Cascade(self.programs(), stderr=self.stderr, invoker=invoker)

    def prompt_options(self, environ: Mapping[str, str] | None = None) -> PromptOptions:
        """Combine prompt settings with git's prompt environment variables.

        The environment can disable prompting, and supplies an askpass
        program only when none is configured.

        Args:
            environ: Environment to read; defaults to ``os.environ``
        """
        from_env = PromptOptions.from_env(environ)
        mode = from_env.mode if self.prompt.enabled else PromptMode.DISABLED
        return PromptOptions(mode=mode, askpass=self.prompt.askpass or from_env.askpass)

    @classmethod
    def from_yaml(cls, config_path: str) -> CascadeSettings:
        """Load settings from YAML file with environment variable interpolation.

        Supports ${VAR_NAME} syntax for environment variable substitution.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            CascadeSettings instance

        Raises:
            ConfigurationError: If config file is invalid or missing required fields
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with open(config_file) as f:
                yaml_content = f.read()
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file: {config_path}") from e

        try:
            yaml_content = cls._interpolate_env_vars(yaml_content)
        except ValueError as e:
            raise ConfigurationError(f"Invalid environment variable reference in config: {e}") from e

        try:
            config_dict = yaml.safe_load(yaml_content)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in {config_path}: {e}") from e

        # An empty file means all defaults
        if config_dict is None:
            config_dict = {}
        if not isinstance(config_dict, dict):
            raise ConfigurationError("Configuration must be a YAML object, not a list or scalar")

        try:
            return cls(**config_dict)
        except Exception as e:
            raise ConfigurationError(f"Failed to validate configuration: {e}") from e

    @staticmethod
    def _interpolate_env_vars(content: str) -> str:
        """Interpolate ${VAR_NAME} placeholders with environment variables.

        Supports two syntaxes:
        - ${VAR_NAME} - Required environment variable (raises if not set)
        - ${VAR_NAME:-default} - Optional with default value

        YAML comment lines are left unchanged.

        Raises:
            ValueError: If a required environment variable is not set
        """
        pattern = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")

        def replace_var(match: re.Match[str]) -> str:
            var_name = match.group(1)
            default_value = match.group(2)
            value = os.getenv(var_name)

            if value is not None:
                return value
            elif default_value is not None:
                return default_value
            else:
                raise ValueError(f"Environment variable {var_name} is not set")

        def process_line(line: str) -> str:
            if line.lstrip().startswith("#"):
                return line
            return pattern.sub(replace_var, line)

        return "\n".join(process_line(line) for line in content.split("\n"))
