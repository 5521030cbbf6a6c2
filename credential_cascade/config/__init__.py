"""Configuration for the credential cascade.

Key Components:
    - CascadeSettings: Helper selection, process and prompt settings with
      YAML loading support
    - PromptConfig: Interactive prompt settings

Example:
    >>> from credential_cascade.config import CascadeSettings
    >>> settings = CascadeSettings.from_yaml("cascade.yaml")
    >>> cascade = settings.build_cascade()
"""

from credential_cascade.config.settings import CascadeSettings, PromptConfig

__all__ = ["CascadeSettings", "PromptConfig"]
