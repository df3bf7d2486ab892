"""Configuration management for ssh-ident"""

import os
import re
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from ssh_ident.constants import (
    DEFAULTS,
    HOME_PLACEHOLDER,
    PATH_PARAMETERS,
    STRUCTURED_PARAMETERS,
)
from ssh_ident.exceptions import ConfigurationError
from ssh_ident.logger import LogLevel


class UserConfigSchema(BaseModel):
    """Schema of the user config file (and of environment overrides)"""

    model_config = ConfigDict(extra="forbid", coerce_numbers_to_str=True)

    FILE_USER_CONFIG: Optional[str] = None
    DIR_IDENTITIES: Optional[str] = None
    DIR_AGENTS: Optional[str] = None
    PATTERN_KEYS: Optional[str] = None
    PATTERN_CONFIG: Optional[str] = None
    SSH_OPTIONS: Optional[Dict[str, str]] = None
    SSH_DEFAULT_OPTIONS: Optional[str] = None
    SSH_ADD_OPTIONS: Optional[Dict[str, str]] = None
    SSH_ADD_DEFAULT_OPTIONS: Optional[str] = None
    BINARY_SSH: Optional[str] = None
    BINARY_DIR: Optional[str] = None
    DEFAULT_IDENTITY: Optional[str] = None
    MATCH_PATH: Optional[List[Tuple[str, str]]] = None
    MATCH_ARGV: Optional[List[Tuple[str, str]]] = None
    SSH_BATCH_MODE: Optional[bool] = None
    VERBOSITY: Optional[Union[int, str]] = None
    FILE_LOG: Optional[str] = None

    @field_validator("PATTERN_KEYS", "PATTERN_CONFIG")
    @classmethod
    def _check_pattern(cls, value: Optional[str]) -> Optional[str]:
        if value is not None:
            try:
                re.compile(value)
            except re.error as e:
                raise ValueError(f"invalid regular expression '{value}': {e}")
        return value

    @field_validator("MATCH_PATH", "MATCH_ARGV")
    @classmethod
    def _check_rules(cls, rules):
        for regex, _identity in rules or []:
            try:
                re.compile(regex)
            except re.error as e:
                raise ValueError(f"invalid regular expression '{regex}': {e}")
        return rules

    @field_validator("VERBOSITY")
    @classmethod
    def _check_verbosity(cls, value):
        if value is not None:
            LogLevel.parse(value)
        return value


def _validate(data: Dict[str, Any], source: str) -> Dict[str, Any]:
    """Validate raw parameters against the schema, dropping unset ones."""
    try:
        schema = UserConfigSchema.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {source}", context=str(e))
    return schema.model_dump(exclude_none=True)


class IdentConfig:
    """
    Resolved ssh-ident configuration.

    Lookup order for every parameter:
        1. values injected with set() (autodetection)
        2. environment variable of the same name
        3. user config file (YAML)
        4. built-in default
    """

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        """
        Initialize configuration

        Args:
            environ: Environment to read overrides from (defaults to os.environ)
        """
        self.environ = os.environ if environ is None else environ
        self.home = self.environ.get("HOME") or str(Path.home())
        self._values: Dict[str, Any] = {}
        self._overrides: Dict[str, Any] = {}
        self._env = self._load_environment()

    def _load_environment(self) -> Dict[str, Any]:
        """Collect environment overrides for known parameters."""
        raw: Dict[str, Any] = {}
        for name in DEFAULTS:
            value = self.environ.get(name)
            if not value:
                continue
            if name in STRUCTURED_PARAMETERS:
                try:
                    value = yaml.safe_load(value)
                except yaml.YAMLError as e:
                    raise ConfigurationError(
                        f"Invalid value for environment variable '{name}'",
                        context=str(e),
                    )
            raw[name] = value
        return _validate(raw, "environment")

    def load(self) -> "IdentConfig":
        """
        Load the user config file, if there is one.

        Returns:
            self, for chaining

        Raises:
            ConfigurationError: If the file is malformed
        """
        path = self.get("FILE_USER_CONFIG", required=False)
        if not path or not os.path.exists(path):
            return self

        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except FileNotFoundError:
            return self
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}", context=str(e))
        except OSError as e:
            raise ConfigurationError(f"Cannot read {path}", context=str(e))

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Invalid configuration in {path}",
                context="Expected a mapping of parameter names to values",
            )

        self._values = _validate(data, path)
        return self

    def expand(self, value: Any) -> Any:
        """Substitute $HOME and ~ in a path and make it absolute."""
        if not isinstance(value, str):
            return value
        value = value.replace(HOME_PLACEHOLDER, self.home)
        return os.path.abspath(os.path.expanduser(value))

    def _default(self, parameter: str) -> Any:
        if parameter == "DEFAULT_IDENTITY":
            return self.environ.get("USER")
        return DEFAULTS[parameter]

    def get(self, parameter: str, required: bool = True) -> Any:
        """
        Look up a parameter

        Args:
            parameter: Parameter name (e.g. 'DIR_AGENTS')
            required: Raise if no value resolves

        Returns:
            Resolved value (paths expanded), or None when optional and unset

        Raises:
            ConfigurationError: If required and unset, or the name is unknown
        """
        if parameter not in DEFAULTS:
            raise ConfigurationError(f"Unknown parameter '{parameter}'")

        for layer in (self._overrides, self._env, self._values):
            if layer.get(parameter) is not None:
                value = layer[parameter]
                break
        else:
            value = self._default(parameter)

        if value is None:
            if required:
                raise ConfigurationError(
                    f"Parameter '{parameter}' needs to be defined in config file or defaults",
                    context=f"Set it in {DEFAULTS['FILE_USER_CONFIG']} or export {parameter}",
                )
            return None

        if parameter in PATH_PARAMETERS:
            return self.expand(value)
        return value

    def set(self, parameter: str, value: Any) -> None:
        """Inject a computed value visible to all later lookups."""
        self._overrides[parameter] = value

    def __repr__(self) -> str:
        return f"IdentConfig(file={self.get('FILE_USER_CONFIG', required=False)})"
