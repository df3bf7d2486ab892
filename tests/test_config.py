"""Tests for configuration loading and lookup."""

import pytest

from ssh_ident.core.config_loader import IdentConfig
from ssh_ident.exceptions import ConfigurationError


def write_user_config(home, text):
    path = home / ".ssh-ident.yml"
    path.write_text(text)
    return path


def test_defaults_apply_without_user_file(config, home):
    """Built-in defaults are used when nothing overrides them."""
    assert config.get("DIR_AGENTS") == str(home / ".ssh" / "agents")
    assert config.get("SSH_DEFAULT_OPTIONS") == "-oUseRoaming=no"
    assert config.get("SSH_ADD_DEFAULT_OPTIONS") == "-t 7200"
    assert config.get("DEFAULT_IDENTITY") == "alice"


def test_required_parameter_without_value_fails(environ):
    """A required parameter with no value anywhere is fatal."""
    env = dict(environ)
    del env["USER"]
    config = IdentConfig(env).load()

    with pytest.raises(ConfigurationError, match="DEFAULT_IDENTITY"):
        config.get("DEFAULT_IDENTITY")


def test_optional_parameter_without_value_returns_none(config):
    assert config.get("BINARY_SSH", required=False) is None


def test_empty_mapping_is_a_value_not_missing(config):
    """Falsy defaults resolve instead of raising."""
    assert config.get("SSH_OPTIONS") == {}
    assert config.get("MATCH_ARGV") == []
    assert config.get("SSH_BATCH_MODE") is False


def test_unknown_parameter_is_rejected(config):
    with pytest.raises(ConfigurationError):
        config.get("NOT_A_PARAMETER")


def test_user_file_overrides_defaults(home, make_config):
    write_user_config(
        home,
        """
DEFAULT_IDENTITY: work
SSH_ADD_OPTIONS:
  work: -t 3600
MATCH_ARGV:
  - ["github\\\\.com", work]
""",
    )

    config = make_config()

    assert config.get("DEFAULT_IDENTITY") == "work"
    assert config.get("SSH_ADD_OPTIONS") == {"work": "-t 3600"}
    assert [tuple(rule) for rule in config.get("MATCH_ARGV")] == [
        ("github\\.com", "work")
    ]


def test_environment_overrides_user_file(home, make_config):
    write_user_config(home, "DEFAULT_IDENTITY: work\n")

    config = make_config(DEFAULT_IDENTITY="personal")

    assert config.get("DEFAULT_IDENTITY") == "personal"


def test_set_overrides_environment(make_config):
    """Autodetected values win over every other source."""
    config = make_config(BINARY_SSH="/opt/ssh")

    config.set("BINARY_SSH", "/usr/bin/ssh")

    assert config.get("BINARY_SSH") == "/usr/bin/ssh"


def test_structured_environment_values_are_parsed(make_config):
    config = make_config(SSH_OPTIONS="{alice: -v}", SSH_BATCH_MODE="yes")

    assert config.get("SSH_OPTIONS") == {"alice": "-v"}
    assert config.get("SSH_BATCH_MODE") is True


def test_invalid_structured_environment_value_fails(environ):
    env = dict(environ, MATCH_ARGV="[unbalanced")

    with pytest.raises(ConfigurationError, match="MATCH_ARGV"):
        IdentConfig(env)


def test_home_placeholder_is_expanded(home, make_config):
    config = make_config(DIR_IDENTITIES="$HOME/keys/../ids")

    assert config.get("DIR_IDENTITIES") == str(home / "ids")


def test_non_path_values_are_not_expanded(make_config):
    config = make_config(SSH_DEFAULT_OPTIONS="-F $HOME/x")

    assert config.get("SSH_DEFAULT_OPTIONS") == "-F $HOME/x"


def test_malformed_yaml_is_fatal(home, make_config):
    write_user_config(home, "DEFAULT_IDENTITY: [oops\n")

    with pytest.raises(ConfigurationError, match="Invalid YAML"):
        make_config()


def test_non_mapping_document_is_fatal(home, make_config):
    write_user_config(home, "- just\n- a list\n")

    with pytest.raises(ConfigurationError):
        make_config()


def test_unknown_key_in_user_file_is_fatal(home, make_config):
    write_user_config(home, "DEFAULT_IDENTIY: typo\n")

    with pytest.raises(ConfigurationError):
        make_config()


def test_invalid_regex_in_user_file_is_fatal(home, make_config):
    write_user_config(home, "MATCH_PATH:\n  - ['(unclosed', work]\n")

    with pytest.raises(ConfigurationError):
        make_config()


def test_invalid_verbosity_is_fatal(home, make_config):
    write_user_config(home, "VERBOSITY: LOUD\n")

    with pytest.raises(ConfigurationError):
        make_config()


def test_empty_user_file_is_accepted(home, make_config):
    write_user_config(home, "")

    assert make_config().get("DEFAULT_IDENTITY") == "alice"


def test_user_file_location_follows_environment(tmp_path, make_config):
    other = tmp_path / "elsewhere.yml"
    other.write_text("SSH_DEFAULT_OPTIONS: -4\n")

    config = make_config(FILE_USER_CONFIG=str(other))

    assert config.get("SSH_DEFAULT_OPTIONS") == "-4"


def test_numeric_looking_options_stay_strings(home, make_config):
    """Unquoted '-4' or '-6' in YAML are ssh flags, not numbers."""
    write_user_config(
        home,
        """
SSH_DEFAULT_OPTIONS: -4
SSH_OPTIONS:
  work: -6
SSH_ADD_OPTIONS:
  work: -1
""",
    )

    config = make_config()

    assert config.get("SSH_DEFAULT_OPTIONS") == "-4"
    assert config.get("SSH_OPTIONS") == {"work": "-6"}
    assert config.get("SSH_ADD_OPTIONS") == {"work": "-1"}


def test_numeric_options_from_environment_stay_strings(make_config):
    config = make_config(SSH_OPTIONS="{work: -6}")

    assert config.get("SSH_OPTIONS") == {"work": "-6"}


def test_home_comes_from_given_environment(tmp_path, environ):
    other_home = tmp_path / "other-home"
    env = dict(environ, HOME=str(other_home), DIR_AGENTS="$HOME/agents")

    config = IdentConfig(env).load()

    assert config.get("DIR_AGENTS") == str(other_home / "agents")
