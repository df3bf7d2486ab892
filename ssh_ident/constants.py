"""
ssh-ident Constants

Built-in defaults for every configuration parameter.
"""

# Placeholder substituted with the user's home directory in path parameters
HOME_PLACEHOLDER = "$HOME"

DEFAULTS = {
    "FILE_USER_CONFIG": "$HOME/.ssh-ident.yml",
    "DIR_IDENTITIES": "$HOME/.ssh/identities",
    "DIR_AGENTS": "$HOME/.ssh/agents",
    "PATTERN_KEYS": r"/(id_.*|identity.*|ssh[0-9]-.*)",
    "PATTERN_CONFIG": r"/config$",
    "SSH_OPTIONS": {},
    "SSH_DEFAULT_OPTIONS": "-oUseRoaming=no",
    "SSH_ADD_OPTIONS": {},
    "SSH_ADD_DEFAULT_OPTIONS": "-t 7200",
    "BINARY_SSH": None,
    "BINARY_DIR": None,
    # Falls back to $USER at lookup time
    "DEFAULT_IDENTITY": None,
    "MATCH_PATH": [],
    "MATCH_ARGV": [],
    "SSH_BATCH_MODE": False,
    "VERBOSITY": "LOG_INFO",
    "FILE_LOG": None,
}

# Parameters holding filesystem paths ($HOME and ~ expanded, made absolute)
PATH_PARAMETERS = frozenset(
    {
        "FILE_USER_CONFIG",
        "DIR_IDENTITIES",
        "DIR_AGENTS",
        "BINARY_SSH",
        "BINARY_DIR",
        "FILE_LOG",
    }
)

# Parameters whose environment overrides are parsed as YAML
STRUCTURED_PARAMETERS = frozenset(
    {"SSH_OPTIONS", "SSH_ADD_OPTIONS", "MATCH_ARGV", "MATCH_PATH", "SSH_BATCH_MODE"}
)

# Key file classifiers, tested in order; the first substring found wins
KEY_KINDS = (
    ("private", "priv"),
    ("public", "pub"),
    (".pub", "pub"),
    ("", "priv"),
)

# Exit statuses of `ssh-add -l` meaning the agent is reachable
# (0: identities listed, 1: agent has no identities)
AGENT_ALIVE_STATUSES = (0, 1)

# Binaries whose argv is scanned for BatchMode
BATCH_MODE_BINARIES = ("ssh", "scp")
BATCH_MODE_ENABLE_PATTERN = r"-oBatchMode[= ](yes|true)"
BATCH_MODE_DISABLE_PATTERN = r"-oBatchMode[= ](no|false)"

SHELL = "/bin/sh"
AGENTS_DIR_MODE = 0o700
TTY_DEVICE = "/dev/tty"
