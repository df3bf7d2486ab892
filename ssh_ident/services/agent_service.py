"""Agent service: per-identity ssh-agent lifecycle and the final exec."""

import os
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Set

from ssh_ident.constants import AGENT_ALIVE_STATUSES, AGENTS_DIR_MODE, SHELL
from ssh_ident.core.config_loader import IdentConfig
from ssh_ident.logger import IdentLogger, LogLevel
from ssh_ident.models.keys import AgentHandle, KeyPair
from ssh_ident import utils
from ssh_ident.services.launcher import launch as default_launch


class AgentService:
    """
    Service for one identity's ssh-agent.

    Responsibilities:
    - Reuse a live agent or start a new one (agent-<identity>-<host> file)
    - Load keys that the agent does not hold yet
    - Replace the current process with the real ssh binary
    """

    def __init__(
        self,
        identity: str,
        ssh_config: Optional[str],
        config: IdentConfig,
        logger: IdentLogger,
        launch: Optional[Callable] = None,
    ):
        """
        Initialize agent service.

        Args:
            identity: Identity name
            ssh_config: Path passed to ssh as -F, if any
            config: Resolved configuration
            logger: Logger for diagnostics
            launch: Terminal exec capability (defaults to launcher.launch)
        """
        self.identity = identity
        self.ssh_config = ssh_config
        self.config = config
        self.logger = logger
        self.launch = launch or default_launch
        self.agents_path = os.path.abspath(config.get("DIR_AGENTS"))
        self.agent_file = self.get_agent_file(self.agents_path, identity)

    def get_agent_file(self, path: str, identity: str) -> str:
        """
        Return the agent file for identity, starting an agent if needed.

        Args:
            path: Agents directory
            identity: Identity name

        Returns:
            Path of the agent file
        """
        os.makedirs(path, mode=AGENTS_DIR_MODE, exist_ok=True)
        handle = AgentHandle(agents_dir=Path(path), identity=identity)
        agent_file = str(handle.path)

        if handle.is_readable and self.is_agent_file_valid(agent_file):
            self.logger.info(f"Agent for identity {identity} ready")
            return agent_file

        self.logger.info(f"Preparing new agent for identity {identity}")
        # ssh-agent forks; its own exit status says nothing about the daemon
        utils.run_command(
            [
                "/usr/bin/env",
                "-i",
                SHELL,
                "-c",
                f"ssh-agent > {utils.escape_shell_arguments([agent_file])}",
            ]
        )
        return agent_file

    @staticmethod
    def is_agent_file_valid(agent_file: str) -> bool:
        """Probe the agent described by agent_file."""
        result = utils.run_in_agent(agent_file, "ssh-add -l >/dev/null 2>/dev/null")
        return (result.returncode & 0xFF) in AGENT_ALIVE_STATUSES

    def get_loaded_keys(self) -> Set[str]:
        """Fingerprints currently held by the agent (empty on any failure)."""
        result = utils.run_in_agent(self.agent_file, "ssh-add -l")
        if result.is_failure:
            return set()

        fingerprints = set()
        for line in result.stdout.splitlines():
            fields = line.split()
            if len(fields) > 1:
                fingerprints.add(fields[1])
        return fingerprints

    @staticmethod
    def get_public_key_fingerprint(key: str) -> Optional[str]:
        """Fingerprint of a public key file, or None if ssh-keygen fails."""
        result = utils.run_command(["ssh-keygen", "-l", "-f", key])
        if result.is_failure:
            return None

        fields = result.stdout.split()
        return fields[1] if len(fields) > 1 else None

    def find_unloaded_keys(self, keys: Dict[str, KeyPair]) -> List[str]:
        """
        Private keys whose public half is not loaded in the agent.

        Pairs missing either half are skipped.
        """
        loaded = self.get_loaded_keys()
        toload = []
        for pair in keys.values():
            if not pair.is_complete:
                self.logger.debug(f"Skipping incomplete key pair {pair}")
                continue

            fingerprint = self.get_public_key_fingerprint(pair.public_key)
            if fingerprint not in loaded:
                toload.append(pair.private_key)
        return toload

    def load_key_files(self, keys: Sequence[str]) -> None:
        """Run ssh-add once for all keys, prompting on the session tty."""
        if not keys:
            self.logger.info("All keys already loaded")
            return

        self.logger.info("Loading keys:\n    " + "\n    ".join(keys))

        options = self.config.get("SSH_ADD_OPTIONS").get(
            self.identity
        ) or self.config.get("SSH_ADD_DEFAULT_OPTIONS")
        command = " ".join(
            ["ssh-add", options, utils.escape_shell_arguments(keys)]
        )

        console = utils.get_session_tty()
        try:
            result = utils.run_in_agent(
                self.agent_file, command, stdin=console, stdout=console, capture=False
            )
        finally:
            if console is not None:
                console.close()

        if result.is_failure:
            self.logger.warning(
                f"ssh-add exited with status {result.returncode}: {result.stderr.strip()}"
            )

    def load_unloaded_keys(self, keys: Dict[str, KeyPair]) -> None:
        """Load every complete key pair the agent does not hold."""
        self.load_key_files(self.find_unloaded_keys(keys))

    def get_shell_args(self) -> str:
        return "-xc" if self.logger.should_print(LogLevel.DEBUG) else "-c"

    def build_ssh_command(self, argv: Sequence[str]) -> str:
        """Shell command line that sources the agent and execs ssh."""
        additional_flags = self.config.get("SSH_OPTIONS").get(
            self.identity
        ) or self.config.get("SSH_DEFAULT_OPTIONS")
        if self.ssh_config:
            additional_flags += " -F " + utils.escape_shell_arguments([self.ssh_config])

        return (
            utils.source_agent_prefix(self.agent_file)
            + "exec "
            + utils.escape_shell_arguments([self.config.get("BINARY_SSH")])
            + f" {additional_flags} "
            + utils.escape_shell_arguments(argv)
        )

    def run_ssh(self, argv: Sequence[str]):
        """
        Replace this process with the real ssh binary.

        Never returns on success.
        """
        command = self.build_ssh_command(argv)
        self.logger.debug(f"Running: {command}")
        self.logger.close()
        return self.launch(SHELL, [SHELL, self.get_shell_args(), command])

