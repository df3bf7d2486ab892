#!/usr/bin/env python3
"""ssh-ident - Main entry point"""

import sys
from typing import Callable, List, Optional, Sequence

import rich_click as click
from rich.console import Console
from rich.markup import escape

from ssh_ident.core import IdentConfig, IdentityMatcher, KeyLocator
from ssh_ident.exceptions import SshIdentError
from ssh_ident.logger import IdentLogger
from ssh_ident.services import AgentService, Launcher, redirect_to_tty


class IdentCommand:
    """
    One ssh-ident invocation.

    Provides:
    - Configuration and logger setup
    - The config → identity → keys → agent → exec pipeline
    - Consistent exit codes for errors
    """

    def __init__(
        self,
        argv: Sequence[str],
        environ=None,
        launch: Optional[Callable] = None,
        console: Optional[Console] = None,
    ):
        self.argv = list(argv)
        self.environ = environ
        self.launch = launch
        self.console = console or Console(stderr=True, highlight=False)
        self.config: Optional[IdentConfig] = None
        self.logger: Optional[IdentLogger] = None

    def execute(self) -> None:
        """Execute the wrapper pipeline (does not return once ssh runs)."""
        self.config = IdentConfig(self.environ).load()
        self.logger = IdentLogger(self.config)

        launcher = Launcher(self.config, self.logger)
        launcher.autodetect_binary(self.argv)
        launcher.check_for_loop(self.argv)
        launcher.parse_command_line(self.argv)

        identity = IdentityMatcher(self.config, self.logger).resolve(self.argv)
        locator = KeyLocator(self.config, self.logger)
        keys = locator.find_keys(identity)
        ssh_config = locator.find_ssh_config(identity)

        agent = AgentService(
            identity, ssh_config, self.config, self.logger, launch=self.launch
        )
        if not self.config.get("SSH_BATCH_MODE"):
            agent.load_unloaded_keys(keys)

        agent.run_ssh(self.argv[1:])

    def print_error(self, message: str) -> None:
        """Print error message (skip in batch mode)."""
        if self.config is not None and self.config.get("SSH_BATCH_MODE", required=False):
            return
        self.console.print(f"[bold red]✗[/bold red] {escape(message)}")

    def run(self) -> int:
        """
        Run the invocation with error handling.

        Returns:
            Exit status (only reached when ssh was not exec'd)
        """
        try:
            self.execute()
        except KeyboardInterrupt:
            self.console.print("Goodbye")
            return 0
        except SshIdentError as e:
            self.print_error(e.format_message())
            return e.exit_code
        except OSError as e:
            self.print_error(f"{type(e).__name__}: {e}")
            return 1
        finally:
            if self.logger:
                self.logger.close()
        return 0


class PassthroughCommand(click.RichCommand):
    """Click command that hands every argument to the wrapped binary untouched."""

    def parse_args(self, ctx: click.Context, args: List[str]) -> List[str]:
        ctx.params["args"] = tuple(args)
        ctx.args = []
        return ctx.args


@click.command(
    name="ssh-ident",
    cls=PassthroughCommand,
    add_help_option=False,
)
@click.pass_context
def cli(ctx: click.Context, args):
    """
    Start ssh with the agent and keys of the matching identity

    All arguments are passed to the real ssh (or scp) binary.

    Examples:
        ssh-ident -o BatchMode=yes build.example.com uptime

        ln -s $(which ssh-ident) ~/bin/ssh && ssh user@host
    """
    argv = [ctx.info_name or "ssh-ident", *args]
    ctx.exit(IdentCommand(argv).run())


def main():
    """Main entry point."""
    redirect_to_tty()
    cli.main(args=sys.argv[1:], prog_name=sys.argv[0])


if __name__ == "__main__":
    main()
