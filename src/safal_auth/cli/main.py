"""
Safal CLI: `safal` command.

Commands:
  safal auth login            Sign in (with 2FA when the account has it)
  safal auth status           Show the stored session
  safal auth logout           Clear the stored session
  safal auth reset-password   Forgot-password flow
  safal policy <terms|privacy>  Print a legal document
"""

import asyncio
import logging

try:
    import click
    from rich.console import Console
except ImportError:
    raise SystemExit("CLI requires extras: pip install safal-auth[cli]")

from safal_auth.client import AsyncSafalAuth
from safal_auth.config import ClientSettings
from safal_auth.log import configure_logging

console = Console()


def _get_client() -> AsyncSafalAuth:
    return AsyncSafalAuth(settings=ClientSettings())


def _run(coro):
    return asyncio.run(coro)


@click.group()
@click.version_option("0.1.0")
@click.option("-v", "--verbose", is_flag=True, help="Log HTTP traffic")
def main(verbose: bool):
    """Safal CLI: sign in to the Safal clinical backend."""
    configure_logging(logging.DEBUG if verbose else logging.WARNING)


# Register subcommands from separate modules
from safal_auth.cli.auth import auth, policy

main.add_command(auth)
main.add_command(policy)


if __name__ == "__main__":
    main()
