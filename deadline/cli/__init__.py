import asyncio
import functools
import logging
import sys

import click


def async_command(f):
    """Decorator that wraps an async click command with asyncio.run() and common error handling."""

    @functools.wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return asyncio.run(f(*args, **kwargs))
        except KeyboardInterrupt:
            sys.exit(130)

    return wrapper


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose (debug) logging.")
@click.version_option(package_name="async-deadline")
def main(verbose):
    """async-deadline CLI: exercise the deadline primitives."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


# Import commands to register them with the group
from deadline.cli import selfcheck as _selfcheck_module  # noqa: E402

main.add_command(_selfcheck_module.selfcheck)
