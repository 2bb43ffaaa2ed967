"""
Entry point for the dxc_entrypoint component.

Usage: dxc-entrypoint [--v=VERSION] [DXC_ARGS...]
"""

import logging
import os
import sys
from typing import List, Optional

from .application.domain import ExecuteTool, ShowUsage, TerminalAction
from .application.exceptions import EntrypointError
from .infrastructure.containers import Container

logger = logging.getLogger(__name__)


def setup_logging(level: str):
    """Applies basic logging configuration."""
    logging.basicConfig(level=level)


def render_usage(action: ShowUsage) -> str:
    """The usage summary shown when no tool arguments were given."""
    lines = [
        "DirectX Compiler (DXC) Docker Image",
        "Usage: docker run dxc [--v=VERSION] [DXC_ARGS...]",
        "Available versions:",
        *(f"  {v}" for v in action.versions),
        f"Current version: {action.version}",
        "For DXC help: docker run dxc --help",
    ]
    return "\n".join(lines)


def run_application(
    argv: List[str], container: Optional[Container] = None
) -> TerminalAction:
    """Wires and runs the application using the DI container."""

    container = container or Container()
    setup_logging(level=str(container.config().logging.level).upper())

    try:
        service = container.entrypoint_service()
        return service.dispatch(argv)
    except EntrypointError as e:
        logger.error(f"An application error occurred: {e}")
        sys.exit(1)


def perform(action: TerminalAction):
    """Carries out the terminal action; does not return."""

    if isinstance(action, ShowUsage):
        print(render_usage(action), file=sys.stderr)
        sys.exit(0)

    elif isinstance(action, ExecuteTool):
        path = str(action.path)
        sys.stdout.flush()
        sys.stderr.flush()
        os.execv(path, [path, *action.args])
    else:
        raise TypeError(f"Unknown terminal action: {action!r}")


def main(argv: Optional[List[str]] = None):
    perform(run_application(sys.argv[1:] if argv is None else argv))


if __name__ == "__main__":
    main()
