"""
Opt-in rich logging for flagpole.

Library modules only create loggers (logging.getLogger(__name__)); nothing is
configured on import. Scripts that want to see the engine's debug records call
install() once:

    >>> import flagpole.logs
    >>> handler = flagpole.logs.install("DEBUG")
"""
import logging
import os

from rich.console import Console
from rich.logging import RichHandler

logger = logging.getLogger("flagpole")


def install(level="INFO", /, *, colorful=True, console=None):
    """
    Attach a RichHandler to the "flagpole" logger and set its level.

    Calling it again replaces the previously installed handler. Colors are
    dropped when colorful is False or NO_COLOR is set.

    Returns
    - the installed handler.
    """
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    if console is None:
        console = Console(stderr=True, no_color=not colorful or "NO_COLOR" in os.environ)
    handler = RichHandler(console=console, show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)
    return handler


__all__ = (
    "install",
)
