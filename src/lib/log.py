"""
Loguru logging for the typesetting engine

Two entry points:

    LOG(message, level)   progress and debug output, shown when the
                          connected ProgramState's verbosity >= level
    WARN(message)         diagnostics that never stop a run (skipped
                          schemes, coverage gaps, shadowed schemes);
                          always shown

Each record is tagged with the source file being read, so a warning about
line 42 names the definition file it came from:

    with source_track("set-mathml.mmts"):
        WARN("Line 42: Unknown symbol ph; scheme skipped")

Usage:
    from lib.log import LOG, WARN, state_connectToLogger

    state_connectToLogger(state)
    LOG("Compiling typesetting definition...", level=1)
    LOG("SCHEME at line 12", level=3)
"""

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterator, Optional
import sys

from loguru import logger

# ProgramState whose verbosity gates LOG()
_program_state: ContextVar[Optional[Any]] = ContextVar('program_state', default=None)

logger_format = (
    "<green>{time:HH:mm:ss}</green> │ "
    "<level>{level: <7}</level> │ "
    "<magenta>{extra[source]: <18}</magenta> │ "
    "<cyan>{function: <20}</cyan> @ "
    "<cyan>{line: <4}</cyan> ║ "
    "<level>{message}</level>"
)

logger.remove()
logger.configure(extra={"source": "-"})
logger.add(sys.stderr, format=logger_format, level="DEBUG")


def state_connectToLogger(state: Any) -> None:
    """
    Make a ProgramState's verbosity govern LOG() in the current context.

    Args:
        state: ProgramState (anything with a verbosity attribute)
    """
    _program_state.set(state)


@contextmanager
def source_track(name: str) -> Iterator[None]:
    """Tag every record logged inside the block with a source file name"""
    with logger.contextualize(source=name):
        yield


def LOG(message: str, level: int = 1, **kwargs: Any) -> None:
    """
    Log message if current state's verbosity allows.

    Args:
        message: Log message to display
        level: Minimum verbosity level required (1=normal, 2=verbose, 3=debug)
        **kwargs: Passed on to loguru

    Nothing is logged while no state is connected, e.g. when the library is
    used without the CLI.
    """
    state = _program_state.get()
    if state is None:
        return
    if getattr(state, 'verbosity', 0) >= level:
        logger.opt(depth=1).debug(message, **kwargs)


def WARN(message: str, **kwargs: Any) -> None:
    """Emit a diagnostic regardless of verbosity"""
    logger.opt(depth=1).warning(message, **kwargs)
