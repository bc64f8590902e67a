"""
stsengine - Structured typesetting for formal formulas

Compiles typesetting definition files into pattern-driven renderers.
"""

__version__ = "1.0.0"

from .parser import Parser
from .compiler import Compiler, definition_compile, definition_load
from .definition import Definition
from .checker import CoverageChecker
from .database import MetamathDatabase
from .renderers import RendererRegistry
from .log import LOG, WARN, state_connectToLogger

__all__ = [
    "Parser",
    "Compiler",
    "definition_compile",
    "definition_load",
    "Definition",
    "CoverageChecker",
    "MetamathDatabase",
    "RendererRegistry",
    "LOG",
    "WARN",
    "state_connectToLogger",
    "__version__",
]
