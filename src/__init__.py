"""
stsengine - Structured typesetting for formal formulas

Turns parsed logical formulas into typeset markup (e.g. MathML) by matching
them against the schemes of a declarative definition file.
"""

__version__ = "1.0.0"

from .lib import (
    Parser,
    Compiler,
    Definition,
    definition_compile,
    definition_load,
    MetamathDatabase,
    RendererRegistry,
    LOG,
    state_connectToLogger,
)

__all__ = [
    "Parser",
    "Compiler",
    "Definition",
    "definition_compile",
    "definition_load",
    "MetamathDatabase",
    "RendererRegistry",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
