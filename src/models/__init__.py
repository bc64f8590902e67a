"""
Models package for stsengine

Contains data structures and type definitions for the parsing, compiling
and rendering pipeline.
"""

from .state import ProgramState, pipeline
from .directives import Directive, DirectiveKind
from .parser import DirectiveMatch, MathString, ParsedDefinition
from .database import Database, Formula, Statement, StatementType, Substitutions
from .scheme import Scheme
from .page import RenderedExpression, RenderedStatement

__all__ = [
    "ProgramState",
    "pipeline",
    "Directive",
    "DirectiveKind",
    "DirectiveMatch",
    "MathString",
    "ParsedDefinition",
    "Database",
    "Formula",
    "Statement",
    "StatementType",
    "Substitutions",
    "Scheme",
    "RenderedExpression",
    "RenderedStatement",
]
