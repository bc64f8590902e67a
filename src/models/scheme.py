"""
Typesetting scheme model
"""

from dataclasses import dataclass

from .database import Formula


@dataclass(frozen=True)
class Scheme:
    """
    A compiled typesetting rule

    An identifier scheme renders only a formula structurally equal to its
    pattern and returns its template verbatim. A pattern scheme renders any
    formula unifying with its pattern, replacing each #var# placeholder in
    the template with the rendering of the bound sub-formula.

    Attributes:
        is_identifier: True for identifier ($i) schemes
        typecode: Typecode bucket this scheme belongs to
        pattern: Pattern formula
        template: Substitution template, surrounding blanks trimmed
        line_number: Definition file line, for diagnostics
    """
    is_identifier: bool
    typecode: str
    pattern: Formula
    template: str
    line_number: int = 0
