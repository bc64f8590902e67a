"""
Exception hierarchy for the typesetting engine

Load-time errors (ParseError, SchemeError subclasses) are raised while
reading and compiling a definition file. Render-time errors (RenderError
subclasses) are raised by Definition.format() and its callers, and are
meant to be displayed inline by the page layer rather than abort anything.
"""

from typing import Any, Optional


class StsError(Exception):
    """Base class for all typesetting engine errors"""
    pass


class ParseError(StsError, SyntaxError):
    """Raised when a definition file does not match the directive grammar"""

    def __init__(self, message: str, line_number: Optional[int] = None):
        if line_number is not None:
            message = f"{message} (line {line_number})"
        super().__init__(message)
        self.line_number = line_number


class SchemeError(StsError):
    """Raised when a single scheme directive cannot be compiled"""
    pass


class UnknownSymbolError(SchemeError):
    """A scheme referenced a token missing from the symbol table"""

    def __init__(self, token: str):
        super().__init__(f"Unknown symbol {token}")
        self.token = token


class FormulaParseError(SchemeError):
    """A token sequence could not be parsed under the requested typecodes"""
    pass


class EmptyIdentifierFormula(SchemeError):
    """An identifier scheme's pattern is not a single bare symbol"""
    pass


class RenderError(StsError):
    """Base class for failures while rendering a formula"""
    pass


class MissingSchemeError(RenderError):
    """No schemes are registered for the requested typecode"""

    def __init__(self, typecode: str):
        super().__init__(f"No typesetting found for typecode {typecode}")
        self.typecode = typecode


class UnificationFailure(RenderError):
    """Schemes exist for the typecode but none applies to the formula"""

    def __init__(self, formula: Any, typecode: str, text: Optional[str] = None):
        shown = text if text is not None else str(formula)
        super().__init__(f"No typesetting found for {shown} with typecode {typecode}")
        self.formula = formula
        self.typecode = typecode
