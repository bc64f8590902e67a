"""
Parser-specific data models

Type-safe structures for parser operations and return values.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .directives import Directive


@dataclass
class DirectiveMatch:
    """
    Result of matching one directive at the current parser position

    Returned by Parser.directive_match() when a directive is recognized.

    Attributes:
        directive: The parsed directive
        end: Character position just past the directive's terminator
    """
    directive: Directive
    end: int


@dataclass
class MathString:
    """
    Result of scanning a scheme's math tokens

    Returned by Parser.mathString_scan().

    Attributes:
        tokens: Printable tokens, in source order (e.g., ("wff", "(", "x", ")"))
        end: Character position just past the last token
    """
    tokens: Tuple[str, ...]
    end: int


@dataclass
class ParsedDefinition:
    """
    Result of parsing a whole definition file

    Returned by directives_parse(). Parsing stops at the first position
    where no directive matches; whatever is left is reported in
    `remaining` rather than raised, so callers decide how strict to be.

    Attributes:
        directives: Directives in source order
        remaining: Unconsumed suffix of the input ("" when fully parsed)
        line_number: Line on which the unconsumed suffix starts

    Example:
        Input: "$c provable $. junk"
        Result: ParsedDefinition(
            directives=[Directive(COMMAND, " provable "), Directive(COMMENT)],
            remaining="junk",
            line_number=1
        )
    """
    directives: List[Directive]
    remaining: str
    line_number: Optional[int] = None

    @property
    def complete(self) -> bool:
        """True when the whole input was consumed"""
        return not self.remaining
