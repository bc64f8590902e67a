"""
Parser for typesetting definition files

Transforms the text of a definition file into an ordered list of
directives. The parser performs no semantic interpretation: symbols are
not resolved and templates are kept verbatim.

Grammar:
    file       := (comment | scheme | typecodes | command | display | inline | header)*
    comment    := "$(" ... "$)" | whitespace
    scheme     := ("$s" | "$i") mathstring "$:" text "$."
    typecodes  := "$u" text "$."
    command    := "$c" text "$."
    display    := "$d" text "$."
    inline     := "$t" text "$."
    header     := "$h" text "$."
    mathstring := printable tokens without "$", separated by whitespace

Scanning stops at the first position where no directive matches. The
whole file must be consumed; Parser.parse() rejects any leftover text.

Example:
    >>> parser = Parser("$i wff x $: X $.")
    >>> directives = parser.parse()
    >>> directives[0].symbols
    ('wff', 'x')
    >>> directives[0].text
    ' X '
"""

import re
from typing import List, Optional

from ..models.directives import Directive, DirectiveKind, SCHEME_KEYWORDS, TEXT_DIRECTIVES
from ..models.parser import DirectiveMatch, MathString, ParsedDefinition
from .errors import ParseError
from .log import LOG


WHITESPACE = re.compile(r'[ \t\r\n]+')
MATH_TOKEN = re.compile(r'[!-#%-~]+')   # printable ASCII except '$'

COMMENT_OPEN = "$("
COMMENT_CLOSE = "$)"
SCHEME_SEPARATOR = "$:"
TERMINATOR = "$."


class Parser:
    """
    Parser for typesetting definition files

    Handles:
    - $( ... $) comments and blank space between directives
    - $s pattern schemes and $i identifier schemes
    - $u, $c, $d, $t, $h text directives
    - Error reporting with line numbers
    """

    def __init__(self, source: str, debug: bool = False):
        """
        Initialize parser with source text

        Args:
            source: Raw definition file text
            debug: Enable debug output for parser operations

        Attributes:
            source: Source text being parsed
            debug: Debug mode flag
            position: Current character position in source
            line_number: Line of the current position (for error reporting)
        """
        self.source = source
        self.debug = debug
        self.position = 0
        self.line_number = 1

    def parse(self) -> List[Directive]:
        """
        Parse source text into directives

        Returns:
            Directives in source order. Blank space and comments produce
            COMMENT directives.

        Raises:
            ParseError: If any text remains that no directive matches
        """
        parsed = self.directives_parse()
        if not parsed.complete:
            raise ParseError(
                f"Definition file could not be parsed completely: "
                f"{self.leftover_describe(parsed.remaining)}",
                parsed.line_number,
            )
        LOG(f"Parsed {len(parsed.directives)} directives", level=2)
        return parsed.directives

    def directives_parse(self) -> ParsedDefinition:
        """
        Consume directives until none matches

        Returns:
            ParsedDefinition with the directives found and the unconsumed
            suffix of the source (empty when the whole file parsed)
        """
        self.position = 0
        self.line_number = 1
        directives: List[Directive] = []

        while self.position < len(self.source):
            match = self.directive_match()
            if match is None:
                break
            if self.debug:
                LOG(f"{match.directive.kind.name} at line {self.line_number}", level=3)
            directives.append(match.directive)
            self.line_number += self.source.count('\n', self.position, match.end)
            self.position = match.end

        remaining = self.source[self.position:]
        return ParsedDefinition(
            directives=directives,
            remaining=remaining,
            line_number=self.line_number if remaining else None,
        )

    def directive_match(self) -> Optional[DirectiveMatch]:
        """
        Match one directive at the current position

        Alternatives are tried in grammar order: comment, scheme, then the
        text directives.

        Returns:
            DirectiveMatch, or None if nothing matches here
        """
        for matcher in (self.comment_match, self.scheme_match, self.textDirective_match):
            match = matcher(self.position)
            if match is not None:
                return match
        return None

    def comment_match(self, pos: int) -> Optional[DirectiveMatch]:
        """
        Match a $( ... $) comment or a run of blank space

        Example:
            "$( note $) $s ..." at 0 -> COMMENT ending just past "$)"
        """
        if self.source.startswith(COMMENT_OPEN, pos):
            close = self.source.find(COMMENT_CLOSE, pos + len(COMMENT_OPEN))
            if close == -1:
                return None
            end = close + len(COMMENT_CLOSE)
        else:
            blank = WHITESPACE.match(self.source, pos)
            if not blank:
                return None
            end = blank.end()
        return DirectiveMatch(
            directive=Directive(kind=DirectiveKind.COMMENT, line_number=self.line_number),
            end=end,
        )

    def scheme_match(self, pos: int) -> Optional[DirectiveMatch]:
        """
        Match a $s or $i scheme

        The keyword must be followed by blank space, at least one math
        token, blank space, then "$:". The template runs up to the first
        "$." and is kept verbatim, surrounding blanks included.

        Example:
            "$s wff ( x -> x ) $: #x# IMPLIES #x# $." ->
            SCHEME, symbols=("wff", "(", "x", "->", "x", ")"),
                    text=" #x# IMPLIES #x# "
        """
        keyword = self.source[pos:pos + 2]
        if keyword not in SCHEME_KEYWORDS:
            return None

        gap = WHITESPACE.match(self.source, pos + len(keyword))
        if not gap:
            return None
        math = self.mathString_scan(gap.end())
        if math is None:
            return None
        gap = WHITESPACE.match(self.source, math.end)
        if not gap or not self.source.startswith(SCHEME_SEPARATOR, gap.end()):
            return None

        body_start = gap.end() + len(SCHEME_SEPARATOR)
        body_end = self.source.find(TERMINATOR, body_start)
        if body_end == -1:
            return None

        directive = Directive(
            kind=DirectiveKind.SCHEME,
            text=self.source[body_start:body_end],
            is_identifier=SCHEME_KEYWORDS[keyword],
            symbols=math.tokens,
            line_number=self.line_number,
        )
        return DirectiveMatch(directive=directive, end=body_end + len(TERMINATOR))

    def mathString_scan(self, pos: int) -> Optional[MathString]:
        """
        Scan whitespace-separated math tokens starting at pos

        Trailing blank space is left unconsumed, so the caller can require
        it before the "$:" separator.

        Returns:
            MathString, or None if no token starts at pos
        """
        token = MATH_TOKEN.match(self.source, pos)
        if not token:
            return None
        tokens = [token.group(0)]
        end = token.end()

        while True:
            gap = WHITESPACE.match(self.source, end)
            if not gap:
                break
            token = MATH_TOKEN.match(self.source, gap.end())
            if not token:
                break
            tokens.append(token.group(0))
            end = token.end()

        return MathString(tokens=tuple(tokens), end=end)

    def textDirective_match(self, pos: int) -> Optional[DirectiveMatch]:
        """
        Match a $u, $c, $d, $t or $h directive

        The text between the keyword and the first "$." is kept verbatim.
        """
        kind = TEXT_DIRECTIVES.get(self.source[pos:pos + 2])
        if kind is None:
            return None
        body_start = pos + 2
        body_end = self.source.find(TERMINATOR, body_start)
        if body_end == -1:
            return None
        directive = Directive(
            kind=kind,
            text=self.source[body_start:body_end],
            line_number=self.line_number,
        )
        return DirectiveMatch(directive=directive, end=body_end + len(TERMINATOR))

    def leftover_describe(self, remaining: str) -> str:
        """Short human-readable reason for an unconsumed suffix"""
        excerpt = remaining[:40].split('\n')[0]
        if remaining.startswith(COMMENT_OPEN):
            return f"unterminated comment near '{excerpt}'"
        if remaining[:2] in SCHEME_KEYWORDS:
            return f"malformed scheme near '{excerpt}'"
        if remaining[:2] in TEXT_DIRECTIVES:
            return f"missing '{TERMINATOR}' near '{excerpt}'"
        return f"unexpected text '{excerpt}'"


def directives_parse(source: str) -> ParsedDefinition:
    """
    Parse definition text without enforcing complete consumption

    Pure function of the text: returns the directives and the unconsumed
    remainder.
    """
    return Parser(source).directives_parse()
