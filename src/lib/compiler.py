"""
Compiler from definition-file directives to a Definition

Resolves each scheme's math tokens against the database's symbol table,
parses them into a pattern formula with the database's grammar, and
assembles the immutable Definition together with the last-seen header,
display, inline and command strings.

A scheme that fails to compile (unknown symbol, unparsable pattern,
identifier that is not a single symbol) is skipped with a warning, or
aborts the load when strict mode is on.
"""

from pathlib import Path
from typing import Dict, List, Optional, Sequence

from ..config import appsettings
from ..models.database import Database
from ..models.directives import Directive, DirectiveKind
from ..models.scheme import Scheme
from .definition import Definition, identifier_label
from .errors import SchemeError, UnknownSymbolError
from .log import LOG, WARN, source_track
from .parser import Parser


class Compiler:
    """
    Compiles parsed directives into a Definition

    Responsibilities:
    - Resolve scheme symbols and typecodes
    - Parse scheme patterns with the database grammar
    - Apply the skip-or-abort policy to failing schemes
    - Collect the auxiliary header/display/inline/command strings
    """

    def __init__(
        self,
        database: Database,
        directives: Sequence[Directive],
        strict: Optional[bool] = None,
    ) -> None:
        """
        Initialize compiler

        Args:
            database: Formula database supplying symbols and grammar
            directives: Directives in source order
            strict: Abort on the first failing scheme
                    (default: appsettings.strict_mode)
        """
        self.database = database
        self.directives = directives
        self.strict = appsettings.strict_mode if strict is None else strict
        self.skipped: List[Directive] = []

    def compile(self) -> Definition:
        """
        Compile all directives

        Returns:
            The immutable Definition

        Raises:
            SchemeError: A scheme failed to compile and strict mode is on
        """
        schemes: List[Scheme] = []
        strings: Dict[DirectiveKind, str] = {}

        for directive in self.directives:
            if directive.kind == DirectiveKind.SCHEME:
                scheme = self.scheme_compileOrSkip(directive)
                if scheme is not None:
                    schemes.append(scheme)
            elif directive.kind in (
                DirectiveKind.HEADER,
                DirectiveKind.DISPLAY,
                DirectiveKind.INLINE,
                DirectiveKind.COMMAND,
            ):
                strings[directive.kind] = directive.text.strip()

        LOG(f"Compiled {len(schemes)} schemes, skipped {len(self.skipped)}", level=1)
        return Definition.build(
            database=self.database,
            schemes=schemes,
            header=strings.get(DirectiveKind.HEADER, appsettings.default_header),
            display=strings.get(DirectiveKind.DISPLAY, appsettings.default_display),
            inline=strings.get(DirectiveKind.INLINE, ""),
            command=strings.get(DirectiveKind.COMMAND, ""),
        )

    def scheme_compileOrSkip(self, directive: Directive) -> Optional[Scheme]:
        try:
            return self.scheme_compile(directive)
        except SchemeError as e:
            if self.strict:
                raise
            WARN(f"Line {directive.line_number}: {e}; scheme skipped")
            self.skipped.append(directive)
            return None

    def scheme_compile(self, directive: Directive) -> Scheme:
        """
        Compile one scheme directive

        The first symbol names the scheme's typecode. When it is one of the
        grammar's typecodes, the remaining symbols are parsed under it only;
        otherwise (e.g. the provable typecode) under every grammar typecode.
        Patterns are always parsed with provable framing allowed.

        Raises:
            UnknownSymbolError: A token is not in the symbol table
            FormulaParseError: The pattern does not parse
            EmptyIdentifierFormula: An identifier pattern is not a single symbol
        """
        symbols = self.symbols_resolve(directive.symbols)
        typecode = symbols[0]
        known = self.database.typecodes()
        candidates = [typecode] if typecode in known else list(known)

        pattern = self.database.formula_parse(symbols[1:], candidates, True)
        scheme = Scheme(
            is_identifier=directive.is_identifier,
            typecode=typecode,
            pattern=pattern,
            template=directive.text.strip(),
            line_number=directive.line_number,
        )
        if scheme.is_identifier:
            identifier_label(scheme)
        LOG(f"Scheme {typecode} {' '.join(symbols[1:])}", level=3)
        return scheme

    def symbols_resolve(self, tokens: Sequence[str]) -> List[str]:
        """Resolve math tokens to symbol atoms"""
        atoms = []
        for token in tokens:
            atom = self.database.symbol_lookup(token)
            if atom is None:
                raise UnknownSymbolError(token)
            atoms.append(atom)
        return atoms


def definition_compile(
    database: Database, directives: Sequence[Directive], strict: Optional[bool] = None
) -> Definition:
    """Compile directives against a database"""
    return Compiler(database, directives, strict=strict).compile()


def definition_load(
    database: Database, path: Path, strict: Optional[bool] = None, check: bool = False
) -> Definition:
    """
    Read, parse and compile a definition file

    Args:
        database: Formula database
        path: Definition file path (see AppSettings.definitionPath_make)
        strict: Abort on the first failing scheme
        check: Run the coverage check after compiling

    Raises:
        ParseError: The file does not parse completely
        SchemeError: A scheme failed to compile in strict mode
    """
    path = Path(path)
    with source_track(path.name):
        source = path.read_text(encoding="utf-8")
        LOG(f"Read {len(source)} characters", level=2)
        definition = definition_compile(database, Parser(source).parse(), strict=strict)
        if check:
            definition.check()
    return definition
