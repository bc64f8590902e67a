"""
In-memory Metamath database

Reads the subset of the Metamath language needed to typeset formulas and
implements the Database protocol on top of it:

    $( ... $)          comments ($t comments supply althtmldef typesetting)
    ${ ... $}          blocks (scope essential hypotheses; other
                       declarations are global)
    $c ... $.          constants
    $v ... $.          variables
    label $f ... $.    floating hypotheses (variable typecodes)
    label $e ... $.    essential hypotheses
    label $a ... $.    syntax axioms and logical axioms
    label $p ... $= ... $.   theorems (proofs are skipped)
    $d ... $.          disjoint variable conditions (ignored)

Axioms whose typecode is not the provable typecode are syntax axioms and
form the grammar. Formulas are parsed by backtracking over them.

Example:
    >>> db = MetamathDatabase("$c ( ) -> wff $. $v x $. wx $f wff x $. "
    ...                       "wi $a wff ( x -> x ) $.")
    >>> str(db.formula_parse(["(", "x", "->", "x", ")"], ["wff"], False))
    'wi(wx, wx)'
"""

import re
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Sequence, Set, Tuple

from ..config import appsettings
from ..models.database import Formula, Statement, StatementType, Substitutions
from .errors import FormulaParseError, ParseError
from .log import LOG


TOKEN = re.compile(r'\S+')
QUOTED = re.compile(r'"((?:[^"]|"")*)"|\'((?:[^\']|\'\')*)\'')
ALTHTML_DEF = re.compile(
    r'althtmldef\s+'
    r'(?P<token>"(?:[^"]|"")*"|\'(?:[^\']|\'\')*\')\s+as\s+'
    r'(?P<value>(?:(?:"(?:[^"]|"")*"|\'(?:[^\']|\'\')*\')\s*\+?\s*)+);'
)

STATEMENT_KEYWORDS = {
    "$f": StatementType.FLOATING,
    "$e": StatementType.ESSENTIAL,
    "$a": StatementType.AXIOM,
    "$p": StatementType.PROVABLE,
}


def quoted_join(text: str) -> str:
    """
    Concatenate Metamath quoted strings

    Example:
        >>> quoted_join('"a" + \\'b\\'\\'c\\'')
        "ab'c"
    """
    parts = []
    for match in QUOTED.finditer(text):
        if match.group(1) is not None:
            parts.append(match.group(1).replace('""', '"'))
        else:
            parts.append(match.group(2).replace("''", "'"))
    return ''.join(parts)


class MetamathDatabase:
    """
    Formula store, symbol table, grammar and statement store in one object

    Built once from source text, then only read.
    """

    def __init__(
        self,
        source: str,
        provable_typecode: Optional[str] = None,
        logic_typecode: Optional[str] = None,
    ):
        """
        Read a Metamath source text

        Args:
            source: Metamath database text
            provable_typecode: Typecode of provable statements
                               (default: appsettings.provable_typecode)
            logic_typecode: Typecode framed as provable on request
                            (default: appsettings.logic_typecode)

        Raises:
            ParseError: On malformed or unsupported statements
        """
        self._provable = provable_typecode or appsettings.provable_typecode
        self.logic_typecode = logic_typecode or appsettings.logic_typecode
        self._constants: Set[str] = set()
        self._variables: Set[str] = set()
        self._statements: Dict[str, Statement] = {}
        self._floats: Dict[str, Statement] = {}
        self._float_by_variable: Dict[str, Statement] = {}
        self._syntax: Dict[str, List[Statement]] = {}
        self._typecodes: List[str] = []
        self._althtml: Dict[str, str] = {}
        self._essentials: Dict[str, Tuple[str, ...]] = {}
        self.source_read(source)
        LOG(
            f"Database: {len(self._statements)} statements, "
            f"{len(self._typecodes)} typecodes",
            level=2,
        )

    @classmethod
    def file_load(cls, path: Path, **kwargs) -> "MetamathDatabase":
        """Read a database from a .mm file"""
        return cls(Path(path).read_text(encoding="utf-8"), **kwargs)

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def source_read(self, source: str) -> None:
        """Consume all statements of the source text"""
        self._source = source
        tokens = [(match.group(0), match.start(), match.end()) for match in TOKEN.finditer(source)]
        index = 0
        label: Optional[str] = None
        # Essential hypotheses active in each open ${ $} block, outermost first
        scopes: List[List[str]] = [[]]

        while index < len(tokens):
            token, start, _ = tokens[index]

            if token == "$(":
                close = self.tokens_find(tokens, index, "$)")
                self.comment_read(source[tokens[index][2]:tokens[close][1]])
                index = close + 1
            elif token == "${":
                scopes.append([])
                index += 1
            elif token == "$}":
                if len(scopes) == 1:
                    raise ParseError("Unbalanced $}", self.line_at(start))
                scopes.pop()
                index += 1
            elif token in ("$c", "$v", "$d"):
                close = self.tokens_find(tokens, index, "$.")
                symbols = [t for t, _, _ in tokens[index + 1:close]]
                if token == "$c":
                    self._constants.update(symbols)
                elif token == "$v":
                    self._variables.update(symbols)
                index = close + 1
            elif token in STATEMENT_KEYWORDS:
                if label is None:
                    raise ParseError(f"Statement {token} without label", self.line_at(start))
                close = self.tokens_find(tokens, index, "$.")
                math = [t for t, _, _ in tokens[index + 1:close]]
                if "$=" in math:
                    math = math[:math.index("$=")]
                statement = Statement(label, STATEMENT_KEYWORDS[token], tuple(math))
                self.statement_add(statement, start)
                if statement.kind == StatementType.ESSENTIAL:
                    scopes[-1].append(label)
                elif statement.kind in (StatementType.AXIOM, StatementType.PROVABLE):
                    self._essentials[label] = tuple(e for scope in scopes for e in scope)
                label = None
                index = close + 1
            elif token.startswith("$"):
                raise ParseError(f"Unsupported keyword {token}", self.line_at(start))
            else:
                label = token
                index += 1

        if len(scopes) > 1:
            raise ParseError("Missing $} at end of database", self.line_at(len(source)))

    def tokens_find(self, tokens: List[Tuple[str, int, int]], index: int, closer: str) -> int:
        for position in range(index + 1, len(tokens)):
            if tokens[position][0] == closer:
                return position
        raise ParseError(f"Missing {closer} after {tokens[index][0]}", self.line_at(tokens[index][1]))

    def line_at(self, offset: int) -> int:
        return self._source.count("\n", 0, offset) + 1

    def comment_read(self, text: str) -> None:
        """Collect althtmldef pairs from a $t typesetting comment"""
        if not text.lstrip().startswith("$t"):
            return
        for match in ALTHTML_DEF.finditer(text):
            self._althtml[quoted_join(match.group("token"))] = quoted_join(match.group("value"))

    def statement_add(self, statement: Statement, offset: int) -> None:
        if not statement.math:
            raise ParseError(f"Statement {statement.label} has no typecode", self.line_at(offset))
        self._statements[statement.label] = statement
        typecode = statement.typecode

        if statement.kind == StatementType.FLOATING:
            if len(statement.math) != 2:
                raise ParseError(f"Floating hypothesis {statement.label} must name one variable", self.line_at(offset))
            self._floats[statement.label] = statement
            self._float_by_variable[statement.math[1]] = statement
            self.typecode_register(typecode)
        elif statement.kind == StatementType.AXIOM and typecode != self._provable:
            self._syntax.setdefault(typecode, []).append(statement)
            self.typecode_register(typecode)

    def typecode_register(self, typecode: str) -> None:
        if typecode != self._provable and typecode not in self._typecodes:
            self._typecodes.append(typecode)

    # ------------------------------------------------------------------
    # Symbol table and statement store
    # ------------------------------------------------------------------

    @property
    def provable_typecode(self) -> str:
        return self._provable

    def typecodes(self) -> Tuple[str, ...]:
        return tuple(self._typecodes)

    def symbol_lookup(self, token: str) -> Optional[str]:
        if token in self._constants or token in self._variables:
            return token
        return None

    def statement_get(self, label: str) -> Optional[Statement]:
        return self._statements.get(label)

    def statements(self) -> Iterable[Statement]:
        return self._statements.values()

    def variable_name(self, statement: Statement) -> Optional[str]:
        if statement.kind != StatementType.FLOATING:
            return None
        return statement.math[1]

    def althtml_get(self, token: str) -> Optional[str]:
        return self._althtml.get(token)

    # ------------------------------------------------------------------
    # Grammar
    # ------------------------------------------------------------------

    def formula_parse(
        self, tokens: Sequence[str], typecodes: Sequence[str], convert_to_provable: bool
    ) -> Formula:
        """
        Parse math tokens into a formula

        Typecodes are tried in order; the first complete parse wins. With
        convert_to_provable, a formula of the logic typecode is re-tagged
        with the provable typecode.

        Raises:
            FormulaParseError: If no typecode yields a complete parse
        """
        tokens = tuple(tokens)
        for typecode in typecodes:
            for formula, end in self.parses_generate(tokens, 0, typecode, frozenset()):
                if end == len(tokens):
                    if convert_to_provable and typecode == self.logic_typecode:
                        formula = formula.retag(self._provable)
                    return formula
        raise FormulaParseError(
            f"Could not parse formula '{' '.join(tokens)}' as {' or '.join(typecodes)}"
        )

    def parses_generate(
        self,
        tokens: Tuple[str, ...],
        pos: int,
        typecode: str,
        active: FrozenSet[Tuple[str, int]],
    ) -> Iterator[Tuple[Formula, int]]:
        """
        All parses of a typecode starting at pos, as (formula, end) pairs

        `active` holds the (typecode, position) pairs being parsed on the
        current path without any token consumed in between; re-entering
        one of them would recurse forever. Axioms that start with a
        variable of their own typecode are instead grown from each parse
        found, see parses_grow().
        """
        key = (typecode, pos)
        if key in active:
            return
        active = active | {key}

        if pos < len(tokens):
            hypothesis = self._float_by_variable.get(tokens[pos])
            if hypothesis is not None and hypothesis.typecode == typecode:
                leaf = Formula(hypothesis.label, (), typecode)
                yield leaf, pos + 1
                yield from self.parses_grow(tokens, leaf, pos + 1)

        for axiom in self._syntax.get(typecode, ()):
            for children, end in self.sequence_match(tokens, pos, axiom.math[1:], active):
                formula = Formula(axiom.label, tuple(children), typecode)
                yield formula, end
                yield from self.parses_grow(tokens, formula, end)

    def parses_grow(self, tokens: Tuple[str, ...], seed: Formula, pos: int) -> Iterator[Tuple[Formula, int]]:
        """Extend a parse ending at pos with left-recursive axioms of its typecode"""
        for axiom in self._syntax.get(seed.typecode, ()):
            if len(axiom.math) < 3:
                continue
            first = self._float_by_variable.get(axiom.math[1])
            if first is None or first.typecode != seed.typecode:
                continue
            for children, end in self.sequence_match(tokens, pos, axiom.math[2:], frozenset()):
                grown = Formula(axiom.label, (seed,) + tuple(children), seed.typecode)
                yield grown, end
                yield from self.parses_grow(tokens, grown, end)

    def sequence_match(
        self,
        tokens: Tuple[str, ...],
        pos: int,
        pattern: Tuple[str, ...],
        active: FrozenSet[Tuple[str, int]],
    ) -> Iterator[Tuple[List[Formula], int]]:
        if not pattern:
            yield [], pos
            return

        symbol, rest = pattern[0], pattern[1:]
        hypothesis = self._float_by_variable.get(symbol)
        if hypothesis is None:
            if pos < len(tokens) and tokens[pos] == symbol:
                yield from self.sequence_match(tokens, pos + 1, rest, frozenset())
            return

        for child, end in self.parses_generate(tokens, pos, hypothesis.typecode, active):
            for children, final in self.sequence_match(tokens, end, rest, frozenset()):
                yield [child] + children, final

    def statement_formula(self, statement: Statement) -> Optional[Formula]:
        """
        Parsed formula of a statement

        Provable statements are parsed as the logic typecode framed as
        provable; others under their own typecode. Returns None when the
        statement does not parse.
        """
        try:
            if statement.typecode == self._provable:
                return self.formula_parse(statement.math[1:], [self.logic_typecode], True)
            return self.formula_parse(statement.math[1:], [statement.typecode], False)
        except FormulaParseError as e:
            LOG(f"{statement.label}: {e}", level=2)
            return None

    def essentials(self, statement: Statement) -> Tuple[Statement, ...]:
        """Essential hypotheses in scope of an assertion, in declaration order"""
        return tuple(self._statements[label] for label in self._essentials.get(statement.label, ()))

    def syntax_steps(self, statement: Statement) -> Tuple[Formula, ...]:
        """
        Sub-formulas of a statement's syntax tree, children before parents

        Each distinct sub-formula appears once; the whole formula comes
        last. Formulas are tagged with their grammar typecode, provable
        statements are read as the logic typecode. Empty when the statement
        does not parse.
        """
        typecode = self.logic_typecode if statement.typecode == self._provable else statement.typecode
        try:
            formula = self.formula_parse(statement.math[1:], [typecode], False)
        except FormulaParseError as e:
            LOG(f"{statement.label}: {e}", level=2)
            return ()
        steps: Dict[Formula, None] = {}
        self.steps_collect(formula, steps)
        return tuple(steps)

    def steps_collect(self, formula: Formula, steps: Dict[Formula, None]) -> None:
        for child in formula.children:
            self.steps_collect(child, steps)
        steps.setdefault(formula, None)

    def formula_tokens(self, formula: Formula) -> Tuple[str, ...]:
        """Spell a formula back out as math tokens"""
        if formula.label in self._floats:
            return (self._floats[formula.label].math[1],)
        axiom = self._statements[formula.label]
        children = iter(formula.children)
        tokens: List[str] = []
        for symbol in axiom.math[1:]:
            if symbol in self._float_by_variable:
                tokens.extend(self.formula_tokens(next(children)))
            else:
                tokens.append(symbol)
        return tuple(tokens)

    # ------------------------------------------------------------------
    # Unification
    # ------------------------------------------------------------------

    def unify(self, pattern: Formula, formula: Formula) -> Optional[Substitutions]:
        """
        Match a formula against a pattern

        Leaves of the pattern labelled by floating hypotheses are variables
        and bind the corresponding sub-formula; a variable occurring twice
        must bind equal sub-formulas. Bindings are returned in pattern
        pre-order.

        Returns:
            Mapping of variable labels to sub-formulas, or None on mismatch
        """
        substitutions: Substitutions = {}
        if self.nodes_unify(pattern, formula, substitutions):
            return substitutions
        return None

    def nodes_unify(self, pattern: Formula, formula: Formula, substitutions: Substitutions) -> bool:
        if pattern.label in self._floats:
            bound = substitutions.get(pattern.label)
            if bound is None:
                substitutions[pattern.label] = formula
                return True
            return bound == formula
        if pattern.label != formula.label or len(pattern.children) != len(formula.children):
            return False
        return all(
            self.nodes_unify(sub_pattern, sub_formula, substitutions)
            for sub_pattern, sub_formula in zip(pattern.children, formula.children)
        )
