"""
Formula database models

Immutable formula trees and statements, plus the Database protocol that
describes everything the typesetting engine needs from a formula store:
symbol lookup, grammar, unification and statement lookup.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, Optional, Protocol, Sequence, Tuple


class StatementType(Enum):
    """Kinds of database statements"""
    FLOATING = "$f"     # variable type declaration
    ESSENTIAL = "$e"    # logical hypothesis
    AXIOM = "$a"        # syntax axiom or logical axiom
    PROVABLE = "$p"     # theorem


@dataclass(frozen=True)
class Statement:
    """
    A labelled database statement

    Attributes:
        label: Statement label (e.g., "wi", "ax-mp")
        kind: Statement type
        math: Math tokens, typecode first (e.g., ("wff", "(", "ph", "->", "ps", ")"))
    """
    label: str
    kind: StatementType
    math: Tuple[str, ...]

    @property
    def typecode(self) -> str:
        return self.math[0]


@dataclass(frozen=True)
class Formula:
    """
    An immutable formula tree

    Each node is labelled by the syntax axiom (or, for leaves naming a
    variable, the floating hypothesis) that produced it. Equality is
    structural over labels and children; the typecode tag does not take
    part, so a formula compares equal to itself re-tagged as provable.

    Attributes:
        label: Label of the syntax axiom or floating hypothesis at the root
        children: Sub-formulas, one per variable of the syntax axiom
        typecode: Typecode of the whole formula

    Example:
        "( ph -> ps )" parses to
        Formula("wi", (Formula("wph", (), "wff"), Formula("wps", (), "wff")), "wff")
    """
    label: str
    children: Tuple["Formula", ...] = field(default_factory=tuple)
    typecode: str = field(default="", compare=False)

    def get_by_path(self, path: Sequence[int]) -> Optional[str]:
        """
        Label of the node reached by following child indices from the root.

        An empty path names the root label.
        """
        node = self
        for index in path:
            if index >= len(node.children):
                return None
            node = node.children[index]
        return node.label or None

    def retag(self, typecode: str) -> "Formula":
        """Same tree, different typecode"""
        return Formula(self.label, self.children, typecode)

    def labels(self) -> Iterator[str]:
        """Labels in pre-order"""
        yield self.label
        for child in self.children:
            yield from child.labels()

    def __str__(self) -> str:
        if not self.children:
            return self.label
        return f"{self.label}({', '.join(str(child) for child in self.children)})"


# Mapping of pattern variable labels to the sub-formulas they bind
Substitutions = Dict[str, Formula]


class Database(Protocol):
    """
    Formula store, symbol table, grammar and statement store

    The typesetting engine only consumes this contract; it never parses
    or unifies formulas itself.
    """

    @property
    def provable_typecode(self) -> str:
        ...

    def typecodes(self) -> Tuple[str, ...]:
        """Typecodes known to the grammar, excluding the provable one"""
        ...

    def symbol_lookup(self, token: str) -> Optional[str]:
        """Atom for a textual token, or None if undeclared"""
        ...

    def formula_parse(
        self, tokens: Sequence[str], typecodes: Sequence[str], convert_to_provable: bool
    ) -> Formula:
        """Parse tokens under the given typecodes; raises FormulaParseError"""
        ...

    def unify(self, pattern: Formula, formula: Formula) -> Optional[Substitutions]:
        """Bind the pattern's variables to sub-formulas, or None on mismatch"""
        ...

    def statement_get(self, label: str) -> Optional[Statement]:
        ...

    def statements(self) -> Iterable[Statement]:
        ...

    def variable_name(self, statement: Statement) -> Optional[str]:
        """Variable token declared by a floating hypothesis"""
        ...

    def statement_formula(self, statement: Statement) -> Optional[Formula]:
        """Parsed formula of a statement, provable statements framed as provable"""
        ...

    def essentials(self, statement: Statement) -> Tuple[Statement, ...]:
        """Essential hypotheses in scope of an assertion"""
        ...

    def syntax_steps(self, statement: Statement) -> Tuple[Formula, ...]:
        """Distinct sub-formulas of the statement's syntax tree, children first"""
        ...

    def formula_tokens(self, formula: Formula) -> Tuple[str, ...]:
        """Math tokens spelling out a formula, without typecode"""
        ...

    def althtml_get(self, token: str) -> Optional[str]:
        """Alternative HTML typesetting of a single token"""
        ...
