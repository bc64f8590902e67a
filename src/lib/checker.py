"""
Coverage checker for typesetting definitions

Walks every syntax axiom of the database (axioms whose typecode is not
the provable one), rebuilds its formula and tries to render it with the
schemes of its typecode. Failures are reported as warnings; nothing is
raised. Used while authoring a definition file, not while serving.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator, List, Optional, Tuple

from ..models.database import Formula, Statement, StatementType
from .errors import FormulaParseError, RenderError, StsError
from .log import LOG, WARN

if TYPE_CHECKING:
    from .definition import Definition


@dataclass
class CoverageGap:
    """
    A syntax axiom the definition cannot render

    Attributes:
        label: Axiom label
        typecode: Axiom typecode
        error: Why it failed (RenderError or FormulaParseError)
    """
    label: str
    typecode: str
    error: StsError


@dataclass
class ShadowedScheme:
    """
    A syntax axiom matched by more than one scheme of its typecode

    Only the first scheme is ever used; the others are shadowed.

    Attributes:
        label: Axiom label
        typecode: Axiom typecode
        lines: Definition-file lines of the matching schemes, in order
    """
    label: str
    typecode: str
    lines: Tuple[int, ...]


class CoverageChecker:
    """Checks that every syntax axiom typecode is renderable"""

    def __init__(self, definition: "Definition") -> None:
        self.definition = definition
        self.database = definition.database

    def axioms_iterate(self) -> Iterator[Tuple[Statement, Optional[Formula], Optional[StsError]]]:
        """
        Syntax axioms with their formulas, parsed without provable framing

        Yields:
            (statement, formula, None), or (statement, None, error) when the
            axiom's own math does not parse
        """
        provable = self.database.provable_typecode
        for statement in self.database.statements():
            if statement.kind != StatementType.AXIOM or statement.typecode == provable:
                continue
            try:
                formula = self.database.formula_parse(
                    statement.math[1:], [statement.typecode], False
                )
            except FormulaParseError as e:
                yield statement, None, e
                continue
            yield statement, formula, None

    def gaps_find(self) -> List[CoverageGap]:
        """Syntax axioms that fail to render, in database order"""
        gaps = []
        for statement, formula, error in self.axioms_iterate():
            if formula is not None:
                try:
                    self.definition.format(statement.typecode, formula)
                except RenderError as e:
                    error = e
            if error is not None:
                gaps.append(CoverageGap(statement.label, statement.typecode, error))
        return gaps

    def shadows_find(self) -> List[ShadowedScheme]:
        """Syntax axioms matched by several schemes of their typecode"""
        shadows = []
        for statement, formula, _ in self.axioms_iterate():
            if formula is None:
                continue
            matching = [
                scheme.line_number
                for scheme in self.definition.schemes.get(statement.typecode, ())
                if self.definition.scheme_matches(scheme, formula)
            ]
            if len(matching) > 1:
                shadows.append(ShadowedScheme(statement.label, statement.typecode, tuple(matching)))
        return shadows

    def check(self) -> None:
        """Emit a warning per gap and per shadowed scheme"""
        gaps = self.gaps_find()
        for gap in gaps:
            WARN(f"{gap.label}: {gap.error}")
        shadows = self.shadows_find()
        for shadow in shadows:
            lines = ", ".join(str(line) for line in shadow.lines)
            WARN(
                f"{shadow.label}: {len(shadow.lines)} {shadow.typecode} schemes match "
                f"(lines {lines}), only the first is used"
            )
        LOG(f"Coverage check: {len(gaps)} gaps, {len(shadows)} shadowed", level=1)
