"""
Compiled typesetting definition and render engine

A Definition holds the schemes of one definition file, grouped by
typecode in declaration order, and renders formulas by matching them
against those schemes:

- an identifier scheme applies only to a formula equal to its pattern
  and yields its template as is;
- a pattern scheme applies when the formula unifies with its pattern;
  each bound variable's sub-formula is rendered recursively with the
  schemes of the typecode its identifier scheme declared, and replaces
  the #variable# placeholders of the template.

The first applicable scheme of a typecode wins.

A Definition is never mutated after construction, so one instance can be
shared by any number of concurrent renders.

Example:
    >>> definition = definition_compile(db, Parser(
    ...     "$i wff x $: X $. $s wff ( x -> x ) $: #x# IMPLIES #x# $.").parse())
    >>> definition.render_formula(db.formula_parse(["(", "x", "->", "x", ")"], ["wff"], False), False)
    'X IMPLIES X'
"""

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple, Union

from ..config import appsettings
from ..models.database import Database, Formula, Statement
from ..models.scheme import Scheme
from .errors import EmptyIdentifierFormula, MissingSchemeError, RenderError, UnificationFailure
from .log import LOG


# (typecode, formula) pairs being rendered on the current call path
Pending = FrozenSet[Tuple[str, Formula]]


def identifier_label(scheme: Scheme) -> str:
    """
    Label of the single symbol an identifier scheme names

    Raises:
        EmptyIdentifierFormula: If the pattern is empty or has sub-formulas
    """
    label = scheme.pattern.get_by_path([])
    if label is None or scheme.pattern.children:
        raise EmptyIdentifierFormula(
            f"Identifier scheme for {scheme.typecode} must name a single symbol, "
            f"got {scheme.pattern}"
        )
    return label


@dataclass(frozen=True, eq=False)
class Definition:
    """
    Immutable, indexed set of typesetting schemes

    Attributes:
        database: Formula database the schemes were compiled against
        schemes: Typecode -> schemes in declaration order
        identifiers: Identifier label -> typecode it renders as
        header: Markup injected once per page using this renderer
        display: Wrapper for top-level renderings, "###" marks the formula
        inline: Inline wrapper (passed through)
        command: Command string (passed through)
    """
    database: Database
    schemes: Mapping[str, Tuple[Scheme, ...]]
    identifiers: Mapping[str, str]
    header: str
    display: str
    inline: str = ""
    command: str = ""

    @classmethod
    def build(
        cls,
        database: Database,
        schemes: Iterable[Scheme],
        header: str,
        display: str,
        inline: str = "",
        command: str = "",
    ) -> "Definition":
        """
        Index schemes by typecode and register identifier labels

        Raises:
            EmptyIdentifierFormula: If an identifier scheme has no single label
        """
        buckets: Dict[str, List[Scheme]] = {}
        identifiers: Dict[str, str] = {}
        for scheme in schemes:
            if scheme.is_identifier:
                identifiers[identifier_label(scheme)] = scheme.typecode
            buckets.setdefault(scheme.typecode, []).append(scheme)

        LOG(
            f"Indexed {sum(len(b) for b in buckets.values())} schemes "
            f"over {len(buckets)} typecodes",
            level=2,
        )
        return cls(
            database=database,
            schemes=MappingProxyType({tc: tuple(b) for tc, b in buckets.items()}),
            identifiers=MappingProxyType(identifiers),
            header=header,
            display=display,
            inline=inline,
            command=command,
        )

    def render_formula(self, formula: Formula, use_provables: bool) -> str:
        """
        Render a formula and wrap it in the display string

        Args:
            formula: Formula to render
            use_provables: Render with the provable typecode's schemes
                           instead of the formula's own typecode

        Raises:
            RenderError: If the formula cannot be rendered
        """
        if use_provables:
            typecode = self.database.provable_typecode
        else:
            typecode = formula.typecode
        return self.display.replace(appsettings.display_placeholder, self.format(typecode, formula))

    def render_statement(self, statement: Union[Statement, str], use_provables: bool) -> str:
        """
        Render the parsed formula of a statement

        Args:
            statement: Statement, or its label

        Raises:
            RenderError: If the statement is unknown, unparsed or unrenderable
        """
        if isinstance(statement, str):
            found = self.database.statement_get(statement)
            if found is None:
                raise RenderError(f"Unknown statement {statement}")
            statement = found
        formula = self.database.statement_formula(statement)
        if formula is None:
            raise RenderError(f"Unknown statement {statement.label}")
        return self.render_formula(formula, use_provables)

    def format(self, typecode: str, formula: Formula, pending: Pending = frozenset()) -> str:
        """
        Recursively render a formula with the schemes of a typecode

        Args:
            typecode: Typecode whose schemes are tried, in declaration order
            formula: Formula to render
            pending: Renders in progress further up the call path

        Raises:
            MissingSchemeError: No scheme is registered for the typecode
            UnificationFailure: No scheme of the typecode applies
        """
        schemes = self.schemes.get(typecode)
        if schemes is None:
            raise MissingSchemeError(typecode)

        pending = pending | {(typecode, formula)}
        for scheme in schemes:
            rendered = self.scheme_apply(scheme, formula, pending)
            if rendered is not None:
                return rendered

        raise UnificationFailure(formula, typecode, text=self.formula_text(formula))

    def scheme_apply(self, scheme: Scheme, formula: Formula, pending: Pending = frozenset()) -> Optional[str]:
        """
        Render a formula with one scheme

        Returns:
            The rendered text, or None if the scheme does not apply

        Raises:
            RenderError: A sub-formula matched but failed to render
        """
        if scheme.is_identifier:
            return scheme.template if scheme.pattern == formula else None

        substitutions = self.database.unify(scheme.pattern, formula)
        if substitutions is None:
            return None

        texts: Dict[str, str] = {}
        for label, sub_formula in substitutions.items():
            statement = self.database.statement_get(label)
            if statement is None:
                return None
            name = self.database.variable_name(statement)
            if name is None:
                return None
            sub_typecode = self.identifiers.get(label)
            if sub_typecode is None:
                return None
            # A variable bound to the whole formula must not re-enter a render in progress
            if (sub_typecode, sub_formula) in pending:
                return None
            texts[appsettings.placeHolder_make(name)] = self.format(sub_typecode, sub_formula, pending)
        if not texts:
            return scheme.template
        # One pass over the template: substituted text is never searched again
        placeholders = re.compile("|".join(re.escape(p) for p in sorted(texts, key=len, reverse=True)))
        return placeholders.sub(lambda m: texts[m.group(0)], scheme.template)

    def scheme_matches(self, scheme: Scheme, formula: Formula) -> bool:
        """Whether a scheme's pattern accepts the formula, sub-renders aside"""
        if scheme.is_identifier:
            return scheme.pattern == formula
        return self.database.unify(scheme.pattern, formula) is not None

    def formula_text(self, formula: Formula) -> str:
        try:
            return ' '.join(self.database.formula_tokens(formula))
        except KeyError:
            return str(formula)

    def check(self) -> None:
        """
        Report typecodes of syntax axioms that cannot be rendered

        Diagnostics only; see CoverageChecker.
        """
        from .checker import CoverageChecker
        CoverageChecker(self).check()
