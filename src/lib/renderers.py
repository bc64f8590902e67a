"""
Expression rendering backends

The page layer picks one backend per request by key and then treats it
uniformly:

    ascii   plain math tokens in a <pre> block
    uni     per-token substitution with the database's althtmldef strings
    sts     structured typesetting through a compiled Definition

Every backend renders a formula or a statement to a string given a
provability flag, and supplies the header markup its output needs.
"""

import html
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Union

from ..models.database import Database, Formula, Statement
from .definition import Definition
from .errors import RenderError, UnknownSymbolError


class ExpressionRenderer(ABC):
    """Renders formulas and statements to markup"""

    key: str = ""

    def __init__(self, database: Database) -> None:
        self.database = database

    @property
    def header(self) -> str:
        """Markup injected once per page"""
        return ""

    @abstractmethod
    def render_formula(self, formula: Formula, use_provables: bool) -> str:
        ...

    def render_statement(self, statement: Union[Statement, str], use_provables: bool) -> str:
        """
        Render the parsed formula of a statement

        Raises:
            RenderError: If the statement is unknown or cannot be parsed
        """
        statement = self.statement_resolve(statement)
        formula = self.database.statement_formula(statement)
        if formula is None:
            raise RenderError(f"Unknown statement {statement.label}")
        return self.render_formula(formula, use_provables)

    def statement_resolve(self, statement: Union[Statement, str]) -> Statement:
        if isinstance(statement, Statement):
            return statement
        found = self.database.statement_get(statement)
        if found is None:
            raise RenderError(f"Unknown statement {statement}")
        return found


class AsciiRenderer(ExpressionRenderer):
    """Math tokens as plain text"""

    key = "ascii"

    def render_formula(self, formula: Formula, use_provables: bool) -> str:
        typecode = self.database.provable_typecode if use_provables else formula.typecode
        tokens = " ".join(self.database.formula_tokens(formula))
        return f"<pre>{html.escape(typecode)} {html.escape(tokens)}</pre>"


class UnicodeRenderer(ExpressionRenderer):
    """Math tokens replaced one by one with their althtmldef markup"""

    key = "uni"

    def render_formula(self, formula: Formula, use_provables: bool) -> str:
        symbols = self.tokens_render(self.database.formula_tokens(formula))
        return f'<span class="uni"><span color="gray">&#8866;</span> {symbols}</span>'

    def render_statement(self, statement: Union[Statement, str], use_provables: bool) -> str:
        statement = self.statement_resolve(statement)
        return f'<span class="uni">{self.tokens_render(statement.math)}</span>'

    def tokens_render(self, tokens) -> str:
        parts = []
        for token in tokens:
            markup = self.database.althtml_get(token)
            if markup is None:
                raise UnknownSymbolError(token)
            parts.append(markup)
        return " ".join(parts)


class StsRenderer(ExpressionRenderer):
    """Structured typesetting with a compiled Definition"""

    key = "sts"

    def __init__(self, database: Database, definition: Definition) -> None:
        super().__init__(database)
        self.definition = definition

    @property
    def header(self) -> str:
        return self.definition.header

    def render_formula(self, formula: Formula, use_provables: bool) -> str:
        return self.definition.render_formula(formula, use_provables)

    def render_statement(self, statement: Union[Statement, str], use_provables: bool) -> str:
        return self.definition.render_statement(self.statement_resolve(statement), use_provables)


class RendererRegistry:
    """
    Registry of available rendering backends

    Maps backend keys to renderer instances. The sts backend is only
    registered when a Definition is supplied.
    """

    def __init__(self, database: Database, definition: Optional[Definition] = None) -> None:
        self.renderers: Dict[str, ExpressionRenderer] = {}
        self.register(AsciiRenderer(database))
        self.register(UnicodeRenderer(database))
        if definition is not None:
            self.register(StsRenderer(database, definition))

    def register(self, renderer: ExpressionRenderer) -> None:
        self.renderers[renderer.key] = renderer

    def get(self, key: str) -> Optional[ExpressionRenderer]:
        return self.renderers.get(key)

    def keys(self) -> List[str]:
        return list(self.renderers)
