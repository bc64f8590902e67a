"""
Rendered page models

One RenderedStatement per page row: the assertion, the essential
hypotheses it depends on, and for axioms the steps of its syntax tree.
"""

from dataclasses import dataclass, field
from typing import List


@dataclass
class RenderedExpression:
    """
    One rendered expression

    Attributes:
        label: Statement label, or the syntax axiom building a step
        markup: Rendered markup, or the escaped error text
        ok: False when rendering failed
    """
    label: str
    markup: str
    ok: bool = True


@dataclass
class RenderedStatement:
    """
    A page row

    Attributes:
        label: Statement label
        assertion: The statement itself
        hypotheses: Essential hypotheses in scope, in declaration order
        steps: Syntax tree steps (axioms only), children before parents
    """
    label: str
    assertion: RenderedExpression
    hypotheses: List[RenderedExpression] = field(default_factory=list)
    steps: List[RenderedExpression] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True when every expression of the row rendered"""
        return all(e.ok for e in [self.assertion, *self.hypotheses, *self.steps])
