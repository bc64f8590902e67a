"""
Render engine tests

First-match-wins, identifier exactness, recursive substitution, error
reporting and the display wrapper.
"""

import pytest

from stsengine.lib.errors import MissingSchemeError, RenderError, UnificationFailure

from conftest import compiled, formula_parse


class TestScenario:
    """The two-scheme scenario"""

    def test_identifier(self, scenario_db, scenario_definition):
        x = formula_parse(scenario_db, "x")
        assert scenario_definition.render_formula(x, False) == "X"

    def test_pattern(self, scenario_db, scenario_definition):
        formula = formula_parse(scenario_db, "( x -> x )")
        assert scenario_definition.render_formula(formula, False) == "X IMPLIES X"

    def test_repeated_variable_must_match(self, scenario_db, scenario_definition):
        """( x -> y ) does not unify with ( x -> x )"""
        formula = formula_parse(scenario_db, "( x -> y )")
        with pytest.raises(UnificationFailure) as excinfo:
            scenario_definition.render_formula(formula, False)
        assert excinfo.value.typecode == "wff"
        assert "( x -> y )" in str(excinfo.value)

    def test_missing_typecode(self, scenario_db, scenario_definition):
        """A typecode without schemes is named in the error"""
        x = formula_parse(scenario_db, "x")
        with pytest.raises(MissingSchemeError) as excinfo:
            scenario_definition.format("class", x)
        assert excinfo.value.typecode == "class"
        assert "class" in str(excinfo.value)

    def test_deterministic(self, scenario_db, scenario_definition):
        formula = formula_parse(scenario_db, "( x -> x )")
        assert scenario_definition.render_formula(formula, False) == \
            scenario_definition.render_formula(formula, False)


class TestFirstMatchWins:
    """Schemes are tried in declaration order"""

    def test_first_of_two_applicable(self, scenario_db):
        definition = compiled(scenario_db, """
            $i wff x $: X $.
            $i wff y $: Y $.
            $s wff ( x -> y ) $: FIRST #x# #y# $.
            $s wff ( x -> y ) $: SECOND $.
        """)
        formula = formula_parse(scenario_db, "( x -> y )")
        assert definition.render_formula(formula, False) == "FIRST X Y"

    def test_order_reversed(self, scenario_db):
        definition = compiled(scenario_db, """
            $i wff x $: X $.
            $i wff y $: Y $.
            $s wff ( x -> y ) $: SECOND $.
            $s wff ( x -> y ) $: FIRST #x# #y# $.
        """)
        formula = formula_parse(scenario_db, "( x -> y )")
        assert definition.render_formula(formula, False) == "SECOND"

    def test_specific_before_general(self, scenario_db):
        """A narrower pattern declared first takes precedence where it applies"""
        definition = compiled(scenario_db, """
            $i wff x $: X $.
            $i wff y $: Y $.
            $s wff ( x -> x ) $: SAME #x# $.
            $s wff ( x -> y ) $: #x# TO #y# $.
        """)
        same = formula_parse(scenario_db, "( x -> x )")
        other = formula_parse(scenario_db, "( x -> y )")
        assert definition.render_formula(same, False) == "SAME X"
        assert definition.render_formula(other, False) == "X TO Y"


class TestIdentifierExactness:
    """Identifier schemes only apply to their own symbol"""

    def test_other_symbol_rejected(self, scenario_db, scenario_definition):
        """x is a variable, yet its identifier scheme does not render y"""
        y = formula_parse(scenario_db, "y")
        with pytest.raises(UnificationFailure):
            scenario_definition.render_formula(y, False)

    def test_compound_rejected(self, scenario_db):
        definition = compiled(scenario_db, "$i wff x $: X $.")
        formula = formula_parse(scenario_db, "-. x")
        with pytest.raises(UnificationFailure):
            definition.render_formula(formula, False)

    def test_scheme_apply_returns_none(self, scenario_db, scenario_definition):
        identifier = scenario_definition.schemes["wff"][0]
        y = formula_parse(scenario_db, "y")
        assert scenario_definition.scheme_apply(identifier, y) is None


class TestSubstitution:
    """Recursive rendering of bound sub-formulas"""

    DEFINITION = """
        $i wff x $: X $.
        $i wff y $: B $.
        $s wff -. x $: A(#x#) $.
        $s wff ( x -> y ) $: [#x#|#y#] $.
    """

    def test_round_trip(self, scenario_db):
        definition = compiled(scenario_db, self.DEFINITION)
        formula = formula_parse(scenario_db, "-. y")
        assert definition.render_formula(formula, False) == "A(B)"

    def test_nested(self, scenario_db):
        definition = compiled(scenario_db, self.DEFINITION)
        formula = formula_parse(scenario_db, "-. -. -. y")
        assert definition.render_formula(formula, False) == "A(A(A(B)))"

    def test_mixed_nesting(self, scenario_db):
        definition = compiled(scenario_db, self.DEFINITION)
        formula = formula_parse(scenario_db, "( -. x -> ( y -> -. y ) )")
        assert definition.render_formula(formula, False) == "[A(X)|[B|A(B)]]"

    def test_every_occurrence_replaced(self, scenario_db, scenario_definition):
        formula = formula_parse(scenario_db, "( x -> x )")
        assert "#x#" not in scenario_definition.render_formula(formula, False)

    def test_rendered_text_not_rescanned(self, scenario_db):
        """Placeholder text inside a sub-render is left alone"""
        definition = compiled(scenario_db, """
            $i wff x $: [#y#] $.
            $i wff y $: Y $.
            $s wff ( x -> y ) $: #x# TO #y# $.
        """)
        formula = formula_parse(scenario_db, "( x -> y )")
        assert definition.render_formula(formula, False) == "[#y#] TO Y"

    def test_placeholder_next_to_entity(self, scenario_db):
        definition = compiled(scenario_db, """
            $i wff x $: X $.
            $s wff -. x $: &#172;#x#&#172; $.
        """)
        formula = formula_parse(scenario_db, "-. x")
        assert definition.render_formula(formula, False) == "&#172;X&#172;"

    def test_sub_formula_uses_identifier_typecode(self, toy_db, toy_definition):
        """A class variable bound to a set variable renders through class schemes"""
        formula = formula_parse(toy_db, "x = A")
        assert toy_definition.format("wff", formula) == \
            "<mrow><mi>x</mi><mo>=</mo><mi>A</mi></mrow>"

    def test_variable_without_identifier_is_soft_failure(self, scenario_db):
        """A pattern whose variable has no identifier scheme is passed over"""
        definition = compiled(scenario_db, """
            $i wff y $: Y $.
            $s wff -. x $: NOT #x# $.
            $s wff -. y $: FALLBACK $.
        """)
        formula = formula_parse(scenario_db, "-. y")
        assert definition.render_formula(formula, False) == "FALLBACK"

    def test_sub_render_failure_propagates(self, toy_db):
        """A matching scheme whose sub-formula fails does not fall through"""
        definition = compiled(toy_db, """
            $i class A $: A $.
            $i class B $: B $.
            $s wff A = B $: #A# EQ #B# $.
        """)
        formula = formula_parse(toy_db, "x = A")
        with pytest.raises(UnificationFailure) as excinfo:
            definition.render_formula(formula, False)
        assert excinfo.value.typecode == "class"

    def test_whole_formula_binding_does_not_loop(self, scenario_db):
        """A bare-variable pattern cannot re-enter its own render"""
        definition = compiled(scenario_db, """
            $i wff x $: X $.
            $s wff x $: ANY #x# $.
        """)
        formula = formula_parse(scenario_db, "y")
        with pytest.raises(UnificationFailure):
            definition.render_formula(formula, False)


class TestRenderEntryPoints:
    """render_formula / render_statement with and without provables"""

    def test_display_wrapper(self, toy_db, toy_definition):
        formula = formula_parse(toy_db, "-. ph")
        assert toy_definition.render_formula(formula, False) == \
            "<math><mo>&not;</mo><mi>&phi;</mi></math>"

    def test_use_provables(self, toy_db, toy_definition):
        formula = formula_parse(toy_db, "ph")
        assert toy_definition.render_formula(formula, True) == \
            "<math><mo>&vdash;</mo><mi>&phi;</mi></math>"

    def test_render_statement(self, toy_definition):
        rendered = toy_definition.render_statement("ax-1", True)
        assert rendered == (
            "<math><mo>&vdash;</mo>"
            "<mrow><mo>(</mo><mi>&phi;</mi><mo>&rarr;</mo>"
            "<mrow><mo>(</mo><mi>&psi;</mi><mo>&rarr;</mo><mi>&phi;</mi><mo>)</mo></mrow>"
            "<mo>)</mo></mrow></math>"
        )

    def test_render_statement_object(self, toy_db, toy_definition):
        statement = toy_db.statement_get("ax-mp")
        assert toy_definition.render_statement(statement, True) == \
            "<math><mo>&vdash;</mo><mi>&psi;</mi></math>"

    def test_render_syntax_statement(self, toy_definition):
        """Syntax axioms render under their own typecode"""
        assert toy_definition.render_statement("wn", False) == \
            "<math><mo>&not;</mo><mi>&phi;</mi></math>"

    def test_unknown_statement(self, toy_definition):
        with pytest.raises(RenderError, match="Unknown statement"):
            toy_definition.render_statement("no-such-label", True)

    def test_provable_typecode_without_schemes(self, scenario_db, scenario_definition):
        x = formula_parse(scenario_db, "x")
        with pytest.raises(MissingSchemeError) as excinfo:
            scenario_definition.render_formula(x, True)
        assert excinfo.value.typecode == "|-"
