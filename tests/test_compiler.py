"""
Scheme compiler tests

Symbol resolution, typecode selection, the skip-or-abort policy for
failing schemes, and the shape of the compiled Definition.
"""

import dataclasses

import pytest

from stsengine.config import appsettings
from stsengine.lib.compiler import Compiler, definition_load
from stsengine.lib.errors import (
    EmptyIdentifierFormula,
    FormulaParseError,
    ParseError,
    SchemeError,
    UnknownSymbolError,
)
from stsengine.lib.parser import Parser

from conftest import MATHML_DEFINITION, SCENARIO_DEFINITION, compiled


class TestSchemeIndex:
    """Test grouping of schemes by typecode"""

    def test_scenario_buckets(self, scenario_definition):
        """Both scenario schemes land in the wff bucket, in order"""
        schemes = scenario_definition.schemes["wff"]
        assert [s.is_identifier for s in schemes] == [True, False]
        assert [s.template for s in schemes] == ["X", "#x# IMPLIES #x#"]

    def test_templates_trimmed(self, scenario_definition):
        """Blank space around templates is dropped"""
        assert scenario_definition.schemes["wff"][0].template == "X"

    def test_identifiers_from_identifier_schemes_only(self, toy_definition):
        """identifiers maps each $i label to its typecode"""
        assert dict(toy_definition.identifiers) == {
            "wph": "wff",
            "wps": "wff",
            "wch": "wff",
            "vx": "setvar",
            "cA": "class",
            "cB": "class",
        }

    def test_declaration_order_kept(self, toy_definition):
        wff = toy_definition.schemes["wff"]
        assert [s.pattern.label for s in wff] == ["wph", "wps", "wch", "wn", "wi", "wceq"]

    def test_deterministic(self, toy_db):
        """Compiling twice yields the same per-typecode order"""
        first = compiled(toy_db, MATHML_DEFINITION)
        second = compiled(toy_db, MATHML_DEFINITION)
        assert {tc: list(s) for tc, s in first.schemes.items()} == \
            {tc: list(s) for tc, s in second.schemes.items()}

    def test_line_numbers_recorded(self, toy_definition):
        schemes = toy_definition.schemes["wff"]
        assert schemes[0].line_number == 4


class TestTypecodeSelection:
    """Test how the first symbol selects parsing typecodes"""

    def test_grammar_typecode_used_directly(self, toy_definition):
        scheme = toy_definition.schemes["class"][-1]
        assert scheme.pattern.label == "cv"
        assert scheme.pattern.children[0].label == "vx"

    def test_non_grammar_typecode_parses_under_all(self, toy_definition):
        """The provable typecode is not a grammar typecode: any parse is accepted"""
        scheme = toy_definition.schemes["|-"][0]
        assert scheme.typecode == "|-"
        assert scheme.pattern.label == "wph"

    def test_pattern_gets_provable_framing(self, toy_definition):
        """Patterns of the logic typecode are framed as provable"""
        scheme = toy_definition.schemes["wff"][0]
        assert scheme.pattern.typecode == appsettings.provable_typecode


class TestAuxiliaryStrings:
    """Test header, display, inline and command"""

    def test_declared_strings(self, toy_definition):
        assert toy_definition.header == '<script src="mathjax.js"></script>'
        assert toy_definition.display == "<math>###</math>"

    def test_defaults(self, scenario_definition):
        """Without $d/$h the configured defaults apply"""
        assert scenario_definition.display == appsettings.default_display
        assert scenario_definition.header == appsettings.default_header
        assert scenario_definition.command == "provable"

    def test_last_seen_wins(self, scenario_db):
        definition = compiled(scenario_db, "$d <a>###</a> $. $t i1 $. $d <b>###</b> $. $t i2 $.")
        assert definition.display == "<b>###</b>"
        assert definition.inline == "i2"

    def test_typecodes_directive_has_no_effect(self, scenario_db):
        definition = compiled(scenario_db, "$u wff class $.")
        assert dict(definition.schemes) == {}


class TestFailingSchemes:
    """Test the skip (default) and strict policies"""

    def test_unknown_symbol_strict(self, scenario_db):
        with pytest.raises(UnknownSymbolError) as excinfo:
            compiled(scenario_db, "$i wff z $: Z $.", strict=True)
        assert excinfo.value.token == "z"

    def test_unknown_symbol_skipped(self, scenario_db):
        """The failing scheme is dropped, the others are kept"""
        directives = Parser("$i wff z $: Z $. $i wff x $: X $.").parse()
        compiler = Compiler(scenario_db, directives, strict=False)
        definition = compiler.compile()

        assert [s.template for s in definition.schemes["wff"]] == ["X"]
        assert [d.symbols for d in compiler.skipped] == [("wff", "z")]

    def test_unparsable_pattern(self, scenario_db):
        with pytest.raises(FormulaParseError):
            compiled(scenario_db, "$s wff ( x x ) $: bad $.", strict=True)

    def test_empty_pattern(self, scenario_db):
        """A typecode alone is not a pattern"""
        with pytest.raises(FormulaParseError):
            compiled(scenario_db, "$i wff $: nothing $.", strict=True)

    def test_identifier_must_be_bare_symbol(self, scenario_db):
        with pytest.raises(EmptyIdentifierFormula):
            compiled(scenario_db, "$i wff ( x -> y ) $: W $.", strict=True)

    def test_identifier_failure_skipped(self, scenario_db):
        definition = compiled(scenario_db, "$i wff ( x -> y ) $: W $.", strict=False)
        assert "wff" not in definition.schemes
        assert dict(definition.identifiers) == {}

    def test_strict_default_from_settings(self, scenario_db, monkeypatch):
        monkeypatch.setattr(appsettings, "strict_mode", True)
        with pytest.raises(SchemeError):
            compiled(scenario_db, "$i wff z $: Z $.", strict=None)


class TestImmutability:
    """The compiled Definition cannot be modified"""

    def test_fields_frozen(self, scenario_definition):
        with pytest.raises(dataclasses.FrozenInstanceError):
            scenario_definition.display = "changed"

    def test_scheme_index_read_only(self, scenario_definition):
        with pytest.raises(TypeError):
            scenario_definition.schemes["class"] = ()

    def test_scheme_buckets_are_tuples(self, scenario_definition):
        assert isinstance(scenario_definition.schemes["wff"], tuple)


class TestDefinitionLoad:
    """Test reading definition files from disk"""

    def test_load_file(self, scenario_db, tmp_path):
        path = tmp_path / "scenario-text.mmts"
        path.write_text(SCENARIO_DEFINITION, encoding="utf-8")
        definition = definition_load(scenario_db, path)
        assert len(definition.schemes["wff"]) == 2

    def test_load_rejects_trailing_garbage(self, scenario_db, tmp_path):
        path = tmp_path / "scenario-text.mmts"
        path.write_text(SCENARIO_DEFINITION + "!", encoding="utf-8")
        with pytest.raises(ParseError):
            definition_load(scenario_db, path)

    def test_path_from_database_name(self):
        path = appsettings.definitionPath_make("db/set.mm", "mathml")
        assert str(path) == "db/set-mathml.mmts"

    def test_path_without_directory(self):
        assert str(appsettings.definitionPath_make("set.mm", "text")) == "set-text.mmts"

    def test_path_requires_mm_extension(self):
        with pytest.raises(ParseError):
            appsettings.definitionPath_make("db/set.txt", "mathml")
