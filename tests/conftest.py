"""
Shared fixtures: small Metamath databases and typesetting definitions
"""

import pytest

from stsengine.lib.compiler import definition_compile
from stsengine.lib.database import MetamathDatabase
from stsengine.lib.parser import Parser


# Two wff variables and implication, as in the README scenario
SCENARIO_DB = """
$c ( ) -> -. wff |- $.
$v x y $.
wx $f wff x $.
wy $f wff y $.
wn $a wff -. x $.
wi $a wff ( x -> y ) $.
"""

SCENARIO_DEFINITION = "$c provable $. $i wff x $: X $. $s wff ( x -> x ) $: #x# IMPLIES #x# $."


TOY_DB = """
$( A small propositional and class fragment $)
$c ( ) -> -. wff |- class setvar = e. $.
$v ph ps ch x A B $.
wph $f wff ph $.
wps $f wff ps $.
wch $f wff ch $.
vx $f setvar x $.
cA $f class A $.
cB $f class B $.
wn $a wff -. ph $.
wi $a wff ( ph -> ps ) $.
cv $a class x $.
wceq $a wff A = B $.
wcel $a wff A e. B $.
${
  min $e |- ph $.
  maj $e |- ( ph -> ps ) $.
  ax-mp $a |- ps $.
$}
ax-1 $a |- ( ph -> ( ps -> ph ) ) $.
idi $p |- ( ph -> ph ) $= ? $.
$( $t
  althtmldef "|-" as "&vdash;";
  althtmldef "(" as "(";
  althtmldef ")" as ")";
  althtmldef "->" as " &rarr; ";
  althtmldef "ph" as '<i>' + "&phi;" + '</i>';
  althtmldef "ps" as "<i>&psi;</i>";
$)
"""

MATHML_DEFINITION = """$( MathML typesetting for the toy database $)
$h <script src="mathjax.js"></script> $.
$d <math>###</math> $.
$i wff ph $: <mi>&phi;</mi> $.
$i wff ps $: <mi>&psi;</mi> $.
$i wff ch $: <mi>&chi;</mi> $.
$i setvar x $: <mi>x</mi> $.
$i class A $: <mi>A</mi> $.
$i class B $: <mi>B</mi> $.
$s wff -. ph $: <mo>&not;</mo>#ph# $.
$s wff ( ph -> ps ) $: <mrow><mo>(</mo>#ph#<mo>&rarr;</mo>#ps#<mo>)</mo></mrow> $.
$s class x $: #x# $.
$s wff A = B $: <mrow>#A#<mo>=</mo>#B#</mrow> $.
$s |- ph $: <mo>&vdash;</mo>#ph# $.
"""


def formula_parse(db, text, typecode="wff", provable=False):
    """Parse a space-separated formula"""
    return db.formula_parse(text.split(), [typecode], provable)


def compiled(db, text, strict=True):
    """Compile definition text against a database"""
    return definition_compile(db, Parser(text).parse(), strict=strict)


@pytest.fixture
def scenario_db():
    return MetamathDatabase(SCENARIO_DB)


@pytest.fixture
def scenario_definition(scenario_db):
    return compiled(scenario_db, SCENARIO_DEFINITION)


@pytest.fixture
def toy_db():
    return MetamathDatabase(TOY_DB)


@pytest.fixture
def toy_definition(toy_db):
    return compiled(toy_db, MATHML_DEFINITION)
