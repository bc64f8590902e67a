#!/usr/bin/env python3
"""
stsengine - Structured typesetting for formal formulas

Renders the statements of a Metamath database to an HTML page, using one
of several interchangeable expression renderers. The structured
typesetting renderer reads its schemes from a definition file next to the
database: <dbname>-<format>.mmts.

As an aside, this codebase leverages the ChRIS "plugin" concept/pattern as
general purpose python app development framework.

Usage:
    stsengine inputdir/ outputdir/ --database set.mm

    The rendered page is written to outputdir/ as a standalone HTML file.

Examples:
    # Typeset every axiom and theorem with set-mathml.mmts
    stsengine db/ out/ --database set.mm

    # A few statements, checking the definition file first
    stsengine db/ out/ --database set.mm --label ax-mp --label ax-1 --checkSts

    # Plain-text rendering, verbose
    stsengine db/ out/ --database set.mm --renderer ascii -vv
"""

import html
import sys
from argparse import ArgumentParser, Namespace, ArgumentDefaultsHelpFormatter
from pathlib import Path
from typing import Callable

from chris_plugin import chris_plugin
from pygments import highlight
from pygments.formatters import HtmlFormatter

from .config import appsettings
from .lib import MetamathDatabase, RendererRegistry, definition_load, __version__, LOG, state_connectToLogger
from .lib.log import source_track
from .lib.errors import StsError
from .lib.lexer import StsLexer
from .lib.renderers import ExpressionRenderer
from .models import Database, ProgramState, RenderedExpression, RenderedStatement, StatementType, pipeline


DISPLAY_TITLE = r"""
       _
   ___| |_ ___  ___ _ __   __ _(_)_ __   ___
  / __| __/ __|/ _ \ '_ \ / _` | | '_ \ / _ \
  \__ \ |_\__ \  __/ | | | (_| | | | | |  __/
  |___/\__|___/\___|_| |_|\__, |_|_| |_|\___|
                          |___/
  Structured typesetting for formal formulas
"""

# Define CLI arguments
parser = ArgumentParser(
    description="stsengine - Structured typesetting for formal formulas",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "--database", required=True, type=str, help="Metamath database (.mm) file (relative to inputdir)"
)

parser.add_argument(
    "--format",
    default="mathml",
    type=str,
    help="Typesetting format tag, selects <dbname>-<format>.mmts",
)

parser.add_argument(
    "--renderer",
    default="sts",
    choices=["ascii", "uni", "sts"],
    help="Expression renderer",
)

parser.add_argument(
    "--label",
    action="append",
    default=None,
    help="Statement label to render (repeatable). Defaults to all axioms and theorems",
)

parser.add_argument(
    "--checkSts",
    action="store_true",
    help="Check that every syntax axiom can be typeset",
)

parser.add_argument(
    "--outputFile",
    default="index.html",
    type=str,
    help="Name of the rendered page",
)

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase output verbosity (can be repeated: -v, -vv, -vvv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{title}</title>
{header}
</head>
<body>
<table class="statements">
{rows}
</table>
<h2>Typesetting definition</h2>
{source}
</body>
</html>
"""


def env_check(inputstate: ProgramState) -> ProgramState:
    """
    Validate environment and resolve all file paths.

    Args:
        inputstate: Initial program state with CLI options

    Returns:
        ProgramState with added fields:
            - databaseFile: Resolved path to the .mm database
            - definitionFile: Resolved path to the .mmts definition (sts only)
            - envOK: True if environment is valid

    Exits:
        1 if the database or (for the sts renderer) definition file is missing
    """
    state = inputstate.copy()

    if state.verbosity >= 2:
        LOG(DISPLAY_TITLE, level=2)

    LOG("Checking environment...", level=2)

    state.databaseFile = state.inputdir / state.database
    if not state.databaseFile.exists():
        print(f"Error: Database not found: {state.databaseFile}", file=sys.stderr)
        sys.exit(1)
    LOG(f"Database: {state.databaseFile}", level=2)

    if state.renderer == "sts":
        try:
            state.definitionFile = appsettings.definitionPath_make(str(state.databaseFile), state.format)
        except StsError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)

        if not state.definitionFile.exists():
            print(f"Error: Typesetting definition not found: {state.definitionFile}", file=sys.stderr)
            sys.exit(1)
        LOG(f"Definition: {state.definitionFile}", level=2)

    state.outputdir.mkdir(parents=True, exist_ok=True)
    state.envOK = True
    return state


def database_load(inputstate: ProgramState) -> ProgramState:
    """
    Read the Metamath database.

    Returns:
        ProgramState with added field:
            - db: MetamathDatabase

    Exits:
        1 if the database does not parse
    """
    state = inputstate.copy()

    LOG("Loading database...", level=1)
    try:
        with source_track(state.databaseFile.name):
            state.db = MetamathDatabase.file_load(state.databaseFile)
    except StsError as e:
        print(f"Database error: {e}", file=sys.stderr)
        sys.exit(1)
    return state


def definition_stage(inputstate: ProgramState) -> ProgramState:
    """
    Parse and compile the typesetting definition (sts renderer only).

    Returns:
        ProgramState with added field:
            - definition: compiled Definition

    Exits:
        1 if the definition file does not parse, or a scheme fails in strict mode
    """
    state = inputstate.copy()
    if state.renderer != "sts":
        return state

    LOG("Compiling typesetting definition...", level=1)
    try:
        state.definition = definition_load(state.db, state.definitionFile, check=state.checkSts)
    except StsError as e:
        print(f"Definition error: {e}", file=sys.stderr)
        sys.exit(1)
    return state


def expression_render(label: str, render: Callable[[], str]) -> RenderedExpression:
    """Run one render, turning a rendering error into inline error markup"""
    try:
        return RenderedExpression(label, render())
    except StsError as e:
        LOG(f"{label}: {e}", level=2)
        return RenderedExpression(label, f'<span class="error">{html.escape(str(e))}</span>', ok=False)


def statement_render(renderer: ExpressionRenderer, db: Database, label: str) -> RenderedStatement:
    """
    Render one page row.

    The assertion and its essential hypotheses are rendered with provable
    framing when the assertion is provable. Axioms also list every step of
    their syntax tree, rendered under its own typecode.
    """
    statement = db.statement_get(label)
    use_provables = statement is not None and statement.typecode == db.provable_typecode
    row = RenderedStatement(
        label,
        expression_render(label, lambda: renderer.render_statement(statement or label, use_provables)),
    )
    if statement is None:
        return row

    for hypothesis in db.essentials(statement):
        row.hypotheses.append(expression_render(
            hypothesis.label,
            lambda h=hypothesis: renderer.render_statement(h, use_provables),
        ))
    if statement.kind == StatementType.AXIOM:
        for step in db.syntax_steps(statement):
            row.steps.append(expression_render(
                step.label,
                lambda s=step: renderer.render_formula(s, False),
            ))
    return row


def statements_render(inputstate: ProgramState) -> ProgramState:
    """
    Render the requested statements.

    Rendering errors do not stop the run: the error text is shown in place
    of the expression.

    Returns:
        ProgramState with added field:
            - renderedStatements: List of RenderedStatement rows
    """
    state = inputstate.copy()
    renderer = RendererRegistry(state.db, state.definition).get(state.renderer)

    if state.label:
        labels = state.label
    else:
        labels = [
            s.label
            for s in state.db.statements()
            if s.kind in (StatementType.AXIOM, StatementType.PROVABLE)
        ]

    LOG(f"Rendering {len(labels)} statements with {state.renderer}", level=1)
    state.renderedStatements = [statement_render(renderer, state.db, label) for label in labels]
    return state


def row_format(row: RenderedStatement) -> str:
    """HTML table row: label, assertion, then hypotheses and steps"""
    cells = [f'<div class="assertion">{row.assertion.markup}</div>']
    for css, expressions in (("hypothesis", row.hypotheses), ("step", row.steps)):
        for expression in expressions:
            cells.append(
                f'<div class="{css}"><span class="label">{html.escape(expression.label)}</span> '
                f'{expression.markup}</div>'
            )
    return f'<tr><td class="label">{html.escape(row.label)}</td><td>{"".join(cells)}</td></tr>'


def page_write(inputstate: ProgramState) -> ProgramState:
    """
    Assemble and write the HTML page.

    Returns:
        ProgramState with added field:
            - pageResult: Dict with output_file, statement_count, error_count
    """
    state = inputstate.copy()
    renderer = RendererRegistry(state.db, state.definition).get(state.renderer)

    rows = "\n".join(row_format(row) for row in state.renderedStatements)
    source = ""
    if state.definition is not None:
        source = highlight(
            state.definitionFile.read_text(encoding="utf-8"),
            StsLexer(),
            HtmlFormatter(noclasses=True),
        )
    page = PAGE_TEMPLATE.format(
        title=html.escape(state.databaseFile.name),
        header=renderer.header,
        rows=rows,
        source=source,
    )

    output_file = state.outputdir / state.outputFile
    output_file.write_text(page, encoding="utf-8")
    LOG(f"Wrote {output_file}", level=2)

    state.pageResult = {
        "output_file": str(output_file),
        "statement_count": len(state.renderedStatements),
        "error_count": sum(1 for row in state.renderedStatements if not row.ok),
    }
    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Display rendering results to the user.

    Returns:
        ProgramState unchanged (terminal pipeline stage)

    Exits:
        1 if pageResult is None
    """
    state: ProgramState = inputstate.copy()
    if not state.pageResult:
        print("Error: Rendering failed", file=sys.stderr)
        sys.exit(1)

    LOG("\n✓ Rendering complete!", level=1)
    LOG(f"  Output: {state.pageResult['output_file']}", level=1)
    LOG(f"  Statements: {state.pageResult['statement_count']}", level=1)
    LOG(f"  Errors: {state.pageResult['error_count']}", level=1)
    return state


@chris_plugin(
    parser=parser,
    title="stsengine - Structured typesetting for formal formulas",
    category="Visualization",
    min_memory_limit="100Mi",
    min_cpu_limit="500m",
)
def main(options: Namespace, inputdir: Path, outputdir: Path):
    """
    Main entry point - render database statements to an HTML page.

    Orchestrates the full pipeline:
        1. env_check: Validate paths
        2. database_load: Read the .mm database
        3. definition_stage: Parse and compile the .mmts definition
        4. statements_render: Render each requested statement
        5. page_write: Write the HTML page
        6. results_report: Display results

    Note:
        This function is wrapped by @chris_plugin which handles CLI
        argument parsing and invokes this function with parsed values.
    """

    state: ProgramState = ProgramState.state_createFromNamespace(
        options=options, inputdir=inputdir, outputdir=outputdir
    )

    # Connect state to logger for entire pipeline
    state_connectToLogger(state)

    pipeline(
        state,
        env_check,
        database_load,
        definition_stage,
        statements_render,
        page_write,
        results_report,
    )


if __name__ == "__main__":
    main()  # type: ignore  # @chris_plugin decorator transforms signature
