"""
Program state model and pipeline helper

Defines ProgramState dataclass for the functional pipeline pattern and
the pipeline() helper for composing transformation stages.
"""

from pathlib import Path
from argparse import Namespace
from typing import Any, Optional, Type, TypeVar, List, Dict, Callable, TYPE_CHECKING
from dataclasses import dataclass, field

# Forward reference for type hint - avoid circular import
if TYPE_CHECKING:
    from ..lib.definition import Definition
    from .page import RenderedStatement


PS = TypeVar("PS", bound="ProgramState")


@dataclass
class ProgramState:
    """
    Central state container for the rendering pipeline (state bus pattern).

    This dataclass carries all program state through the functional pipeline,
    with each stage adding new fields as the run progresses.

    Pipeline stages and their state additions:
        - Initial: inputdir, outputdir, verbosity, database, format, renderer,
                   label, checkSts, outputFile
        - env_check: databaseFile, definitionFile, envOK
        - database_load: db
        - definition_stage: definition
        - statements_render: renderedStatements
        - page_write: pageResult
        - results_report: (no additions, terminal stage)

    Attributes:
        inputdir: Directory containing the .mm database and .mmts definitions
        outputdir: Directory for the rendered page
        verbosity: Logging verbosity level (1-3)
        database: Database filename (relative to inputdir)
        format: Typesetting format tag selecting the definition file
        renderer: Rendering backend key ("ascii", "uni" or "sts")
        label: Statement labels to render (all axioms/theorems if empty)
        checkSts: Run the coverage check after loading definitions
        outputFile: Name of the page written to outputdir
        envOK: Environment validation passed
        databaseFile: Resolved database path
        definitionFile: Resolved definition file path
        db: Loaded formula database
        definition: Compiled typesetting definition
        renderedStatements: RenderedStatement rows in render order
        pageResult: Page results (output_file, statement_count, error_count)
    """

    # CLI arguments
    inputdir: Optional[Path] = field(default=None)
    outputdir: Optional[Path] = field(default=None)
    verbosity: int = field(default=1)
    database: str = field(default="")
    format: str = field(default="mathml")
    renderer: str = field(default="sts")
    label: List[str] = field(default_factory=list)
    checkSts: bool = field(default=False)
    outputFile: str = field(default="index.html")

    # Pipeline state
    envOK: bool = field(default=False)
    databaseFile: Path = field(default=Path("/"))
    definitionFile: Path = field(default=Path("/"))
    db: Optional[Any] = field(default=None)  # MetamathDatabase at runtime
    definition: Optional["Definition"] = field(default=None)
    renderedStatements: Optional[List["RenderedStatement"]] = field(default=None)
    pageResult: Optional[Dict] = field(default=None)

    @classmethod
    def state_createFromNamespace(
        cls: Type["ProgramState"], options: Namespace, inputdir: Path, outputdir: Path
    ) -> "ProgramState":
        """
        Create ProgramState from argparse Namespace and directory paths.

        CLI options that are not ProgramState fields are dropped; options
        left unset (None) fall back to the dataclass defaults.

        Args:
            options: Parsed CLI arguments (database, format, renderer, etc.)
            inputdir: Directory containing the database and definition files
            outputdir: Directory for the rendered page

        Returns:
            ProgramState instance with all CLI options as attributes
        """
        import dataclasses
        known = {f.name for f in dataclasses.fields(cls)}
        chosen = {
            name: value
            for name, value in vars(options).items()
            if name in known and value is not None
        }
        return cls(**{**chosen, "inputdir": inputdir, "outputdir": outputdir})

    def copy(self: PS) -> PS:
        """
        Creates a shallow copy of the ProgramState instance.

        Returns:
            A new ProgramState instance.
        """
        return type(self)(**self.__dict__)


def pipeline(
    initial_state: ProgramState, *stages: Callable[[ProgramState], ProgramState]
) -> ProgramState:
    """
    Execute a functional pipeline of state transformations.

    Each stage is a function (ProgramState) -> ProgramState that receives
    the output of the previous stage and returns a new state.

    Example:
        final_state = pipeline(
            initial_state,
            env_check,
            database_load,
            definition_stage,
            results_report
        )

    is results_report(definition_stage(database_load(env_check(initial_state)))).
    """
    from functools import reduce
    return reduce(lambda state, stage: stage(state), stages, initial_state)
