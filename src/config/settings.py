"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use STS_ prefix (e.g., STS_STRICT_MODE=true).

Settings can also be loaded from a .env file in the project root.
"""

import re
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


MATHJAX_HEADER = (
    '<script src="https://polyfill.io/v3/polyfill.min.js?features=es6"></script>\n'
    '<script id="MathJax-script" async '
    'src="https://cdn.jsdelivr.net/npm/mathjax@3/es5/tex-mml-chtml.js"></script>'
)


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use STS_ prefix.

    Examples:
        STS_PROVABLE_TYPECODE=|-
        STS_STRICT_MODE=true
        STS_DEFINITION_EXTENSION=mmts
    """

    model_config = SettingsConfigDict(
        env_prefix="STS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Grammar configuration
    provable_typecode: str = Field(
        default="|-",
        description="Typecode of provable statements",
    )

    logic_typecode: str = Field(
        default="wff",
        description="Typecode re-tagged as provable when provable framing is requested",
    )

    # Template configuration
    display_placeholder: str = Field(
        default="###",
        description="Placeholder in the display string replaced by the rendered formula",
    )

    variable_delimiter: str = Field(
        default="#",
        description="Delimiter surrounding variable names in scheme templates",
    )

    default_display: str = Field(
        default="###",
        description="Display string used when the definition file declares none",
    )

    default_header: str = Field(
        default=MATHJAX_HEADER,
        description="Page header markup used when the definition file declares none",
    )

    # Loading configuration
    definition_extension: str = Field(
        default="mmts",
        description="File extension of typesetting definition files",
    )

    strict_mode: bool = Field(
        default=False,
        description="Strict mode: a scheme that fails to compile aborts the load",
    )

    def placeHolder_make(self, name: str) -> str:
        """
        Generate the template placeholder for a scheme variable.

        Args:
            name: Variable symbol name (e.g., "ph")

        Returns:
            Placeholder string (e.g., "#ph#")

        Example:
            >>> settings = AppSettings()
            >>> settings.placeHolder_make('x')
            '#x#'
        """
        return f"{self.variable_delimiter}{name}{self.variable_delimiter}"

    def definitionPath_make(self, database_path: str, format_name: str) -> Path:
        """
        Derive the definition file path from a database path and format tag.

        Args:
            database_path: Path to the Metamath database (must end in .mm)
            format_name: Format tag (e.g., "mathml")

        Returns:
            Path of the form <dir>/<dbname>-<format>.<extension>

        Raises:
            ParseError: If the database path does not name a .mm file

        Example:
            >>> AppSettings().definitionPath_make('db/set.mm', 'mathml')
            PosixPath('db/set-mathml.mmts')
        """
        from ..lib.errors import ParseError

        match = re.match(r'^(.+/)?([^/]+)\.mm$', str(database_path))
        if not match:
            raise ParseError(f"Could not parse database file name: {database_path}")
        directory = match.group(1) or ""
        name = match.group(2)
        return Path(f"{directory}{name}-{format_name}.{self.definition_extension}")


# Singleton instance - import this in your code
appsettings = AppSettings()
