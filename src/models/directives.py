"""
Directive models

Defines the kinds of directives found in a typesetting definition file
and the transient Directive record produced by the parser. Directives are
consumed immediately by the scheme compiler.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Dict, Tuple


class DirectiveKind(Enum):
    """
    Kinds of definition-file directives

    The value is the keyword that introduces the directive in source.
    """
    COMMENT = "$("       # $( ... $) or blank space
    SCHEME = "$s"        # $s / $i math... $: template $.
    TYPECODES = "$u"     # $u ... $. (reserved, no effect)
    COMMAND = "$c"       # $c ... $.
    DISPLAY = "$d"       # $d ... $.
    INLINE = "$t"        # $t ... $.
    HEADER = "$h"        # $h ... $.


@dataclass(frozen=True)
class Directive:
    """
    A single parsed directive

    Attributes:
        kind: Which directive this is
        text: Verbatim text body (template for schemes, free text otherwise)
        is_identifier: True for $i schemes, False for $s schemes
        symbols: Math tokens of a scheme, first one naming its typecode
        line_number: Source line where the directive starts

    Example:
        For source "$i wff x $: X $." at line 1:
        Directive(kind=DirectiveKind.SCHEME, text=" X ",
                  is_identifier=True, symbols=("wff", "x"), line_number=1)
    """
    kind: DirectiveKind
    text: str = ""
    is_identifier: bool = False
    symbols: Tuple[str, ...] = field(default_factory=tuple)
    line_number: int = 1


# Keywords introducing text directives of the form <kw> text $.
TEXT_DIRECTIVES: Dict[str, DirectiveKind] = {
    "$u": DirectiveKind.TYPECODES,
    "$c": DirectiveKind.COMMAND,
    "$d": DirectiveKind.DISPLAY,
    "$t": DirectiveKind.INLINE,
    "$h": DirectiveKind.HEADER,
}

# Keywords introducing scheme directives, mapped to is_identifier
SCHEME_KEYWORDS: Dict[str, bool] = {
    "$s": False,
    "$i": True,
}
