"""
Custom Pygments lexer for typesetting definition files

Provides syntax highlighting for .mmts definition sources when they are
shown alongside rendered statements.

Token types:
- Comment: $( ... $) comments
- Keyword: scheme keywords ($s, $i)
- Keyword.Declaration: text directive keywords ($u, $c, $d, $t, $h)
- Name: math tokens of a scheme
- Punctuation: $: and $.
- String: templates and directive text
- Name.Variable: #variable# placeholders in templates
"""

from pygments.lexer import RegexLexer
from pygments.token import (
    Text,
    Punctuation,
    Name,
    String,
    Keyword,
    Comment,
    Error,
)


class StsLexer(RegexLexer):
    """
    Lexer for typesetting definition files

    Example:
        $s wff ( ph -> ps ) $: <mrow>#ph# <mo>&rarr;</mo> #ps#</mrow> $.

    Tokens:
        $s → Keyword
        wff, (, ph, ... → Name
        $: → Punctuation
        <mrow> → String
        #ph# → Name.Variable
        $. → Punctuation
    """

    name = 'STS'
    aliases = ['sts', 'mmts']
    filenames = ['*.mmts']

    tokens = {
        'root': [
            (r'\$\((.|\n)*?\$\)', Comment.Multiline),
            (r'\$[si](?=\s)', Keyword, 'math'),
            (r'\$[ucdth]', Keyword.Declaration, 'text'),
            (r'\s+', Text),
            (r'.', Error),
        ],

        'math': [
            (r'\$:', Punctuation, ('#pop', 'template')),
            (r'[!-#%-~]+', Name),
            (r'\s+', Text),
            (r'.', Error),
        ],

        'template': [
            (r'\$\.', Punctuation, '#pop'),
            (r'#[^#\s$]+#', Name.Variable),
            (r'[^$#]+', String),
            (r'[$#]', String),
        ],

        'text': [
            (r'\$\.', Punctuation, '#pop'),
            (r'[^$]+', String.Other),
            (r'\$', String.Other),
        ],
    }


def get_lexer() -> StsLexer:
    """
    Get the StsLexer instance

    Returns:
        StsLexer instance ready for use with Pygments
    """
    return StsLexer()
