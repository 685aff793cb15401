"""
Witx Interface Description Language Parser

Turns witx source, a small s-expression language describing cross-boundary
function signatures, data types and module imports, into an unvalidated
syntax tree that keeps documentation comments and source positions.
"""

__version__ = "0.1.0"


from ._error import *
from ._syntax import *
from ._lexer import *
from ._parse import *
from ._dump import *
