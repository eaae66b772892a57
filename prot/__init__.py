# Prot language package
# This package provides the tokenizer, parser and interpreter for the Prot language.
from .errors import CoercionError, Diagnostic, Diagnostics
from .interpreter import Interpreter, run_program
from .parser import Parser, parse
from .tokenizer import Tokenizer, tokenize
from .types import Token, TokenKind

__all__ = [
    'run_program',
    'tokenize',
    'parse',
    'Tokenizer',
    'Parser',
    'Interpreter',
    'Token',
    'TokenKind',
    'Diagnostic',
    'Diagnostics',
    'CoercionError',
]
