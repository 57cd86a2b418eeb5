"""
MiniKV Command Parser
=====================
Public API for the command parser.

Usage:
    from parser import parse, ParseError

    cmd = parse("SET greeting 'hello'")
    print(cmd)
"""

from parser.parser import Parser, ParseError
from parser.tokenizer import Tokenizer, Token, TokenType, TokenizeError
from parser.ast_nodes import Command


def parse(text: str) -> Command:
    """
    Parse a command string into a Command node.
    Raises ParseError if syntax is invalid.
    """
    try:
        tokens = Tokenizer().tokenize(text)
    except TokenizeError as e:
        token = Token(TokenType.EOF, "", e.line, e.col)
        raise ParseError(e.reason, token) from e
    return Parser(tokens).parse()


def tokenize(text: str) -> list[Token]:
    """Tokenize a command string (for debugging)."""
    return Tokenizer().tokenize(text)
