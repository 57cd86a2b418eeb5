"""
MiniKV Command Tokenizer
========================
Converts a raw command line into a stream of typed tokens.

Features:
- Case-insensitive keywords (GET = get)
- Quoted keys ("my key")
- String literals ('hello world', '' escapes a quote)
- Numeric literals (integers and floats, optional leading minus)
- Line/column tracking for error reporting
- EOF sentinel token
"""

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import List


class TokenType(Enum):
    # Data commands
    GET = auto()
    SET = auto()
    DELETE = auto()
    EXISTS = auto()

    # Transaction Control
    BEGIN = auto()
    COMMIT = auto()
    ROLLBACK = auto()

    # Literal keywords
    NULL = auto()
    TRUE = auto()
    FALSE = auto()

    # Literals
    NUMBER = auto()      # 123, -4, 3.14
    STRING_LIT = auto()  # 'hello'
    IDENTIFIER = auto()  # user:1, "Quoted Key"

    # Punctuation
    SEMICOLON = auto()   # ;

    # Special
    EOF = auto()


@dataclass(frozen=True)
class Token:
    """Immutable token with position info."""
    type: TokenType
    value: str
    line: int
    col: int
    quoted: bool = False

    def __repr__(self) -> str:
        return f"Token({self.type.name}, '{self.value}', {self.line}:{self.col})"


class TokenizeError(SyntaxError):
    """Unexpected character in command input."""

    def __init__(self, message: str, line: int, col: int):
        super().__init__(f"{message} at line {line}:{col}")
        self.reason = message
        self.line = line
        self.col = col


class Tokenizer:
    """
    Lexer for MiniKV commands. Call .tokenize(text) to get a list of tokens.
    """

    KEYWORDS = {
        "GET": TokenType.GET,
        "SET": TokenType.SET,
        "DELETE": TokenType.DELETE,
        "UNSET": TokenType.DELETE,
        "EXISTS": TokenType.EXISTS,
        "BEGIN": TokenType.BEGIN,
        "COMMIT": TokenType.COMMIT,
        "ROLLBACK": TokenType.ROLLBACK,
        "NULL": TokenType.NULL,
        "TRUE": TokenType.TRUE,
        "FALSE": TokenType.FALSE,
    }

    # Note: order matters!
    PATTERNS = [
        # Whitespace (skip)
        (re.compile(r'\s+'), None),
        # Comments (skip), only where a new token may start
        (re.compile(r'(?<![^\s;])--.*'), None),
        (re.compile(r'(?<![^\s;])#.*'), None),

        (re.compile(r';'), TokenType.SEMICOLON),

        # String: 'hello' (supports escaped single quote via '')
        (re.compile(r"'((?:''|[^'])*)'"), TokenType.STRING_LIT),
        # Number: -12.5 or 12. Must not run into a following word (12abc).
        (re.compile(r'-?\d+\.\d+(?![A-Za-z0-9_.:\-#])'), TokenType.NUMBER),
        (re.compile(r'-?\d+(?![A-Za-z0-9_.:\-#])'), TokenType.NUMBER),

        # Quoted key: "my key"
        (re.compile(r'"([^"]+)"'), TokenType.IDENTIFIER),
        # Bare word: user:42, cfg.timeout, a-b, tag#1 (could be keyword)
        (re.compile(r'[A-Za-z0-9_][A-Za-z0-9_.:\-#]*'), TokenType.IDENTIFIER),
    ]

    def tokenize(self, text: str) -> List[Token]:
        """Tokenize a command string into a list of Tokens."""
        tokens = []
        pos = 0
        line = 1
        col_start = 0  # position of start of current line in string

        while pos < len(text):
            match = None

            for pattern, token_type in self.PATTERNS:
                regex_match = pattern.match(text, pos)
                if regex_match:
                    raw = regex_match.group(0)

                    if token_type:  # If not skipped (whitespace/comments)
                        value = raw
                        quoted = False
                        if token_type == TokenType.IDENTIFIER:
                            if raw.startswith('"'):
                                value = regex_match.group(1)
                                quoted = True
                            elif raw.upper() in self.KEYWORDS:
                                token_type = self.KEYWORDS[raw.upper()]
                        elif token_type == TokenType.STRING_LIT:
                            value = regex_match.group(1).replace("''", "'")

                        col = pos - col_start + 1
                        tokens.append(Token(token_type, value, line, col, quoted))

                    pos += len(raw)

                    newlines = raw.count('\n')
                    if newlines > 0:
                        line += newlines
                        col_start = pos - (len(raw) - raw.rfind('\n') - 1)

                    match = regex_match
                    break

            if not match:
                col = pos - col_start + 1
                raise TokenizeError(f"Unexpected character '{text[pos]}'", line, col)

        # Always append EOF
        tokens.append(Token(TokenType.EOF, "", line, pos - col_start + 1))
        return tokens
