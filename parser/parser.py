"""
MiniKV Command Parser
=====================
Recursive-descent parser for the MiniKV command language.
Converts a stream of tokens into a Command node.

Grammar:
    command  := GET key | SET key value | DELETE key | EXISTS key
              | BEGIN | COMMIT | ROLLBACK
    key      := IDENTIFIER
    value    := NUMBER | STRING_LIT | NULL | TRUE | FALSE | IDENTIFIER
"""

from typing import Any, List, NoReturn

from parser.tokenizer import Token, TokenType
from parser.ast_nodes import (
    Command, GetCmd, SetCmd, DeleteCmd, ExistsCmd,
    BeginCmd, CommitCmd, RollbackCmd,
)


class ParseError(Exception):
    """Error during parsing with position info."""
    def __init__(self, message: str, token: Token):
        super().__init__(f"{message} at line {token.line}:{token.col}")
        self.token = token


class Parser:
    """
    Initialize with a list of tokens, call .parse() to get the Command.
    """

    _KEY_COMMANDS = {
        TokenType.GET: GetCmd,
        TokenType.DELETE: DeleteCmd,
        TokenType.EXISTS: ExistsCmd,
    }

    _CONTROL_COMMANDS = {
        TokenType.BEGIN: BeginCmd,
        TokenType.COMMIT: CommitCmd,
        TokenType.ROLLBACK: RollbackCmd,
    }

    def __init__(self, tokens: List[Token]):
        self._tokens = tokens
        self._pos = 0

    def parse(self) -> Command:
        """Parse a single command."""
        if self._check(TokenType.EOF):
            raise ParseError("Unexpected end of input", self._peek())

        cmd = self._parse_command()

        if self._match(TokenType.SEMICOLON) and not self._check(TokenType.EOF):
            self._error("Multiple commands not supported")
        if not self._check(TokenType.EOF):
            self._error("Unexpected token after command")
        return cmd

    # ─── Commands ────────────────────────────────────────────────────────

    def _parse_command(self) -> Command:
        token = self._advance()

        if token.type in self._CONTROL_COMMANDS:
            return self._CONTROL_COMMANDS[token.type]()

        if token.type in self._KEY_COMMANDS:
            key = self._parse_key(token.value.upper())
            return self._KEY_COMMANDS[token.type](key)

        if token.type == TokenType.SET:
            key = self._parse_key("SET")
            value = self._parse_value()
            return SetCmd(key, value)

        raise ParseError(f"Unknown command '{token.value}'", token)

    def _parse_key(self, command: str) -> str:
        token = self._peek()
        if token.type == TokenType.IDENTIFIER:
            self._advance()
            return token.value
        if token.type == TokenType.EOF:
            self._error(f"{command} requires a key")
        if token.type == TokenType.NUMBER:
            # Numeric-looking keys are still keys
            self._advance()
            return token.value
        self._error(f"Expected key after {command}, found '{token.value}'")

    def _parse_value(self) -> Any:
        token = self._peek()
        if token.type == TokenType.EOF or token.type == TokenType.SEMICOLON:
            self._error("SET requires a value")
        self._advance()

        if token.type == TokenType.NUMBER:
            if "." in token.value:
                return float(token.value)
            return int(token.value)
        if token.type == TokenType.STRING_LIT:
            return token.value
        if token.type == TokenType.NULL:
            return None
        if token.type == TokenType.TRUE:
            return True
        if token.type == TokenType.FALSE:
            return False
        # Bare word or quoted identifier (including command words) as a string
        return token.value

    # ─── Helpers ─────────────────────────────────────────────────────────

    def _peek(self) -> Token:
        return self._tokens[self._pos]

    def _advance(self) -> Token:
        token = self._tokens[self._pos]
        if token.type != TokenType.EOF:
            self._pos += 1
        return token

    def _check(self, token_type: TokenType) -> bool:
        return self._peek().type == token_type

    def _match(self, token_type: TokenType) -> bool:
        if self._check(token_type):
            self._advance()
            return True
        return False

    def _error(self, message: str) -> NoReturn:
        raise ParseError(message, self._peek())
