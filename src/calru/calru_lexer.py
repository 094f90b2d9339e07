"""
Lexical analyzer for the Calru programming language.

This module converts raw source text into a finite token sequence:

Classes:
    Position: 1-based line/column pair attached to every token.
    CharacterStream: Stream abstraction for reading characters with line/column tracking.
    Token: A single token with type, literal text, and source location.
    Lexer: Converts a CharacterStream into a sequence of tokens.

Functions:
    tokenize(source, strict=True): Lex a whole source text. In strict mode the first
        UNKNOWN token is raised as a `LexicalError`.

Features:
    - Skips spaces, tabs and carriage returns; newlines advance the line counter
    - Skips `//` line comments
    - Recognizes:
        * Identifiers and keywords (`let`, `stdout`, `if`, `then`, `else`, `end`,
          `loop`, `break`, `fetch`, `push`, `pop`, `len`)
        * Boolean literals (`true`, `false`)
        * Numbers (integer, and float when a single `.` appears in the digit run)
        * Type annotations (`:int`, `:float`, `:bool`, `:[int]`, `:[float]`, `:[bool]`)
        * Operators with one-character lookahead (`>=`, `<=`, `==`, `!=`, `&&`, `||`, `:=`)
        * Punctuation
    - Any other character becomes an UNKNOWN token; the lexer itself never aborts.

The token sequence always ends with exactly one EOF token carrying the final position.

Example:
    >>> [tok.type for tok in tokenize("let x:int := 1;")]
    ['LET', 'IDENT', 'INT_TYPE', 'ASSIGN', 'NUMBER', 'SEMICOLON', 'EOF']

Exports:
    - Position
    - CharacterStream
    - Token
    - Lexer
    - tokenize
"""

from typing import Any

from calru.calru_constants import (
    boolean_literals,
    token_hashmap,
    type_annotations,
)
from calru.calru_errors import LexicalError

# Characters that may begin a two-character operator, and what they pair with.
TWO_CHAR_OPERATORS = {
    ">": "=",
    "<": "=",
    "=": "=",
    "!": "=",
    "&": "&",
    "|": "|",
    ":": "=",
}


class Position:
    """A 1-based source location."""

    def __init__(self, line: int, column: int) -> None:
        self.line = line
        self.column = column

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Position)
            and self.line == other.line
            and self.column == other.column
        )

    def __hash__(self) -> int:
        return hash((self.line, self.column))

    def __repr__(self) -> str:
        return f"Position(line={self.line}, column={self.column})"

    def __str__(self) -> str:
        return f"line {self.line}, column {self.column}"


class CharacterStream:
    """
    A utility for reading characters from a string source with line and column tracking.

    Attributes:
        source (str): The input source string.
        position (int): Current index in the source.
        line (int): Current line number (1-indexed).
        column (int): Current column number (1-indexed).
    """

    def __init__(self, source: str, position: int = 0, line: int = 1, column: int = 1):
        self.source = source
        self.position = position
        self.line = line
        self.column = column

    def next(self) -> str:
        """
        Consumes and returns the next character in the stream.

        Returns:
            str: The next character.

        Raises:
            Exception: If reading past the end of the source.
        """
        if self.position >= len(self.source):
            raise Exception(
                f"CharacterStreamError: Attempted to read past end of source at position=<{self.position}>, line=<{self.line}>"
            )
        char = self.source[self.position]
        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.position += 1
        return char

    def peek(self, offset: int = 0) -> str:
        """
        Returns the character at the given offset from the current position without advancing.

        Returns:
            str: The character at the offset, or an empty string if out of bounds.
        """
        index = self.position + offset
        if index < 0 or index >= len(self.source):
            return ""
        return self.source[index]

    def end_of_file(self) -> bool:
        return self.position >= len(self.source)


class Token:
    """Represents a single lexical token in the Calru language.

    Attributes:
        type (str): The canonical token type (e.g. 'IDENT', 'NUMBER', 'EOF').
        value (str): The literal text of the token.
        line (int): The 1-based line number where the token appears.
        col (int): The 1-based column number where the token starts.
    """

    def __init__(self, type_: str, value: str, line: int = 0, col: int = 0):
        self.type = type_
        self.value = value
        self.line = line
        self.col = col

    @property
    def position(self) -> Position:
        return Position(self.line, self.col)

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.value})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Token)
            and self.type == other.type
            and self.value == other.value
            and self.line == other.line
            and self.col == other.col
        )

    def __hash__(self) -> int:
        return hash((self.type, self.value, self.line, self.col))


class Lexer:
    """Lexical analyzer for the Calru language.

    The Lexer takes a CharacterStream and converts it into a stream of Token objects.

    Attributes:
        stream (CharacterStream): The source stream to tokenize.
    """

    def __init__(self, stream: CharacterStream) -> None:
        self.stream = stream

    def peek(self, offset: int = 0) -> str:
        return self.stream.peek(offset)

    def advance(self) -> str:
        return self.stream.next()

    def skip_whitespace(self) -> None:
        """Skips all whitespace and `//` comments in the stream."""
        while not self.stream.end_of_file():
            if self.peek() in " \t\r\n":
                self.advance()
            elif self.peek() == "/" and self.peek(1) == "/":
                self.skip_comment()
            else:
                break

    def skip_comment(self) -> None:
        """Advances through the stream until the end of a comment line."""
        while not self.stream.end_of_file() and self.peek() != "\n":
            self.advance()

    def match_type_annotation(self) -> tuple[str, int] | None:
        """Looks past a `:` for a type name.

        Spaces and tabs between the colon and the name are allowed. Scalar names
        must end at a word boundary, so `:integer` is not an annotation.

        Returns:
            tuple[str, int] | None: The annotation text and the number of characters
            to consume after the colon, or None when no annotation follows.
        """
        offset = 1
        while self.peek(offset) in (" ", "\t"):
            offset += 1
        for text in type_annotations:
            if all(self.peek(offset + i) == ch for i, ch in enumerate(text)):
                following = self.peek(offset + len(text))
                if text[0] != "[" and (following.isalnum() or following == "_"):
                    continue
                return text, offset + len(text) - 1
        return None

    def match_operator(self) -> Token | None:
        """Matches an operator or punctuation character, preferring the two-character form.

        Returns:
            Token | None: A Token if a match is found, otherwise None.
        """
        line, col = self.stream.line, self.stream.column
        ch = self.peek()

        if ch == ":" and self.peek(1) != "=":
            annotation = self.match_type_annotation()
            if annotation is not None:
                text, length = annotation
                self.advance()
                for _ in range(length):
                    self.advance()
                return Token(type_annotations[text], text, line, col)

        if TWO_CHAR_OPERATORS.get(ch) == self.peek(1) and self.peek(1):
            candidate = ch + self.peek(1)
            self.advance()
            self.advance()
            return Token(token_hashmap[candidate], candidate, line, col)

        if ch in token_hashmap:
            self.advance()
            return Token(token_hashmap[ch], ch, line, col)

        return None

    def next_token(self) -> Token:
        """Consumes and returns the next Token from the stream.

        Returns:
            Token: The next token; EOF once the source is exhausted, UNKNOWN for an
            unrecognized character.
        """
        self.skip_whitespace()

        if self.stream.end_of_file():
            return Token("EOF", "EOF", self.stream.line, self.stream.column)

        ch = self.peek()
        line, col = self.stream.line, self.stream.column

        # 1. Identifier, keyword or boolean literal
        if ch.isascii() and ch.isalpha() or ch == "_":
            ident = ""
            while not self.stream.end_of_file() and (
                self.peek().isascii() and self.peek().isalnum() or self.peek() == "_"
            ):
                ident += self.advance()
            if ident in token_hashmap:
                return Token(token_hashmap[ident], ident, line, col)
            if ident in boolean_literals:
                return Token("BOOLEAN", ident, line, col)
            return Token("IDENT", ident, line, col)

        # 2. Number or float; a second dot ends the literal
        if ch.isascii() and ch.isdigit():
            num = ""
            has_dot = False
            while not self.stream.end_of_file() and (
                self.peek().isascii() and self.peek().isdigit() or self.peek() == "."
            ):
                if self.peek() == ".":
                    if has_dot:
                        break
                    has_dot = True
                num += self.advance()
            return Token("FLOAT" if has_dot else "NUMBER", num, line, col)

        # 3. Operator or punctuation
        token = self.match_operator()
        if token:
            return token

        # 4. Unknown character
        return Token("UNKNOWN", self.advance(), line, col)

    def tokenize(self) -> list[Token]:
        """Consumes the whole stream, returning every token including the final EOF."""
        tokens: list[Token] = []
        while True:
            tok = self.next_token()
            tokens.append(tok)
            if tok.type == "EOF":
                return tokens


def check_tokens(tokens: list[Token]) -> list[Token]:
    """Raises a `LexicalError` for the first UNKNOWN token, else returns the tokens."""
    for tok in tokens:
        if tok.type == "UNKNOWN":
            raise LexicalError(tok.value, tok.line, tok.col)
    return tokens


def tokenize(source: str, strict: bool = True) -> list[Token]:
    """Lexes a complete source text into a token list ending with EOF.

    Args:
        source (str): Calru source code.
        strict (bool): When True, an unrecognized character raises `LexicalError`.

    Returns:
        list[Token]: The token sequence.
    """
    tokens = Lexer(CharacterStream(source)).tokenize()
    return check_tokens(tokens) if strict else tokens


__all__ = [
    "CharacterStream",
    "Lexer",
    "Position",
    "Token",
    "check_tokens",
    "tokenize",
]
