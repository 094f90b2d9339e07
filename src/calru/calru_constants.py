"""
Token tables shared by the Calru lexer and parser.

Exports:
    token_hashmap: Literal source text to canonical token type for keywords,
        operators and punctuation.
    keyword_tokens: Reserved words and their token types.
    type_annotations: Type names accepted after `:` and their token types.
    boolean_literals: The two boolean literal spellings.
    arith_ops, comparison_ops, logical_ops: Operator token type groups.
    binary_ops: Every operator allowed at expression level.
    operator_symbols: Token type to operator text, used when building AST nodes.
"""

keyword_tokens: dict[str, str] = {
    "let": "LET",
    "stdout": "PRINT",
    "if": "IF",
    "then": "THEN",
    "else": "ELSE",
    "end": "END",
    "loop": "LOOP",
    "break": "BREAK",
    "fetch": "FETCH",
    "push": "PUSH",
    "pop": "POP",
    "len": "LEN",
}

boolean_literals: frozenset[str] = frozenset({"true", "false"})

type_annotations: dict[str, str] = {
    "int": "INT_TYPE",
    "float": "FLOAT_TYPE",
    "bool": "BOOL_TYPE",
    "[int]": "INT_LIST_TYPE",
    "[float]": "FLOAT_LIST_TYPE",
    "[bool]": "BOOL_LIST_TYPE",
}

operator_tokens: dict[str, str] = {
    "+": "PLUS",
    "-": "SUB",
    "*": "MULT",
    "/": "DIV",
    ">": "GT",
    "<": "LT",
    ">=": "GE",
    "<=": "LE",
    "==": "EQ",
    "!=": "NE",
    "&&": "AND",
    "||": "OR",
    ":=": "ASSIGN",
}

punctuation_tokens: dict[str, str] = {
    "(": "LPAREN",
    ")": "RPAREN",
    "{": "LBRACE",
    "}": "RBRACE",
    "[": "LBRACK",
    "]": "RBRACK",
    ",": "COMMA",
    ".": "DOT",
    ":": "COLON",
    ";": "SEMICOLON",
}

token_hashmap: dict[str, str] = {
    **keyword_tokens,
    **operator_tokens,
    **punctuation_tokens,
}

arith_ops: frozenset[str] = frozenset({"PLUS", "SUB", "MULT", "DIV"})
comparison_ops: frozenset[str] = frozenset({"GT", "LT", "GE", "LE", "EQ", "NE"})
logical_ops: frozenset[str] = frozenset({"AND", "OR"})

# Operators parsed at the lowest precedence level (`expression`).
binary_ops: frozenset[str] = (
    frozenset({"PLUS", "SUB"}) | comparison_ops | logical_ops
)
# Operators parsed at the `term` level.
term_ops: frozenset[str] = frozenset({"MULT", "DIV"})

operator_symbols: dict[str, str] = {v: k for k, v in operator_tokens.items()}

__all__ = [
    "arith_ops",
    "binary_ops",
    "boolean_literals",
    "comparison_ops",
    "keyword_tokens",
    "logical_ops",
    "operator_symbols",
    "operator_tokens",
    "punctuation_tokens",
    "term_ops",
    "token_hashmap",
    "type_annotations",
]
