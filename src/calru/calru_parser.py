"""
Calru Language Parser and Type Checker

Parses Calru tokens into typed abstract syntax trees while checking types and
populating the symbol environment in the same pass.

Grammar (precedence low to high)
--------------------------------
    statement  := 'let' IDENT TYPE ':=' expression ';'
                | 'stdout' '(' expression ')' ';'
                | 'if' '(' expression ')' 'then' statement [ 'else' statement ] 'end'
                | 'loop' '{' statement* '}'
                | 'break' ';'
                | IDENT ':=' expression ';'
                | IDENT '.' 'push' '(' expression ')' ';'
                | IDENT '.' 'pop' '(' ')' ';'
    expression := term ( ( '+' | '-' | '==' | '!=' | '>' | '<' | '>=' | '<=' | '&&' | '||' ) term )*
    term       := factor ( ( '*' | '/' ) factor )*
    factor     := INT | FLOAT | BOOL | IDENT [ '.' 'fetch' '(' expression ')' | '.' 'len' '(' ')' ]
                | '(' expression ')' | '[' expression ( ',' expression )* ']'

Type Rules
----------
- Arithmetic operators need both operands of the same numeric type; Int and
  Float never mix.
- Comparison operators need equal operand types and yield Boolean.
- `&&` and `||` need Boolean operands and yield Boolean.
- `fetch` needs a list receiver and an Int index; `len` yields Int; `push` needs
  the list's element type; list literals must be non-empty and homogeneous.
- `if` conditions must be Boolean and both branches must have the same type.

Parser Behavior
---------------
- `let` is evaluated while parsing, against the environment built so far, and the
  result is declared before parsing continues. A runtime fault in that evaluation
  declares the type's zero value instead; the interpreter evaluates again.
- Each `if` branch and each loop body is checked inside a nested scope.
- Every expression node is annotated with its inferred `SymbolType`.

Raises
------
ParseError
    Unexpected or missing token, with what was expected, what was found and where.
CalruTypeError
    Type mismatches, undeclared names, and duplicate declarations.
"""

from calru.calru_ast import ASTNode
from calru.calru_constants import (
    arith_ops,
    binary_ops,
    comparison_ops,
    logical_ops,
    operator_symbols,
    term_ops,
    type_annotations,
)
from calru.calru_errors import (
    AlreadyDeclaredError,
    CalruRuntimeError,
    CalruTypeError,
    ParseError,
)
from calru.calru_interpreter import Interpreter
from calru.calru_lexer import Token
from calru.calru_symbols import SymbolTable
from calru.calru_types import INT_MAX, SymbolType, SymbolValue

TYPE_TOKENS = tuple(type_annotations.values())


class Parser:
    """
    Calru Parser Class

    Attributes
    ----------
    tokens : list[Token]
        The input token stream, normally ending with EOF.
    position : int
        Current index into the token stream.
    symbols : SymbolTable
        Environment populated by `let` declarations as they are parsed.
    loop_depth : int
        Number of enclosing loop bodies; `break` needs at least one.
    """

    def __init__(self, tokens: list[Token], symbols: SymbolTable | None = None) -> None:
        self.tokens: list[Token] = tokens
        self.position: int = 0
        self.symbols: SymbolTable = symbols if symbols is not None else SymbolTable()
        self.loop_depth: int = 0
        self.evaluator = Interpreter(self.symbols)

    def current(self) -> Token:
        if self.position < len(self.tokens):
            return self.tokens[self.position]
        last = self.tokens[-1] if self.tokens else Token("EOF", "EOF", 1, 1)
        return Token("EOF", "EOF", last.line, last.col)

    def advance(self) -> Token:
        tok = self.current()
        self.position += 1
        return tok

    def error(self, expected: str, tok: Token | None = None) -> ParseError:
        tok = tok or self.current()
        found = None if tok.type == "EOF" else tok.value
        return ParseError(expected, found, tok.line, tok.col)

    def match(self, *types: str, expected: str | None = None) -> Token:
        tok = self.current()
        if tok.type in types:
            return self.advance()
        raise self.error(expected or " or ".join(types), tok)

    def parse(self) -> list[ASTNode]:
        """Parse a full Calru program and return its statements."""
        ast: list[ASTNode] = []
        while self.current().type != "EOF":
            ast.append(self.parse_statement())
        return ast

    def parse_program(self) -> tuple[list[ASTNode], SymbolTable]:
        """Parse a full program, returning the statements and the populated environment."""
        return self.parse(), self.symbols

    def parse_statement(self) -> ASTNode:
        """Parse a single statement."""
        tok = self.current()
        if tok.type == "LET":
            return self.parse_let()
        if tok.type == "PRINT":
            return self.parse_print()
        if tok.type == "IF":
            return self.parse_if()
        if tok.type == "LOOP":
            return self.parse_loop()
        if tok.type == "BREAK":
            return self.parse_break()
        if tok.type == "IDENT":
            return self.parse_identifier_statement()
        raise self.error("statement", tok)

    def parse_let(self) -> ASTNode:
        """Parse, check, evaluate and declare `let NAME:TYPE := expr;`."""
        let_tok = self.match("LET")
        name_tok = self.match("IDENT", expected="identifier after 'let'")
        if self.symbols.is_declared_locally(name_tok.value):
            raise AlreadyDeclaredError(name_tok.value, name_tok.line, name_tok.col)
        type_tok = self.match(
            *TYPE_TOKENS, expected="type annotation (:int, :float, :bool, :[int], ...)"
        )
        self.match("ASSIGN", expected="':='")
        expr = self.parse_expression()
        self.match("SEMICOLON", expected="';'")

        declared = SymbolType.from_annotation(type_tok.value)
        if expr.symbol_type != declared:
            raise CalruTypeError(
                f"Type mismatch: cannot assign expression of type {expr.symbol_type!r} "
                f"to variable of type {declared!r}",
                name_tok.line,
                name_tok.col,
            )

        try:
            value = self.evaluator.evaluate_expression(expr)
        except CalruRuntimeError:
            value = SymbolValue.default_for(declared)
        self.symbols.declare(name_tok.value, declared, value, name_tok.line, name_tok.col)

        node = ASTNode(
            "assign",
            name_tok.value,
            [expr],
            line=let_tok.line,
            col=let_tok.col,
            type_=type_tok.value,
        )
        node.symbol_type = declared
        return node

    def parse_print(self) -> ASTNode:
        print_tok = self.match("PRINT")
        self.match("LPAREN", expected="'(' after 'stdout'")
        expr = self.parse_expression()
        self.match("RPAREN", expected="')'")
        self.match("SEMICOLON", expected="';'")
        node = ASTNode("print", children=[expr], line=print_tok.line, col=print_tok.col)
        node.symbol_type = expr.symbol_type
        return node

    def parse_branch(self) -> ASTNode:
        """Parse one `if` branch statement inside its own scope."""
        self.symbols.enter_scope()
        try:
            return self.parse_statement()
        finally:
            self.symbols.exit_scope()

    def parse_if(self) -> ASTNode:
        """Parse `if (cond) then stmt [else stmt] end`."""
        if_tok = self.match("IF")
        self.match("LPAREN", expected="'(' after 'if'")
        condition = self.parse_expression()
        self.match("RPAREN", expected="')'")
        if condition.symbol_type != SymbolType.BOOLEAN:
            raise CalruTypeError(
                f"Condition in 'if' must be of type Boolean, found {condition.symbol_type!r}",
                condition.line,
                condition.col,
            )
        self.match("THEN", expected="'then'")
        then_branch = self.parse_branch()

        node = ASTNode("if", condition, [then_branch], line=if_tok.line, col=if_tok.col)
        node.symbol_type = then_branch.symbol_type

        if self.current().type == "ELSE":
            self.advance()
            else_branch = self.parse_branch()
            if else_branch.symbol_type != then_branch.symbol_type:
                raise CalruTypeError(
                    f"Type mismatch in 'if' branches: then branch is {then_branch.symbol_type!r}, "
                    f"else branch is {else_branch.symbol_type!r}",
                    if_tok.line,
                    if_tok.col,
                )
            node.else_children = [else_branch]

        self.match("END", expected="'else' or 'end'")
        return node

    def parse_loop(self) -> ASTNode:
        """Parse `loop { stmt* }`; the body is checked in its own scope."""
        loop_tok = self.match("LOOP")
        self.match("LBRACE", expected="'{' after 'loop'")
        body: list[ASTNode] = []
        self.loop_depth += 1
        self.symbols.enter_scope()
        try:
            while self.current().type != "RBRACE":
                if self.current().type == "EOF":
                    raise self.error("'}' to close loop body")
                body.append(self.parse_statement())
        finally:
            self.symbols.exit_scope()
            self.loop_depth -= 1
        self.match("RBRACE")
        node = ASTNode("loop", children=body, line=loop_tok.line, col=loop_tok.col)
        node.symbol_type = SymbolType.VOID
        return node

    def parse_break(self) -> ASTNode:
        tok = self.current()
        if self.loop_depth == 0:
            raise self.error("statement ('break' is only allowed inside a loop)", tok)
        self.match("BREAK")
        self.match("SEMICOLON", expected="';'")
        node = ASTNode("break", line=tok.line, col=tok.col)
        node.symbol_type = SymbolType.VOID
        return node

    def parse_identifier_statement(self) -> ASTNode:
        """Parse `NAME := expr;`, `NAME.push(expr);` or `NAME.pop();`."""
        name_tok = self.match("IDENT")
        target = self.identifier_node(name_tok)

        if self.current().type == "ASSIGN":
            self.advance()
            expr = self.parse_expression()
            self.match("SEMICOLON", expected="';'")
            if expr.symbol_type != target.symbol_type:
                raise CalruTypeError(
                    f"Type mismatch: cannot assign expression of type {expr.symbol_type!r} "
                    f"to variable of type {target.symbol_type!r}",
                    name_tok.line,
                    name_tok.col,
                )
            node = ASTNode(
                "reassign", name_tok.value, [expr], line=name_tok.line, col=name_tok.col
            )
            node.symbol_type = expr.symbol_type
            return node

        if self.current().type != "DOT":
            raise self.error("':=' or '.' after identifier")
        self.advance()
        method_tok = self.match("PUSH", "POP", expected="'push' or 'pop'")
        list_type = self.require_list(target, method_tok.value)
        self.match("LPAREN", expected=f"'(' after '{method_tok.value}'")

        if method_tok.type == "PUSH":
            value = self.parse_expression()
            self.match("RPAREN", expected="')'")
            self.match("SEMICOLON", expected="';'")
            if value.symbol_type != list_type.element:
                raise CalruTypeError(
                    f"Type mismatch: cannot push {value.symbol_type!r} onto {list_type!r}",
                    value.line,
                    value.col,
                )
            node = ASTNode(
                "push", children=[target, value], line=method_tok.line, col=method_tok.col
            )
        else:
            self.match("RPAREN", expected="')'")
            self.match("SEMICOLON", expected="';'")
            node = ASTNode(
                "pop", children=[target], line=method_tok.line, col=method_tok.col
            )
        node.symbol_type = SymbolType.VOID
        return node

    def identifier_node(self, tok: Token) -> ASTNode:
        symbol = self.symbols.lookup(tok.value, tok.line, tok.col)
        node = ASTNode("identifier", tok.value, line=tok.line, col=tok.col)
        node.symbol_type = symbol.type
        return node

    def require_list(self, target: ASTNode, method: str) -> SymbolType:
        list_type = target.symbol_type
        if list_type is None or not list_type.is_list:
            raise CalruTypeError(
                f"'{method}' requires a list, but '{target.value}' is {list_type!r}",
                target.line,
                target.col,
            )
        return list_type

    def parse_expression(self) -> ASTNode:
        """Parse a left-associative chain of additive, comparison and logical operators."""
        left = self.parse_term()
        while self.current().type in binary_ops:
            op_tok = self.advance()
            right = self.parse_term()
            left = self.binary_node(op_tok, left, right)
        return left

    def parse_term(self) -> ASTNode:
        left = self.parse_factor()
        while self.current().type in term_ops:
            op_tok = self.advance()
            right = self.parse_factor()
            left = self.binary_node(op_tok, left, right)
        return left

    def parse_factor(self) -> ASTNode:
        tok = self.current()

        if tok.type == "NUMBER":
            self.advance()
            number = int(tok.value)
            if number > INT_MAX:
                raise self.error("integer literal within the 64-bit range", tok)
            node = ASTNode("int", number, line=tok.line, col=tok.col)
            node.symbol_type = SymbolType.INT
            return node

        if tok.type == "FLOAT":
            self.advance()
            node = ASTNode("float", float(tok.value), line=tok.line, col=tok.col)
            node.symbol_type = SymbolType.FLOAT
            return node

        if tok.type == "BOOLEAN":
            self.advance()
            node = ASTNode("bool", tok.value == "true", line=tok.line, col=tok.col)
            node.symbol_type = SymbolType.BOOLEAN
            return node

        if tok.type == "IDENT":
            self.advance()
            node = self.identifier_node(tok)
            if self.current().type == "DOT":
                return self.parse_method_suffix(node)
            return node

        if tok.type == "LPAREN":
            self.advance()
            node = self.parse_expression()
            self.match("RPAREN", expected="')'")
            return node

        if tok.type == "LBRACK":
            return self.parse_list_literal()

        raise self.error("expression", tok)

    def parse_method_suffix(self, target: ASTNode) -> ASTNode:
        """Parse `.fetch(expr)` or `.len()` after an identifier."""
        self.match("DOT")
        method_tok = self.match("FETCH", "LEN", expected="'fetch' or 'len'")
        list_type = self.require_list(target, method_tok.value)
        self.match("LPAREN", expected=f"'(' after '{method_tok.value}'")

        if method_tok.type == "FETCH":
            index = self.parse_expression()
            self.match("RPAREN", expected="')'")
            if index.symbol_type != SymbolType.INT:
                raise CalruTypeError(
                    f"List index must be of type Int, found {index.symbol_type!r}",
                    index.line,
                    index.col,
                )
            node = ASTNode(
                "fetch", children=[target, index], line=method_tok.line, col=method_tok.col
            )
            node.symbol_type = list_type.element
            return node

        self.match("RPAREN", expected="')'")
        node = ASTNode("len", children=[target], line=method_tok.line, col=method_tok.col)
        node.symbol_type = SymbolType.INT
        return node

    def parse_list_literal(self) -> ASTNode:
        open_tok = self.match("LBRACK")
        elements: list[ASTNode] = []
        if self.current().type != "RBRACK":
            while True:
                elements.append(self.parse_expression())
                if self.current().type != "COMMA":
                    break
                self.advance()
        self.match("RBRACK", expected="',' or ']'")

        if not elements:
            raise CalruTypeError(
                "Cannot infer the type of an empty list literal",
                open_tok.line,
                open_tok.col,
            )
        element_type = elements[0].symbol_type
        assert element_type is not None  # for mypy
        for element in elements[1:]:
            if element.symbol_type != element_type:
                raise CalruTypeError(
                    f"List elements must share one type, found {element_type!r} "
                    f"and {element.symbol_type!r}",
                    element.line,
                    element.col,
                )
        node = ASTNode("list", children=elements, line=open_tok.line, col=open_tok.col)
        node.symbol_type = SymbolType.list_of(element_type)
        return node

    def binary_node(self, op_tok: Token, left: ASTNode, right: ASTNode) -> ASTNode:
        """Build a `binary_op` node after checking its operand types."""
        op = operator_symbols[op_tok.type]
        lt, rt = left.symbol_type, right.symbol_type

        if op_tok.type in arith_ops:
            if lt != rt or lt is None or not lt.is_numeric:
                raise CalruTypeError(
                    f"Operator '{op}' requires operands of the same numeric type, "
                    f"found {lt!r} and {rt!r}",
                    op_tok.line,
                    op_tok.col,
                )
            result = lt
        elif op_tok.type in comparison_ops:
            if lt != rt:
                raise CalruTypeError(
                    f"Operator '{op}' requires operands of the same type, "
                    f"found {lt!r} and {rt!r}",
                    op_tok.line,
                    op_tok.col,
                )
            result = SymbolType.BOOLEAN
        elif op_tok.type in logical_ops:
            if lt != SymbolType.BOOLEAN or rt != SymbolType.BOOLEAN:
                raise CalruTypeError(
                    f"Operator '{op}' requires Boolean operands, found {lt!r} and {rt!r}",
                    op_tok.line,
                    op_tok.col,
                )
            result = SymbolType.BOOLEAN
        else:
            raise AssertionError(f"Unexpected operator: {op_tok}")  # pragma: no cover

        node = ASTNode(
            "binary_op", op, [left, right], line=op_tok.line, col=op_tok.col
        )
        node.symbol_type = result
        return node


__all__ = ["Parser"]
