"""
Recursive descent parser for the Pebble Programming Language

Grammar, lowest precedence first:

    program     -> declaration* EOF
    declaration -> funDecl | varDecl | statement
    statement   -> exprStmt | forStmt | ifStmt | printStmt | returnStmt | whileStmt | block
    expression  -> assignment
    assignment  -> IDENTIFIER "=" assignment | logic_or
    logic_or    -> logic_and ( "or" logic_and )*
    logic_and   -> equality ( "and" equality )*
    equality    -> comparison ( ( "!=" | "==" ) comparison )*
    comparison  -> term ( ( ">" | ">=" | "<" | "<=" ) term )*
    term        -> factor ( ( "-" | "+" ) factor )*
    factor      -> unary ( ( "/" | "*" ) unary )*
    unary       -> ( "!" | "-" ) unary | call
    call        -> primary ( "(" arguments? ")" )*
    primary     -> NUMBER | STRING | "true" | "false" | "nil" | "(" expression ")" | IDENTIFIER
"""

from typing import Callable, List, Optional
from tokens import Token, TokenType
from ast_nodes import *
from errors import ParseError, PebbleError

MAX_ARGUMENTS = 255

# Tokens that begin a statement; synchronization stops in front of them
STATEMENT_KEYWORDS = (
    TokenType.FUN, TokenType.VAR, TokenType.FOR, TokenType.IF,
    TokenType.WHILE, TokenType.PRINT, TokenType.RETURN,
)

class Parser:
    def __init__(self, tokens: List[Token], reporter: Optional[Callable[[PebbleError], None]] = None):
        self.tokens = tokens
        self.reporter = reporter
        self.errors: List[ParseError] = []
        self.current = 0

    @property
    def had_error(self) -> bool:
        return bool(self.errors)

    def parse(self) -> List[Statement]:
        """Parse tokens into a list of statements

        Statements that failed to parse are reported and left out, so the
        result is the best-effort program made of everything that did parse.
        """
        statements = []
        while not self.is_at_end():
            stmt = self.declaration()
            if stmt is not None:
                statements.append(stmt)

        return statements

    def declaration(self) -> Optional[Statement]:
        """Parse declarations (fun, var) or fall through to a statement"""
        try:
            if self.match(TokenType.FUN):
                return self.function_declaration("function")
            if self.match(TokenType.VAR):
                return self.var_declaration()

            return self.statement()
        except ParseError:
            self.synchronize()
            return None

    def var_declaration(self) -> VarStatement:
        name = self.consume(TokenType.IDENTIFIER, "Expect variable name.")

        initializer = None
        if self.match(TokenType.ASSIGN):
            initializer = self.expression()

        self.consume(TokenType.SEMICOLON, "Expect ';' after variable declaration.")
        return VarStatement(name, initializer)

    def function_declaration(self, kind: str) -> FunctionStatement:
        name = self.consume(TokenType.IDENTIFIER, f"Expect {kind} name.")

        self.consume(TokenType.LEFT_PAREN, f"Expect '(' after {kind} name.")
        params = []
        if not self.check(TokenType.RIGHT_PAREN):
            while True:
                if len(params) >= MAX_ARGUMENTS:
                    # Reported, but the declaration itself still parses
                    self.error(ParseError.too_many_parameters(self.peek()))
                params.append(self.consume(TokenType.IDENTIFIER, "Expect parameter name."))
                if not self.match(TokenType.COMMA):
                    break
        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after parameters.")

        self.consume(TokenType.LEFT_BRACE, f"Expect '{{' before {kind} body.")
        body = self.block()
        return FunctionStatement(name, params, body)

    def statement(self) -> Statement:
        if self.match(TokenType.FOR):
            return self.for_statement()
        if self.match(TokenType.IF):
            return self.if_statement()
        if self.match(TokenType.PRINT):
            return self.print_statement()
        if self.match(TokenType.RETURN):
            return self.return_statement()
        if self.match(TokenType.WHILE):
            return self.while_statement()
        if self.match(TokenType.LEFT_BRACE):
            return BlockStatement(self.block())

        return self.expression_statement()

    def for_statement(self) -> Statement:
        """Parse a for loop and desugar it into a while loop"""
        self.consume(TokenType.LEFT_PAREN, "Expect '(' after 'for'.")

        if self.match(TokenType.SEMICOLON):
            initializer = None
        elif self.match(TokenType.VAR):
            initializer = self.var_declaration()
        else:
            initializer = self.expression_statement()

        condition = None
        if not self.check(TokenType.SEMICOLON):
            condition = self.expression()
        semicolon = self.consume(TokenType.SEMICOLON, "Expect ';' after loop condition.")

        increment = None
        if not self.check(TokenType.RIGHT_PAREN):
            increment = self.expression()
        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after for clauses.")

        body = self.statement()

        if increment is not None:
            body = BlockStatement([body, ExpressionStatement(increment)])

        if condition is None:
            condition = LiteralExpression(True, semicolon.span)
        body = WhileStatement(condition, body)

        if initializer is not None:
            body = BlockStatement([initializer, body])

        return body

    def if_statement(self) -> IfStatement:
        self.consume(TokenType.LEFT_PAREN, "Expect '(' after 'if'.")
        condition = self.expression()
        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after if condition.")

        then_branch = self.statement()
        else_branch = None
        if self.match(TokenType.ELSE):
            else_branch = self.statement()

        return IfStatement(condition, then_branch, else_branch)

    def print_statement(self) -> PrintStatement:
        value = self.expression()
        self.consume(TokenType.SEMICOLON, "Expect ';' after value.")
        return PrintStatement(value)

    def return_statement(self) -> ReturnStatement:
        keyword = self.previous()
        value = None
        if not self.check(TokenType.SEMICOLON):
            value = self.expression()

        self.consume(TokenType.SEMICOLON, "Expect ';' after return value.")
        return ReturnStatement(keyword, value)

    def while_statement(self) -> WhileStatement:
        self.consume(TokenType.LEFT_PAREN, "Expect '(' after 'while'.")
        condition = self.expression()
        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after condition.")
        body = self.statement()

        return WhileStatement(condition, body)

    def block(self) -> List[Statement]:
        """Parse declarations up to the closing brace; the '{' is already consumed"""
        statements = []
        while not self.check(TokenType.RIGHT_BRACE) and not self.is_at_end():
            stmt = self.declaration()
            if stmt is not None:
                statements.append(stmt)

        self.consume(TokenType.RIGHT_BRACE, "Expect '}' after block.")
        return statements

    def expression_statement(self) -> ExpressionStatement:
        expr = self.expression()
        self.consume(TokenType.SEMICOLON, "Expect ';' after expression.")
        return ExpressionStatement(expr)

    def expression(self) -> Expression:
        return self.assignment()

    def assignment(self) -> Expression:
        expr = self.logical_or()

        if self.match(TokenType.ASSIGN):
            equals = self.previous()
            value = self.assignment()

            if isinstance(expr, VariableExpression):
                return AssignmentExpression(expr.name, value)

            # Reported without unwinding: the parser is not confused, only the target is wrong
            self.error(ParseError.invalid_assignment_target(equals))

        return expr

    def logical_or(self) -> Expression:
        expr = self.logical_and()

        while self.match(TokenType.OR):
            operator = self.previous()
            right = self.logical_and()
            expr = LogicalExpression(expr, operator, right)

        return expr

    def logical_and(self) -> Expression:
        expr = self.equality()

        while self.match(TokenType.AND):
            operator = self.previous()
            right = self.equality()
            expr = LogicalExpression(expr, operator, right)

        return expr

    def equality(self) -> Expression:
        return self.binary_level(self.comparison, TokenType.NOT_EQUAL, TokenType.EQUAL)

    def comparison(self) -> Expression:
        return self.binary_level(self.term, TokenType.GREATER, TokenType.GREATER_EQUAL,
                                 TokenType.LESS, TokenType.LESS_EQUAL)

    def term(self) -> Expression:
        return self.binary_level(self.factor, TokenType.MINUS, TokenType.PLUS)

    def factor(self) -> Expression:
        return self.binary_level(self.unary, TokenType.DIVIDE, TokenType.MULTIPLY)

    def binary_level(self, operand: Callable[[], Expression], *operators: TokenType) -> Expression:
        """Parse one left-associative level of binary operators"""
        expr = operand()

        while self.match(*operators):
            operator = self.previous()
            right = operand()
            expr = BinaryExpression(expr, operator, right)

        return expr

    def unary(self) -> Expression:
        if self.match(TokenType.NOT, TokenType.MINUS):
            operator = self.previous()
            right = self.unary()
            return UnaryExpression(operator, right)

        return self.call()

    def call(self) -> Expression:
        expr = self.primary()

        while self.match(TokenType.LEFT_PAREN):
            expr = self.finish_call(expr)

        return expr

    def finish_call(self, callee: Expression) -> CallExpression:
        """Parse function call arguments"""
        arguments = []
        if not self.check(TokenType.RIGHT_PAREN):
            while True:
                if len(arguments) >= MAX_ARGUMENTS:
                    self.error(ParseError.too_many_arguments(self.peek()))
                arguments.append(self.expression())
                if not self.match(TokenType.COMMA):
                    break

        paren = self.consume(TokenType.RIGHT_PAREN, "Expect ')' after arguments.")
        return CallExpression(callee, paren, arguments)

    def primary(self) -> Expression:
        if self.match(TokenType.FALSE):
            return LiteralExpression(False, self.previous().span)
        if self.match(TokenType.TRUE):
            return LiteralExpression(True, self.previous().span)
        if self.match(TokenType.NIL):
            return LiteralExpression(None, self.previous().span)

        if self.match(TokenType.NUMBER, TokenType.STRING):
            token = self.previous()
            return LiteralExpression(token.literal, token.span)

        if self.match(TokenType.IDENTIFIER):
            return VariableExpression(self.previous())

        if self.match(TokenType.LEFT_PAREN):
            start = self.previous()
            expr = self.expression()
            self.consume(TokenType.RIGHT_PAREN, "Expect ')' after expression.")
            return GroupingExpression(expr, start.span)

        raise self.error(ParseError.expected_expression(self.peek()))

    # Utility methods
    def match(self, *types: TokenType) -> bool:
        """Consume the current token if it has any of the given types"""
        for token_type in types:
            if self.check(token_type):
                self.advance()
                return True
        return False

    def check(self, token_type: TokenType) -> bool:
        if self.is_at_end():
            return False
        return self.peek().type == token_type

    def advance(self) -> Token:
        if not self.is_at_end():
            self.current += 1
        return self.previous()

    def is_at_end(self) -> bool:
        return self.peek().type == TokenType.EOF

    def peek(self) -> Token:
        return self.tokens[self.current]

    def previous(self) -> Token:
        return self.tokens[self.current - 1]

    def consume(self, token_type: TokenType, message: str) -> Token:
        """Consume token of expected type or raise error"""
        if self.check(token_type):
            return self.advance()

        raise self.error(ParseError.expected_token(self.peek(), message))

    def error(self, error: ParseError) -> ParseError:
        """Report a syntax error; the caller decides whether to raise it"""
        self.errors.append(error)
        if self.reporter:
            self.reporter(error)
        return error

    def synchronize(self):
        """Recover from parse error by discarding tokens up to the next statement"""
        self.advance()

        while not self.is_at_end():
            if self.previous().type == TokenType.SEMICOLON:
                return

            if self.peek().type in STATEMENT_KEYWORDS:
                return

            self.advance()
