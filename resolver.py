"""
Static scope resolution for the Pebble Programming Language

Walks the whole program once before it runs. For every variable read or
assignment that refers to a local, records how many scopes separate the
reference from its declaration. References with no entry are globals.
"""

from enum import Enum
from typing import Callable, Dict, List, Optional
from ast_nodes import *
from errors import PebbleError, ResolveError
from tokens import Token

class FunctionType(Enum):
    NONE = "none"
    FUNCTION = "function"

class Resolver:
    """Computes the scope-distance table consumed by the interpreter"""

    def __init__(self, reporter: Optional[Callable[[PebbleError], None]] = None):
        self.reporter = reporter
        self.errors: List[ResolveError] = []
        # Innermost scope last; each maps a name to "fully defined yet?"
        self.scopes: List[Dict[str, bool]] = []
        self.locals: Dict[Expression, int] = {}
        self.current_function = FunctionType.NONE

    @property
    def had_error(self) -> bool:
        return bool(self.errors)

    def resolve(self, statements: List[Statement]) -> Dict[Expression, int]:
        """Resolve a program and return its scope-distance table"""
        self.resolve_statements(statements)
        return self.locals

    def resolve_statements(self, statements: List[Statement]):
        for statement in statements:
            self.resolve_statement(statement)

    def resolve_statement(self, stmt: Statement):
        if isinstance(stmt, BlockStatement):
            self.begin_scope()
            self.resolve_statements(stmt.statements)
            self.end_scope()
        elif isinstance(stmt, VarStatement):
            # declare -> initializer -> define is what catches 'var a = a;'
            self.declare(stmt.name)
            if stmt.initializer is not None:
                self.resolve_expression(stmt.initializer)
            self.define(stmt.name)
        elif isinstance(stmt, FunctionStatement):
            # Defined before the body so the function can call itself
            self.declare(stmt.name)
            self.define(stmt.name)
            self.resolve_function(stmt, FunctionType.FUNCTION)
        elif isinstance(stmt, (ExpressionStatement, PrintStatement)):
            self.resolve_expression(stmt.expression)
        elif isinstance(stmt, IfStatement):
            self.resolve_expression(stmt.condition)
            self.resolve_statement(stmt.then_branch)
            if stmt.else_branch is not None:
                self.resolve_statement(stmt.else_branch)
        elif isinstance(stmt, WhileStatement):
            self.resolve_expression(stmt.condition)
            self.resolve_statement(stmt.body)
        elif isinstance(stmt, ReturnStatement):
            if self.current_function == FunctionType.NONE:
                self.error(ResolveError.top_level_return(stmt.keyword))
            if stmt.value is not None:
                self.resolve_expression(stmt.value)
        else:
            raise TypeError(f"Unknown statement type: {type(stmt).__name__}")

    def resolve_expression(self, expr: Expression):
        if isinstance(expr, VariableExpression):
            if self.scopes and self.scopes[-1].get(expr.name.lexeme) is False:
                self.error(ResolveError.own_initializer(expr.name))
            self.resolve_local(expr, expr.name)
        elif isinstance(expr, AssignmentExpression):
            self.resolve_expression(expr.value)
            self.resolve_local(expr, expr.name)
        elif isinstance(expr, (BinaryExpression, LogicalExpression)):
            self.resolve_expression(expr.left)
            self.resolve_expression(expr.right)
        elif isinstance(expr, UnaryExpression):
            self.resolve_expression(expr.operand)
        elif isinstance(expr, GroupingExpression):
            self.resolve_expression(expr.expression)
        elif isinstance(expr, CallExpression):
            self.resolve_expression(expr.callee)
            for argument in expr.arguments:
                self.resolve_expression(argument)
        elif isinstance(expr, LiteralExpression):
            pass
        else:
            raise TypeError(f"Unknown expression type: {type(expr).__name__}")

    def resolve_function(self, function: FunctionStatement, function_type: FunctionType):
        enclosing_function = self.current_function
        self.current_function = function_type

        self.begin_scope()
        for param in function.params:
            self.declare(param)
            self.define(param)
        self.resolve_statements(function.body)
        self.end_scope()

        self.current_function = enclosing_function

    def resolve_local(self, expr: Expression, name: Token):
        """Record the hop count to the innermost scope declaring name, if any"""
        for hops, scope in enumerate(reversed(self.scopes)):
            if name.lexeme in scope:
                self.locals[expr] = hops
                return
        # Not found locally: left unresolved, looked up by name in the globals

    def begin_scope(self):
        self.scopes.append({})

    def end_scope(self):
        self.scopes.pop()

    def declare(self, name: Token):
        if not self.scopes:
            return

        scope = self.scopes[-1]
        if name.lexeme in scope:
            self.error(ResolveError.already_declared(name))
        scope[name.lexeme] = False

    def define(self, name: Token):
        if not self.scopes:
            return
        self.scopes[-1][name.lexeme] = True

    def error(self, error: ResolveError):
        self.errors.append(error)
        if self.reporter:
            self.reporter(error)
