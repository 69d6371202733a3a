"""
Main interpreter for the Pebble Programming Language
"""

import math
import sys
import time
from typing import Any, Callable, Dict, List, Optional, TextIO
from ast_nodes import *
from environment import Environment, NativeFunction, PebbleCallable, PebbleFunction
from errors import PebbleError, PebbleRuntimeError
from tokens import Token, TokenType

class Return:
    """Completion of a statement that hit 'return'

    Statements that finish normally complete with None. A Return is handed
    back up through every enclosing block and loop until the function call
    that owns it takes the value.
    """
    __slots__ = ("value",)

    def __init__(self, value: Any):
        self.value = value

def stringify(value: Any) -> str:
    """Render a runtime value the way 'print' shows it"""
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            text = str(int(value))
            return "-0" if text == "0" and math.copysign(1.0, value) < 0 else text
        return repr(value)
    return str(value)

def type_name(value: Any) -> str:
    """Human-readable type name for error messages"""
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, PebbleCallable):
        return "function"
    return type(value).__name__.lower()

def divide(left: float, right: float) -> float:
    """IEEE division: x/0 is a signed infinity and 0/0 is NaN"""
    if right == 0:
        if left == 0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right

class Interpreter:
    """Main interpreter that executes the AST"""

    def __init__(self, output: Optional[TextIO] = None,
                 reporter: Optional[Callable[[PebbleError], None]] = None):
        self.globals = Environment()
        self.environment = self.globals
        self.locals: Dict[Expression, int] = {}
        self.output = output
        self.reporter = reporter
        self.had_runtime_error = False

        self.define_built_ins()

    def define_built_ins(self):
        self.globals.define("clock", NativeFunction("clock", 0, time.time))

    def interpret(self, statements: List[Statement],
                  locals: Optional[Dict[Expression, int]] = None) -> bool:
        """Run a resolved program; returns False if a runtime error stopped it"""
        if locals:
            self.locals.update(locals)

        try:
            for statement in statements:
                self.execute(statement)
        except PebbleRuntimeError as error:
            self.had_runtime_error = True
            if self.reporter:
                self.reporter(error)
            return False
        return True

    def execute(self, stmt: Statement) -> Optional[Return]:
        """Execute a statement"""
        if isinstance(stmt, ExpressionStatement):
            self.evaluate(stmt.expression)
        elif isinstance(stmt, PrintStatement):
            value = self.evaluate(stmt.expression)
            print(stringify(value), file=self.output or sys.stdout)
        elif isinstance(stmt, VarStatement):
            return self.execute_var_statement(stmt)
        elif isinstance(stmt, BlockStatement):
            return self.execute_block(stmt.statements, Environment(self.environment))
        elif isinstance(stmt, FunctionStatement):
            function = PebbleFunction(stmt, self.environment)
            self.environment.define(stmt.name.lexeme, function)
        elif isinstance(stmt, IfStatement):
            return self.execute_if_statement(stmt)
        elif isinstance(stmt, WhileStatement):
            return self.execute_while_statement(stmt)
        elif isinstance(stmt, ReturnStatement):
            value = None
            if stmt.value is not None:
                value = self.evaluate(stmt.value)
            return Return(value)
        else:
            raise TypeError(f"Unknown statement type: {type(stmt).__name__}")
        return None

    def execute_var_statement(self, stmt: VarStatement) -> None:
        value = None
        if stmt.initializer is not None:
            value = self.evaluate(stmt.initializer)

        self.environment.define(stmt.name.lexeme, value)

    def execute_block(self, statements: List[Statement], environment: Environment) -> Optional[Return]:
        """Execute a list of statements in a given environment"""
        previous = self.environment
        try:
            self.environment = environment

            for statement in statements:
                completion = self.execute(statement)
                if completion is not None:
                    return completion
        finally:
            self.environment = previous
        return None

    def execute_if_statement(self, stmt: IfStatement) -> Optional[Return]:
        if self.is_truthy(self.evaluate(stmt.condition)):
            return self.execute(stmt.then_branch)
        if stmt.else_branch is not None:
            return self.execute(stmt.else_branch)
        return None

    def execute_while_statement(self, stmt: WhileStatement) -> Optional[Return]:
        while self.is_truthy(self.evaluate(stmt.condition)):
            completion = self.execute(stmt.body)
            if completion is not None:
                return completion
        return None

    def evaluate(self, expr: Expression) -> Any:
        """Evaluate an expression"""
        if isinstance(expr, LiteralExpression):
            return expr.value
        elif isinstance(expr, GroupingExpression):
            return self.evaluate(expr.expression)
        elif isinstance(expr, VariableExpression):
            return self.look_up_variable(expr.name, expr)
        elif isinstance(expr, AssignmentExpression):
            return self.evaluate_assignment_expression(expr)
        elif isinstance(expr, UnaryExpression):
            return self.evaluate_unary_expression(expr)
        elif isinstance(expr, BinaryExpression):
            return self.evaluate_binary_expression(expr)
        elif isinstance(expr, LogicalExpression):
            return self.evaluate_logical_expression(expr)
        elif isinstance(expr, CallExpression):
            return self.evaluate_call_expression(expr)
        else:
            raise TypeError(f"Unknown expression type: {type(expr).__name__}")

    def look_up_variable(self, name: Token, expr: Expression) -> Any:
        distance = self.locals.get(expr)
        if distance is not None:
            return self.environment.get_at(distance, name.lexeme)
        return self.globals.get(name)

    def evaluate_assignment_expression(self, expr: AssignmentExpression) -> Any:
        value = self.evaluate(expr.value)

        distance = self.locals.get(expr)
        if distance is not None:
            self.environment.assign_at(distance, expr.name, value)
        else:
            self.globals.assign(expr.name, value)
        return value

    def evaluate_unary_expression(self, expr: UnaryExpression) -> Any:
        operand = self.evaluate(expr.operand)

        if expr.operator.type == TokenType.MINUS:
            self.check_number_operand(expr.operator, operand)
            return -operand
        if expr.operator.type == TokenType.NOT:
            return not self.is_truthy(operand)

        raise TypeError(f"Unknown unary operator: {expr.operator.lexeme}")

    def evaluate_binary_expression(self, expr: BinaryExpression) -> Any:
        """Evaluate binary expression with type-aware error reporting"""
        left = self.evaluate(expr.left)
        right = self.evaluate(expr.right)
        operator = expr.operator
        op = operator.type

        if op == TokenType.PLUS:
            if isinstance(left, float) and isinstance(right, float):
                return left + right
            if isinstance(left, str) and isinstance(right, str):
                return left + right
            raise PebbleRuntimeError.cannot_add(operator, type_name(left), type_name(right))

        if op == TokenType.EQUAL:
            return self.is_equal(left, right)
        if op == TokenType.NOT_EQUAL:
            return not self.is_equal(left, right)

        self.check_number_operands(operator, left, right)
        if op == TokenType.MINUS:
            return left - right
        if op == TokenType.MULTIPLY:
            return left * right
        if op == TokenType.DIVIDE:
            return divide(left, right)
        if op == TokenType.GREATER:
            return left > right
        if op == TokenType.GREATER_EQUAL:
            return left >= right
        if op == TokenType.LESS:
            return left < right
        if op == TokenType.LESS_EQUAL:
            return left <= right

        raise TypeError(f"Unknown binary operator: {operator.lexeme}")

    def evaluate_logical_expression(self, expr: LogicalExpression) -> Any:
        """Short-circuit 'and' / 'or', yielding the deciding operand itself"""
        left = self.evaluate(expr.left)

        if expr.operator.type == TokenType.OR:
            if self.is_truthy(left):
                return left
        elif not self.is_truthy(left):
            return left

        return self.evaluate(expr.right)

    def evaluate_call_expression(self, expr: CallExpression) -> Any:
        callee = self.evaluate(expr.callee)

        arguments = [self.evaluate(argument) for argument in expr.arguments]

        if not isinstance(callee, PebbleCallable):
            raise PebbleRuntimeError.not_callable(expr.paren, type_name(callee))

        if len(arguments) != callee.arity():
            raise PebbleRuntimeError.wrong_arity(expr.paren, callee.arity(), len(arguments))

        try:
            return callee.call(self, arguments)
        except RecursionError:
            # Innermost call that can still build the error reports it
            raise PebbleRuntimeError.stack_overflow(expr.paren) from None

    def is_truthy(self, obj: Any) -> bool:
        """Only nil and false are falsey"""
        if obj is None:
            return False
        if isinstance(obj, bool):
            return obj
        return True

    def is_equal(self, a: Any, b: Any) -> bool:
        """Value equality with no coercion between types"""
        if a is None or b is None:
            return a is b
        if type(a) is not type(b):
            return False
        return a == b

    def check_number_operand(self, operator: Token, operand: Any):
        if not isinstance(operand, float):
            raise PebbleRuntimeError.operand_not_number(operator)

    def check_number_operands(self, operator: Token, left: Any, right: Any):
        if not isinstance(left, float) or not isinstance(right, float):
            raise PebbleRuntimeError.operands_not_numbers(operator, type_name(left), type_name(right))
