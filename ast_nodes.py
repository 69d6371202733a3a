"""
Abstract Syntax Tree node definitions for the Pebble Programming Language

Nodes compare and hash by identity, so two identical-looking expressions at
different places in the source stay distinct keys in the resolver's table.
"""

from abc import ABC
from typing import Any, List, Optional
from source_map import Span
from tokens import Token

# Base classes
class ASTNode(ABC):
    """Base class for all AST nodes"""
    def __init__(self, span: Optional[Span] = None):
        self.span = span

class Expression(ASTNode):
    """Base class for all expressions"""

class Statement(ASTNode):
    """Base class for all statements"""

# Expressions
class LiteralExpression(Expression):
    def __init__(self, value: Any, span: Optional[Span] = None):
        super().__init__(span)
        self.value = value

class GroupingExpression(Expression):
    """A parenthesized expression"""
    def __init__(self, expression: Expression, span: Optional[Span] = None):
        super().__init__(span)
        self.expression = expression

class UnaryExpression(Expression):
    def __init__(self, operator: Token, operand: Expression):
        super().__init__(operator.span)
        self.operator = operator
        self.operand = operand

class BinaryExpression(Expression):
    def __init__(self, left: Expression, operator: Token, right: Expression):
        super().__init__(operator.span)
        self.left = left
        self.operator = operator
        self.right = right

class LogicalExpression(Expression):
    """'and' / 'or', which evaluate their right side lazily"""
    def __init__(self, left: Expression, operator: Token, right: Expression):
        super().__init__(operator.span)
        self.left = left
        self.operator = operator
        self.right = right

class VariableExpression(Expression):
    def __init__(self, name: Token):
        super().__init__(name.span)
        self.name = name

class AssignmentExpression(Expression):
    def __init__(self, name: Token, value: Expression):
        super().__init__(name.span)
        self.name = name
        self.value = value

class CallExpression(Expression):
    def __init__(self, callee: Expression, paren: Token, arguments: List[Expression]):
        super().__init__(paren.span)
        self.callee = callee
        self.paren = paren  # closing ')', used to locate call errors
        self.arguments = arguments

# Statements
class ExpressionStatement(Statement):
    def __init__(self, expression: Expression):
        super().__init__(expression.span)
        self.expression = expression

class PrintStatement(Statement):
    def __init__(self, expression: Expression):
        super().__init__(expression.span)
        self.expression = expression

class VarStatement(Statement):
    def __init__(self, name: Token, initializer: Optional[Expression]):
        super().__init__(name.span)
        self.name = name
        self.initializer = initializer

class BlockStatement(Statement):
    def __init__(self, statements: List[Statement]):
        super().__init__()
        self.statements = statements

class IfStatement(Statement):
    def __init__(self, condition: Expression, then_branch: Statement,
                 else_branch: Optional[Statement] = None):
        super().__init__(condition.span)
        self.condition = condition
        self.then_branch = then_branch
        self.else_branch = else_branch

class WhileStatement(Statement):
    def __init__(self, condition: Expression, body: Statement):
        super().__init__(condition.span)
        self.condition = condition
        self.body = body

class FunctionStatement(Statement):
    def __init__(self, name: Token, params: List[Token], body: List[Statement]):
        super().__init__(name.span)
        self.name = name
        self.params = params
        self.body = body

class ReturnStatement(Statement):
    def __init__(self, keyword: Token, value: Optional[Expression]):
        super().__init__(keyword.span)
        self.keyword = keyword
        self.value = value
