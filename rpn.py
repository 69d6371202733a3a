"""
Reverse Polish rendering of Pebble expressions

Operands come first, then the operator: (1 + 2) * 3 renders as "1 2 + 3 *".
Used by 'pebble --rpn' to show how an expression was parsed.
"""

from ast_nodes import *
from interpreter import stringify

def to_rpn(expr: Expression) -> str:
    if isinstance(expr, LiteralExpression):
        return stringify(expr.value)
    elif isinstance(expr, GroupingExpression):
        # Postfix order already encodes the grouping
        return to_rpn(expr.expression)
    elif isinstance(expr, VariableExpression):
        return expr.name.lexeme
    elif isinstance(expr, AssignmentExpression):
        return f"{to_rpn(expr.value)} {expr.name.lexeme} ="
    elif isinstance(expr, UnaryExpression):
        return f"{to_rpn(expr.operand)} {expr.operator.lexeme}"
    elif isinstance(expr, (BinaryExpression, LogicalExpression)):
        return f"{to_rpn(expr.left)} {to_rpn(expr.right)} {expr.operator.lexeme}"
    elif isinstance(expr, CallExpression):
        parts = [to_rpn(expr.callee)]
        parts.extend(to_rpn(argument) for argument in expr.arguments)
        parts.append(f"call/{len(expr.arguments)}")
        return " ".join(parts)
    else:
        raise TypeError(f"Unknown expression type: {type(expr).__name__}")
