import unittest

from ast_nodes import *
from lexer import Lexer
from parser import Parser
from source_map import reset_source_map
from tokens import TokenType


def parse(source):
    errors = []
    tokens = Lexer(source, reporter=errors.append).tokenize()
    statements = Parser(tokens, reporter=errors.append).parse()
    return statements, errors


class ParserTestCase(unittest.TestCase):

    def setUp(self):
        reset_source_map()

    def parse_expression(self, source):
        statements, errors = parse(source)
        self.assertEqual([], errors, source)
        self.assertEqual(1, len(statements), source)
        self.assertIsInstance(statements[0], ExpressionStatement, source)
        return statements[0].expression

    def test_precedence(self):
        expr = self.parse_expression("1 + 2 * 3;")
        self.assertIsInstance(expr, BinaryExpression)
        self.assertEqual(TokenType.PLUS, expr.operator.type)
        self.assertIsInstance(expr.right, BinaryExpression)
        self.assertEqual(TokenType.MULTIPLY, expr.right.operator.type)

        expr = self.parse_expression("1 - 2 - 3;")
        self.assertEqual(TokenType.MINUS, expr.operator.type)
        self.assertIsInstance(expr.left, BinaryExpression)
        self.assertIsInstance(expr.right, LiteralExpression)

        expr = self.parse_expression("a or b and c;")
        self.assertIsInstance(expr, LogicalExpression)
        self.assertEqual(TokenType.OR, expr.operator.type)
        self.assertEqual(TokenType.AND, expr.right.operator.type)

        expr = self.parse_expression("1 < 2 == true;")
        self.assertEqual(TokenType.EQUAL, expr.operator.type)
        self.assertEqual(TokenType.LESS, expr.left.operator.type)

        expr = self.parse_expression("!-x;")
        self.assertEqual(TokenType.NOT, expr.operator.type)
        self.assertEqual(TokenType.MINUS, expr.operand.operator.type)

    def test_assignment_is_right_associative(self):
        expr = self.parse_expression("a = b = 1;")
        self.assertIsInstance(expr, AssignmentExpression)
        self.assertEqual("a", expr.name.lexeme)
        self.assertIsInstance(expr.value, AssignmentExpression)
        self.assertEqual("b", expr.value.name.lexeme)

    def test_calls(self):
        expr = self.parse_expression("f(1, 2)(3);")
        self.assertIsInstance(expr, CallExpression)
        self.assertEqual(1, len(expr.arguments))
        self.assertIsInstance(expr.callee, CallExpression)
        self.assertEqual(2, len(expr.callee.arguments))
        self.assertEqual(TokenType.RIGHT_PAREN, expr.paren.type)

        expr = self.parse_expression("(g)();")
        self.assertIsInstance(expr.callee, GroupingExpression)
        self.assertEqual([], expr.arguments)

    def test_declarations(self):
        statements, errors = parse("var a; var b = 2; fun add(x, y) { return x + y; }")
        self.assertEqual([], errors)
        self.assertIsNone(statements[0].initializer)
        self.assertEqual(2.0, statements[1].initializer.value)
        function = statements[2]
        self.assertIsInstance(function, FunctionStatement)
        self.assertEqual(["x", "y"], [param.lexeme for param in function.params])
        self.assertIsInstance(function.body[0], ReturnStatement)

    def test_if_else_binds_to_nearest_if(self):
        statements, errors = parse("if (a) if (b) print 1; else print 2;")
        self.assertEqual([], errors)
        outer = statements[0]
        self.assertIsNone(outer.else_branch)
        self.assertIsNotNone(outer.then_branch.else_branch)

    def test_for_desugars_to_while(self):
        statements, errors = parse("for (var i = 0; i < 3; i = i + 1) print i;")
        self.assertEqual([], errors)
        block = statements[0]
        self.assertIsInstance(block, BlockStatement)
        initializer, loop = block.statements
        self.assertIsInstance(initializer, VarStatement)
        self.assertIsInstance(loop, WhileStatement)
        self.assertIsInstance(loop.condition, BinaryExpression)
        body, increment = loop.body.statements
        self.assertIsInstance(body, PrintStatement)
        self.assertIsInstance(increment.expression, AssignmentExpression)

    def test_empty_for_clauses(self):
        statements, errors = parse("for (;;) print 1;")
        self.assertEqual([], errors)
        loop = statements[0]
        self.assertIsInstance(loop, WhileStatement)
        self.assertIs(True, loop.condition.value)
        self.assertIsInstance(loop.body, PrintStatement)

    def test_reports_every_syntax_error(self):
        statements, errors = parse("print 1\nprint 2;\nprint 3\nprint 4;\nprint 5;")
        self.assertEqual(["Expect ';' after value.", "Expect ';' after value."], [e.message for e in errors])
        self.assertEqual([2, 4], [e.line for e in errors])
        # Only the statement untouched by recovery survives
        self.assertEqual(1, len(statements))
        self.assertEqual(5.0, statements[0].expression.value)

    def test_error_messages(self):
        cases = {
            "print ;": "Expect expression.",
            "var 1 = 2;": "Expect variable name.",
            "var a = 1": "Expect ';' after variable declaration.",
            "1 + 2": "Expect ';' after expression.",
            "(1 + 2;": "Expect ')' after expression.",
            "f(1;": "Expect ')' after arguments.",
            "{ print 1;": "Expect '}' after block.",
            "if 1) print 1;": "Expect '(' after 'if'.",
            "while (true print 1;": "Expect ')' after condition.",
            "fun (a) {}": "Expect function name.",
            "fun f(a {}": "Expect ')' after parameters.",
            "fun f() print 1;": "Expect '{' before function body.",
            "fun f() { return 1 }": "Expect ';' after return value.",
        }
        for source, message in cases.items():
            _, errors = parse(source)
            self.assertIn(message, [e.message for e in errors], source)

    def test_error_at_end(self):
        _, errors = parse("print 1")
        self.assertEqual(1, len(errors))
        self.assertEqual(TokenType.EOF, errors[0].token.type)

    def test_invalid_assignment_target(self):
        for source in ["1 = 2;", "a + b = c;", "(a) = 1;"]:
            statements, errors = parse(source)
            self.assertEqual(["Invalid assignment target."], [e.message for e in errors], source)
            # The statement itself still parses
            self.assertEqual(1, len(statements), source)

    def test_argument_and_parameter_limits(self):
        arguments = ", ".join(["1"] * 256)
        statements, errors = parse(f"f({arguments});")
        self.assertEqual(["Can't have more than 255 arguments."], [e.message for e in errors])
        self.assertEqual(256, len(statements[0].expression.arguments))

        _, errors = parse(f"f({', '.join(['1'] * 255)});")
        self.assertEqual([], errors)

        params = ", ".join(f"p{i}" for i in range(256))
        statements, errors = parse(f"fun f({params}) {{}}")
        self.assertEqual(["Can't have more than 255 parameters."], [e.message for e in errors])
        self.assertEqual(1, len(statements))

    def test_nodes_hash_by_identity(self):
        statements, _ = parse("a; a;")
        first, second = statements[0].expression, statements[1].expression
        self.assertNotEqual(first, second)
        self.assertEqual(2, len({first: 0, second: 1}))


if __name__ == "__main__":
    unittest.main()
