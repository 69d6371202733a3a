import io
import math
import unittest

from interpreter import Interpreter, divide, stringify
from lexer import Lexer
from parser import Parser
from resolver import Resolver
from source_map import reset_source_map


def execute(source, interpreter=None):
    """Run source through every stage; returns (printed text, runtime errors, success)"""
    static_errors = []
    tokens = Lexer(source, reporter=static_errors.append).tokenize()
    statements = Parser(tokens, reporter=static_errors.append).parse()
    locals = Resolver(reporter=static_errors.append).resolve(statements)
    assert not static_errors, [e.message for e in static_errors]

    errors = []
    if interpreter is None:
        interpreter = Interpreter(output=io.StringIO())
    interpreter.reporter = errors.append
    success = interpreter.interpret(statements, locals)
    return interpreter.output.getvalue(), errors, success


class InterpreterTestCase(unittest.TestCase):

    def setUp(self):
        reset_source_map()

    def assertPrints(self, source, *lines):
        output, errors, success = execute(source)
        self.assertEqual([], [e.message for e in errors], source)
        self.assertTrue(success, source)
        self.assertEqual(list(lines), output.splitlines(), source)

    def assertRuntimeError(self, source, message, *lines):
        output, errors, success = execute(source)
        self.assertFalse(success, source)
        self.assertEqual([message], [e.message for e in errors], source)
        self.assertEqual(list(lines), output.splitlines(), source)
        return errors[0]

    def test_closure_counter(self):
        self.assertPrints("""
            fun makeCounter() {
              var i = 0;
              fun count() {
                i = i + 1;
                return i;
              }
              return count;
            }
            var counter = makeCounter();
            print counter();
            print counter();
        """, "1", "2")

    def test_closures_share_their_frame(self):
        self.assertPrints("""
            fun make() {
              var n = 0;
              fun inc() { n = n + 1; }
              fun get() { return n; }
              inc();
              inc();
              return get;
            }
            print make()();
        """, "2")

    def test_counters_are_independent(self):
        self.assertPrints("""
            fun makeCounter() { var i = 0; fun count() { i = i + 1; return i; } return count; }
            var a = makeCounter();
            var b = makeCounter();
            a(); a();
            print a();
            print b();
        """, "3", "1")

    def test_static_scope(self):
        self.assertPrints("""
            var a = "global";
            {
              fun showA() {
                print a;
              }

              showA();
              var a = "block";
              showA();
            }
        """, "global", "global")

    def test_shadowing_and_blocks(self):
        self.assertPrints("""
            var a = "outer";
            {
              var a = "inner";
              print a;
            }
            print a;
        """, "inner", "outer")

    def test_for_loop(self):
        self.assertPrints("for (var i = 0; i < 3; i = i + 1) print i;", "0", "1", "2")

    def test_while_loop(self):
        self.assertPrints("""
            var n = 3;
            while (n > 0) {
              print n;
              n = n - 1;
            }
        """, "3", "2", "1")

    def test_runtime_error_aborts_run(self):
        error = self.assertRuntimeError('print "before"; print 1 + "2"; print "after";',
                                        "Operands must be two numbers or two strings.", "before")
        self.assertEqual("+", error.token.lexeme)
        self.assertEqual(1, error.line)

    def test_wrong_arity(self):
        self.assertRuntimeError("""
            fun f(a, b) { print "body"; }
            f(1);
        """, "Expected 2 arguments but got 1.")
        self.assertRuntimeError("clock(1);", "Expected 0 arguments but got 1.")

    def test_runtime_errors(self):
        cases = {
            'print -"x";': "Operand must be a number.",
            'print 1 < "2";': "Operands must be numbers.",
            'print nil * 2;': "Operands must be numbers.",
            'print true + 1;': "Operands must be two numbers or two strings.",
            '"str"();': "Can only call functions.",
            'nil();': "Can only call functions.",
            'print y;': "Undefined variable 'y'.",
            'y = 1;': "Undefined variable 'y'.",
        }
        for source, message in cases.items():
            self.assertRuntimeError(source, message)

    def test_error_restores_environment(self):
        interpreter = Interpreter(output=io.StringIO())
        execute('fun f() { { var a = 1; print a + "x"; } } { var b = 2; f(); }', interpreter)
        self.assertIs(interpreter.globals, interpreter.environment)
        self.assertTrue(interpreter.had_runtime_error)

    def test_logical_operators_return_operands(self):
        self.assertPrints("""
            print nil or "yes";
            print "first" or "second";
            print false and 1;
            print 1 and 2;
            print nil and nil();
        """, "yes", "first", "false", "2", "nil")

    def test_short_circuit(self):
        self.assertPrints("""
            var calls = 0;
            fun bump() { calls = calls + 1; return true; }
            false and bump();
            true or bump();
            nil or bump();
            print calls;
        """, "1")

    def test_truthiness(self):
        self.assertPrints("""
            if (0) print "zero"; else print "no zero";
            if ("") print "empty"; else print "no empty";
            if (nil) print "nil"; else print "no nil";
            if (false) print "false"; else print "no false";
            print !nil;
            print !0;
        """, "zero", "empty", "no nil", "no false", "true", "false")

    def test_equality(self):
        self.assertPrints("""
            print 1 == 1;
            print "a" == "a";
            print nil == nil;
            print nil == false;
            print 1 == "1";
            print true == 1;
            print 0 == false;
            print 0/0 == 0/0;
            print clock == clock;
            print 1 != 2;
        """, "true", "true", "true", "false", "false", "false", "false", "false", "true", "true")

    def test_printing(self):
        self.assertPrints("""
            print 3;
            print 2.5;
            print -0.5;
            print 10 / 4;
            print "raw text";
            print nil;
            print true;
            fun f() {}
            print f;
            print clock;
            var unset;
            print unset;
        """, "3", "2.5", "-0.5", "2.5", "raw text", "nil", "true", "<fn f>", "<native fn>", "nil")

    def test_division(self):
        self.assertPrints("print 1/0; print -1/0; print 0/0;", "Infinity", "-Infinity", "NaN")

    def test_arithmetic_and_strings(self):
        self.assertPrints("""
            print 1 + 2 * 3 - 4 / 2;
            print (1 + 2) * 3;
            print "con" + "cat";
            print 2 >= 2;
            print 1 > 2;
        """, "5", "9", "concat", "true", "false")

    def test_return_unwinds_loops(self):
        self.assertPrints("""
            fun find() {
              var i = 0;
              while (true) {
                if (i == 3) return i;
                i = i + 1;
              }
            }
            print find();
            fun empty() { return; }
            print empty();
            fun none() { 1 + 1; }
            print none();
        """, "3", "nil", "nil")

    def test_recursion(self):
        self.assertPrints("""
            fun fib(n) {
              if (n < 2) return n;
              return fib(n - 1) + fib(n - 2);
            }
            print fib(10);
        """, "55")

    def test_runaway_recursion_is_a_runtime_error(self):
        interpreter = Interpreter(output=io.StringIO())
        output, errors, success = execute("""
            fun count(n) { if (n > 0) return count(n - 1); return 0; }
            print "start";
            print count(5000);
            print "after";
        """, interpreter)
        self.assertFalse(success)
        self.assertEqual(["Stack overflow."], [e.message for e in errors])
        self.assertEqual("PBL4007", errors[0].diagnostic.code)
        self.assertEqual("start\n", output)
        self.assertIs(interpreter.globals, interpreter.environment)

        # The same interpreter keeps working after the overflow
        output, errors, success = execute("print count(3);", interpreter)
        self.assertTrue(success)
        self.assertEqual("start\n0\n", output)

    def test_arguments_evaluated_left_to_right(self):
        self.assertPrints("""
            var log = "";
            fun note(s) { log = log + s; return s; }
            fun pair(a, b) { return a + b; }
            print pair(note("a"), note("b"));
            print log;
        """, "ab", "ab")

    def test_clock(self):
        self.assertPrints("print clock() > 0;", "true")

    def test_globals_persist_between_runs(self):
        interpreter = Interpreter(output=io.StringIO())
        execute("var total = 1; fun add(n) { total = total + n; }", interpreter)
        reset_source_map()
        output, errors, success = execute("add(2); print total;", interpreter)
        self.assertTrue(success)
        self.assertEqual("3\n", output)

    def test_output_defaults_to_stdout(self):
        interpreter = Interpreter()
        self.assertIsNone(interpreter.output)


class ValueHelpersTestCase(unittest.TestCase):

    def test_stringify(self):
        cases = [
            (None, "nil"), (True, "true"), (False, "false"), (1.0, "1"), (-3.0, "-3"),
            (0.1, "0.1"), (math.inf, "Infinity"), (-math.inf, "-Infinity"), (math.nan, "NaN"),
            (1e21, "1000000000000000000000"), ("text", "text"),
        ]
        for value, expected in cases:
            self.assertEqual(expected, stringify(value), value)

    def test_divide(self):
        self.assertEqual(2.5, divide(5.0, 2.0))
        self.assertEqual(math.inf, divide(1.0, 0.0))
        self.assertEqual(-math.inf, divide(-1.0, 0.0))
        self.assertTrue(math.isnan(divide(0.0, 0.0)))


if __name__ == "__main__":
    unittest.main()
