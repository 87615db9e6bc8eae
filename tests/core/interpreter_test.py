import io
import textwrap
import unittest

from lox.core import ast
from lox.core.interpreter import Interpreter
from lox.core.tokens import Token, TokenType
from lox.lang.error import Diagnostic, ErrorHandler, LoxError
from lox.lang.session import Session


def run(source):
    """Runs source in a fresh session. Returns (printed lines, error handler)."""
    stdout = io.StringIO()
    handler = ErrorHandler(stream=io.StringIO(), color=False)
    Session(handler, stdout=stdout).run(textwrap.dedent(source))
    return stdout.getvalue().splitlines(), handler


def messages(handler):
    return [diagnostic.message for diagnostic in handler.diagnostics]


class ExpressionTestCase(unittest.TestCase):

    def test_should_print(self):
        cases = {
            "1 + 2 * 3": "7",
            "(1 + 2) * 3": "9",
            "10 - 4 - 3": "3",
            "7 / 2": "3.5",
            "-(3)": "-3",
            "--3": "3",
            "2 * -0": "-0",
            "1 / 0": "Infinity",
            "-1 / 0": "-Infinity",
            "0 / 0": "NaN",
            "0.1 + 0.2": "0.30000000000000004",
            "10000000 * 10000000 * 10000000": "1000000000000000000000",
            "10000000 * 10000000 * 100": "10000000000000000",
            "1 / 10000000": "0.0000001",
            "1 < 2": "true",
            "2 <= 2": "true",
            "1 > 2": "false",
            "3 >= 4": "false",
            "!nil": "true",
            "!0": "false",
            "!\"\"": "false",
            "1 == 1": "true",
            "1 == true": "false",
            "nil == nil": "true",
            "nil == false": "false",
            "\"a\" == \"a\"": "true",
            "\"1\" == 1": "false",
            "1 != 2": "true",
            "0 / 0 == 0 / 0": "true",
            "clock == clock": "true",
            "nil": "nil",
        }
        for case, expected in cases.items():
            output, handler = run(f"print {case};")
            self.assertFalse(handler.diagnostics, case)
            self.assertEqual([expected], output, case)

    def test_string_concatenation(self):
        cases = {
            "\"a\" + \"b\"": "ab",
            "\"\" + \"\"": "",
            "\"n = \" + 1": "n = 1",
            "2.5 + \"!\"": "2.5!",
            "\"x\" + nil": "xnil",
            "true + \"\"": "true",
            "1 + 2 + \"3\"": "33",
            "\"1\" + 2 + 3": "123",
        }
        for case, expected in cases.items():
            output, __ = run(f"print {case};")
            self.assertEqual([expected], output, case)

        output, __ = run("""
            var s = "count: ";
            var n = 1 + 1;
            print s + n;
            print n + s;
            var empty = "";
            print empty + empty + n;
        """)
        self.assertEqual(["count: 2", "2count: ", "2"], output)

    def test_logical_operators_return_operands(self):
        cases = {
            "nil or \"x\"": "x",
            "\"a\" or \"b\"": "a",
            "false or nil": "nil",
            "0 and 1": "1",
            "nil and 1": "nil",
            "false and undefined": "false",
            "true or undefined": "true",
        }
        for case, expected in cases.items():
            output, handler = run(f"print {case};")
            self.assertFalse(handler.diagnostics, case)
            self.assertEqual([expected], output, case)

    def test_type_errors(self):
        should_fail = {
            "print -\"a\";": "Operand must be a number.",
            "print -nil;": "Operand must be a number.",
            "print 1 < \"2\";": "Operands must be numbers.",
            "print \"a\" * 2;": "Operands must be numbers.",
            "print true - 1;": "Operands must be numbers.",
            "print nil / 1;": "Operands must be numbers.",
            "print true + 1;": "Operands must be two numbers or at least one string.",
            "print nil + nil;": "Operands must be two numbers or at least one string.",
            "print x;": "Undefined variable 'x'.",
            "x = 1;": "Undefined variable 'x'.",
            "\"not callable\"();": "Can only call functions and classes.",
            "var n = 1; n();": "Can only call functions and classes.",
            "print 1.field;": "Only instances have properties.",
            "var s = \"s\"; s.x = 1;": "Only instances have fields.",
            "class A {} print A().missing;": "Undefined property 'missing'.",
            "class A {} print A.missing;": "Only instances have properties.",
            "var A = 1; class B < A {}": "Superclass must be a class.",
            "fun f() {} class B < f {}": "Superclass must be a class.",
        }
        for case, message in should_fail.items():
            __, handler = run(case)
            self.assertTrue(handler.had_runtime_error, case)
            self.assertEqual([message], messages(handler), case)
            self.assertEqual(Diagnostic.RUNTIME, handler.diagnostics[0].kind, case)

    def test_runtime_error_line(self):
        __, handler = run("var a = 1;\n\nprint a + nil;")
        self.assertEqual(3, handler.diagnostics[0].line)
        self.assertEqual("Operands must be two numbers or at least one string.\n[line 3]", str(handler.diagnostics[0]))


class StatementTestCase(unittest.TestCase):

    def test_block_shadowing(self):
        output, __ = run("var a = 1; { var a = 2; print a; } print a;")
        self.assertEqual(["2", "1"], output)

    def test_nested_scopes(self):
        output, __ = run("""
            var a = "global a";
            var b = "global b";
            {
              var a = "outer a";
              {
                var a = "inner a";
                print a;
                print b;
              }
              print a;
            }
            print a;
        """)
        self.assertEqual(["inner a", "global b", "outer a", "global a"], output)

    def test_assignment_reaches_enclosing_scope(self):
        output, __ = run("var a = 1; { a = 2; { a = a + 1; } } print a; print a = 7;")
        self.assertEqual(["3", "7"], output)

    def test_uninitialized_variable_is_nil(self):
        output, __ = run("var a; print a;")
        self.assertEqual(["nil"], output)

    def test_global_redeclaration(self):
        output, handler = run("var a = 1; var a = a + 1; print a;")
        self.assertFalse(handler.diagnostics)
        self.assertEqual(["2"], output)

    def test_if_else(self):
        cases = {
            "if (true) print 1; else print 2;": ["1"],
            "if (nil) print 1; else print 2;": ["2"],
            "if (0) print 1;": ["1"],
            "if (\"\") print 1;": ["1"],
            "if (false) print 1;": [],
            "if (true) if (false) print 1; else print 2;": ["2"],
        }
        for case, expected in cases.items():
            output, __ = run(case)
            self.assertEqual(expected, output, case)

    def test_loops(self):
        output, __ = run("var i = 0; while (i < 3) { print i; i = i + 1; }")
        self.assertEqual(["0", "1", "2"], output)

        output, __ = run("for (var i = 0; i < 3; i = i + 1) print i * i;")
        self.assertEqual(["0", "1", "4"], output)

        output, __ = run("var i = 5; for (; i > 3;) i = i - 1; print i;")
        self.assertEqual(["3"], output)

    def test_for_scope(self):
        __, handler = run("for (var i = 0; i < 1; i = i + 1) {} print i;")
        self.assertEqual(["Undefined variable 'i'."], messages(handler))

    def test_runtime_error_stops_the_run(self):
        output, handler = run("print 1; print -\"a\"; print 2;")

        self.assertEqual(["1"], output)
        self.assertEqual(1, len(handler.diagnostics))


class FunctionTestCase(unittest.TestCase):

    def test_call_and_return(self):
        output, __ = run("""
            fun add(a, b) { return a + b; }
            fun nothing() {}
            fun early(x) { if (x) return "early"; return "late"; }
            print add(1, 2);
            print nothing();
            print early(true);
            print early(false);
            print add;
            print clock;
        """)
        self.assertEqual(["3", "nil", "early", "late", "<fn add>", "<native fn>"], output)

    def test_return_from_loops(self):
        output, __ = run("""
            fun find(target) {
              for (var i = 0; i < 100; i = i + 1) {
                { if (i * i == target) return i; }
              }
              return nil;
            }
            fun first(limit) {
              var i = 0;
              while (true) { if (i >= limit) return i; i = i + 1; }
            }
            print find(49);
            print find(50);
            print first(4);
        """)
        self.assertEqual(["7", "nil", "4"], output)

    def test_recursion(self):
        output, __ = run("""
            fun fib(n) {
              if (n < 2) return n;
              return fib(n - 1) + fib(n - 2);
            }
            print fib(15);
        """)
        self.assertEqual(["610"], output)

    def test_closure_counter(self):
        output, __ = run("""
            fun makeCounter() {
              var count = 0;
              fun increment() {
                count = count + 1;
                return count;
              }
              return increment;
            }
            var counter = makeCounter();
            print counter();
            print counter();
            var other = makeCounter();
            print other();
            print counter();
        """)
        self.assertEqual(["1", "2", "1", "3"], output)

    def test_closures_share_a_frame(self):
        output, __ = run("""
            var get;
            var set;
            fun make() {
              var value = "initial";
              fun getter() { return value; }
              fun setter(v) { value = v; }
              get = getter;
              set = setter;
            }
            make();
            print get();
            set("updated");
            print get();
        """)
        self.assertEqual(["initial", "updated"], output)

    def test_closure_binds_at_declaration(self):
        output, __ = run("""
            var a = "global";
            {
              fun show() { print a; }
              show();
              var a = "block";
              show();
            }
        """)
        self.assertEqual(["global", "global"], output)

    def test_arity(self):
        should_fail = {
            "fun f(a, b) {} f(1);": "Expected 2 arguments but got 1.",
            "fun f() {} f(1, 2, 3);": "Expected 0 arguments but got 3.",
            "clock(1);": "Expected 0 arguments but got 1.",
            "class A { init(x) {} } A();": "Expected 1 arguments but got 0.",
            "class A {} A(1);": "Expected 0 arguments but got 1.",
        }
        for case, message in should_fail.items():
            __, handler = run(case)
            self.assertEqual([message], messages(handler), case)

    def test_call_non_callable(self):
        cases = ["1();", "nil();", "true();", "\"s\"();", "class A {} A()();"]
        for case in cases:
            __, handler = run(case)
            self.assertEqual(["Can only call functions and classes."], messages(handler), case)

    def test_stack_overflow(self):
        stdout = io.StringIO()
        handler = ErrorHandler(stream=io.StringIO(), color=False)
        session = Session(handler, stdout=stdout)

        session.run("fun f(n) { return f(n + 1); } { var local = 1; f(0); }")

        self.assertTrue(handler.had_runtime_error)
        self.assertEqual(["Stack overflow."], messages(handler))
        self.assertEqual(1, handler.diagnostics[0].line)
        self.assertIs(session.interpreter.globals, session.interpreter.environment)

        # the session is still usable afterwards
        handler.reset()
        session.run("print 1;")
        self.assertEqual("1\n", stdout.getvalue())


class ClassTestCase(unittest.TestCase):

    def test_fields_and_methods(self):
        output, __ = run("""
            class Point {
              init(x, y) { this.x = x; this.y = y; }
              sum() { return this.x + this.y; }
            }
            var p = Point(1, 2);
            print p.sum();
            p.x = 10;
            print p.sum();
            print p.x = 5;
            print Point;
            print p;
        """)
        self.assertEqual(["3", "12", "5", "Point", "Point instance"], output)

    def test_fields_shadow_methods(self):
        output, __ = run("""
            class A { m() { return "method"; } }
            var a = A();
            print a.m();
            a.m = "field";
            print a.m;
            print A().m();
        """)
        self.assertEqual(["method", "field", "method"], output)

    def test_bound_methods_remember_this(self):
        output, __ = run("""
            class Person {
              init(name) { this.name = name; }
              greet() { return "hi " + this.name; }
            }
            var greet = Person("ann").greet;
            var bob = Person("bob");
            bob.other = greet;
            print greet();
            print bob.other();
        """)
        self.assertEqual(["hi ann", "hi ann"], output)

    def test_this_in_nested_function(self):
        output, __ = run("""
            class Box {
              init(v) { this.v = v; }
              getter() { fun get() { return this.v; } return get; }
            }
            print Box(4).getter()();
        """)
        self.assertEqual(["4"], output)

    def test_initializer(self):
        output, __ = run("""
            class A {
              init(flag) {
                this.value = 1;
                if (flag) return;
                this.value = 2;
              }
            }
            print A(true).value;
            print A(false).value;
            var a = A(false);
            print a.init(true) == a;
            print a.value;
        """)
        self.assertEqual(["1", "2", "true", "1"], output)

    def test_inherited_methods_and_init(self):
        output, __ = run("""
            class Base {
              init(n) { this.n = n; }
              describe() { return "base " + this.n; }
            }
            class Derived < Base {}
            var d = Derived(3);
            print d.describe();
        """)
        self.assertEqual(["base 3"], output)

    def test_super_dispatch(self):
        output, __ = run("""
            class A {
              method() { return "A.method on " + this.name; }
            }
            class B < A {
              init() { this.name = "b"; }
              method() { return "B -> " + super.method(); }
            }
            class C < B {
              init() { this.name = "c"; }
            }
            print B().method();
            print C().method();
        """)
        self.assertEqual(["B -> A.method on b", "B -> A.method on c"], output)

    def test_super_is_lexical(self):
        output, __ = run("""
            class A { say() { return "A"; } }
            class B < A {
              say() { return "B"; }
              test() { return super.say(); }
            }
            class C < B { say() { return "C"; } }
            print C().test();
        """)
        self.assertEqual(["A"], output)

    def test_super_bound_method(self):
        output, __ = run("""
            class A { name() { return this.n; } }
            class B < A {
              init() { this.n = "from b"; }
              get() { return super.name; }
            }
            var method = B().get();
            print method();
        """)
        self.assertEqual(["from b"], output)

    def test_super_missing_method(self):
        __, handler = run("class A {} class B < A { m() { return super.missing(); } } B().m();")
        self.assertEqual(["Undefined property 'missing'."], messages(handler))

    def test_classes_are_values(self):
        output, __ = run("""
            fun make() {
              class Local { kind() { return "local"; } }
              return Local;
            }
            var K = make();
            print K().kind();
            print K == K;
        """)
        self.assertEqual(["local", "true"], output)


class StaticErrorTestCase(unittest.TestCase):

    def test_syntax_errors_suppress_execution(self):
        output, handler = run("print \"before\"; var = 1; print 2 +; print \"after\";")

        self.assertEqual([], output)
        self.assertEqual(["Expect variable name.", "Expect expression."], messages(handler))
        self.assertFalse(handler.had_runtime_error)

    def test_lexical_errors_suppress_execution(self):
        output, handler = run("print 1; @")

        self.assertEqual([], output)
        self.assertTrue(handler.had_error)

    def test_resolution_errors_suppress_execution(self):
        output, handler = run("print 1; { var a = 1; var a = 2; } return;")

        self.assertEqual([], output)
        self.assertEqual(2, len(handler.diagnostics))


class InterpreterTestCase(unittest.TestCase):

    def setUp(self):
        self.handler = ErrorHandler(stream=io.StringIO(), color=False)
        self.stdout = io.StringIO()
        self.interpreter = Interpreter(self.handler, stdout=self.stdout)

    def test_escaping_return_is_an_internal_fault(self):
        keyword = Token(TokenType.RETURN, "return", None, 1, 1)
        self.assertRaises(LoxError, self.interpreter.interpret, [ast.Return(keyword, None)])
        self.assertIs(self.interpreter.globals, self.interpreter.environment)

    def test_failed_statements_are_skipped(self):
        self.interpreter.interpret([None, ast.Print(ast.Literal("ok")), None])
        self.assertEqual("ok\n", self.stdout.getvalue())

    def test_resolution_entry_is_fixed(self):
        expr = ast.Variable(Token(TokenType.IDENTIFIER, "a", None, 1, 1))
        self.interpreter.resolve(expr, 1)
        self.interpreter.resolve(expr, 3)

        self.assertEqual({expr: 1}, self.interpreter.locals)

    def test_globals_persist_across_runs(self):
        session = Session(self.handler, stdout=self.stdout)
        session.run("var a = 1; fun inc() { a = a + 1; return a; }")
        session.run("print inc();")
        session.run("print inc();")

        self.assertEqual("2\n3\n", self.stdout.getvalue())


if __name__ == '__main__':
    unittest.main()
