import io
import math
import unittest

from lox.core import ast
from lox.core.environment import Environment
from lox.core.interpreter import Interpreter
from lox.core.runtime import (
    NATIVES, LoxClass, LoxFunction, LoxInstance, NativeFunction, is_equal, is_truthy, stringify
)
from lox.core.tokens import Token, TokenType
from lox.lang.error import ErrorHandler, LoxRuntimeError


def name(lexeme):
    return Token(TokenType.IDENTIFIER, lexeme, None, 1, 1)


def method(lexeme, *params):
    return ast.Function(name(lexeme), [name(param) for param in params], [])


class ValueRulesTestCase(unittest.TestCase):

    def test_is_truthy(self):
        should_be_falsy = [None, False]
        for case in should_be_falsy:
            self.assertFalse(is_truthy(case), case)

        should_be_truthy = [True, 0.0, 1.0, "", "false", math.nan, NATIVES["clock"]]
        for case in should_be_truthy:
            self.assertTrue(is_truthy(case), case)

    def test_is_equal(self):
        klass = LoxClass("A", None, {})
        should_be_equal = [
            (None, None), (True, True), (1.0, 1.0), ("a", "a"), (math.nan, math.nan), (klass, klass),
        ]
        for left, right in should_be_equal:
            self.assertTrue(is_equal(left, right), (left, right))

        should_differ = [
            (None, False), (False, None), (True, 1.0), (False, 0.0), (1.0, "1"), ("", None),
            (1.0, 2.0), (klass, LoxClass("A", None, {})), (LoxInstance(klass), LoxInstance(klass)),
        ]
        for left, right in should_differ:
            self.assertFalse(is_equal(left, right), (left, right))

    def test_stringify(self):
        klass = LoxClass("Point", None, {})
        cases = [
            (None, "nil"),
            (True, "true"),
            (False, "false"),
            (3.0, "3"),
            (-1.5, "-1.5"),
            ("text", "text"),
            (klass, "Point"),
            (LoxInstance(klass), "Point instance"),
            (LoxFunction(method("area"), Environment()), "<fn area>"),
            (NATIVES["clock"], "<native fn>"),
        ]
        for value, expected in cases:
            self.assertEqual(expected, stringify(value), expected)


class CallableTestCase(unittest.TestCase):

    def setUp(self):
        self.interpreter = Interpreter(ErrorHandler(stream=io.StringIO(), color=False), stdout=io.StringIO())

    def test_native_function(self):
        native = NativeFunction("twice", 1, lambda value: value * 2)

        self.assertEqual(1, native.arity())
        self.assertEqual(8.0, native.call(self.interpreter, [4.0]))

    def test_clock(self):
        clock = NATIVES["clock"]

        self.assertEqual(0, clock.arity())
        self.assertIsInstance(clock.call(self.interpreter, []), float)
        self.assertIs(clock, self.interpreter.globals.get(name("clock")))

    def test_function_arity(self):
        self.assertEqual(0, LoxFunction(method("f"), Environment()).arity())
        self.assertEqual(2, LoxFunction(method("f", "a", "b"), Environment()).arity())

    def test_bind_adds_one_frame(self):
        closure = Environment()
        function = LoxFunction(method("m"), closure)
        instance = LoxInstance(LoxClass("A", None, {"m": function}))

        bound = function.bind(instance)

        self.assertIsNot(function, bound)
        self.assertIs(function.declaration, bound.declaration)
        self.assertIs(closure, bound.closure.enclosing)
        self.assertEqual({"this": instance}, bound.closure.values)

    def test_class_arity_follows_init(self):
        base = LoxClass("Base", None, {"init": LoxFunction(method("init", "a", "b"), Environment(), True)})
        derived = LoxClass("Derived", base, {})

        self.assertEqual(0, LoxClass("Empty", None, {}).arity())
        self.assertEqual(2, base.arity())
        self.assertEqual(2, derived.arity())

    def test_find_method(self):
        shared = LoxFunction(method("shared"), Environment())
        overridden = LoxFunction(method("m"), Environment())
        override = LoxFunction(method("m"), Environment())

        base = LoxClass("Base", None, {"shared": shared, "m": overridden})
        derived = LoxClass("Derived", base, {"m": override})

        self.assertIs(shared, derived.find_method("shared"))
        self.assertIs(override, derived.find_method("m"))
        self.assertIs(overridden, base.find_method("m"))
        self.assertIsNone(derived.find_method("missing"))

    def test_instance_properties(self):
        function = LoxFunction(method("m"), Environment())
        instance = LoxInstance(LoxClass("A", None, {"m": function}))

        bound = instance.get(name("m"))
        self.assertIs(function.declaration, bound.declaration)
        self.assertIs(instance, bound.closure.get_at(0, "this"))

        instance.set(name("m"), "field")
        self.assertEqual("field", instance.get(name("m")))
        self.assertEqual({"m": "field"}, instance.fields)
        self.assertIs(function, instance.klass.methods["m"])

        with self.assertRaises(LoxRuntimeError) as context:
            instance.get(name("missing"))
        self.assertEqual("Undefined property 'missing'.", context.exception.message)

    def test_class_call_makes_instance(self):
        klass = LoxClass("A", None, {})
        instance = klass.call(self.interpreter, [])

        self.assertIsInstance(instance, LoxInstance)
        self.assertIs(klass, instance.klass)


if __name__ == '__main__':
    unittest.main()
