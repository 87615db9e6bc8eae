"""Tree-walking evaluator for lox.

Statements are executed for effect and expressions evaluated for value. execute() returns None when a statement
completes normally and a ReturnSignal when a `return` ran somewhere inside it; blocks and loops hand the signal
straight back up, and the enclosing function call consumes it.

Variables resolved by the Resolver are read and written exactly `distance` frames up from the current environment;
everything else is global.
"""

import sys

from lox.core import ast
from lox.core.environment import Environment
from lox.core.runtime import (
    NATIVES, LoxCallable, LoxClass, LoxFunction, LoxInstance, ReturnSignal, is_equal, is_truthy, stringify
)
from lox.core.tokens import TokenType
from lox.lang.error import LoxError, LoxRuntimeError, StackOverflowError
from lox.lang.numerical import divide


class Interpreter(ast.ExprVisitor, ast.StmtVisitor):
    """One interpreter per session: globals and the resolution table persist across interpret() calls."""

    def __init__(self, error_handler, stdout=None):
        self.error_handler = error_handler
        self.stdout = stdout or sys.stdout

        self.globals = Environment()
        self.environment = self.globals  # current frame, swapped in and out by execute_block
        self.locals = {}                 # resolution table, dict of Expr node: scope distance

        for name, native in NATIVES.items():
            self.globals.define(name, native)

        self._call_token = None  # token of the innermost call, locates stack overflows

    def interpret(self, statements):
        """Executes statements in order. The first runtime error is reported and stops the run."""
        try:
            for statement in statements:
                signal = self.execute(statement)
                if signal is not None:
                    raise LoxError("'return' escaped to top-level code.")
        except LoxRuntimeError as error:
            self.error_handler.runtime_error(error)
        except RecursionError:
            self.error_handler.runtime_error(StackOverflowError(self._call_token))
        finally:
            self._call_token = None

    def interpret_expression(self, expr):
        """Evaluates a single expression (REPL expression mode). Returns its text, or None after a runtime error."""
        try:
            return stringify(self.evaluate(expr))
        except LoxRuntimeError as error:
            self.error_handler.runtime_error(error)
        except RecursionError:
            self.error_handler.runtime_error(StackOverflowError(self._call_token))
        finally:
            self._call_token = None
        return None

    def resolve(self, expr, depth):
        """Called by the Resolver. An entry, once recorded, never changes."""
        self.locals.setdefault(expr, depth)

    def evaluate(self, expr):
        return expr.accept(self)

    def execute(self, stmt):
        if stmt is None:
            return None
        return stmt.accept(self)

    def execute_block(self, statements, environment):
        """Runs statements in environment, restoring the previous environment however the block is left."""
        previous = self.environment
        try:
            self.environment = environment
            for statement in statements:
                signal = self.execute(statement)
                if signal is not None:
                    return signal
            return None
        finally:
            self.environment = previous

    # -- statements -- #

    def visit_block_stmt(self, stmt):
        return self.execute_block(stmt.statements, Environment(self.environment))

    def visit_class_stmt(self, stmt):
        superclass = None
        if stmt.superclass is not None:
            superclass = self.evaluate(stmt.superclass)
            if not isinstance(superclass, LoxClass):
                raise LoxRuntimeError(stmt.superclass.name, "Superclass must be a class.")

        self.environment.define(stmt.name.lexeme, None)

        environment = self.environment
        if superclass is not None:
            environment = Environment(environment)
            environment.define("super", superclass)

        methods = {
            method.name.lexeme: LoxFunction(method, environment, method.name.lexeme == "init")
            for method in stmt.methods
        }

        self.environment.assign(stmt.name, LoxClass(stmt.name.lexeme, superclass, methods))
        return None

    def visit_expression_stmt(self, stmt):
        self.evaluate(stmt.expression)
        return None

    def visit_function_stmt(self, stmt):
        self.environment.define(stmt.name.lexeme, LoxFunction(stmt, self.environment))
        return None

    def visit_if_stmt(self, stmt):
        if is_truthy(self.evaluate(stmt.condition)):
            return self.execute(stmt.then_branch)
        return self.execute(stmt.else_branch)

    def visit_print_stmt(self, stmt):
        print(stringify(self.evaluate(stmt.expression)), file=self.stdout)
        return None

    def visit_return_stmt(self, stmt):
        value = None
        if stmt.value is not None:
            value = self.evaluate(stmt.value)
        return ReturnSignal(value)

    def visit_var_stmt(self, stmt):
        value = None
        if stmt.initializer is not None:
            value = self.evaluate(stmt.initializer)
        self.environment.define(stmt.name.lexeme, value)
        return None

    def visit_while_stmt(self, stmt):
        while is_truthy(self.evaluate(stmt.condition)):
            signal = self.execute(stmt.body)
            if signal is not None:
                return signal
        return None

    # -- expressions -- #

    def visit_assign_expr(self, expr):
        value = self.evaluate(expr.value)

        distance = self.locals.get(expr)
        if distance is not None:
            self.environment.assign_at(distance, expr.name.lexeme, value)
        else:
            self.globals.assign(expr.name, value)

        return value

    def visit_binary_expr(self, expr):
        left = self.evaluate(expr.left)
        right = self.evaluate(expr.right)
        operator = expr.operator
        kind = operator.type

        if kind == TokenType.BANG_EQUAL:
            return not is_equal(left, right)
        if kind == TokenType.EQUAL_EQUAL:
            return is_equal(left, right)

        if kind == TokenType.PLUS:
            if isinstance(left, float) and isinstance(right, float):
                return left + right
            if isinstance(left, str) or isinstance(right, str):
                return stringify(left) + stringify(right)
            raise LoxRuntimeError(operator, "Operands must be two numbers or at least one string.")

        self.check_number_operands(operator, left, right)

        if kind == TokenType.GREATER:
            return left > right
        if kind == TokenType.GREATER_EQUAL:
            return left >= right
        if kind == TokenType.LESS:
            return left < right
        if kind == TokenType.LESS_EQUAL:
            return left <= right
        if kind == TokenType.MINUS:
            return left - right
        if kind == TokenType.SLASH:
            return divide(left, right)
        if kind == TokenType.STAR:
            return left * right

        raise LoxError(f"unknown binary operator '{operator.lexeme}'")

    def visit_call_expr(self, expr):
        callee = self.evaluate(expr.callee)
        arguments = [self.evaluate(argument) for argument in expr.arguments]

        if not isinstance(callee, LoxCallable):
            raise LoxRuntimeError(expr.paren, "Can only call functions and classes.")

        if len(arguments) != callee.arity():
            raise LoxRuntimeError(expr.paren, f"Expected {callee.arity()} arguments but got {len(arguments)}.")

        self._call_token = expr.paren
        return callee.call(self, arguments)

    def visit_get_expr(self, expr):
        obj = self.evaluate(expr.object)
        if isinstance(obj, LoxInstance):
            return obj.get(expr.name)

        raise LoxRuntimeError(expr.name, "Only instances have properties.")

    def visit_grouping_expr(self, expr):
        return self.evaluate(expr.expression)

    def visit_literal_expr(self, expr):
        return expr.value

    def visit_logical_expr(self, expr):
        left = self.evaluate(expr.left)

        if expr.operator.type == TokenType.OR:
            if is_truthy(left):
                return left
        elif not is_truthy(left):
            return left

        return self.evaluate(expr.right)

    def visit_set_expr(self, expr):
        obj = self.evaluate(expr.object)
        if not isinstance(obj, LoxInstance):
            raise LoxRuntimeError(expr.name, "Only instances have fields.")

        value = self.evaluate(expr.value)
        obj.set(expr.name, value)
        return value

    def visit_super_expr(self, expr):
        distance = self.locals[expr]
        superclass = self.environment.get_at(distance, "super")
        # the "this" frame is always bound directly inside the "super" frame
        instance = self.environment.get_at(distance - 1, "this")

        method = superclass.find_method(expr.method.lexeme)
        if method is None:
            raise LoxRuntimeError(expr.method, f"Undefined property '{expr.method.lexeme}'.")

        return method.bind(instance)

    def visit_this_expr(self, expr):
        return self.look_up_variable(expr.keyword, expr)

    def visit_unary_expr(self, expr):
        right = self.evaluate(expr.right)

        if expr.operator.type == TokenType.BANG:
            return not is_truthy(right)
        if expr.operator.type == TokenType.MINUS:
            self.check_number_operand(expr.operator, right)
            return -right

        raise LoxError(f"unknown unary operator '{expr.operator.lexeme}'")

    def visit_variable_expr(self, expr):
        return self.look_up_variable(expr.name, expr)

    # -- helpers -- #

    def look_up_variable(self, name, expr):
        distance = self.locals.get(expr)
        if distance is not None:
            return self.environment.get_at(distance, name.lexeme)
        return self.globals.get(name)

    @staticmethod
    def check_number_operand(operator, operand):
        if not isinstance(operand, float):
            raise LoxRuntimeError(operator, "Operand must be a number.")

    @staticmethod
    def check_number_operands(operator, left, right):
        if not isinstance(left, float) or not isinstance(right, float):
            raise LoxRuntimeError(operator, "Operands must be numbers.")
