"""Static scope resolution. Runs once over the whole AST before it is interpreted and

    1. records, for every local variable reference (Variable, Assign, This, Super), how many scopes lie between the
       reference and the declaration it refers to. References found in no scope are globals and get no entry.
    2. reports scope misuse: reading a local in its own initializer, declaring a name twice in one block, `return`
       outside a function, returning a value from an initializer, `this`/`super` outside a class, `super` without a
       superclass and a class inheriting from itself.

Resolution only records and reports: it never stops at the first error.

Class bodies are resolved inside two extra scopes, one binding "super" (only for subclasses) and inside it one
binding "this". The interpreter builds exactly the same frames at run time, so the distances line up.

Source: https://craftinginterpreters.com/resolving-and-binding.html
"""

from enum import Enum, auto

from lox.core import ast


class FunctionType(Enum):
    NONE = auto()
    FUNCTION = auto()
    INITIALIZER = auto()
    METHOD = auto()


class ClassType(Enum):
    NONE = auto()
    CLASS = auto()
    SUBCLASS = auto()


class Resolver(ast.ExprVisitor, ast.StmtVisitor):

    def __init__(self, interpreter, error_handler):
        self.interpreter = interpreter
        self.error_handler = error_handler

        self.scopes = []  # stack of dicts of name: whether its initializer has been resolved
        self.current_function = FunctionType.NONE
        self.current_class = ClassType.NONE

    def resolve(self, statements):
        """Resolves a program. Returns the interpreter's resolution table."""
        for statement in statements:
            self._resolve(statement)
        return self.interpreter.locals

    def resolve_expression(self, expr):
        self._resolve(expr)
        return self.interpreter.locals

    def _resolve(self, node):
        if node is not None:  # statements that failed to parse
            node.accept(self)

    # -- statements -- #

    def visit_block_stmt(self, stmt):
        self.begin_scope()
        self.resolve(stmt.statements)
        self.end_scope()

    def visit_class_stmt(self, stmt):
        enclosing_class = self.current_class
        self.current_class = ClassType.CLASS

        self.declare(stmt.name)
        self.define(stmt.name)

        if stmt.superclass is not None:
            if stmt.name.lexeme == stmt.superclass.name.lexeme:
                self.error_handler.error_at(stmt.superclass.name, "A class can't inherit from itself.")

            self.current_class = ClassType.SUBCLASS
            self._resolve(stmt.superclass)

            self.begin_scope()
            self.scopes[-1]["super"] = True

        self.begin_scope()
        self.scopes[-1]["this"] = True

        for method in stmt.methods:
            kind = FunctionType.INITIALIZER if method.name.lexeme == "init" else FunctionType.METHOD
            self.resolve_function(method, kind)

        self.end_scope()

        if stmt.superclass is not None:
            self.end_scope()

        self.current_class = enclosing_class

    def visit_expression_stmt(self, stmt):
        self._resolve(stmt.expression)

    def visit_function_stmt(self, stmt):
        # defined before the body so the function can refer to itself
        self.declare(stmt.name)
        self.define(stmt.name)
        self.resolve_function(stmt, FunctionType.FUNCTION)

    def visit_if_stmt(self, stmt):
        self._resolve(stmt.condition)
        self._resolve(stmt.then_branch)
        self._resolve(stmt.else_branch)

    def visit_print_stmt(self, stmt):
        self._resolve(stmt.expression)

    def visit_return_stmt(self, stmt):
        if self.current_function == FunctionType.NONE:
            self.error_handler.error_at(stmt.keyword, "Can't return from top-level code.")

        if stmt.value is not None:
            if self.current_function == FunctionType.INITIALIZER:
                self.error_handler.error_at(stmt.keyword, "Can't return a value from an initializer.")
            self._resolve(stmt.value)

    def visit_var_stmt(self, stmt):
        self.declare(stmt.name)
        self._resolve(stmt.initializer)
        self.define(stmt.name)

    def visit_while_stmt(self, stmt):
        self._resolve(stmt.condition)
        self._resolve(stmt.body)

    # -- expressions -- #

    def visit_assign_expr(self, expr):
        self._resolve(expr.value)
        self.resolve_local(expr, expr.name)

    def visit_binary_expr(self, expr):
        self._resolve(expr.left)
        self._resolve(expr.right)

    def visit_call_expr(self, expr):
        self._resolve(expr.callee)
        for argument in expr.arguments:
            self._resolve(argument)

    def visit_get_expr(self, expr):
        # properties are looked up dynamically, only the object is resolved
        self._resolve(expr.object)

    def visit_grouping_expr(self, expr):
        self._resolve(expr.expression)

    def visit_literal_expr(self, expr):
        pass

    def visit_logical_expr(self, expr):
        self._resolve(expr.left)
        self._resolve(expr.right)

    def visit_set_expr(self, expr):
        self._resolve(expr.value)
        self._resolve(expr.object)

    def visit_super_expr(self, expr):
        if self.current_class == ClassType.NONE:
            self.error_handler.error_at(expr.keyword, "Can't use 'super' outside of a class.")
        elif self.current_class != ClassType.SUBCLASS:
            self.error_handler.error_at(expr.keyword, "Can't use 'super' in a class with no superclass.")

        self.resolve_local(expr, expr.keyword)

    def visit_this_expr(self, expr):
        if self.current_class == ClassType.NONE:
            self.error_handler.error_at(expr.keyword, "Can't use 'this' outside of a class.")
            return

        self.resolve_local(expr, expr.keyword)

    def visit_unary_expr(self, expr):
        self._resolve(expr.right)

    def visit_variable_expr(self, expr):
        if self.scopes and self.scopes[-1].get(expr.name.lexeme) is False:
            self.error_handler.error_at(expr.name, "Can't read local variable in its own initializer.")

        self.resolve_local(expr, expr.name)

    # -- scopes -- #

    def resolve_local(self, expr, name):
        """Records the distance from the innermost scope to the one declaring name. Globals are not recorded."""
        for distance, scope in enumerate(reversed(self.scopes)):
            if name.lexeme in scope:
                self.interpreter.resolve(expr, distance)
                return

    def resolve_function(self, function, kind):
        enclosing_function = self.current_function
        self.current_function = kind

        self.begin_scope()
        for param in function.params:
            self.declare(param)
            self.define(param)
        self.resolve(function.body)
        self.end_scope()

        self.current_function = enclosing_function

    def begin_scope(self):
        self.scopes.append({})

    def end_scope(self):
        self.scopes.pop()

    def declare(self, name):
        """Adds name to the innermost scope as declared but not yet usable. Globals are not tracked."""
        if not self.scopes:
            return

        scope = self.scopes[-1]
        if name.lexeme in scope:
            self.error_handler.error_at(name, "Already a variable with this name in this scope.")
        scope[name.lexeme] = False

    def define(self, name):
        if not self.scopes:
            return
        self.scopes[-1][name.lexeme] = True
