"""Abstract syntax tree for lox.

Both node families are closed: every Expr variant has exactly one visit_* method on ExprVisitor, every Stmt variant
exactly one on StmtVisitor, and both visitors are ABCs, so a visitor that misses a node kind cannot be instantiated.

Nodes compare and hash by identity (eq=False). The resolver's table is keyed on node identity, and two textually
identical references at different places in a program are different nodes.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional

from lox.core.tokens import Token


def _snake(name):
    return "".join("_" + char.lower() if char.isupper() else char for char in name).lstrip("_")


class Expr(ABC):
    """Superclass of every expression node."""

    def accept(self, visitor):
        return getattr(visitor, f"visit_{_snake(type(self).__name__)}_expr")(self)


class Stmt(ABC):
    """Superclass of every statement node."""

    def accept(self, visitor):
        return getattr(visitor, f"visit_{_snake(type(self).__name__)}_stmt")(self)


@dataclass(eq=False)
class Assign(Expr):
    name: Token
    value: Expr


@dataclass(eq=False)
class Binary(Expr):
    left: Expr
    operator: Token
    right: Expr


@dataclass(eq=False)
class Call(Expr):
    callee: Expr
    paren: Token  # closing paren, locates runtime errors
    arguments: List[Expr]


@dataclass(eq=False)
class Get(Expr):
    object: Expr
    name: Token


@dataclass(eq=False)
class Grouping(Expr):
    expression: Expr


@dataclass(eq=False)
class Literal(Expr):
    value: object


@dataclass(eq=False)
class Logical(Expr):
    left: Expr
    operator: Token
    right: Expr


@dataclass(eq=False)
class Set(Expr):
    object: Expr
    name: Token
    value: Expr


@dataclass(eq=False)
class Super(Expr):
    keyword: Token
    method: Token


@dataclass(eq=False)
class This(Expr):
    keyword: Token


@dataclass(eq=False)
class Unary(Expr):
    operator: Token
    right: Expr


@dataclass(eq=False)
class Variable(Expr):
    name: Token


@dataclass(eq=False)
class Block(Stmt):
    statements: List[Optional[Stmt]]


@dataclass(eq=False)
class Class(Stmt):
    name: Token
    superclass: Optional[Variable]
    methods: List["Function"] = field(default_factory=list)


@dataclass(eq=False)
class Expression(Stmt):
    expression: Expr


@dataclass(eq=False)
class Function(Stmt):
    name: Token
    params: List[Token]
    body: List[Optional[Stmt]]


@dataclass(eq=False)
class If(Stmt):
    condition: Expr
    then_branch: Stmt
    else_branch: Optional[Stmt]


@dataclass(eq=False)
class Print(Stmt):
    expression: Expr


@dataclass(eq=False)
class Return(Stmt):
    keyword: Token
    value: Optional[Expr]


@dataclass(eq=False)
class Var(Stmt):
    name: Token
    initializer: Optional[Expr]


@dataclass(eq=False)
class While(Stmt):
    condition: Expr
    body: Stmt


class ExprVisitor(ABC):

    @abstractmethod
    def visit_assign_expr(self, expr): ...

    @abstractmethod
    def visit_binary_expr(self, expr): ...

    @abstractmethod
    def visit_call_expr(self, expr): ...

    @abstractmethod
    def visit_get_expr(self, expr): ...

    @abstractmethod
    def visit_grouping_expr(self, expr): ...

    @abstractmethod
    def visit_literal_expr(self, expr): ...

    @abstractmethod
    def visit_logical_expr(self, expr): ...

    @abstractmethod
    def visit_set_expr(self, expr): ...

    @abstractmethod
    def visit_super_expr(self, expr): ...

    @abstractmethod
    def visit_this_expr(self, expr): ...

    @abstractmethod
    def visit_unary_expr(self, expr): ...

    @abstractmethod
    def visit_variable_expr(self, expr): ...


class StmtVisitor(ABC):

    @abstractmethod
    def visit_block_stmt(self, stmt): ...

    @abstractmethod
    def visit_class_stmt(self, stmt): ...

    @abstractmethod
    def visit_expression_stmt(self, stmt): ...

    @abstractmethod
    def visit_function_stmt(self, stmt): ...

    @abstractmethod
    def visit_if_stmt(self, stmt): ...

    @abstractmethod
    def visit_print_stmt(self, stmt): ...

    @abstractmethod
    def visit_return_stmt(self, stmt): ...

    @abstractmethod
    def visit_var_stmt(self, stmt): ...

    @abstractmethod
    def visit_while_stmt(self, stmt): ...
