"""Lox interpreter.

Lox is a small dynamically-typed scripting language with first-class functions, closures and single-inheritance
classes. Source text is executed directly by walking its syntax tree; nothing is compiled. Basic program flow:
    1. Scanner: turns source text into a flat list of tokens (lox/core/lexical.py)
    2. Parser: builds statement and expression trees by recursive descent, recovering from syntax errors at statement
       boundaries (lox/core/parser.py)
    3. Resolver: static pass that binds every local variable reference to the scope declaring it and rejects misuse
       of `this`, `super` and `return` (lox/core/resolver.py)
    4. Interpreter: walks the trees, looking resolved variables up in a chain of environments
       (lox/core/interpreter.py)

lox/lang holds what surrounds the core: error reporting, number semantics, sessions and the interactive shell.
"""

__version__ = "1.0.0"
