"""
Selve Language Package

A small toy language: integers, objects, `let`/`const` bindings,
functions, field access, reassignment and `print`.

PIPELINE:
---------
    source text
        -> lexer.tokenize        (tokens)
        -> parser.Parser         (ast_nodes.Program)
        -> interpreter.Interpreter  (values.RuntimeValue)

Side channels consume the same Program unchanged:
    - analyzer.analyze_program   (static report)
    - serialization              (JSON/YAML dumps)
"""

__version__ = "0.1.0"
