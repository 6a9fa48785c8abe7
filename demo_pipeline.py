#!/usr/bin/env python3
"""
Complete Pipeline Demo: Source → Tokens → AST → Analysis → Evaluation

Shows the full workflow:
1. Tokenize Selve source text
2. Parse it into a syntax tree and dump it as YAML
3. Analyze the program
4. Evaluate it in a fresh global environment
"""

from selve.analyzer import analyze_program
from selve.environment import create_global_environment
from selve.interpreter import Interpreter
from selve.lexer import tokenize
from selve.parser import parse
from selve.serialization import program_to_yaml
from selve.values import display

SOURCE = """
// build a counter with a closure
fn make_counter(start) {
    let count = start;
    fn next() {
        count = count + 1;
        count
    }
    next
}

const counter = make_counter(40);
counter();
let point = { x: counter(), y: 7 / 2 };
print(point, point.x * point.y);
"""


def main():
    print("=" * 80)
    print("COMPLETE PIPELINE DEMO: Source → Tokens → AST → Analysis → Evaluation")
    print("=" * 80)

    # =========================================================================
    # STEP 1: Tokenize
    # =========================================================================
    print("\n1. TOKENIZING...")
    tokens = tokenize(SOURCE)
    print(f"   ✓ Tokens: {len(tokens)}")
    for token in tokens[:8]:
        print(f"      {token.type.name:<16} {token.value!r}")
    print("      ...")

    # =========================================================================
    # STEP 2: Parse
    # =========================================================================
    print("\n2. PARSING...")
    program = parse(SOURCE)
    print(f"   ✓ Top-level statements: {len(program.body)}")
    yaml_text = program_to_yaml(program)
    print(f"   ✓ YAML dump: {len(yaml_text.splitlines())} lines")

    # =========================================================================
    # STEP 3: Analyze
    # =========================================================================
    print("\n3. ANALYZING...")
    report = analyze_program(program)
    print(f"   ✓ Declared names: {report.declared_names}")
    print(f"   ✓ Undefined names: {sorted(report.undefined_names)}")
    print(f"   ✓ Max expression depth: {report.max_expression_depth}")
    for warning in report.warnings:
        print(f"      - {warning}")

    # =========================================================================
    # STEP 4: Evaluate
    # =========================================================================
    print("\n4. EVALUATING...")
    env = create_global_environment()
    result = Interpreter().execute(program, env)
    print(f"   ✓ Result: {display(result)}")
    print(f"   ✓ Global names: {env.names()}")

    print("\n" + "=" * 80)
    print("DEMO COMPLETE")
    print("=" * 80)


if __name__ == "__main__":
    main()
