#!/usr/bin/env python3
"""Demo: Using codectx as a Python library.

This shows how to use codectx programmatically, not just as a CLI tool.
"""

import os
from pathlib import Path

from codectx.context import ContextEngine
from codectx.prompts import build_prompt, detect_language


def main():
    # Point at any code directory
    project_root = Path(".")
    engine = ContextEngine(project_root)

    # 1. Project overview
    print(engine.structure())

    # 2. Find files by path
    print("--- Files matching 'context' ---")
    files = engine.find_relevant("context", max_files=5)
    for f in files:
        print(f"  {engine.relative(f)}")

    if not files:
        return

    # 3. Related files of the first hit
    target = files[0]
    print(f"\n--- Related to {engine.relative(target)} ---")
    for f in engine.find_related(target):
        print(f"  {engine.relative(f)}")

    # 4. Budgeted context, and the prompt it would go into
    engine.max_context_length = 4000
    assembled = engine.assemble(target)
    print(f"\n{assembled.summary()}")

    prompt = build_prompt(
        "explain", detect_language(target), assembled.render(), "What does this module do?"
    )
    print(f"\nPrompt is {len(prompt):,} characters ({os.path.basename(target)})")


if __name__ == "__main__":
    main()
