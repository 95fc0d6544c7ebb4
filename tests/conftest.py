"""Shared test fixtures for codectx."""

from __future__ import annotations

from pathlib import Path

import pytest

from codectx.config import ContextConfig
from codectx.context.engine import ContextEngine


@pytest.fixture
def tmp_project(tmp_path: Path) -> Path:
    """Create a temporary project with Go, JS/TS and Python sources."""
    # Go: a.go imports the local package "./b"
    (tmp_path / "a.go").write_text('package main\n\nimport "./b"\n\nfunc main() {\n\tB()\n}\n')
    (tmp_path / "b.go").write_text("package main\n\nfunc B() {}\n")

    auth = tmp_path / "auth"
    auth.mkdir()
    (auth / "login.go").write_text("package auth\n\nfunc Login() bool { return true }\n")

    billing = tmp_path / "billing"
    billing.mkdir()
    (billing / "pay.go").write_text("package billing\n\nfunc Pay() {}\n")

    # JS/TS
    web = tmp_path / "web"
    web.mkdir()
    (web / "app.js").write_text(
        "import helper from './helpers';\n"
        "const config = require('./config');\n"
        "import React from 'react';\n"
        "\n"
        "export default function app() { return helper(config); }\n"
    )
    (web / "helpers.ts").write_text("export default function helper(x) { return x; }\n")
    (web / "config.js").write_text("module.exports = { debug: true };\n")
    (web / "app.css").write_text("body { margin: 0; }\n")

    # Python package
    pkg = tmp_path / "pkg"
    pkg.mkdir()
    (pkg / "__init__.py").write_text('"""Package."""\n')
    (pkg / "core.py").write_text(
        "from .models import User\n"
        "import os\n"
        "\n"
        "\n"
        "def run():\n"
        "    return User()\n"
    )
    (pkg / "models.py").write_text("class User:\n    pass\n")

    # Things that must never show up
    node_modules = tmp_path / "node_modules"
    (node_modules / "left-pad").mkdir(parents=True)
    (node_modules / "left-pad" / "index.js").write_text("module.exports = 1;\n")
    git = tmp_path / ".git"
    git.mkdir()
    (git / "HEAD").write_text("ref: refs/heads/main\n")
    (tmp_path / "debug.log").write_text("noise\n")
    (tmp_path / "stale.pyc").write_bytes(b"\x00\x01")

    return tmp_path


@pytest.fixture
def engine(tmp_project: Path) -> ContextEngine:
    """A context engine over tmp_project with host security detection disabled."""
    return ContextEngine(tmp_project, ContextConfig(security_distro=False))
