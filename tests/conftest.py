"""
Shared fixtures for the dauns test suite.

Provides test fixtures for:
- A sample multi-language workspace
- Deterministic scheduling
- Isolation from the user's home config, DAUNS_* variables and logging setup
"""

import logging
import os
from pathlib import Path

import pytest

from dauns.utils.scheduler import ManualScheduler

SAMPLE_VUE = """<template>
  <div>
    <input v-model="query" />
    <li v-for="item in items">{{ item }}</li>
  </div>
</template>
<script>
const query = "";
let items = [];
</script>
"""


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path_factory):
    """Keep tests away from ~/.dauns, DAUNS_* variables and leftover log handlers."""
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("HOME", str(home))
    for name in list(os.environ):
        if name.startswith("DAUNS_"):
            monkeypatch.delenv(name)

    yield

    logger = logging.getLogger("dauns")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture()
def sample_vue() -> str:
    return SAMPLE_VUE


@pytest.fixture()
def manual_scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture()
def sample_workspace(tmp_path) -> Path:
    """Workspace with supported, unsupported and skipped-directory files."""
    root = tmp_path / "workspace"
    root.mkdir()

    (root / "app.js").write_text(
        'const greeting = "hello";\n'
        "let count = 0;\n"
        "count = count + 1;\n"
        "console.log(greeting);\n"
    )
    (root / "util.py").write_text("ratio = 0.5\nname = 'dauns'\n")
    (root / "data.json").write_text('{"server": {"port": 8080}, "debug": true}')
    (root / "notes.txt").write_text("const ignored = 1;\n")

    src = root / "src"
    src.mkdir()
    (src / "component.vue").write_text(SAMPLE_VUE)
    (src / "settings.yaml").write_text("name: demo\nretries: 3\n")

    hidden = root / "node_modules" / "lib"
    hidden.mkdir(parents=True)
    (hidden / "index.js").write_text("const hidden = 1;\n")

    dist = root / "dist"
    dist.mkdir()
    (dist / "bundle.js").write_text("var bundled = 1;\n")

    return root


@pytest.fixture()
def expected_workspace_files(sample_workspace) -> set[str]:
    return {
        str(sample_workspace / "app.js"),
        str(sample_workspace / "util.py"),
        str(sample_workspace / "data.json"),
        str(sample_workspace / "src" / "component.vue"),
        str(sample_workspace / "src" / "settings.yaml"),
    }
