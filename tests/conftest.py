"""Pytest configuration and fixtures."""

import os
from pathlib import Path

import pytest

FEATURE_GRAPH_BUILD = """\
---
feature: 01_GraphBuild
status: active
code_references:
  - src/graph/build.py
  - ./src/graph/store.py
related_features:
  - 02_Validation
interfaces:
  - graph/build
  - graph/query
test_files:
  - tests/test_build.py
---
# Graph Build

Builds the [[Reference Index]] from every [[Feature Document]].
"""

FEATURE_VALIDATION = """\
---
feature: 02_Validation
status: active
code_references:
  - src/validate.py
depends_on:
  - 01_GraphBuild
---
# Validation

Checks the [[Reference Index]] for broken links.

## [[Finding]]

**Type**: entity
**Related**: [[Reference Index]]

A single validation error or warning.
"""

INTERFACE_01_02 = """\
---
from: 01_GraphBuild
to: 02_Validation
type: api
shared_types:
  - 01--02_01--03
---
# Graph Build -> Validation
"""

SHARED_TYPE = """\
---
type: shared
status: active
interfaces:
  - 01--02
  - 01--03
---
# Shared graph types
"""

GLOSSARY = """\
# Glossary

## [[Reference Index]]

**Type**: entity
**Aliases**: refindex

Persisted snapshot of the documentation graph.

## [[Feature Document]]

**Type**: entity
**Parent**: [[Reference Index]]

A markdown document describing one feature.
"""

SOURCES = {
    "src/graph/build.py": "from .store import save\n\n\ndef build():\n    return save({})\n",
    "src/graph/store.py": "import json\n\n\ndef save(data):\n    return json.dumps(data)\n",
    "src/validate.py": "from .graph.build import build\n\n\ndef validate():\n    return build()\n",
    "tests/test_build.py": "def test_build():\n    assert True\n",
}


def write(root: Path, rel: str, content: str) -> Path:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def write_file():
    """Write ``content`` to ``root/rel`` creating parent directories."""
    return write


@pytest.fixture
def sample_project(tmp_path):
    """
    Small but complete documentation project.

    Two features (01 documents src/graph/*, 02 documents src/validate.py
    which imports 01's code), one interface pair with a shared type, and a
    global glossary plus one document-scoped term. It validates without
    errors; warnings (unused/isolated terms, unused interfaces) are expected.
    """
    write(tmp_path, "tasks/features/01_GraphBuild.md", FEATURE_GRAPH_BUILD)
    write(tmp_path, "tasks/features/02_Validation.md", FEATURE_VALIDATION)
    write(tmp_path, "tasks/interfaces/01--02.md", INTERFACE_01_02)
    write(tmp_path, "tasks/shared/01--02_01--03.md", SHARED_TYPE)
    write(tmp_path, "docs/GLOSSARY.md", GLOSSARY)
    for rel, content in SOURCES.items():
        write(tmp_path, rel, content)
    return tmp_path


@pytest.fixture
def clean_env(monkeypatch):
    """Remove DOCGRAPH_* configuration variables from the environment."""
    for key in list(os.environ):
        if key.startswith("DOCGRAPH_") and not key.startswith("DOCGRAPH_LOG"):
            monkeypatch.delenv(key, raising=False)
    return monkeypatch
