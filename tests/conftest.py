"""Pytest configuration and fixtures for modgraph tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Callable, Dict, Generator

import pytest


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp()).resolve()
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def write_project(temp_dir: Path) -> Callable[[Dict[str, str]], Path]:
    """Write ``{relative path: source}`` files under the temp dir and return it."""

    def _write(files: Dict[str, str]) -> Path:
        for rel_path, content in files.items():
            target = temp_dir / rel_path
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        return temp_dir

    return _write


@pytest.fixture
def node_project_path() -> Path:
    """Static project with a nested and a scoped package in node_modules."""
    return Path(__file__).parent / "fixtures" / "node_project"


@pytest.fixture
def ts_project_path() -> Path:
    """Static TypeScript project with a tsconfig.json."""
    return Path(__file__).parent / "fixtures" / "ts_project"


@pytest.fixture
def diamond_project(write_project) -> Path:
    """a -> b, a -> d, b -> c, d -> c."""
    return write_project({
        "a.js": "import './b.js';\nimport './d.js';\n",
        "b.js": "import './c.js';\nexport const b = 1;\n",
        "d.js": "import './c.js';\nexport const d = 1;\n",
        "c.js": "export const c = 1;\n",
    })


@pytest.fixture
def cycle_project(write_project) -> Path:
    """a -> b -> c -> a."""
    return write_project({
        "a.js": "import './b.js';\n",
        "b.js": "import './c.js';\n",
        "c.js": "import './a.js';\n",
    })
