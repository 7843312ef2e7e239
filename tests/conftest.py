"""
Test configuration and fixtures for the robotlang test suite.
"""
import io
import sys
import pytest
from pathlib import Path

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

from robotlang.config import SimulationConfig
from robotlang.display import RecordingDisplay
from robotlang.runtime import Runtime


@pytest.fixture(scope="session")
def examples_dir() -> Path:
    """Return the path to the bundled example programs."""
    return Path(__file__).resolve().parents[1] / "examples"


@pytest.fixture
def display() -> RecordingDisplay:
    return RecordingDisplay()


@pytest.fixture
def make_runtime(display):
    """Build a runtime with in-memory streams and a recording display."""
    def _make(stdin: str = "", **kwargs) -> Runtime:
        kwargs.setdefault("config", SimulationConfig())
        kwargs.setdefault("display", display)
        return Runtime(stdin=io.StringIO(stdin), stdout=io.StringIO(), **kwargs)
    return _make


@pytest.fixture
def run_source(make_runtime):
    """Load and run a program, returning the runtime and everything it wrote."""
    def _run(src: str, stdin: str = "", **kwargs):
        rt = make_runtime(stdin, **kwargs)
        rt.load(src)
        rt.run()
        return rt, rt.stdout.getvalue()
    return _run
