"""
Tests for the public interface of package arbiter
"""
import importlib
import subprocess
import sys

import pytest

import arbiter
from arbiter.base import EstimatorRegistry


@pytest.mark.parametrize(  # type: ignore
    ["module_name", "symbol"],
    [
        ("arbiter.base", "EstimatorRegistry"),
        ("arbiter.data", "Labeled"),
        ("arbiter.ensemble", "CommitteeMachine"),
        ("arbiter.errors", "ConfigurationError"),
        ("arbiter.learners", "DecisionTreeClassifier"),
        ("arbiter.persistence", "FilesystemPersister"),
        ("arbiter.selection", "GridSearch"),
        ("arbiter.validation", "KFold"),
    ],
)
def test_import(module_name: str, symbol: str) -> None:
    module = importlib.import_module(module_name)
    assert isinstance(getattr(module, symbol), type)


def test_constants() -> None:
    import arbiter.learners
    import arbiter.validation

    assert isinstance(arbiter.learners.REGISTRY, EstimatorRegistry)
    assert "DecisionTreeClassifier" in arbiter.learners.REGISTRY

    assert callable(arbiter.validation.SCORERS["accuracy"])
    assert arbiter.validation.SCORERS["r2"]([1.0, 2.0], [1.0, 2.0]) == 1.0

    assert arbiter.__version__ == "1.0.0"


def test_docstrings_inherited() -> None:
    # importing the package logs no unmatched docstring inheritance
    completed = subprocess.run(
        [
            sys.executable,
            "-c",
            "import logging; logging.basicConfig(level=logging.DEBUG); "
            "import arbiter.ensemble, arbiter.persistence, arbiter.selection",
        ],
        capture_output=True,
        text=True,
        check=True,
    )
    assert "no match found" not in completed.stderr
