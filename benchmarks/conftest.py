from __future__ import annotations

import importlib.metadata as importlib_metadata
import json
import os
import platform
import sys
from pathlib import Path

import pytest
from jinja2 import DictLoader as Jinja2DictLoader
from jinja2 import Environment as Jinja2Environment

from ashlar import DictLoader as AshlarDictLoader
from ashlar import Environment as AshlarEnvironment
from benchmarks.fixtures import ASHLAR_TEMPLATES, JINJA2_TEMPLATES

BASE_DIR = Path(__file__).resolve().parent
BENCHMARK_OUTPUT_DIR = BASE_DIR.parent / ".benchmarks"


def _version(dist: str) -> str:
    try:
        return importlib_metadata.version(dist)
    except importlib_metadata.PackageNotFoundError:
        return "unknown"


def collect_environment_metadata() -> dict[str, object]:
    """Capture reproducibility metadata for each benchmark run."""
    return {
        "python": {
            "version": platform.python_version(),
            "implementation": platform.python_implementation(),
            "executable": sys.executable,
        },
        "os": {
            "system": platform.system(),
            "release": platform.release(),
            "machine": platform.machine(),
        },
        "cpu": {
            "processor": platform.processor(),
            "count": os.cpu_count(),
        },
        "ashlar": _version("ashlar"),
        "jinja2": _version("jinja2"),
    }


@pytest.fixture(scope="session")
def environment_metadata() -> dict[str, object]:
    """Write environment metadata to .benchmarks for ingestion."""
    metadata = collect_environment_metadata()
    BENCHMARK_OUTPUT_DIR.mkdir(exist_ok=True)
    (BENCHMARK_OUTPUT_DIR / "environment.json").write_text(json.dumps(metadata, indent=2))
    return metadata


@pytest.fixture(scope="session")
def ashlar_env() -> AshlarEnvironment:
    return AshlarEnvironment(loader=AshlarDictLoader(ASHLAR_TEMPLATES))


@pytest.fixture(scope="session")
def jinja2_env() -> Jinja2Environment:
    return Jinja2Environment(loader=Jinja2DictLoader(JINJA2_TEMPLATES), autoescape=True)


@pytest.fixture(scope="session")
def list_context() -> dict[str, object]:
    return {
        "items": [{"kind": "even" if i % 2 else "odd", "title": f"Item <{i}> & more"} for i in range(1000)]
    }


@pytest.fixture(scope="session")
def page_context() -> dict[str, object]:
    return {
        "title": "Report <Q3>",
        "user": {"name": "Ann & Bob"},
        "rows": [[f"r{r}c{c}", r * c, None] for c in range(10) for r in range(10)],
    }
