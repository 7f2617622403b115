"""Template rendering benchmarks: ashlar vs Jinja2 (autoescaped).

Both engines render the same pages from benchmarks/conftest.py. Ashlar
results are converted to ``str`` so the comparison includes flattening the
iodata, which Jinja2 does while rendering.

Run with: pytest benchmarks/test_benchmark_render.py --benchmark-only
Compare: pytest benchmarks/test_benchmark_render.py --benchmark-compare
"""

from __future__ import annotations

import pytest
from jinja2 import Environment as Jinja2Environment
from pytest_benchmark.fixture import BenchmarkFixture

from ashlar import Environment as AshlarEnvironment
from benchmarks.fixtures import ASHLAR_TEMPLATES, JINJA2_TEMPLATES


def _render_str(template, **assigns):
    return str(template.render(assigns))


@pytest.mark.benchmark(group="render:minimal")
def test_render_minimal_ashlar(benchmark: BenchmarkFixture, ashlar_env: AshlarEnvironment) -> None:
    template = ashlar_env.get_template("minimal.html.eex")
    benchmark(_render_str, template, name="Benchmark <&>")


@pytest.mark.benchmark(group="render:minimal")
def test_render_minimal_jinja2(benchmark: BenchmarkFixture, jinja2_env: Jinja2Environment) -> None:
    template = jinja2_env.get_template("minimal.html.eex")
    benchmark(template.render, name="Benchmark <&>")


@pytest.mark.benchmark(group="render:list")
def test_render_list_ashlar(
    benchmark: BenchmarkFixture,
    ashlar_env: AshlarEnvironment,
    list_context: dict[str, object],
) -> None:
    template = ashlar_env.get_template("list.html.eex")
    benchmark(_render_str, template, **list_context)


@pytest.mark.benchmark(group="render:list")
def test_render_list_jinja2(
    benchmark: BenchmarkFixture,
    jinja2_env: Jinja2Environment,
    list_context: dict[str, object],
) -> None:
    template = jinja2_env.get_template("list.html.eex")
    benchmark(template.render, **list_context)


@pytest.mark.benchmark(group="render:list-iodata")
def test_render_list_iodata_ashlar(
    benchmark: BenchmarkFixture,
    ashlar_env: AshlarEnvironment,
    list_context: dict[str, object],
) -> None:
    """Ashlar without flattening: the cost callers pay when streaming iodata."""
    template = ashlar_env.get_template("list.html.eex")
    benchmark(template.render, list_context)


@pytest.mark.benchmark(group="render:page")
def test_render_page_ashlar(
    benchmark: BenchmarkFixture,
    ashlar_env: AshlarEnvironment,
    page_context: dict[str, object],
    environment_metadata: dict[str, object],
) -> None:
    template = ashlar_env.get_template("page.html.eex")
    benchmark(_render_str, template, **page_context)


@pytest.mark.benchmark(group="render:page")
def test_render_page_jinja2(
    benchmark: BenchmarkFixture,
    jinja2_env: Jinja2Environment,
    page_context: dict[str, object],
) -> None:
    template = jinja2_env.get_template("page.html.eex")
    benchmark(template.render, **page_context)


@pytest.mark.benchmark(group="compile:page")
def test_compile_page_ashlar(benchmark: BenchmarkFixture) -> None:
    env = AshlarEnvironment()
    benchmark(env.from_string, ASHLAR_TEMPLATES["page.html.eex"])


@pytest.mark.benchmark(group="compile:page")
def test_compile_page_jinja2(benchmark: BenchmarkFixture) -> None:
    env = Jinja2Environment(autoescape=True)
    benchmark(env.from_string, JINJA2_TEMPLATES["page.html.eex"])
