"""Pytest configuration and fixtures for ashlar tests."""

import pytest

from ashlar import DictLoader, Environment
from ashlar.environment import terminal
from ashlar.render_context import render_context


@pytest.fixture(autouse=True)
def _plain_diagnostics(monkeypatch):
    """Render error messages without ANSI colors, whatever the terminal."""
    monkeypatch.setattr(terminal, "_USE_COLORS", False)


@pytest.fixture
def env():
    """Create a basic ashlar Environment."""
    return Environment()


@pytest.fixture
def csrf_reads():
    """Hosts the CSRF reader fixture was called with, in call order."""
    return []


@pytest.fixture
def csrf_reader(csrf_reads):
    """A CSRF strategy returning a per-host token and recording each call."""

    def reader(host):
        csrf_reads.append(host)
        return f"token-{host or 'self'}"

    return reader


@pytest.fixture
def csrf_env(csrf_reader):
    """Environment whose templates resolve CSRF tokens through ``csrf_reader``."""
    return Environment(csrf_token_reader=csrf_reader)


@pytest.fixture
def csrf_context(csrf_reader):
    """An active render context with the recording CSRF strategy."""
    with render_context(csrf_token_reader=csrf_reader) as ctx:
        yield ctx


@pytest.fixture
def env_with_loader():
    """Create an Environment with a DictLoader and test templates."""
    loader = DictLoader(
        {
            "hello.html.eex": "Hello, <%= @name %>!",
            "list.html.eex": (
                "<ul><% for item in @items %><li><%= item %></li><% else %><li>none</li><% end %></ul>"
            ),
            "broken.html.eex": "line one\n<%= @missing %>\nline three",
        }
    )
    return Environment(loader=loader)


def render(env: Environment, source: str, /, **assigns) -> str:
    """Compile ``source`` and render it to a string."""
    return str(env.from_string(source).render(assigns))
