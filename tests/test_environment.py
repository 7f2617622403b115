"""Tests for Environment, the template cache and loaders."""

from __future__ import annotations

import logging

import pytest

from ashlar import (
    ChoiceLoader,
    DictLoader,
    Environment,
    FileSystemLoader,
    Safe,
    Template,
    TemplateNotFoundError,
    TemplateSyntaxError,
)


class TestEnvironment:
    def test_from_string(self, env):
        template = env.from_string("Hi <%= @who %>")
        assert isinstance(template, Template)
        assert template.name is None
        assert str(template.render(who="<Ann>")) == "Hi &lt;Ann&gt;"

    def test_from_string_with_name(self, env):
        template = env.from_string("x", name="inline.html.eex")
        assert template.name == "inline.html.eex"
        assert repr(template) == "<Template inline.html.eex>"

    def test_repr_inline(self, env):
        assert repr(env.from_string("x")) == "<Template (inline)>"

    def test_render_returns_safe(self, env_with_loader):
        result = env_with_loader.render("hello.html.eex", name="World")
        assert isinstance(result, Safe)
        assert str(result) == "Hello, World!"

    def test_render_with_mapping(self, env_with_loader):
        assert str(env_with_loader.render("hello.html.eex", {"name": "<b>"})) == "Hello, &lt;b&gt;!"

    def test_loop_template(self, env_with_loader):
        assert str(env_with_loader.render("list.html.eex", items=["a", "b"])) == (
            "<ul><li>a</li><li>b</li></ul>"
        )
        assert str(env_with_loader.render("list.html.eex", items=[])) == "<ul><li>none</li></ul>"

    def test_syntax_errors_surface_on_load(self):
        env = Environment(loader=DictLoader({"bad.html.eex": "a\n<%= 1 +"}))
        with pytest.raises(TemplateSyntaxError) as exc_info:
            env.get_template("bad.html.eex")
        assert exc_info.value.name == "bad.html.eex"

    def test_negative_cache_size(self):
        with pytest.raises(ValueError, match="cache_size must be >= 0"):
            Environment(cache_size=-1)

    def test_globals_are_visible(self):
        env = Environment(globals={"shout": lambda s: s.upper()})
        assert str(env.from_string("<%= shout(@word) %>").render(word="hi")) == "HI"

    def test_globals_are_copied(self):
        names = {"x": 1}
        env = Environment(globals=names)
        names["x"] = 2
        assert env.globals == {"x": 1}

    def test_builtins_are_available(self, env):
        assert str(env.from_string("<%= len(@items) %>").render(items=[1, 2])) == "2"

    def test_compile_is_logged(self, env, caplog):
        with caplog.at_level(logging.DEBUG, logger="ashlar.environment.core"):
            env.from_string("x", name="logged.html.eex")
        assert "Compiled template logged.html.eex" in caplog.text


class TestTemplateCache:
    def test_get_template_is_cached(self, env_with_loader):
        first = env_with_loader.get_template("hello.html.eex")
        assert env_with_loader.get_template("hello.html.eex") is first
        assert env_with_loader.cache_info() == {"size": 1, "max_size": 400}

    def test_from_string_is_not_cached(self, env):
        env.from_string("x")
        assert env.cache_info()["size"] == 0

    def test_clear_cache(self, env_with_loader):
        first = env_with_loader.get_template("hello.html.eex")
        env_with_loader.clear_cache()
        assert env_with_loader.cache_info()["size"] == 0
        assert env_with_loader.get_template("hello.html.eex") is not first

    def test_least_recently_used_is_evicted(self):
        env = Environment(loader=DictLoader({"a": "a", "b": "b", "c": "c"}), cache_size=2)
        a = env.get_template("a")
        env.get_template("b")
        env.get_template("a")
        env.get_template("c")
        assert env.cache_info() == {"size": 2, "max_size": 2}
        assert env.get_template("a") is a
        assert env.cache_info()["size"] == 2

    def test_cache_disabled(self):
        env = Environment(loader=DictLoader({"a": "a"}), cache_size=0)
        assert env.get_template("a") is not env.get_template("a")
        assert env.cache_info() == {"size": 0, "max_size": 0}

    def test_cache_hits_are_logged(self, env_with_loader, caplog):
        env_with_loader.get_template("hello.html.eex")
        with caplog.at_level(logging.DEBUG, logger="ashlar.environment.core"):
            env_with_loader.get_template("hello.html.eex")
        assert "Template cache hit: hello.html.eex" in caplog.text


class TestDictLoader:
    def test_no_loader(self, env):
        with pytest.raises(TemplateNotFoundError, match="no loader configured"):
            env.get_template("page.html.eex")

    def test_close_match_is_suggested(self, env_with_loader):
        with pytest.raises(TemplateNotFoundError) as exc_info:
            env_with_loader.get_template("helo.html.eex")
        assert "Did you mean 'hello.html.eex'?" in str(exc_info.value)

    def test_available_names_are_listed(self, env_with_loader):
        with pytest.raises(TemplateNotFoundError, match="Available: broken.html.eex"):
            env_with_loader.get_template("zzz")

    def test_filename_is_none(self):
        assert DictLoader({"a": "src"}).get_source("a") == ("src", None)

    def test_list_templates(self):
        assert DictLoader({"b": "", "a": ""}).list_templates() == ["a", "b"]


class TestFileSystemLoader:
    def test_loads_from_directory(self, tmp_path):
        (tmp_path / "users").mkdir()
        (tmp_path / "users" / "show.html.eex").write_text("<%= @name %>")
        env = Environment(loader=FileSystemLoader(tmp_path))
        template = env.get_template("users/show.html.eex")
        assert template.filename == str(tmp_path / "users" / "show.html.eex")
        assert str(template.render(name="Ann")) == "Ann"

    def test_first_directory_wins(self, tmp_path):
        custom, default = tmp_path / "custom", tmp_path / "default"
        custom.mkdir()
        default.mkdir()
        (custom / "nav.html.eex").write_text("custom")
        (default / "nav.html.eex").write_text("default")
        (default / "footer.html.eex").write_text("footer")
        loader = FileSystemLoader([custom, default])
        assert loader.get_source("nav.html.eex")[0] == "custom"
        assert loader.get_source("footer.html.eex")[0] == "footer"

    def test_missing(self, tmp_path):
        with pytest.raises(TemplateNotFoundError, match="not found in"):
            FileSystemLoader(tmp_path).get_source("missing.html.eex")

    def test_paths_outside_the_directory_are_not_found(self, tmp_path):
        root = tmp_path / "templates"
        root.mkdir()
        (tmp_path / "secret.html.eex").write_text("secret")
        with pytest.raises(TemplateNotFoundError):
            FileSystemLoader(root).get_source("../secret.html.eex")

    def test_list_templates(self, tmp_path):
        (tmp_path / "a.html.eex").write_text("")
        (tmp_path / "sub").mkdir()
        (tmp_path / "sub" / "b.html.heex").write_text("")
        (tmp_path / "notes.txt").write_text("")
        assert FileSystemLoader(tmp_path).list_templates() == ["a.html.eex", "sub/b.html.heex"]

    def test_syntax_error_reports_filename(self, tmp_path):
        (tmp_path / "bad.html.eex").write_text("<% end %>")
        env = Environment(loader=FileSystemLoader(tmp_path))
        with pytest.raises(TemplateSyntaxError) as exc_info:
            env.get_template("bad.html.eex")
        assert str(tmp_path / "bad.html.eex") in str(exc_info.value)


class TestChoiceLoader:
    def test_first_match_wins(self):
        custom = DictLoader({"nav": "custom"})
        default = DictLoader({"nav": "default", "footer": "footer"})
        env = Environment(loader=ChoiceLoader([custom, default]))
        assert str(env.render("nav")) == "custom"
        assert str(env.render("footer")) == "footer"

    def test_none_match(self):
        loader = ChoiceLoader([DictLoader({}), DictLoader({})])
        with pytest.raises(TemplateNotFoundError, match="not found in any of 2 loaders"):
            loader.get_source("x")

    def test_list_templates(self):
        loader = ChoiceLoader([DictLoader({"b": "", "a": ""}), DictLoader({"a": "", "c": ""})])
        assert loader.list_templates() == ["a", "b", "c"]
