"""Benchmark pages, written once per engine."""

from __future__ import annotations

ASHLAR_TEMPLATES = {
    "minimal.html.eex": "<p>Hello, <%= @name %>!</p>",
    "list.html.eex": (
        "<ul>\n"
        "<% for item in @items %>\n"
        '  <li class="<%= item["kind"] %>"><%= item["title"] %></li>\n'
        "<% end %>\n"
        "</ul>\n"
    ),
    "page.html.eex": (
        "<html><head><title><%= @title %></title></head><body>\n"
        "<% if @user %>\n"
        "  <p>Signed in as <%= @user['name'] %></p>\n"
        "<% else %>\n"
        "  <p>Please sign in.</p>\n"
        "<% end %>\n"
        "<table>\n"
        "<% for row in @rows %>\n"
        "  <tr><% for cell in row %><td><%= cell %></td><% end %></tr>\n"
        "<% end %>\n"
        "</table>\n"
        "</body></html>\n"
    ),
}

JINJA2_TEMPLATES = {
    "minimal.html.eex": "<p>Hello, {{ name }}!</p>",
    "list.html.eex": (
        "<ul>\n"
        "{% for item in items %}\n"
        '  <li class="{{ item["kind"] }}">{{ item["title"] }}</li>\n'
        "{% endfor %}\n"
        "</ul>\n"
    ),
    "page.html.eex": (
        "<html><head><title>{{ title }}</title></head><body>\n"
        "{% if user %}\n"
        "  <p>Signed in as {{ user['name'] }}</p>\n"
        "{% else %}\n"
        "  <p>Please sign in.</p>\n"
        "{% endif %}\n"
        "<table>\n"
        "{% for row in rows %}\n"
        "  <tr>{% for cell in row %}<td>{{ cell }}</td>{% endfor %}</tr>\n"
        "{% endfor %}\n"
        "</table>\n"
        "</body></html>\n"
    ),
}
