"""File-based templates with a layout.

Loads templates from disk with FileSystemLoader. Each page renders to a
``Safe`` value that the layout prints as ``@inner_content``; because the page
is already safe it is embedded without being escaped twice.

Run:
    python app.py
"""

from pathlib import Path

from ashlar import Environment, FileSystemLoader
from ashlar.html import link, text_to_html

templates_dir = Path(__file__).parent / "templates"
env = Environment(
    loader=FileSystemLoader(templates_dir),
    globals={"link": link, "text_to_html": text_to_html},
)

site = {
    "site_name": "My Site",
    "nav_items": [
        {"url": "/", "label": "Home"},
        {"url": "/about", "label": "About"},
    ],
}


def render_page(name: str, title: str, **assigns: object) -> str:
    inner_content = env.render(name, title=title, **assigns)
    return str(env.render("layout.html.eex", site, title=title, inner_content=inner_content))


home_output = render_page(
    "home.html.eex",
    "Welcome",
    message="Pages are plain templates.\n\nThe layout wraps them & escapes nothing twice.",
)

about_output = render_page(
    "about.html.eex",
    "About Us",
    facts=["Templates compile to Python", "Output is <iodata>"],
)


def main() -> None:
    print("=== Home Page ===")
    print(home_output)
    print()
    print("=== About Page ===")
    print(about_output)


if __name__ == "__main__":
    main()
