"""Forms with CSRF protection.

The environment carries a CSRF token strategy; form helpers ask the current
render context for a token, so templates never pass one around. Submitted
params are re-displayed, escaped, when the form is shown again.

Run:
    python app.py
"""

import secrets

from ashlar import Environment
from ashlar import html as helpers

SESSION_TOKENS: dict[str | None, str] = {}


def read_csrf_token(host: str | None) -> str:
    """Per-host tokens, as a session store would keep them."""
    return SESSION_TOKENS.setdefault(host, secrets.token_urlsafe(16))


env = Environment(
    csrf_token_reader=read_csrf_token,
    globals={name: getattr(helpers, name) for name in helpers.__all__},
)

template = env.from_string(
    """\
<%= f := form_for(@params, "/users", as_="user") %>
  <%= label(f, "name") %>
  <%= text_input(f, "name") %>
  <%= select(f, "role", [("Admin", "admin"), ("Member", "member")], prompt="Choose a role") %>
  <%= checkbox(f, "newsletter") %>
  <%= submit("Sign up") %>
</form>
<%= button("Delete account", to="/account", method="delete") %>
"""
)

params = {"user": {"name": "<Ann>", "role": "member", "newsletter": "true"}}
output = str(template.render(params=params))


def main() -> None:
    print(output)


if __name__ == "__main__":
    main()
