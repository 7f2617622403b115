"""Tests for the forms example."""


class TestFormsApp:
    """Verify form helpers, CSRF tokens and escaping of submitted params."""

    def test_form_carries_token(self, example_app) -> None:
        token = example_app.SESSION_TOKENS[None]
        assert '<form action="/users" method="post">' in example_app.output
        assert f'<input name="_csrf_token" type="hidden" value="{token}">' in example_app.output

    def test_submitted_value_is_escaped(self, example_app) -> None:
        assert 'value="&lt;Ann&gt;"' in example_app.output

    def test_select_and_checkbox_reflect_params(self, example_app) -> None:
        assert '<option selected value="member">Member</option>' in example_app.output
        assert 'checked id="user_newsletter"' in example_app.output

    def test_button_reuses_token(self, example_app) -> None:
        token = example_app.SESSION_TOKENS[None]
        assert f'data-csrf="{token}"' in example_app.output
        assert len(example_app.SESSION_TOKENS) == 1

    def test_label(self, example_app) -> None:
        assert '<label for="user_name">Name</label>' in example_app.output
