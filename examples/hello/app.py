"""Hello World -- the simplest ashlar example.

Compile a template from a string and render it with assigns. Printed
values are escaped; ``Safe`` values pass through untouched.

Run:
    python app.py
"""

from ashlar import Environment, raw

env = Environment()

# Compile from string
template = env.from_string("Hello, <%= @name %>!")

# Render with assigns
output = str(template.render(name="World"))

# Untrusted input is escaped, trusted markup is not
escaped_output = str(template.render(name="<script>"))
trusted_output = str(template.render(name=raw("<em>World</em>")))


def main() -> None:
    print(output)
    print(escaped_output)
    print(trusted_output)
    print()

    # Multiple renders with different assigns
    for name in ["Ashlar", "Templates", "Python"]:
        print(template.render(name=name))


if __name__ == "__main__":
    main()
