"""HTML helpers: tags, links, forms, text and number formatting.

Every helper that produces markup returns ``Safe``; anything that came from
the caller (attribute values, content, labels) is escaped on the way in.

    >>> from ashlar.html import content_tag, link
    >>> str(content_tag("p", "Tom & Jerry", class_="lead"))
    '<p class="lead">Tom &amp; Jerry</p>'
    >>> str(link("Home", to="/"))
    '<a href="/">Home</a>'

"""

from ashlar.html.form import (
    Form,
    FormField,
    checkbox,
    color_input,
    date_input,
    datetime_local_input,
    email_input,
    file_input,
    form_for,
    hidden_input,
    hidden_inputs_for,
    humanize,
    input_id,
    input_name,
    input_type,
    input_validations,
    input_value,
    inputs_for,
    label,
    multiple_select,
    number_input,
    options_for_select,
    password_input,
    radio_button,
    range_input,
    reset,
    search_input,
    select,
    submit,
    telephone_input,
    text_input,
    textarea,
    time_input,
    to_form,
    url_input,
)
from ashlar.html.format import text_to_html
from ashlar.html.link import button, link, link_attributes, valid_destination
from ashlar.html.number import number_with_delimiter, number_with_precision
from ashlar.html.tag import (
    CSRF_PARAM,
    attributes_escape,
    content_tag,
    csrf_input_tag,
    csrf_meta_tag,
    csrf_token_value,
    dasherize,
    form_tag,
    img_tag,
    tag,
)
from ashlar.utils.html import javascript_escape

__all__ = [
    "CSRF_PARAM",
    "Form",
    "FormField",
    "attributes_escape",
    "button",
    "checkbox",
    "color_input",
    "content_tag",
    "csrf_input_tag",
    "csrf_meta_tag",
    "csrf_token_value",
    "dasherize",
    "date_input",
    "datetime_local_input",
    "email_input",
    "file_input",
    "form_for",
    "form_tag",
    "hidden_input",
    "hidden_inputs_for",
    "humanize",
    "img_tag",
    "input_id",
    "input_name",
    "input_type",
    "input_validations",
    "input_value",
    "inputs_for",
    "javascript_escape",
    "label",
    "link",
    "link_attributes",
    "multiple_select",
    "number_input",
    "number_with_delimiter",
    "number_with_precision",
    "options_for_select",
    "password_input",
    "radio_button",
    "range_input",
    "reset",
    "search_input",
    "select",
    "submit",
    "telephone_input",
    "text_input",
    "text_to_html",
    "textarea",
    "time_input",
    "to_form",
    "url_input",
    "valid_destination",
]
