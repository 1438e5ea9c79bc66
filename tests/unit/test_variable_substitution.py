"""Unit tests for {{variable}} substitution in action text."""

from app.application.services.variable_substitution import (
    replace_variables,
    replace_variables_in,
    stringify,
)


def test_replaces_known_tokens() -> None:
    out = replace_variables("Hi {{first_name}} {{ last_name }}!", {"first_name": "Ada", "last_name": "L"})
    assert out == "Hi Ada L!"


def test_unknown_and_none_tokens_are_kept() -> None:
    out = replace_variables("Hi {{first_name}}, ref {{ref}}", {"ref": None})
    assert out == "Hi {{first_name}}, ref {{ref}}"


def test_empty_template_renders_empty_string() -> None:
    assert replace_variables(None, {"a": 1}) == ""
    assert replace_variables("", {"a": 1}) == ""


def test_template_without_tokens_is_returned_as_is() -> None:
    assert replace_variables("plain text", {"plain": "x"}) == "plain text"


def test_tokens_only_match_identifiers() -> None:
    assert replace_variables("{{client.name}} {{ 1x }}", {"client": "c"}) == "{{client.name}} {{ 1x }}"


def test_stringify_booleans_numbers_and_structures() -> None:
    assert stringify(True) == "true"
    assert stringify(False) == "false"
    assert stringify(0) == "0"
    assert stringify(2.5) == "2.5"
    assert stringify({"a": [1, 2]}) == '{"a":[1,2]}'
    out = replace_variables("{{vip}}/{{count}}", {"vip": False, "count": 0})
    assert out == "false/0"


def test_replace_variables_in_nested_structures() -> None:
    body = {
        "event": "client_created",
        "client": {"name": "{{first_name}}", "tags": ["{{tag}}", 3]},
        "count": 7,
    }
    out = replace_variables_in(body, {"first_name": "Ada", "tag": "vip"})
    assert out == {
        "event": "client_created",
        "client": {"name": "Ada", "tags": ["vip", 3]},
        "count": 7,
    }
    assert body["client"]["name"] == "{{first_name}}"
