"""Tests for reverse template parameter extraction."""

import pytest

from guild_commander.core.commands.template import (
    compile_template,
    create_parameters,
    match_template,
    render_template,
)
from guild_commander.core.errors import ParameterMismatch


class TestMatchTemplate:
    def test_two_placeholders(self):
        assert match_template("{{a}} {{b}}", "x y") == {"a": "x", "b": "y"}

    def test_too_few_tokens(self):
        with pytest.raises(ParameterMismatch):
            match_template("{{a}} {{b}}", "x")

    def test_too_many_tokens(self):
        with pytest.raises(ParameterMismatch):
            match_template("{{a}} {{b}}", "x y z")

    def test_literal_separator(self):
        result = match_template("{{action}} with {{value}}", "hello with person")
        assert result == {"action": "hello", "value": "person"}

    def test_literal_must_be_present(self):
        with pytest.raises(ParameterMismatch) as excinfo:
            match_template("{{action}} with {{value}}", "hello to person")
        assert excinfo.value.template == "{{action}} with {{value}}"
        assert excinfo.value.content == "hello to person"

    def test_non_space_separator(self):
        assert match_template("{{count}}d{{sides}}", "2d6") == {"count": "2", "sides": "6"}

    def test_placeholder_name_whitespace(self):
        assert match_template("{{ level }} {{role}}", "mod @mods") == {"level": "mod", "role": "@mods"}

    def test_empty_content_mismatch(self):
        with pytest.raises(ParameterMismatch):
            match_template("{{a}}", "")

    def test_literal_only_template(self):
        assert match_template("now", "now") == {}
        with pytest.raises(ParameterMismatch):
            match_template("now", "later")

    def test_repeated_placeholder_must_agree(self):
        assert match_template("{{x}} vs {{x}}", "a vs a") == {"x": "a"}
        with pytest.raises(ParameterMismatch):
            match_template("{{x}} vs {{x}}", "a vs b")

    def test_regex_characters_in_literal(self):
        assert match_template("({{a}})", "(x)") == {"a": "x"}

    @pytest.mark.parametrize("template", ["{{user-id}}", "{{ 2fast }} now", "{{}}"])
    def test_invalid_placeholder_names_rejected(self, template):
        with pytest.raises(ValueError, match="Invalid placeholder"):
            match_template(template, "U123")

    def test_compiled_templates_are_cached(self):
        assert compile_template("{{a}} {{b}}") is compile_template("{{a}} {{b}}")


class TestCreateParameters:
    def test_without_template(self):
        result = create_parameters(["a", "b"], None)
        assert result.args == ("a", "b")
        assert result.named is None

    def test_with_template(self):
        result = create_parameters(["mod", "@mods"], "{{level}} {{role}}")
        assert result.args == ("mod", "@mods")
        assert result.named == {"level": "mod", "role": "@mods"}


class TestRenderTemplate:
    def test_renders_prefix(self):
        assert render_template("{{prefix}}ping", {"prefix": "!"}) == "!ping"

    def test_unknown_names_render_empty(self):
        assert render_template("{{prefix}}roll {{count}}", {"prefix": "!"}) == "!roll "
