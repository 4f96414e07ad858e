"""Tests for the script template environment and filters."""

from __future__ import annotations

import pytest
from jinja2 import StrictUndefined, TemplateSyntaxError

from envscript.templating import (
    TemplateOptions,
    find_fields,
    get_environment,
    parse_template,
    psquote,
    shquote,
)


class TestTemplateOptions:
    def test_defaults(self):
        options = TemplateOptions()
        assert options.strict is False
        assert options.trim_blocks is False
        assert options.lstrip_blocks is False

    def test_frozen(self):
        with pytest.raises(ValueError):
            TemplateOptions().strict = True


class TestEnvironment:
    def test_shared_per_options(self):
        assert get_environment() is get_environment(TemplateOptions())
        assert get_environment(TemplateOptions(strict=True)) is get_environment(
            TemplateOptions(strict=True)
        )

    def test_strict_uses_strict_undefined(self):
        env = get_environment(TemplateOptions(strict=True))
        assert env.undefined is StrictUndefined

    def test_keeps_trailing_newline(self):
        assert parse_template("echo hi\n").render() == "echo hi\n"

    def test_no_autoescape(self):
        assert parse_template("{{ v }}").render(v="a && b") == "a && b"

    def test_shell_hash_braces_untouched(self):
        source = 'echo "${#files[@]}" {#not a comment#}'
        assert parse_template(source).render() == source

    def test_comment_syntax(self):
        assert parse_template("a{{/* note */}}b").render() == "ab"

    def test_syntax_error(self):
        with pytest.raises(TemplateSyntaxError):
            parse_template("{% for x in %}")


class TestFilters:
    def test_shquote_plain(self):
        assert shquote("simple") == "simple"

    def test_shquote_spaces_and_quotes(self):
        assert shquote("it's here") == "'it'\"'\"'s here'"

    def test_shquote_non_string(self):
        assert shquote(42) == "42"

    def test_psquote(self):
        assert psquote("it's") == "'it''s'"

    def test_filters_registered(self):
        template = parse_template(
            "{{ a | shquote }} {{ b | psquote }} {{ c | env_entry('MODE') }}"
        )
        assert template.render(a="x y", b="z", c="dev") == "'x y' 'z' MODE=dev"


class TestFindFields:
    def test_variables(self):
        assert find_fields("{{ b }} {{ a }} {{ a }}") == ["a", "b"]

    def test_loop_variables_excluded(self):
        assert find_fields("{% for x in xs %}{{ x }}{% endfor %}") == ["xs"]

    def test_set_variables_excluded(self):
        assert find_fields("{% set y = 1 %}{{ y }} {{ z }}") == ["z"]

    def test_attribute_access(self):
        assert find_fields("{{ repo.path }}") == ["repo"]
