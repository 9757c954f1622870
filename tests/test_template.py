"""
Tests for template variable extraction, interpolation and prompting.
"""

import pytest

from snip.errors import RequiredVariableMissing
from snip.templating.template import (
    EnvDefault,
    LiteralDefault,
    extract_variables,
    has_variables,
    interpolate,
    parse_default,
    prompt_and_interpolate,
)


def scripted(answers):
    """An ``ask`` callable answering prompts by variable name, in order."""
    asked = []

    def ask(label):
        name = label.strip().split(" ")[0]
        asked.append(name)
        return answers[name].pop(0)

    ask.asked = asked
    return ask


class TestExtractVariables:
    """Tests for placeholder discovery."""

    def test_required_and_default(self):
        variables = extract_variables("ssh {{user}}@{{host:localhost}}")

        assert [v.name for v in variables] == ["user", "host"]
        assert variables[0].required
        assert variables[0].default_value is None
        assert variables[1].default_value == "localhost"
        assert variables[1].raw == "{{host:localhost}}"

    def test_deduplicates_keeping_first_default(self):
        variables = extract_variables("{{a:1}} {{b}} {{a:2}} {{a}}")

        assert [v.name for v in variables] == ["a", "b"]
        assert variables[0].default_value == "1"

    def test_default_may_contain_colons(self):
        variables = extract_variables("docker run {{image:ubuntu:24.04}}")

        assert variables[0].default_value == "ubuntu:24.04"

    def test_empty_default_is_not_required(self):
        variables = extract_variables("echo {{suffix:}}")

        assert variables[0].default_value == ""
        assert not variables[0].required

    def test_env_default_resolved(self, monkeypatch):
        monkeypatch.setenv("SNIP_TEST_USER", "alice")

        variables = extract_variables("echo {{user:$SNIP_TEST_USER}}")

        assert variables[0].default_value == "alice"

    def test_unset_env_default_stays_literal(self, monkeypatch):
        monkeypatch.delenv("SNIP_TEST_MISSING", raising=False)

        variables = extract_variables("echo {{x:$SNIP_TEST_MISSING}}")

        assert variables[0].default_value == "$SNIP_TEST_MISSING"

    @pytest.mark.parametrize("content", [
        "{{ name }}",
        "{{1abc}}",
        "{{with-dash}}",
        "{name}",
        "no variables here",
        "",
        None,
    ])
    def test_not_variables(self, content):
        assert extract_variables(content) == []
        assert not has_variables(content)

    def test_has_variables(self):
        assert has_variables("echo {{name}}")
        assert has_variables("echo {{_private:x}}")


class TestParseDefault:
    """Tests for default value parsing."""

    def test_none(self):
        assert parse_default(None) is None

    def test_literal(self):
        assert parse_default("8080") == LiteralDefault("8080")

    def test_env(self):
        default = parse_default("$HOME")

        assert default == EnvDefault("HOME")
        assert default.text == "$HOME"


class TestInterpolate:
    """Tests for substitution."""

    def test_values_replace_tokens(self):
        result = interpolate("echo {{greeting}} {{name}}", {"greeting": "hello", "name": "world"})

        assert result == "echo hello world"

    def test_every_occurrence_replaced(self):
        assert interpolate("{{x}}-{{x}}-{{x}}", {"x": "1"}) == "1-1-1"

    def test_default_used_when_value_missing_or_empty(self):
        assert interpolate("port={{port:8080}}") == "port=8080"
        assert interpolate("port={{port:8080}}", {"port": ""}) == "port=8080"

    def test_required_without_value_left_untouched(self):
        assert interpolate("echo {{name}}", {}) == "echo {{name}}"

    def test_each_token_uses_its_own_default(self):
        assert interpolate("{{a:1}} {{a:2}}") == "1 2"

    def test_env_default(self, monkeypatch):
        monkeypatch.setenv("SNIP_TEST_DIR", "/srv")

        assert interpolate("cd {{dir:$SNIP_TEST_DIR}}") == "cd /srv"

    def test_values_are_not_re_expanded(self):
        assert interpolate("{{a}}", {"a": "{{b}}", "b": "x"}) == "{{b}}"

    @pytest.mark.parametrize("content", [None, ""])
    def test_empty_content(self, content):
        assert interpolate(content, {"a": "1"}) == ""


class TestPromptAndInterpolate:
    """Tests for the interactive prompt flow."""

    def test_no_variables_skips_prompting(self):
        def ask(label):
            raise AssertionError("should not prompt")

        assert prompt_and_interpolate("echo hi", ask=ask) == "echo hi"

    def test_prompts_in_order_of_appearance(self, quiet_console):
        ask = scripted({"user": ["root"], "host": ["db1"]})

        result = prompt_and_interpolate("ssh {{user}}@{{host}} && echo {{user}}", ask=ask, console=quiet_console)

        assert result == "ssh root@db1 && echo root"
        assert ask.asked == ["user", "host"]

    def test_empty_answer_takes_default(self, quiet_console):
        ask = scripted({"port": [""]})

        assert prompt_and_interpolate("nc -l {{port:8080}}", ask=ask, console=quiet_console) == "nc -l 8080"

    def test_label_shows_default(self, quiet_console):
        labels = []

        def ask(label):
            labels.append(label)
            return "x"

        prompt_and_interpolate("{{name}} {{port:8080}}", ask=ask, console=quiet_console)

        assert labels == ["  name", "  port [8080]"]

    def test_required_is_asked_twice(self, quiet_console):
        ask = scripted({"name": ["", "bob"]})

        result = prompt_and_interpolate("echo {{name}}", ask=ask, console=quiet_console)

        assert result == "echo bob"
        assert ask.asked == ["name", "name"]
        assert '"name" is required' in quiet_console.file.getvalue()

    def test_required_missing_twice_aborts(self, quiet_console):
        ask = scripted({"name": ["", "   "]})

        with pytest.raises(RequiredVariableMissing) as exc_info:
            prompt_and_interpolate("echo {{name}}", ask=ask, console=quiet_console)

        assert exc_info.value.name == "name"
        assert 'required variable "name"' in str(exc_info.value)

    def test_answer_overrides_env_default(self, monkeypatch, quiet_console):
        monkeypatch.setenv("SNIP_TEST_BRANCH", "main")
        ask = scripted({"branch": ["dev"]})

        result = prompt_and_interpolate("git checkout {{branch:$SNIP_TEST_BRANCH}}", ask=ask, console=quiet_console)

        assert result == "git checkout dev"

    def test_interpolation_is_idempotent(self):
        once = interpolate("cp {{src:a.txt}} {{dst}}", {"dst": "b.txt"})

        assert interpolate(once, {"dst": "c.txt"}) == once
