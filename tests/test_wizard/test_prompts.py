"""Unit tests for wizard prompt primitives (frameforge.wizard.prompts).

Tests cover:
- ask_text re-prompting, defaults and validators
- ask_yes_no parsing
- ask_menu default fallback
- ask_multi_select parsing and fallback
- Field validators
- RichLineReader delegation to the console
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from frameforge.wizard.prompts import (
    InputValidationError,
    RichLineReader,
    ask_menu,
    ask_multi_select,
    ask_text,
    ask_yes_no,
    validate_env_var,
    validate_environment_name,
    validate_header_name,
    validate_optional_file,
    validate_project_name,
    validate_url,
    validate_url_path,
)

pytestmark = pytest.mark.unit

MENU = [("web", "Web"), ("mobile", "Mobile"), ("api", "API")]
ENVIRONMENTS = [
    ("local", "Local", True),
    ("staging", "Staging", True),
    ("production", "Production", False),
]


class TestAskText:
    def test_returns_answer(self, scripted_reader):
        reader = scripted_reader("  my-suite  ")
        assert ask_text(reader, "Project name") == "my-suite"
        assert reader.prompts == ["Project name:"]

    def test_empty_answer_selects_default(self, scripted_reader):
        reader = scripted_reader("")
        assert ask_text(reader, "Project name", "playwright-automation") == "playwright-automation"
        assert reader.prompts == ["Project name (playwright-automation):"]

    def test_empty_answer_without_default_reasks(self, scripted_reader):
        reader = scripted_reader("", "", "value")
        assert ask_text(reader, "Name") == "value"
        assert len(reader.prompts) == 3

    def test_invalid_answer_reasks_until_valid(self, scripted_reader):
        reader = scripted_reader("bad name!", "../x", "good-name")
        assert ask_text(reader, "Project name", validator=validate_project_name) == "good-name"
        assert reader.exhausted
        assert len(reader.prompts) == 3

    def test_empty_default_is_allowed(self, scripted_reader):
        reader = scripted_reader("")
        assert ask_text(reader, "App path", default="", validator=validate_optional_file) == ""


class TestAskYesNo:
    @pytest.mark.parametrize("answer,expected", [
        ("y", True), ("YES", True), ("n", False), ("No", False),
    ])
    def test_answers(self, scripted_reader, answer: str, expected: bool):
        assert ask_yes_no(scripted_reader(answer), "Continue?") is expected

    @pytest.mark.parametrize("default", [True, False])
    def test_empty_selects_default(self, scripted_reader, default: bool):
        assert ask_yes_no(scripted_reader(""), "Continue?", default=default) is default

    def test_hint_reflects_default(self, scripted_reader):
        reader = scripted_reader("", "")
        ask_yes_no(reader, "Create it?", default=True)
        ask_yes_no(reader, "Overwrite?", default=False)
        assert reader.prompts == ["Create it? (Y/n):", "Overwrite? (y/N):"]

    def test_unrecognized_answer_reasks(self, scripted_reader):
        reader = scripted_reader("maybe", "y")
        assert ask_yes_no(reader, "Continue?") is True
        assert len(reader.prompts) == 2


class TestAskMenu:
    def test_valid_choice(self, scripted_reader):
        assert ask_menu(scripted_reader("2"), "Type?", MENU, default="web") == "mobile"

    def test_empty_selects_default(self, scripted_reader):
        assert ask_menu(scripted_reader(""), "Type?", MENU, default="api") == "api"

    def test_prompt_shows_default_index(self, scripted_reader):
        reader = scripted_reader("")
        ask_menu(reader, "Type?", MENU, default="api")
        assert reader.prompts == ["Enter your choice (1-3) [3]:"]

    @pytest.mark.parametrize("answer", ["0", "4", "web", "1.5"])
    def test_invalid_selects_default_with_warning(self, scripted_reader, answer: str):
        with patch("frameforge.model.presets.print_warning") as warn:
            assert ask_menu(scripted_reader(answer), "Type?", MENU, default="web") == "web"
        warn.assert_called_once()

    def test_never_reasks(self, scripted_reader):
        reader = scripted_reader("99", "2")
        ask_menu(reader, "Type?", MENU, default="web")
        assert reader.answers == ["2"]


class TestAskMultiSelect:
    def test_empty_keeps_defaults(self, scripted_reader):
        assert ask_multi_select(scripted_reader(""), "Envs?", ENVIRONMENTS) == ["local", "staging"]

    def test_selection_in_option_order(self, scripted_reader):
        assert ask_multi_select(scripted_reader("3, 1"), "Envs?", ENVIRONMENTS) == ["local", "production"]

    def test_space_separated(self, scripted_reader):
        assert ask_multi_select(scripted_reader("2 3"), "Envs?", ENVIRONMENTS) == ["staging", "production"]

    def test_duplicates_collapse(self, scripted_reader):
        assert ask_multi_select(scripted_reader("3,3"), "Envs?", ENVIRONMENTS) == ["production"]

    @pytest.mark.parametrize("answer", ["4", "0", "1,x", "all"])
    def test_invalid_keeps_defaults_with_warning(self, scripted_reader, answer: str):
        with patch("frameforge.wizard.prompts.print_warning") as warn:
            result = ask_multi_select(scripted_reader(answer), "Envs?", ENVIRONMENTS)
        assert result == ["local", "staging"]
        warn.assert_called_once()

    def test_only_separators_keeps_defaults(self, scripted_reader):
        assert ask_multi_select(scripted_reader(", ,"), "Envs?", ENVIRONMENTS) == ["local", "staging"]


class TestValidators:
    def test_project_name(self):
        validate_project_name("my_suite-2")
        with pytest.raises(InputValidationError):
            validate_project_name("my suite")

    def test_url(self):
        validate_url("https://example.com")
        with pytest.raises(InputValidationError):
            validate_url("example.com")

    def test_optional_file(self, tmp_path: Path):
        app = tmp_path / "app.apk"
        app.write_bytes(b"")
        validate_optional_file("")
        validate_optional_file(str(app))
        with pytest.raises(InputValidationError, match="File not found"):
            validate_optional_file(str(tmp_path / "missing.apk"))

    def test_environment_name(self):
        validate_environment_name("qa-eu_1")
        for bad in ("QA", "1qa", "qa env", ""):
            with pytest.raises(InputValidationError):
                validate_environment_name(bad)

    def test_env_var(self):
        validate_env_var("API_TOKEN")
        with pytest.raises(InputValidationError):
            validate_env_var("api-token")

    def test_header_name(self):
        validate_header_name("X-API-Key")
        with pytest.raises(InputValidationError):
            validate_header_name("X API Key")

    def test_url_path(self):
        validate_url_path("/graphql")
        for bad in ("graphql", "/graph ql"):
            with pytest.raises(InputValidationError):
                validate_url_path(bad)


class TestRichLineReader:
    def test_delegates_to_console_input(self):
        output = MagicMock()
        output.input.return_value = "answer"
        reader = RichLineReader(output)
        assert reader.ask("Project name:") == "answer"
        assert "Project name:" in output.input.call_args.args[0]
