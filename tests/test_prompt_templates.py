import pytest

from costume_roaster.core import prompt_templates
from costume_roaster.core.errors import TemplateNotFoundError
from costume_roaster.core.prompt_templates import fill_prompt_template, load_prompt


def test_fill_replaces_string_placeholder():
    assert fill_prompt_template("Roast: {{text}}", {"text": "boo"}) == "Roast: boo"


def test_fill_joins_sequence_values():
    assert fill_prompt_template("{{items}}", {"items": ["a", "b"]}) == "a, b"


def test_fill_replaces_every_occurrence():
    assert fill_prompt_template("{{x}} and {{x}}", {"x": "ghost"}) == "ghost and ghost"


def test_fill_leaves_unresolved_placeholders_verbatim():
    assert fill_prompt_template("{{known}} {{unknown}}", {"known": "k"}) == "k {{unknown}}"


def test_fill_does_not_expand_inserted_values():
    result = fill_prompt_template("{{a}}", {"a": "{{b}}", "b": "nope"})

    assert result == "{{b}}"


def test_fill_is_purely_textual():
    assert fill_prompt_template("{{x}}", {"x": "<b>$1\\n</b>"}) == "<b>$1\\n</b>"


@pytest.mark.parametrize(
    "name",
    ["analyze", "generate-roast", "generate-costume", "generate-meme", "modify-image"],
)
def test_every_capability_template_is_packaged(name):
    assert load_prompt(name).strip()


def test_missing_template_raises(monkeypatch, tmp_path):
    monkeypatch.setattr(prompt_templates.config, "PROMPTS_DIR", str(tmp_path))

    with pytest.raises(TemplateNotFoundError) as exc_info:
        load_prompt("generate-roast")

    assert "generate-roast" in exc_info.value.message


def test_prompts_dir_override(monkeypatch, tmp_path):
    (tmp_path / "generate-meme.md").write_text("Meme: {{roastText}}", encoding="utf-8")
    monkeypatch.setattr(prompt_templates.config, "PROMPTS_DIR", str(tmp_path))

    assert prompt_templates.build_meme_prompt("nice cape") == "Meme: nice cape"


def test_roast_prompt_includes_analysis_fields():
    prompt = prompt_templates.build_roast_prompt(
        "Pirate", ["cheap eyepatch", "plastic sword"], "needs work"
    )

    assert "Attempting to be: Pirate" in prompt
    assert "cheap eyepatch, plastic sword" in prompt
    assert "needs work" in prompt
    assert "{{" not in prompt
