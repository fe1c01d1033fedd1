"""Prompt templates and builders for the costume roaster's Gemini flows."""

from __future__ import annotations

import os
import re
from typing import Mapping, Sequence, Union

from costume_roaster import config
from costume_roaster.config import logger
from costume_roaster.core.errors import TemplateNotFoundError

PromptValue = Union[str, Sequence[str]]

PLACEHOLDER_PATTERN = re.compile(r"\{\{([^{}]+)\}\}")

# --- capability prompt names ---

ANALYZE_PROMPT = "analyze"
ROAST_PROMPT = "generate-roast"
COSTUME_PROMPT = "generate-costume"
MEME_PROMPT = "generate-meme"
MODIFY_PROMPT = "modify-image"


def load_prompt(prompt_name: str) -> str:
    """Load a prompt template from ``<PROMPTS_DIR>/<prompt_name>.md``."""
    prompt_path = os.path.join(config.PROMPTS_DIR, f"{prompt_name}.md")
    try:
        with open(prompt_path, encoding="utf-8") as handle:
            return handle.read()
    except OSError as exc:
        logger.error(f"Failed to load prompt: {prompt_name} ({exc})")
        raise TemplateNotFoundError(f"Prompt file not found: {prompt_name}") from exc


def fill_prompt_template(template: str, variables: Mapping[str, PromptValue]) -> str:
    """
    Replace ``{{name}}`` placeholders with their values.

    Sequence values are joined with ", ". Substitution is a single textual
    pass: inserted values are never re-scanned and unknown placeholders are
    left as they are.
    """

    def _replace(match: re.Match) -> str:
        key = match.group(1)
        if key not in variables:
            return match.group(0)
        value = variables[key]
        if isinstance(value, str):
            return value
        return ", ".join(value)

    return PLACEHOLDER_PATTERN.sub(_replace, template)


def build_analysis_prompt() -> str:
    return load_prompt(ANALYZE_PROMPT)


def build_roast_prompt(costume_type: str, fail_points: Sequence[str], analysis: str) -> str:
    return fill_prompt_template(
        load_prompt(ROAST_PROMPT),
        {"costumeType": costume_type, "failPoints": fail_points, "analysis": analysis},
    )


def build_costume_prompt(costume_type: str) -> str:
    return fill_prompt_template(load_prompt(COSTUME_PROMPT), {"costumeType": costume_type})


def build_meme_prompt(roast_text: str) -> str:
    return fill_prompt_template(load_prompt(MEME_PROMPT), {"roastText": roast_text})


def build_modify_prompt(user_request: str) -> str:
    return fill_prompt_template(load_prompt(MODIFY_PROMPT), {"prompt": user_request})


__all__ = [
    "load_prompt",
    "fill_prompt_template",
    "build_analysis_prompt",
    "build_roast_prompt",
    "build_costume_prompt",
    "build_meme_prompt",
    "build_modify_prompt",
]
