"""
content_generator.py - Shared plumbing for the AI content generators

Loads prompt templates, calls the gateway through ``llm_invoke`` and maps
provider failures onto the study service error taxonomy.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any, List

from langchain_core.messages import BaseMessage
from langchain_core.prompts import PromptTemplate

from . import llm_utils
from .errors import GenerationFailedError, TemporarilyUnavailableError

_LOG = logging.getLogger("content_generator")

DEFAULT_PROMPTS_DIR = Path(__file__).parent / "prompts"

# Gateway status codes meaning "rate limited" and "out of credits"
UNAVAILABLE_STATUS_CODES = (429, 402)


class ContentGenerator:
    """Base class for generators that talk to the AI gateway."""

    name = "content"

    def __init__(self, llm_config, prompts_dir: Path = DEFAULT_PROMPTS_DIR):
        self.llm_config = llm_config
        self.prompts_dir = Path(prompts_dir)

    def render_prompt(self, template_name: str, **values: Any) -> str:
        template = PromptTemplate.from_file(self.prompts_dir / template_name, encoding="utf-8")
        return template.format(**values)

    def invoke(self, messages: List[BaseMessage]) -> str:
        """Call the gateway and return the raw text content.

        Raises:
            TemporarilyUnavailableError: on 429/402 from the gateway
            GenerationFailedError: on any other failure or an empty reply
        """
        _LOG.info("[%s] Calling AI gateway...", self.name)
        try:
            response = llm_utils.llm_invoke(
                messages,
                api_key=self.llm_config.api_key,
                base_url=self.llm_config.base_url,
                provider=self.llm_config.provider,
                model=self.llm_config.model,
                timeout=self.llm_config.timeout,
                max_retries=self.llm_config.max_retries,
            )
        except Exception as e:
            status_code = getattr(e, "status_code", None)
            if status_code in UNAVAILABLE_STATUS_CODES:
                _LOG.warning("[%s] AI gateway unavailable: status=%s", self.name, status_code)
                if status_code == 429:
                    message = "Rate limit exceeded. Please try again in a moment."
                else:
                    message = "AI credits exhausted. Please try again later."
                raise TemporarilyUnavailableError(message, status_code=status_code) from e
            _LOG.error("[%s] AI gateway error: %s", self.name, e)
            raise GenerationFailedError(f"AI gateway error: {e}", status_code=status_code) from e

        content = response.content if hasattr(response, "content") else response
        if not isinstance(content, str) or not content.strip():
            raise GenerationFailedError("No content in AI response")

        _LOG.info("[%s] AI response received", self.name)
        return content


def parse_json_array(content: str) -> list:
    """Pull the first JSON array out of a model reply."""
    cleaned = llm_utils.extract_json_from_response(content)
    match = re.search(r"\[[\s\S]*\]", cleaned)
    try:
        data = json.loads(match.group(0) if match else cleaned)
    except json.JSONDecodeError as e:
        raise GenerationFailedError(f"Failed to parse AI response: {e}") from e

    if not isinstance(data, list):
        raise GenerationFailedError("AI response is not a JSON array")
    return data
