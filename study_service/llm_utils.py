"""
llm_utils.py - LLM gateway access

Invokes the hosted OpenAI-compatible AI gateway by default, with DeepSeek
and Ollama kept as alternative providers. Retries are off unless configured:
a failed call is surfaced to the caller, who decides whether to re-invoke.
"""

import logging
import os
import re
from typing import List, Optional

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_deepseek import ChatDeepSeek
from langchain_ollama import OllamaLLM
from langchain_openai import ChatOpenAI

_LOG = logging.getLogger("llm_utils")

DEFAULT_LLM_PROVIDER = "openai"  # "openai" (gateway), "deepseek", or "ollama"
DEFAULT_GATEWAY_BASE_URL = "https://ai.gateway.lovable.dev/v1"
DEFAULT_GATEWAY_MODEL = "google/gemini-2.5-flash"
DEFAULT_DEEPSEEK_MODEL = "deepseek-chat"
DEFAULT_OLLAMA_BASE_URL = "http://localhost:11434"
DEFAULT_OLLAMA_MODEL = "qwen2.5vl:7b"


class LLMProvider:
    """LLM provider configuration and management."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        provider: str = DEFAULT_LLM_PROVIDER,
        model: Optional[str] = None,
        timeout: int = 120,
        max_retries: int = 0,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.provider = (provider or DEFAULT_LLM_PROVIDER).lower()
        self.model = model
        self.timeout = timeout
        self.max_retries = max_retries

        self._configure_provider()

    def _configure_provider(self):
        """Fill in provider defaults from the environment."""
        if self.provider == "ollama":
            if not self.base_url:
                self.base_url = os.getenv("OLLAMA_BASE_URL", DEFAULT_OLLAMA_BASE_URL)
            if not self.model:
                self.model = os.getenv("OLLAMA_MODEL", DEFAULT_OLLAMA_MODEL)
        elif self.provider == "deepseek":
            if not self.api_key:
                self.api_key = os.getenv("DEEPSEEK_API_KEY")
            if not self.model:
                self.model = DEFAULT_DEEPSEEK_MODEL
        else:
            if not self.api_key:
                self.api_key = os.getenv("LLM_API_KEY")
            if not self.base_url:
                self.base_url = os.getenv("LLM_API_BASE", DEFAULT_GATEWAY_BASE_URL)
            if not self.model:
                self.model = os.getenv("LLM_MODEL", DEFAULT_GATEWAY_MODEL)

    def get_llm(self):
        """Get the configured LLM instance."""
        if self.provider == "ollama":
            _LOG.debug("Using Ollama provider: %s at %s", self.model, self.base_url)
            return OllamaLLM(model=self.model, base_url=self.base_url)

        if not self.api_key:
            raise ValueError(
                f"API key required for provider '{self.provider}'. "
                "Set LLM_API_KEY (or DEEPSEEK_API_KEY) or pass api_key"
            )

        if self.provider == "deepseek":
            _LOG.debug("Using DeepSeek provider: %s", self.model)
            kwargs = {"api_base": self.base_url} if self.base_url else {}
            return ChatDeepSeek(
                model=self.model,
                api_key=self.api_key,
                timeout=self.timeout,
                max_retries=self.max_retries,
                **kwargs,
            )

        _LOG.debug("Using gateway provider: %s at %s", self.model, self.base_url)
        return ChatOpenAI(
            model=self.model,
            api_key=self.api_key,
            base_url=self.base_url,
            timeout=self.timeout,
            max_retries=self.max_retries,
        )

    def invoke(self, messages: List[BaseMessage]) -> AIMessage:
        """Invoke the LLM with the configured provider."""
        llm = self.get_llm()

        if self.provider == "ollama":
            # OllamaLLM is a plain completion model: flatten to text
            prompt = "\n\n".join(_message_text(m) for m in messages)
            response = llm.invoke(prompt)
            return AIMessage(content=clean_think_tags(response))

        return llm.invoke(messages)


def _message_text(message: BaseMessage) -> str:
    content = message.content
    if isinstance(content, list):
        parts = [p.get("text", "") for p in content if isinstance(p, dict) and p.get("type") == "text"]
        if len(parts) != len(content):
            _LOG.warning("Dropping image content: provider does not accept images")
        content = "\n".join(parts)
    role = "System" if isinstance(message, SystemMessage) else "User" if isinstance(message, HumanMessage) else "Assistant"
    return f"{role}: {content}"


def llm_invoke(
    messages: List[BaseMessage],
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
    provider: str = DEFAULT_LLM_PROVIDER,
    model: Optional[str] = None,
    **kwargs,
) -> AIMessage:
    """Invoke the configured LLM provider."""
    llm_provider = LLMProvider(
        api_key=api_key, base_url=base_url, provider=provider, model=model, **kwargs
    )
    return llm_provider.invoke(messages)


def clean_think_tags(content: str) -> str:
    """Remove <think> blocks some local models emit."""
    return re.sub(r"<think>.*?</think>", "", content, flags=re.DOTALL)


def image_content_part(image_data: str) -> dict:
    """Build an ``image_url`` content part from base64 data or a URL."""
    if image_data.startswith(("data:", "http://", "https://")):
        url = image_data
    else:
        url = f"data:image/jpeg;base64,{image_data}"
    return {"type": "image_url", "image_url": {"url": url}}


def extract_json_from_response(content: str) -> str:
    """Strip think tags and code fences around a JSON payload."""
    raw = clean_think_tags(content).strip()

    fenced_match = re.search(r"```(?:json|\w+)?\s*([\s\S]*?)\s*```", raw, re.IGNORECASE)
    if fenced_match:
        raw = fenced_match.group(1).strip()

    return raw
