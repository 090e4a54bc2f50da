"""Document classification — text + filename → optional :class:`Classification`.

The classifier's answer is either *present* (a validated
:class:`~docsearch.models.Classification`) or *absent* (``None``).  A
response that carries no usable JSON object is reported as absent.  Errors
from the model itself propagate; the enrichment pipeline drops the labels
in that case.
"""

from __future__ import annotations

import json
import logging
import re
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from docsearch.classification.prompts import build_classification_prompt
from docsearch.config import Settings, settings as default_settings
from docsearch.errors import ClassificationFailure
from docsearch.models import Classification

if TYPE_CHECKING:
    from langchain_core.language_models import BaseChatModel

logger = logging.getLogger(__name__)

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


class DocumentClassifier(ABC):
    """Backend-agnostic classification interface."""

    @abstractmethod
    async def classify(self, text: str, filename: str) -> Classification | None:
        """Return labels for the document, or ``None`` when unavailable."""
        ...


class LLMDocumentClassifier(DocumentClassifier):
    """Classify documents by prompting a chat model for a JSON object.

    Parameters
    ----------
    llm:
        Any LangChain chat model.  When *None*, :func:`get_chat_model`
        builds one from the settings.
    """

    def __init__(self, llm: BaseChatModel | None = None) -> None:
        self._llm = llm if llm is not None else get_chat_model()

    async def classify(self, text: str, filename: str) -> Classification | None:
        prompt = build_classification_prompt(text, filename)
        response = await self._llm.ainvoke(prompt)
        content = response.content if isinstance(response.content, str) else str(response.content)
        try:
            return parse_classification(content)
        except ClassificationFailure as exc:
            logger.warning("Unusable classification for %s: %s", filename, exc)
            return None


def get_chat_model(temperature: float = 0.0, config: Settings = default_settings) -> BaseChatModel:
    """Return the configured chat model.

    ``config.llm_base_url`` points the client at any OpenAI-compatible
    server (vLLM, Ollama, ...) instead of the OpenAI cloud; such servers
    accept the dummy key ``"EMPTY"``.
    """
    from langchain_openai import ChatOpenAI

    kwargs: dict[str, Any] = {"model": config.llm_model_name, "temperature": temperature}
    if config.llm_base_url:
        logger.info("Classifying with OpenAI-compatible endpoint: %s", config.llm_base_url)
        kwargs["base_url"] = config.llm_base_url
        kwargs["api_key"] = config.openai_api_key or "EMPTY"
    else:
        kwargs["api_key"] = config.openai_api_key
    return ChatOpenAI(**kwargs)


def parse_classification(text: str) -> Classification:
    """Parse a model response into a :class:`Classification`.

    Accepts bare JSON, JSON inside markdown fences, and JSON surrounded by
    commentary.

    Raises
    ------
    ClassificationFailure
        When no JSON object can be found or it does not match the schema.
    """
    payload = _load_json_object(text)
    try:
        return Classification.model_validate(payload)
    except ValidationError as exc:
        raise ClassificationFailure(f"response does not match schema: {exc.error_count()} error(s)") from exc


def _load_json_object(text: str) -> dict[str, Any]:
    cleaned = text.strip()
    # Strip ```json … ``` wrappers
    if cleaned.startswith("```"):
        first_newline = cleaned.index("\n") if "\n" in cleaned else 3
        cleaned = cleaned[first_newline + 1 :]
        if cleaned.endswith("```"):
            cleaned = cleaned[:-3]
        cleaned = cleaned.strip()

    candidates = [cleaned]
    match = _JSON_OBJECT.search(cleaned)
    if match and match.group(0) != cleaned:
        candidates.append(match.group(0))

    for candidate in candidates:
        try:
            payload = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(payload, dict):
            return payload
        raise ClassificationFailure(f"expected a JSON object, got {type(payload).__name__}")

    raise ClassificationFailure(f"no JSON object in response: {text[:200]!r}")
