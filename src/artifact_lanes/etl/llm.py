"""Thin client for an OpenAI-compatible chat and embedding service."""

import json
import logging
import re
from typing import Any

import requests

from ..config import DEFAULT_OPENAI_CONFIG, OpenAIConfig

logger = logging.getLogger(__name__)

CODE_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*|\s*```$")


class RemoteServiceError(RuntimeError):
    """The remote service answered with a non-success status."""


class ResponseParseError(ValueError):
    """The remote service answered with text that is not a JSON object."""


def extract_json_object(text: str) -> dict[str, Any]:
    """Decode a JSON object from model output.

    Code-fence markers are stripped first. If the remainder does not parse,
    the slice between the first `{` and the last `}` is tried.

    Raises:
        ResponseParseError: If no JSON object can be recovered
    """
    candidates = [CODE_FENCE_PATTERN.sub("", text.strip())]

    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end > start:
        candidates.append(text[start : end + 1])

    for candidate in candidates:
        try:
            data = json.loads(candidate)
        except ValueError:
            continue
        if isinstance(data, dict):
            return data

    raise ResponseParseError(f"Failed to parse JSON object from response: {text[:200]!r}")


def _post(config: OpenAIConfig, endpoint: str, payload: dict[str, Any]) -> dict[str, Any]:
    response = requests.post(
        f"{config.base_url}/{endpoint}",
        json=payload,
        headers={"Authorization": f"Bearer {config.api_key}"},
        timeout=config.timeout,
    )
    if not response.ok:
        raise RemoteServiceError(f"{endpoint} error {response.status_code}: {response.text[:500]}")
    return response.json()


def chat_json(
    system: str,
    user: str,
    config: OpenAIConfig | None = None,
    temperature: float = 0.2,
    json_mode: bool = True,
) -> dict[str, Any]:
    """Run one chat completion and decode its reply as a JSON object.

    Args:
        system: System instruction
        user: User message content
        config: Service configuration (defaults to environment)
        temperature: Sampling temperature
        json_mode: Request structured JSON output from the service

    Returns:
        Decoded JSON object from the first choice

    Raises:
        requests.RequestException: On network failure
        RemoteServiceError: On non-2xx status
        ResponseParseError: If the reply holds no JSON object
    """
    config = config or DEFAULT_OPENAI_CONFIG

    payload: dict[str, Any] = {
        "model": config.model,
        "temperature": temperature,
        "messages": [
            {"role": "system", "content": system},
            {"role": "user", "content": user},
        ],
    }
    if json_mode:
        payload["response_format"] = {"type": "json_object"}

    data = _post(config, "chat/completions", payload)

    try:
        content = data["choices"][0]["message"]["content"] or ""
    except (KeyError, IndexError, TypeError) as e:
        raise ResponseParseError(f"Unexpected chat response shape: {e}") from e

    logger.debug(f"Chat response ({config.model}): {content[:200]}")
    return extract_json_object(content)


def embed(text: str, config: OpenAIConfig | None = None) -> list[float]:
    """Fetch an embedding vector for `text`.

    Raises:
        requests.RequestException: On network failure
        RemoteServiceError: On non-2xx status
        ResponseParseError: If the reply carries no embedding
    """
    config = config or DEFAULT_OPENAI_CONFIG

    data = _post(config, "embeddings", {"model": config.embed_model, "input": text})

    try:
        return [float(x) for x in data["data"][0]["embedding"]]
    except (KeyError, IndexError, TypeError, ValueError) as e:
        raise ResponseParseError(f"Unexpected embedding response shape: {e}") from e
