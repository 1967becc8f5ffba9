"""LLM-backed skill scorer using the LiteLLM gateway."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx
from pydantic import ValidationError

from skillgate.core.config import Settings
from skillgate.routing.scoring import ScorerUnavailableError
from skillgate.skills.catalog import Catalog
from skillgate.skills.models import ScoredCandidate

LOGGER = logging.getLogger(__name__)

SCORER_SYSTEM_PROMPT = (
    "You are a skill router. Given a user request and a catalog of skills, "
    "rate how relevant each skill is to the request.\n\n"
    "RULES:\n"
    "1. Only rate skills that appear in the catalog.\n"
    "2. confidence is a number from 0.0 (irrelevant) to 1.0 (certainly needed).\n"
    "3. Omit skills that are clearly irrelevant.\n"
    "4. reason is one short sentence.\n\n"
    "OUTPUT FORMAT (strict JSON only):\n"
    '[{"name": "skill-name", "confidence": 0.0-1.0, "reason": "brief explanation"}]\n'
)


class LLMScorerError(ScorerUnavailableError):
    """Raised when the gateway call fails or returns an unusable answer."""


class LLMScorer:
    """Score catalog skills with one chat completion per turn."""

    name = "llm"

    def __init__(
        self,
        settings: Settings,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=str(settings.litellm_api_base),
            timeout=settings.litellm_timeout,
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        if self._owns_client:
            await self._client.aclose()

    def _build_headers(self) -> dict[str, str]:
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if self._settings.litellm_api_key:
            headers["Authorization"] = f"Bearer {self._settings.litellm_api_key}"
        return headers

    async def score(self, prompt: str, catalog: Catalog) -> list[ScoredCandidate]:
        """Ask the model to rate every catalog skill against ``prompt``.

        Raises:
            LLMScorerError: On transport errors, HTTP errors or unparseable output.
        """
        if len(catalog) == 0:
            return []

        payload: dict[str, Any] = {
            "model": self._settings.litellm_model,
            "messages": [
                {"role": "system", "content": SCORER_SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": f"Catalog:\n{catalog.get_index()}\n\nRequest:\n{prompt.strip()}",
                },
            ],
            "temperature": 0,
        }

        try:
            response = await self._client.post(
                "/v1/chat/completions",
                json=payload,
                headers=self._build_headers(),
            )
            response.raise_for_status()
            content = response.json()["choices"][0]["message"]["content"]
        except httpx.HTTPStatusError as exc:
            LOGGER.error(
                "LiteLLM error %s: %s", exc.response.status_code, exc.response.text[:200]
            )
            raise LLMScorerError(f"LiteLLM {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise LLMScorerError(f"Network error: {exc}") from exc
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise LLMScorerError(f"Unexpected LiteLLM response shape: {exc}") from exc

        if content is None:
            content = ""
        if not isinstance(content, str):
            raise LLMScorerError(f"Unexpected message content type: {type(content).__name__}")

        candidates = parse_candidates(content)
        LOGGER.info(
            "LLM scored %d skills: %s",
            len(candidates),
            [(c.name, round(c.confidence, 2)) for c in candidates],
        )
        return candidates


def _coerce_item(item: Any) -> ScoredCandidate | None:
    if not isinstance(item, dict):
        return None
    data = {
        "name": item.get("name") or item.get("skill"),
        "confidence": item.get("confidence", item.get("score")),
        "reason": item.get("reason") or item.get("reasoning") or "",
    }
    try:
        return ScoredCandidate.model_validate(data)
    except ValidationError:
        LOGGER.debug("Skipping malformed candidate %r", item)
        return None


def _decode(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    # Try to extract JSON from surrounding prose
    for opener, closer in (("[", "]"), ("{", "}")):
        start = text.find(opener)
        end = text.rfind(closer)
        if start != -1 and end > start:
            try:
                return json.loads(text[start : end + 1])
            except json.JSONDecodeError:
                continue
    raise LLMScorerError("Model answer contained no JSON")


def parse_candidates(text: str) -> list[ScoredCandidate]:
    """Parse a model answer into candidates.

    Accepts a bare JSON array, an object wrapping the array under
    ``skills``/``candidates``, or either embedded in prose.
    """
    data = _decode(text.strip())
    if isinstance(data, dict):
        data = data.get("skills", data.get("candidates", []))
    if not isinstance(data, list):
        raise LLMScorerError("Model answer is not a list of candidates")

    candidates = []
    for item in data:
        candidate = _coerce_item(item)
        if candidate is not None:
            candidates.append(candidate)
    return candidates


__all__ = ["LLMScorer", "LLMScorerError", "SCORER_SYSTEM_PROMPT", "parse_candidates"]
