from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional, TYPE_CHECKING

from sparkvibe.core.config import Settings
from sparkvibe.core.errors import UpstreamDegraded

if TYPE_CHECKING:
    from openai import OpenAI

log = logging.getLogger("sparkvibe.llm")

__all__ = ["LLMClient", "build_llm_client"]


def _extract_content(resp: Any) -> Optional[str]:
    if resp is None:
        return None
    choices = getattr(resp, "choices", None)
    if choices:
        first = choices[0]
        msg = getattr(first, "message", None)
        if msg is not None and getattr(msg, "content", None):
            return str(msg.content)
        if getattr(first, "text", None):
            return str(first.text)
    if isinstance(resp, dict):
        ch = resp.get("choices") or []
        if ch:
            msg = ch[0].get("message") or {}
            return msg.get("content") or ch[0].get("text")
    return None


def _strip_fences(raw: str) -> str:
    clean = raw.strip()
    if clean.startswith("```"):
        clean = clean.strip("`").strip()
        if clean.lower().startswith("json"):
            clean = clean[4:].strip()
    return clean


class LLMClient:
    """
    Thin JSON-mode wrapper over the OpenAI chat API.

    Every failure (transport, timeout, empty or non-JSON content) is raised as
    UpstreamDegraded; callers decide how to degrade.
    """

    def __init__(self, client: "OpenAI", *, model: str, temperature: float = 0.7):
        self._client = client
        self.model = model
        self.temperature = temperature

    def complete_json(self, system: str, user: str, *, max_tokens: int = 600,
                      temperature: Optional[float] = None) -> Dict[str, Any]:
        try:
            resp = self._client.chat.completions.create(
                model=self.model,
                temperature=self.temperature if temperature is None else temperature,
                max_tokens=max_tokens,
                response_format={"type": "json_object"},
                messages=[{"role": "system", "content": system},
                          {"role": "user", "content": user}],
            )
        except Exception as e:
            raise UpstreamDegraded(f"llm request failed: {type(e).__name__}: {e}") from e

        raw = _extract_content(resp)
        if not raw:
            raise UpstreamDegraded("llm returned empty content")
        try:
            data = json.loads(_strip_fences(raw))
        except json.JSONDecodeError as e:
            raise UpstreamDegraded(f"llm returned invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise UpstreamDegraded("llm returned a non-object JSON payload")
        return data


def build_llm_client(settings: Settings) -> Optional[LLMClient]:
    """
    Returns None when no API key is configured; the domain then runs on its
    static tables only.
    """
    if not settings.OPENAI_API_KEY:
        return None
    from openai import OpenAI

    client = OpenAI(
        api_key=settings.OPENAI_API_KEY,
        timeout=settings.LLM_TIMEOUT_S,
        max_retries=0,
    )
    log.info("llm client ready (model=%s, timeout=%.1fs)", settings.OPENAI_MODEL, settings.LLM_TIMEOUT_S)
    return LLMClient(client, model=settings.OPENAI_MODEL, temperature=settings.OPENAI_TEMPERATURE)
