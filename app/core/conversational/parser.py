"""LLM-backed interpretation of free-text creator briefs."""
from __future__ import annotations

import json
import os
from typing import Any, Dict, List, Optional

from openai import OpenAI

from app.core.criteria import Platform, Region, SearchCriteria


class ConversationalParserError(RuntimeError):
    """Raised when the model call fails or returns something that is not criteria JSON."""


CRITERIA_SCHEMA = (
    '{"platforms": [<platform>], "regions": [<region>], "tags": [<lowercase phrase>], '
    '"min_followers": <int|null>, "max_followers": <int|null>, '
    '"min_viewers": <int|null>, "max_viewers": <int|null>, '
    '"is_live": <bool|null>, "uses_camera": <bool|null>, "is_vtuber": <bool|null>, '
    '"language": <ISO 639-1 code|null>, "limit": <int 1-10000|null>}'
)


def _strip_fences(text: str) -> str:
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = cleaned.split("\n", 1)[1] if "\n" in cleaned else ""
        if cleaned.rstrip().endswith("```"):
            cleaned = cleaned.rstrip()[:-3]
    return cleaned.strip()


class ConversationalParser:
    """Turn a brief into SearchCriteria with an OpenAI model."""

    def __init__(
        self,
        *,
        model: str = "gpt-5-mini",
        api_key: Optional[str] = None,
        client: Optional[Any] = None,
    ) -> None:
        self.model = model
        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        if client is None and not self.api_key:
            raise RuntimeError("OPENAI_API_KEY must be set to use the conversational parser")
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = OpenAI(api_key=self.api_key)
        return self._client

    def _call_openai(self, prompt: str) -> str:
        response = self._get_client().responses.create(
            model=self.model,
            input=[{"role": "user", "content": prompt}],
            text={"format": {"type": "text"}},
        )

        if getattr(response, "output_text", None):
            return str(response.output_text).strip()

        data = response.model_dump(mode="json")
        if isinstance(data, dict):
            if data.get("output_text"):
                return str(data["output_text"]).strip()
            output_items = data.get("output", [])
            if isinstance(output_items, list):
                parts: List[str] = []
                for item in output_items:
                    if isinstance(item, dict) and item.get("type") == "output_text" and item.get("content"):
                        parts.append(str(item["content"]))
                if parts:
                    return "\n".join(parts).strip()
        return str(response)

    def build_prompt(self, text: str, context: Optional[SearchCriteria] = None) -> str:
        lines: List[str] = []
        lines.append("Extract creator search filters from a marketing brief.")
        lines.append("")
        lines.append("Allowed platforms: " + ", ".join(p.value for p in Platform))
        lines.append("Allowed regions: " + ", ".join(r.value for r in Region))
        lines.append("Tags are lowercase content phrases; keep multi-word subjects such as 'sports betting' together.")
        lines.append("Only set limit when the brief asks for a specific number of creators.")
        if context is not None:
            lines.append("")
            lines.append("Filters already known from the conversation (refine, do not discard):")
            lines.append(json.dumps(context.to_dict(), ensure_ascii=False))
        lines.append("")
        lines.append("Brief:")
        lines.append(text)
        lines.append("")
        lines.append("Return ONLY a strict JSON object with the following schema, no extra text:")
        lines.append(CRITERIA_SCHEMA)
        return "\n".join(lines)

    def parse(self, text: str, context: Optional[SearchCriteria] = None) -> SearchCriteria:
        prompt = self.build_prompt(text, context)
        try:
            raw = self._call_openai(prompt)
            payload: Dict[str, Any] = json.loads(_strip_fences(raw or ""))
        except Exception as exc:  # pylint: disable=broad-except
            raise ConversationalParserError(f"Conversational parsing failed: {exc}") from exc

        if not isinstance(payload, dict):
            raise ConversationalParserError("Conversational parser returned a non-object payload")
        try:
            return SearchCriteria.from_dict(payload)
        except (TypeError, ValueError) as exc:
            raise ConversationalParserError(f"Unusable criteria payload: {exc}") from exc
