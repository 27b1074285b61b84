# src/epistemic_core/cognition/ai_models/openai_client.py

import asyncio
import json
import os
import re
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

from dotenv import load_dotenv
from openai import OpenAI, OpenAIError

from epistemic_core.cognition.scorer_interface import EvidenceScorerInterface

if TYPE_CHECKING:
    from epistemic_core.epistemic.justification import JustificationElement
    from epistemic_core.frames.frame_interface import FrameInterface

load_dotenv()

# Created on first use so that importing this module never needs an API key.
_client: Optional[OpenAI] = None


class LLMQueryError(Exception):
    """Raised when a completion request fails or returns nothing usable."""

    pass


def get_client() -> OpenAI:
    """
    Initializes and returns the OpenAI client instance on demand.
    """
    global _client
    if _client is None:
        api_key = os.getenv("OPENAI_API_KEY")
        if not api_key:
            raise OpenAIError(
                "The OPENAI_API_KEY environment variable is not set. Please set it in your .env file or environment."
            )
        _client = OpenAI(api_key=api_key)
    return _client


def _as_dict(llm_config: Any) -> Dict[str, Any]:
    if llm_config is None:
        return {}
    if hasattr(llm_config, "model_dump"):
        return llm_config.model_dump()
    return dict(llm_config)


def query_llm(prompt_text: str, llm_config: Optional[Any] = None) -> Tuple[str, int, float]:
    """
    Queries the LLM, returning the response, token usage, and estimated cost.

    Raises:
        LLMQueryError: If the request fails or the response has no content.
    """
    client = get_client()
    config = _as_dict(llm_config)
    model_name = config.get("completion_model", "gpt-4.1-nano")
    temp = config.get("temperature", 0.0)
    max_tok = config.get("max_tokens", 300)
    timeout = config.get("timeout", 30.0)

    pricing = {
        "gpt-4o-mini": {"prompt": 0.15 / 1_000_000, "completion": 0.60 / 1_000_000},
        "gpt-4.1-nano": {"prompt": 0.10 / 1_000_000, "completion": 0.40 / 1_000_000},
    }
    model_pricing = pricing.get(model_name, pricing["gpt-4o-mini"])

    try:
        response = client.chat.completions.create(
            model=model_name,
            messages=[{"role": "user", "content": prompt_text}],
            temperature=temp,
            max_tokens=max_tok,
            timeout=timeout,
        )
    except Exception as e:
        raise LLMQueryError(f"Error querying OpenAI: {e}") from e

    response_text = ""
    if response.choices and response.choices[0].message and response.choices[0].message.content:
        response_text = response.choices[0].message.content.strip()
    if not response_text:
        raise LLMQueryError("OpenAI returned an empty completion.")

    usage = response.usage
    if usage:
        cost = (usage.prompt_tokens * model_pricing["prompt"]) + (usage.completion_tokens * model_pricing["completion"])
        return response_text, usage.total_tokens, cost
    return response_text, 0, 0.0


_NUMBER_PATTERN = re.compile(r"-?\d+(?:\.\d+)?")


def parse_score(text: str) -> float:
    """Pulls the first number out of a completion. Raises ValueError if there is none."""
    match = _NUMBER_PATTERN.search(text)
    if match is None:
        raise ValueError(f"No numeric score in LLM response: {text[:80]!r}")
    return float(match.group(0))


def parse_json_payload(text: str) -> Any:
    """Parses a JSON completion, tolerating a surrounding markdown code fence."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = cleaned.strip("`")
        if cleaned.lower().startswith("json"):
            cleaned = cleaned[4:]
    return json.loads(cleaned)


def _describe(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, default=str)


class OpenAIEvidenceScorer(EvidenceScorerInterface):
    """
    An evidence scorer backed by chat completions.

    The blocking client runs in a worker thread. Parse failures raise, so
    the EvidenceScaffold wrapping this scorer substitutes its defaults.
    """

    def __init__(self, llm_config: Optional[Any] = None) -> None:
        self.llm_config = llm_config
        self.total_tokens = 0
        self.total_cost = 0.0

    async def _ask(self, prompt: str) -> str:
        text, tokens, cost = await asyncio.to_thread(query_llm, prompt, self.llm_config)
        self.total_tokens += tokens
        self.total_cost += cost
        return text

    async def judge_evidence_strength(self, element: "JustificationElement", proposition: str) -> float:
        prompt = (
            f"Evidence of type '{element.type}' from '{element.source}': {_describe(element.content)}\n"
            f"On a scale from 0 to 1, how strongly does this evidence support the claim '{proposition}'? "
            "Answer with a single number."
        )
        return parse_score(await self._ask(prompt))

    async def judge_evidence_saliency(self, element: "JustificationElement", frame: "FrameInterface") -> float:
        prompt = (
            f"You reason from the '{frame.name}' perspective. "
            f"Evidence of type '{element.type}': {_describe(element.content)}\n"
            "On a scale from 0 to 1, how important is this evidence from that perspective? "
            "Answer with a single number."
        )
        return parse_score(await self._ask(prompt))

    async def extract_relevant_propositions(self, data: Any, frame: "FrameInterface") -> List[str]:
        prompt = (
            f"You reason from the '{frame.name}' perspective. Given this input:\n{_describe(data)}\n"
            "List the claims it bears on as a JSON array of short CamelCase identifiers. "
            "Prefix a claim with '¬' if the input argues against it. Answer with JSON only."
        )
        payload = parse_json_payload(await self._ask(prompt))
        if not isinstance(payload, list):
            raise ValueError("Expected a JSON array of propositions.")
        return [str(p) for p in payload]

    async def interpret_perception(self, data: Any, frame: "FrameInterface") -> Any:
        prompt = (
            f"You reason from the '{frame.name}' perspective. Summarise the following input as that "
            f"perspective would read it, in one or two sentences:\n{_describe(data)}"
        )
        interpretation = await self._ask(prompt)
        if isinstance(data, dict):
            return {**data, "interpretation": interpretation}
        return {"content": data, "interpretation": interpretation}
