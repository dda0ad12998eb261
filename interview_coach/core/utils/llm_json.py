"""Utilities for robustly extracting and validating JSON from LLM responses."""

from __future__ import annotations
import json
import re
from typing import Any

from pydantic import ValidationError

from ..errors import MalformedResponse
from ..models import Evaluation, RoadmapPlan, RoadmapStep

_JSON_BLOCK = re.compile(r"(\{.*\}|\[.*\])", re.DOTALL)


def _strip_code_fences(text: str) -> str:
    """Remove surrounding ```...``` fences (with or without 'json') if present."""
    t = text.strip()
    if t.startswith("```") and t.endswith("```"):
        t = re.sub(r"^```[A-Za-z0-9_-]*\s*", "", t, flags=re.DOTALL)
        t = re.sub(r"\s*```$", "", t, flags=re.DOTALL)
    return t.strip()


def extract_json(text: str) -> Any:
    """
    Extract and parse the first JSON object/array from an LLM response.
    - Safely handles code fences and leading/trailing prose.
    - Returns None when nothing parseable is found.
    """
    if not text:
        return None
    t = _strip_code_fences(text)

    try:
        return json.loads(t)
    except json.JSONDecodeError:
        pass

    m = _JSON_BLOCK.search(t)
    if not m:
        return None
    try:
        return json.loads(m.group(1))
    except json.JSONDecodeError:
        return None


def require_object(text: str, err: str = "Expected a JSON object.") -> dict:
    """Strict: must return an object, else raise MalformedResponse."""
    data = extract_json(text)
    if not isinstance(data, dict):
        raise MalformedResponse(err)
    return data


def require_array(text: str, err: str = "Expected a JSON array.") -> list:
    """Strict: must return an array, else raise MalformedResponse."""
    data = extract_json(text)
    if not isinstance(data, list):
        raise MalformedResponse(err)
    return data


def parse_evaluation(data: Any) -> Evaluation:
    """Validate a decoded JSON object into an Evaluation."""
    try:
        return Evaluation.model_validate(data)
    except ValidationError as e:
        raise MalformedResponse(f"Evaluation does not match the schema: {e}") from e


def parse_roadmap(data: Any) -> list[RoadmapStep]:
    """
    Validate decoded roadmap JSON. Accepts either a bare array of items or an
    object wrapping it under "items" (shape used where the backend needs an
    object at the schema root).
    """
    if isinstance(data, dict):
        data = data.get("items")
    if not isinstance(data, list):
        raise MalformedResponse("Roadmap must be a JSON array of items.")
    try:
        return list(RoadmapPlan.model_validate({"items": data}).items)
    except ValidationError as e:
        raise MalformedResponse(f"Roadmap does not match the schema: {e}") from e
