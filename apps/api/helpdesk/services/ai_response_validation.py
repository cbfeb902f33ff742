"""Helpers for parsing and validating AI JSON responses."""

from __future__ import annotations

import json
import logging
import re
from typing import TypeVar

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")


def _strip_code_fences(text: str) -> str:
    content = text.strip()
    if content.startswith("```"):
        lines = content.splitlines()[1:]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        content = "\n".join(lines).strip()
    return content


def parse_json_object(text: str | None) -> dict | None:
    """Extract a JSON object from model output (fenced or surrounded by prose)."""
    if not text:
        return None
    content = _strip_code_fences(text)
    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        match = _OBJECT_PATTERN.search(content)
        if not match:
            logger.warning(f"Failed to parse JSON object: {exc}")
            return None
        try:
            data = json.loads(match.group(0))
        except json.JSONDecodeError as inner_exc:
            logger.warning(f"Failed to parse JSON object: {inner_exc}")
            return None
    return data if isinstance(data, dict) else None


def validate_model(model_cls: type[ModelT], data: dict | None) -> ModelT | None:
    if data is None:
        return None
    try:
        return model_cls.model_validate(data)
    except ValidationError as exc:
        logger.warning(f"Model validation failed: {exc.error_count()} error(s)")
        return None


def parse_model(model_cls: type[ModelT], text: str | None) -> ModelT | None:
    """Parse model output straight into `model_cls`, or None if it does not fit."""
    return validate_model(model_cls, parse_json_object(text))
