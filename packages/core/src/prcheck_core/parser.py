"""Turn the model's free-text answer into analysis fields.

The model is asked for a JSON object, but answers arrive wrapped in prose,
fenced, truncated or not as JSON at all. parse_model_response() tries the
JSON object first and falls back to reading ``LABEL: value`` sections out of
the text. Neither path raises: anything that cannot be read becomes a
sentinel (JSON path) or None (text path, so the caller picks the default).
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass

from prcheck_core.models import NOT_APPLICABLE, RISK_LEVELS, UNKNOWN_RISK, Score

logger = logging.getLogger(__name__)

RAW_PREFIX_CHARS = 500

DEFAULT_MISSING_REQUIREMENTS = "Unable to determine"
DEFAULT_IMPLEMENTATION_QUALITY = "Not assessed"
DEFAULT_RECOMMENDATIONS = ("No specific recommendations",)

_LABELS = (
    "CORRECTNESS_SCORE",
    "COMPLETENESS_SCORE",
    "RISK_LEVEL",
    "MISSING_REQUIREMENTS",
    "IMPLEMENTATION_QUALITY",
    "RECOMMENDATIONS",
)

# Greedy on purpose: first "{" to last "}" so nested objects stay intact.
_JSON_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)

# Leading decoration a model puts in front of a label: "1. ", "- ", "**", "### ", quotes.
_LINE_PREFIX = r"^[^\w\n]*(?:\d+[.)][^\w\n]*)?"
_BULLET_RE = re.compile(r"^\s*(?:[-*+•]|\d+[.)])\s+")


def _label(name: str) -> str:
    # Accept "RISK_LEVEL", "Risk Level" and "risk-level" alike.
    return r"[_\s-]".join(name.split("_"))


_ANY_LABEL = "|".join(_label(name) for name in _LABELS)
_NEXT_SECTION = rf"[^\w\n]*(?:\d+[.)][^\w\n]*)?(?:{_ANY_LABEL}|\w+)[^\w\n]*:"


def _score_re(name: str) -> re.Pattern:
    return re.compile(rf"\b{_label(name)}[^\w\n]*(\d+(?:\.\d+)?)", re.IGNORECASE)


def _section_re(name: str) -> re.Pattern:
    return re.compile(
        rf"{_LINE_PREFIX}{_label(name)}[^\w\n]*([^\n]*(?:\n(?!{_NEXT_SECTION})[^\n]*)*)",
        re.IGNORECASE | re.MULTILINE,
    )


_SCORE_RES = {name: _score_re(name) for name in ("CORRECTNESS_SCORE", "COMPLETENESS_SCORE")}
_SECTION_RES = {
    name: _section_re(name) for name in ("MISSING_REQUIREMENTS", "IMPLEMENTATION_QUALITY", "RECOMMENDATIONS")
}
_RISK_RE = re.compile(rf"\b{_label('RISK_LEVEL')}[^\w\n]*(LOW|MEDIUM|HIGH)\b", re.IGNORECASE)


@dataclass(frozen=True)
class ParsedResponse:
    """Fields read out of one model answer.

    ``structured`` is True when the JSON object was decoded. On the text path
    any field that was not found is None and ``raw_response`` keeps the start
    of the answer for display.
    """

    correctness_score: Score | None
    completeness_score: Score | None
    risk_level: str
    missing_requirements: str | None
    implementation_quality: str | None
    recommendations: tuple[str, ...] | None
    structured: bool
    raw_response: str | None = None


def _coerce_score(value) -> Score | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip().split("/")[0])
        except ValueError:
            return None
    if not isinstance(value, (int, float)) or not 0 <= value <= 10:
        return None
    return int(value) if float(value).is_integer() else round(float(value), 1)


def _coerce_risk(value) -> str:
    if isinstance(value, str) and value.strip().upper() in RISK_LEVELS:
        return value.strip().upper()
    return UNKNOWN_RISK


def _coerce_text(value, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def _coerce_recommendations(value) -> tuple[str, ...]:
    if isinstance(value, list):
        return tuple(str(item).strip() for item in value if item is not None and str(item).strip())
    if isinstance(value, str) and value.strip():
        return (value.strip(),)
    return DEFAULT_RECOMMENDATIONS


def _from_payload(payload: dict) -> ParsedResponse:
    correctness = _coerce_score(payload.get("correctness_score"))
    completeness = _coerce_score(payload.get("completeness_score"))
    return ParsedResponse(
        correctness_score=NOT_APPLICABLE if correctness is None else correctness,
        completeness_score=NOT_APPLICABLE if completeness is None else completeness,
        risk_level=_coerce_risk(payload.get("risk_level")),
        missing_requirements=_coerce_text(payload.get("missing_requirements"), DEFAULT_MISSING_REQUIREMENTS),
        implementation_quality=_coerce_text(payload.get("implementation_quality"), DEFAULT_IMPLEMENTATION_QUALITY),
        recommendations=_coerce_recommendations(payload.get("recommendations")),
        structured=True,
    )


def extract_score(text: str, label: str) -> Score | None:
    match = _SCORE_RES[label].search(text)
    return _coerce_score(match.group(1)) if match else None


def extract_risk_level(text: str) -> str:
    match = _RISK_RE.search(text)
    return match.group(1).upper() if match else UNKNOWN_RISK


def extract_section(text: str, label: str) -> str | None:
    match = _SECTION_RES[label].search(text)
    if not match:
        return None
    return match.group(1).strip().strip('",').strip() or None


def split_recommendations(section: str | None) -> tuple[str, ...] | None:
    """Split a bulleted section into one entry per bullet; unbulleted text stays one entry."""
    if section is None:
        return None
    lines = [line for line in section.splitlines() if line.strip()]
    if len(lines) > 1 and all(_BULLET_RE.match(line) for line in lines):
        return tuple(_BULLET_RE.sub("", line).strip() for line in lines)
    return (section,)


def _from_text(raw: str) -> ParsedResponse:
    return ParsedResponse(
        correctness_score=extract_score(raw, "CORRECTNESS_SCORE"),
        completeness_score=extract_score(raw, "COMPLETENESS_SCORE"),
        risk_level=extract_risk_level(raw),
        missing_requirements=extract_section(raw, "MISSING_REQUIREMENTS"),
        implementation_quality=extract_section(raw, "IMPLEMENTATION_QUALITY"),
        recommendations=split_recommendations(extract_section(raw, "RECOMMENDATIONS")),
        structured=False,
        raw_response=raw[:RAW_PREFIX_CHARS],
    )


def parse_model_response(raw: str) -> ParsedResponse:
    match = _JSON_OBJECT_RE.search(raw)
    if match:
        try:
            payload = json.loads(match.group(0))
        except json.JSONDecodeError:
            logger.warning("Failed to parse model response as JSON, using text parsing: %s", raw[:200])
        else:
            return _from_payload(payload)
    return _from_text(raw)
