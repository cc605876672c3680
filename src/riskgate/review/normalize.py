"""Normalize provider-specific reviewer output into shared Findings.

Each reviewer format has one normalization function in ``NORMALIZERS``;
every function yields plain ``Finding`` records, so nothing downstream
knows which provider produced a finding.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Iterator
from typing import Any

from riskgate.errors import SchemaError
from riskgate.review.types import (
    CATEGORIES,
    CONFIDENCES,
    DEFAULT_CATEGORY,
    DEFAULT_CONFIDENCE,
    DEFAULT_SEVERITY,
    SEVERITIES,
    Finding,
)

SEVERITY_ALIASES: dict[str, str] = {
    "blocker": "critical",
    "error": "high",
    "major": "high",
    "warning": "medium",
    "warn": "medium",
    "minor": "low",
    "note": "low",
    "nit": "low",
    "suggestion": "low",
    "none": "info",
    "informational": "info",
}

CATEGORY_ALIASES: dict[str, str] = {
    "bug": "correctness",
    "logic": "correctness",
    "vulnerability": "security",
    "perf": "performance",
    "design": "architecture",
    "readability": "maintainability",
    "lint": "style",
    "formatting": "style",
}

_SEVERITY_TAG = re.compile(r"\[(critical|high|medium|low|info)\]", re.IGNORECASE)

Normalizer = Callable[[str, str, Any], Iterator[Finding]]


def normalize_severity(value: Any) -> str:
    text = str(value).strip().lower() if value is not None else ""
    text = SEVERITY_ALIASES.get(text, text)
    return text if text in SEVERITIES else DEFAULT_SEVERITY


def normalize_confidence(value: Any) -> str:
    if isinstance(value, int | float) and not isinstance(value, bool):
        if value >= 0.8:
            return "high"
        if value >= 0.5:
            return "medium"
        return "low"
    text = str(value).strip().lower() if value is not None else ""
    return text if text in CONFIDENCES else DEFAULT_CONFIDENCE


def normalize_category(value: Any) -> str:
    text = str(value).strip().lower() if value is not None else ""
    text = CATEGORY_ALIASES.get(text, text)
    return text if text in CATEGORIES else DEFAULT_CATEGORY


def normalize_path(value: Any) -> str:
    path = str(value or "").strip().replace("\\", "/")
    while path.startswith("./"):
        path = path[2:]
    return path


def _first(item: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = item.get(key)
        if value is not None and value != "":
            return value
    return None


def _line(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def normalize_generic(provider: str, revision: str, raw: Any) -> Iterator[Finding]:
    """Flat list of finding objects with common field-name aliases."""
    if not isinstance(raw, list):
        raise SchemaError(f"Findings from provider '{provider}' must be a list")
    for index, item in enumerate(raw):
        if not isinstance(item, dict):
            raise SchemaError(f"Finding {index} from provider '{provider}' must be an object")
        fingerprint = _first(item, "fingerprint")
        yield Finding(
            providers=(provider,),
            file=normalize_path(_first(item, "file", "path", "filename")),
            line=_line(_first(item, "line", "start_line", "startLine", "line_number")),
            message=str(_first(item, "message", "body", "description", "title") or ""),
            severity=normalize_severity(_first(item, "severity", "level", "priority")),
            confidence=normalize_confidence(_first(item, "confidence")),
            category=normalize_category(_first(item, "category", "type", "kind")),
            revision=str(_first(item, "revision", "headSha", "commit_id") or revision),
            fingerprint=str(fingerprint) if fingerprint is not None else None,
        )


def normalize_sarif(provider: str, revision: str, raw: Any) -> Iterator[Finding]:
    """SARIF 2.1 log: one finding per result, first location wins."""
    if not isinstance(raw, dict) or not isinstance(raw.get("runs"), list):
        raise SchemaError(f"SARIF output from provider '{provider}' must contain a runs list")
    for run_index, run in enumerate(raw["runs"]):
        if not isinstance(run, dict):
            raise SchemaError(f"SARIF run {run_index} from provider '{provider}' must be an object")
        results = run.get("results", [])
        if not isinstance(results, list):
            raise SchemaError(f"SARIF run {run_index} from provider '{provider}' must hold a results list")
        for result_index, result in enumerate(results):
            if not isinstance(result, dict):
                raise SchemaError(
                    f"SARIF result {result_index} in run {run_index} from provider '{provider}' must be an object"
                )
            locations = result.get("locations") or [{}]
            physical = locations[0].get("physicalLocation", {})
            properties = result.get("properties", {})
            fingerprints = result.get("partialFingerprints") or result.get("fingerprints") or {}
            fingerprint = fingerprints[sorted(fingerprints)[0]] if fingerprints else None
            tags = properties.get("tags") or []
            yield Finding(
                providers=(provider,),
                file=normalize_path(physical.get("artifactLocation", {}).get("uri")),
                line=_line(physical.get("region", {}).get("startLine")),
                message=str(result.get("message", {}).get("text", "")),
                severity=normalize_severity(properties.get("severity") or result.get("level")),
                confidence=normalize_confidence(properties.get("confidence")),
                category=normalize_category(properties.get("category") or (tags[0] if tags else None)),
                revision=str(properties.get("revision") or revision),
                fingerprint=str(fingerprint) if fingerprint is not None else None,
            )


def normalize_review_comments(provider: str, revision: str, raw: Any) -> Iterator[Finding]:
    """Pull-request review comments; severity comes from a ``[level]`` tag in the body."""
    if not isinstance(raw, list):
        raise SchemaError(f"Review comments from provider '{provider}' must be a list")
    for index, item in enumerate(raw):
        if not isinstance(item, dict):
            raise SchemaError(f"Review comment {index} from provider '{provider}' must be an object")
        body = str(item.get("body", ""))
        tag = _SEVERITY_TAG.search(body)
        yield Finding(
            providers=(provider,),
            file=normalize_path(item.get("path")),
            line=_line(_first(item, "line", "original_line", "position")),
            message=_SEVERITY_TAG.sub("", body, count=1).strip() if tag else body.strip(),
            severity=normalize_severity(tag.group(1) if tag else None),
            confidence=DEFAULT_CONFIDENCE,
            category=DEFAULT_CATEGORY,
            revision=str(item.get("commit_id") or revision),
        )


NORMALIZERS: dict[str, Normalizer] = {
    "generic": normalize_generic,
    "sarif": normalize_sarif,
    "review-comments": normalize_review_comments,
}


def normalize(provider_payloads: Iterable[dict[str, Any]]) -> list[Finding]:
    """Flatten per-provider payloads into shared Findings.

    Each payload is ``{"provider", "findings", "revision"?, "format"?}``;
    ``format`` defaults to ``generic``.
    """
    findings: list[Finding] = []
    for index, payload in enumerate(provider_payloads):
        if not isinstance(payload, dict):
            raise SchemaError(f"Provider payload {index} must be an object")
        provider = str(payload.get("provider") or "unknown")
        fmt = str(payload.get("format") or "generic")
        normalizer = NORMALIZERS.get(fmt)
        if normalizer is None:
            raise SchemaError(f"Unknown findings format '{fmt}' for provider '{provider}'")
        findings.extend(normalizer(provider, str(payload.get("revision") or ""), payload.get("findings")))
    return findings
