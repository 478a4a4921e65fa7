from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Callable, Literal

from pydantic import ValidationError

from vitals.ai.contracts import CONTRACT_KINDS, CONTRACT_MODELS, FALLBACK_BUILDERS, validate_task_suggestions

JsonKind = Literal["object", "array"]

_FENCE_OPEN_RE = re.compile(r"^```[a-zA-Z]*\s*")
_FENCE_CLOSE_RE = re.compile(r"\s*```$")
_OPENERS = {"object": "{", "array": "["}
_DECODER = json.JSONDecoder()


@dataclass(frozen=True)
class ParseResult:
    ok: bool
    value: Any = None
    error: str = ""
    reason: str = ""

    @classmethod
    def success(cls, value: Any) -> "ParseResult":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, reason: str, error: str) -> "ParseResult":
        return cls(ok=False, reason=reason, error=error)

    def then(self, step: Callable[[Any], "ParseResult"]) -> "ParseResult":
        return step(self.value) if self.ok else self

    def on_error(self, fallback: Callable[["ParseResult"], Any]) -> Any:
        return self.value if self.ok else fallback(self)


def _strip_fences(text: str) -> str:
    stripped = text.strip()
    if stripped.startswith("```"):
        stripped = _FENCE_OPEN_RE.sub("", stripped)
        stripped = _FENCE_CLOSE_RE.sub("", stripped)
    return stripped


def _matches(value: Any, kind: JsonKind) -> bool:
    return isinstance(value, dict) if kind == "object" else isinstance(value, list)


def extract_json(raw: Any, kind: JsonKind = "object") -> ParseResult:
    """Pull the first JSON object or array out of free-form model text."""
    if _matches(raw, kind):
        return ParseResult.success(raw)
    if not isinstance(raw, str) or not raw.strip():
        return ParseResult.failure("parse_failed", "empty response")

    text = _strip_fences(raw)
    open_char = _OPENERS[kind]
    start = text.find(open_char)
    last_error = ""
    while start >= 0:
        try:
            parsed, _ = _DECODER.raw_decode(text, start)
        except json.JSONDecodeError as exc:
            last_error = exc.msg
        else:
            if _matches(parsed, kind):
                return ParseResult.success(parsed)
        start = text.find(open_char, start + 1)

    if last_error:
        return ParseResult.failure("parse_failed", f"invalid JSON: {last_error}")
    return ParseResult.failure("parse_failed", f"no JSON {kind} found in response")


def _validate(task: str, value: Any) -> ParseResult:
    if task == "task_suggestions":
        try:
            accepted, _ = validate_task_suggestions(value)
        except ValueError as exc:
            return ParseResult.failure("schema_validation_failed", str(exc))
        return ParseResult.success(accepted)

    model = CONTRACT_MODELS[task]
    try:
        return ParseResult.success(model.model_validate(value).model_dump(by_alias=True))
    except ValidationError as exc:
        errors = [err.get("msg", "validation error") for err in exc.errors()]
        return ParseResult.failure("schema_validation_failed", "; ".join(errors[:5]))


def fallback_contract(task: str, context: dict[str, Any] | None = None) -> Any:
    builder = FALLBACK_BUILDERS.get(task)
    if builder is None:
        raise KeyError(f"unsupported ai task: {task}")
    return builder(dict(context or {}))


def run_contract(
    task: str,
    raw: Any,
    context: dict[str, Any] | None = None,
    *,
    upstream_error: str = "",
) -> tuple[Any, dict[str, Any]]:
    """Validate a model response for ``task``; any failure lands on the task's fallback.

    ``upstream_error`` marks a provider failure, in which case ``raw`` is ignored.
    """
    kind = CONTRACT_KINDS.get(task)
    if kind is None:
        raise KeyError(f"unsupported ai task: {task}")

    if upstream_error:
        result = ParseResult.failure("provider_error", upstream_error)
    else:
        result = extract_json(raw, kind).then(lambda value: _validate(task, value))

    gate: dict[str, Any] = {
        "fallback_applied": not result.ok,
        "reason": result.reason,
        "validation_errors": [result.error] if result.error else [],
    }
    contract = result.on_error(lambda failed: fallback_contract(task, context))
    return contract, gate
