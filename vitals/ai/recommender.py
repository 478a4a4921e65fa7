from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Any

from vitals.ai.gate import run_contract
from vitals.ai.prompts import RECOMMENDATION_SYSTEM_PROMPT, build_recommendation_prompt
from vitals.ai.providers.base import BaseTextProvider, CompletionConfig, TextCompletionError
from vitals.schema import HealthAnalysis, HealthStatus, ProjectSnapshot

logger = logging.getLogger(__name__)

RECOMMENDATION_CONFIG = CompletionConfig(
    model="advanced",
    temperature=0.3,
    max_tokens=1024,
    system_prompt=RECOMMENDATION_SYSTEM_PROMPT,
)


def generate_recommendations(
    provider: BaseTextProvider,
    snapshot: ProjectSnapshot,
    analysis: HealthAnalysis,
    score: int,
    status: HealthStatus,
    now: datetime,
    *,
    timeout_s: float | None = None,
) -> tuple[dict[str, Any], dict[str, Any]]:
    """Summary, recommendations and next actions for one analysis.

    Never raises for provider or parsing trouble: the rule-based contract is
    returned instead and the gate records why.
    """
    prompt = build_recommendation_prompt(snapshot, analysis, score, status, now)
    config = replace(RECOMMENDATION_CONFIG, timeout_s=timeout_s)

    raw = ""
    upstream_error = ""
    try:
        raw = provider.complete(prompt, config)
    except TextCompletionError as exc:
        upstream_error = exc.code
        logger.warning("recommendations provider=%s failed code=%s message=%s", provider.name, exc.code, exc.message)
    except Exception:
        upstream_error = "UNEXPECTED_ERROR"
        logger.exception("recommendations provider=%s raised unexpectedly", provider.name)

    contract, gate = run_contract(
        "recommendations",
        raw,
        {"analysis": analysis, "status": status},
        upstream_error=upstream_error,
    )
    gate["provider"] = provider.name
    if gate["fallback_applied"] and not upstream_error:
        logger.warning(
            "recommendations provider=%s fell back reason=%s errors=%s",
            provider.name,
            gate["reason"],
            gate["validation_errors"],
        )
    return contract, gate
