from __future__ import annotations

from vitals.ai.contracts.recommendation_contract import (
    RecommendationContract,
    fallback_recommendation_contract,
)
from vitals.ai.contracts.task_suggestion_contract import (
    fallback_task_suggestions,
    validate_task_suggestions,
)

CONTRACT_KINDS = {
    "recommendations": "object",
    "task_suggestions": "array",
}

CONTRACT_MODELS = {
    "recommendations": RecommendationContract,
}

FALLBACK_BUILDERS = {
    "recommendations": fallback_recommendation_contract,
    "task_suggestions": fallback_task_suggestions,
}
