from vitals.ai.gate import ParseResult, extract_json, run_contract
from vitals.ai.recommender import generate_recommendations
from vitals.ai.status_summary import generate_status_summary
from vitals.ai.suggestions import suggest_tasks, suggest_tasks_with_meta

__all__ = [
    "ParseResult",
    "extract_json",
    "run_contract",
    "generate_recommendations",
    "generate_status_summary",
    "suggest_tasks",
    "suggest_tasks_with_meta",
]
