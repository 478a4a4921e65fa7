from vitals.ai.providers.base import BaseTextProvider, TextCompletionError
from vitals.ai.suggestions import suggest_tasks, suggest_tasks_with_meta


class _Provider(BaseTextProvider):
    name = "fake"

    def __init__(self, reply: str = "", error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.prompts: list[str] = []
        self.configs = []

    def complete(self, prompt, config):
        self.prompts.append(prompt)
        self.configs.append(config)
        if self.error is not None:
            raise self.error
        return self.reply


REPLY = """```json
[
  {"title": "Design wireframes", "description": "Low fidelity screens", "priority": "high", "estimatedDuration": "2 days"},
  {"title": "Set up CI", "priority": "medium"},
  {"title": "design WIREFRAMES", "priority": "low"},
  {"title": "Write launch copy", "priority": "asap"}
]
```"""


def test_suggestions_are_validated_and_deduplicated():
    provider = _Provider(reply=REPLY)
    suggestions, gate = suggest_tasks_with_meta(provider, "Website", "Marketing site", ["Set up ci", " "])

    assert gate["fallback_applied"] is False
    assert gate["provider"] == "fake"
    assert [item.title for item in suggestions] == ["Design wireframes", "Write launch copy"]
    assert suggestions[1].priority == "medium"
    assert suggestions[0].estimated_duration == "2 days"
    assert "EXISTING TASKS: Set up ci\n" in provider.prompts[0]
    assert provider.configs[0].model == "advanced"
    assert provider.configs[0].temperature == 0.5


def test_defaults_fill_missing_fields():
    suggestions = suggest_tasks(_Provider(reply='[{"title": "Kickoff call"}]'), "Website", "")
    assert suggestions[0].priority == "medium"
    assert suggestions[0].description == ""
    assert suggestions[0].estimated_duration is None


def test_no_existing_tasks_prompt():
    provider = _Provider(reply="[]")
    suggestions, gate = suggest_tasks_with_meta(provider, "Website", "")
    assert suggestions == []
    assert gate["fallback_applied"] is False
    assert "EXISTING TASKS: None" in provider.prompts[0]
    assert "DESCRIPTION: No description provided" in provider.prompts[0]


def test_provider_failure_is_distinguishable_from_no_suggestions():
    suggestions, gate = suggest_tasks_with_meta(
        _Provider(error=TextCompletionError("TIMEOUT", "slow")), "Website", "Marketing site"
    )
    assert suggestions == []
    assert gate["fallback_applied"] is True
    assert gate["reason"] == "provider_error"


def test_unparseable_reply_yields_empty_list():
    suggestions, gate = suggest_tasks_with_meta(_Provider(reply="I cannot help with that."), "Website", "")
    assert suggestions == []
    assert gate["reason"] == "parse_failed"


def test_capitalized_priorities_are_accepted():
    reply = '[{"title": "Audit content", "priority": "High"}, {"title": "Migrate blog", "priority": " Medium "}]'
    suggestions, gate = suggest_tasks_with_meta(_Provider(reply=reply), "Website", "")

    assert gate["fallback_applied"] is False
    assert [(item.title, item.priority) for item in suggestions] == [
        ("Audit content", "high"),
        ("Migrate blog", "medium"),
    ]
