from __future__ import annotations

from datetime import datetime

from vitals.schema import HealthAnalysis, HealthStatus, ProjectSnapshot, Task, to_iso

RECOMMENDATION_SYSTEM_PROMPT = (
    "You are an expert project manager AI. Always respond with valid JSON only, no markdown or extra text."
)
TASK_SUGGESTION_SYSTEM_PROMPT = "You are an expert project manager. Always respond with valid JSON array only."

RECENT_TITLES_LIMIT = 5


def _names(items: list[str]) -> str:
    return ", ".join(items) or "None"


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def _due_label(value: datetime | None) -> str:
    return value.date().isoformat() if value is not None else "Not set"


def task_title_groups(tasks: list[Task], now: datetime) -> dict[str, list[str]]:
    return {
        "completed": [task.title for task in tasks if task.is_completed][:RECENT_TITLES_LIMIT],
        "pending": [task.title for task in tasks if not task.is_completed][:RECENT_TITLES_LIMIT],
        "overdue": [task.title for task in tasks if task.is_overdue(now)],
    }


def build_recommendation_prompt(
    snapshot: ProjectSnapshot,
    analysis: HealthAnalysis,
    score: int,
    status: HealthStatus,
    now: datetime,
) -> str:
    project = snapshot.project
    titles = task_title_groups(snapshot.tasks, now)
    days_until_due = analysis.timeline.days_until_due
    return "\n".join(
        [
            "You are a project management AI assistant. Analyze this project and provide actionable insights.",
            "",
            "PROJECT DETAILS:",
            f"- Name: {project.name}",
            f"- Description: {project.description or 'No description'}",
            f"- Status: {project.status}",
            f"- Progress: {_format_number(project.progress)}%",
            f"- Due Date: {_due_label(project.due_date)}",
            f"- Days Until Due: {days_until_due if days_until_due is not None else 'N/A'}",
            f"- Is Overdue: {'Yes' if analysis.timeline.is_overdue else 'No'}",
            f"- Evaluated At: {to_iso(now)}",
            "",
            "TASK METRICS:",
            f"- Total Tasks: {analysis.tasks.total}",
            f"- Completed: {analysis.tasks.completed}",
            f"- Completion Rate: {analysis.tasks.completion_rate}%",
            f"- Overdue Tasks: {analysis.tasks.overdue}",
            f"- Recently Completed: {_names(titles['completed'])}",
            f"- Pending Tasks: {_names(titles['pending'])}",
            f"- Overdue Task Names: {_names(titles['overdue'])}",
            "",
            "MILESTONES:",
            f"- Total: {analysis.milestones.total}",
            f"- Completed: {analysis.milestones.completed}",
            f"- Overdue: {analysis.milestones.overdue}",
            "",
            "BUDGET:",
            f"- Utilization: {analysis.budget.utilization}%",
            f"- Remaining: {_format_number(analysis.budget.remaining)}",
            "",
            "HEALTH STATUS:",
            f"- Overall Score: {score}/100",
            f"- Status: {status}",
            f"- Timeline Score: {analysis.timeline.score}",
            f"- Task Score: {analysis.tasks.score}",
            f"- Milestone Score: {analysis.milestones.score}",
            f"- Timeline Issues: {'; '.join(analysis.timeline.issues) or 'None'}",
            f"- Task Issues: {'; '.join(analysis.tasks.issues) or 'None'}",
            "",
            "Based on this analysis, provide:",
            "1. A brief 1-2 sentence summary of the project's current state",
            "2. 3-5 specific, actionable recommendations to improve the project health",
            "3. 2-3 immediate next actions the team should take",
            "",
            "Format your response as JSON:",
            "{",
            '  "summary": "Brief summary of project state",',
            '  "recommendations": ["recommendation 1", "recommendation 2", ...],',
            '  "nextActions": ["action 1", "action 2", ...]',
            "}",
            "",
            "Be specific and practical. Reference actual task names and dates when relevant.",
        ]
    )


def build_task_suggestion_prompt(project_name: str, description: str, existing_titles: list[str]) -> str:
    return "\n".join(
        [
            "You are a project management AI. Break down this project into specific, actionable tasks.",
            "",
            f"PROJECT: {project_name}",
            f"DESCRIPTION: {description or 'No description provided'}",
            f"EXISTING TASKS: {_names(existing_titles)}",
            "",
            "Generate 5-8 new tasks that would help complete this project. Don't duplicate existing tasks.",
            "",
            "Format your response as JSON array:",
            "[",
            "  {",
            '    "title": "Task title",',
            '    "description": "Brief description of what needs to be done",',
            '    "priority": "low" | "medium" | "high",',
            '    "estimatedDuration": "e.g., 2 hours, 1 day, 1 week"',
            "  }",
            "]",
            "",
            "Tasks should be specific, measurable, and achievable. Order them by suggested execution sequence.",
        ]
    )


def _bullets(items: list[str], empty: str) -> str:
    return "\n".join(f"- {item}" for item in items) if items else f"- {empty}"


def build_status_summary_prompt(
    snapshot: ProjectSnapshot,
    recently_completed: list[str],
    in_progress: list[str],
    upcoming_milestones: list[str],
) -> str:
    project = snapshot.project
    return "\n".join(
        [
            "Generate a brief project status update (2-3 sentences) for stakeholders.",
            "",
            f"PROJECT: {project.name}",
            f"PROGRESS: {_format_number(project.progress)}%",
            f"STATUS: {project.status}",
            f"DUE DATE: {_due_label(project.due_date)}",
            "",
            "RECENTLY COMPLETED:",
            _bullets(recently_completed, "No recent completions"),
            "",
            "IN PROGRESS:",
            _bullets(in_progress, "No tasks in progress"),
            "",
            "UPCOMING MILESTONES:",
            _bullets(upcoming_milestones, "No upcoming milestones"),
            "",
            "Write a concise, professional status update that highlights progress and any key points. "
            "Do not use markdown formatting.",
        ]
    )
