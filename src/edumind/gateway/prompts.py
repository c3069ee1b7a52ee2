"""Gateway prompt templates, overridable from config/prompts/gateway.yaml."""

from functools import lru_cache
from pathlib import Path

import yaml

PROMPTS_PATH = Path(__file__).parent.parent.parent.parent / "config" / "prompts" / "gateway.yaml"

DEFAULT_PROMPTS: dict[str, dict[str, str]] = {
    "doubt_solving": {
        "system_prompt": (
            "You are an elite, world-class educator. Provide the clearest possible "
            "explanations. Use Markdown for formatting and LaTeX ($...$, $$...$$) "
            "for all math."
        ),
        "attachment_prompt": "Analyze this document/image for me.",
    },
    "quiz": {
        "system_prompt": (
            "You write multiple choice quizzes for students. Respond ONLY with a JSON "
            'object: {"questions": [{"question": str, "options": [str], '
            '"correctAnswer": int, "explanation": str}]}'
        ),
        "user_prompt": (
            'Generate a {count}-question multiple choice quiz about "{topic}" with '
            'difficulty level "{difficulty}". Ensure there are exactly {count} questions.'
        ),
    },
    "summary": {
        "user_prompt": (
            "Transform the following study notes into a highly concise summary with "
            "sections Core Concept, Key Takeaways (max 5) and Important Terms.\n\n"
            "Notes to summarize:\n{text}"
        ),
    },
    "plan": {
        "system_prompt": (
            "You build day-by-day study schedules. Respond ONLY with a JSON object: "
            '{"plan": [{"day": str, "tasks": [{"time": str, "task": str, '
            '"priority": "High|Medium|Low"}]}]}'
        ),
        "user_prompt": (
            'Create a daily study plan for the "{exam_name}" exam. I have {days} days '
            "left and can study {hours} hours per day."
        ),
    },
}


@lru_cache(maxsize=4)
def load_prompts(path: Path = PROMPTS_PATH) -> dict[str, dict[str, str]]:
    """Merge prompts from YAML over the built-in defaults, section by section."""
    prompts = {name: dict(section) for name, section in DEFAULT_PROMPTS.items()}
    if not path.exists():
        return prompts
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    for name, section in data.items():
        if isinstance(section, dict):
            prompts.setdefault(name, {}).update(
                {k: str(v) for k, v in section.items() if v is not None}
            )
    return prompts
