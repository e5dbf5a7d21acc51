from pathlib import Path

PROMPTS_DIR = Path(__file__).parent / "prompts"


class PromptLoadError(Exception):
    pass


def load_challenge_prompt() -> str:
    """Load the daily challenge prompt template"""
    try:
        return (PROMPTS_DIR / "daily_challenge.md").read_text(encoding="utf-8")
    except OSError as e:
        raise PromptLoadError(f"Error loading daily challenge prompt: {str(e)}")


def render_prompt(template: str, **values: str) -> str:
    """Fill {{PLACEHOLDER}} markers in a prompt template"""
    for name, value in values.items():
        template = template.replace("{{" + name.upper() + "}}", value)
    return template
