"""Prompt files are clean markdown: a ``# Title`` line, a blank line, the body."""

from bouldy_vault.models.prompt import PromptContent

DEFAULT_TITLE = "Untitled"


def parse_prompt_content(content: str) -> PromptContent:
    lines = content.splitlines()
    if not lines:
        return PromptContent(title=DEFAULT_TITLE, content="")

    if lines[0].startswith("# "):
        return PromptContent(
            title=lines[0][2:].strip(),
            content="\n".join(lines[1:]).strip(),
        )
    return PromptContent(title=DEFAULT_TITLE, content="\n".join(lines).strip())


def serialize_prompt_content(prompt: PromptContent) -> str:
    return f"# {prompt.title}\n\n{prompt.content}"
