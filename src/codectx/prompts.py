"""Prompt construction for the inference backend."""

from __future__ import annotations

from pathlib import Path

from codectx.config import PromptConfig

# Language detection by file extension
EXTENSION_LANGUAGE_MAP: dict[str, str] = {
    ".go": "go",
    ".py": "python",
    ".pyi": "python",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".rs": "rust",
    ".java": "java",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".hpp": "cpp",
    ".rb": "ruby",
    ".sh": "bash",
    ".md": "markdown",
}


def detect_language(file_path: str) -> str:
    """Detect programming language from file extension ("text" if unknown)."""
    ext = Path(file_path).suffix.lower()
    return EXTENSION_LANGUAGE_MAP.get(ext, "text")


def build_prompt(
    task: str,
    language: str,
    context: str,
    user_prompt: str,
    prompts: PromptConfig | None = None,
) -> str:
    """Build the prompt text for a task, embedding assembled context."""
    prompts = prompts or PromptConfig()
    system = prompts.system_prompts.get(task, prompts.fallback_prompt)
    return (
        f"System: {system}\n"
        f"Language: {language}\n"
        f"Context:\n```\n{context}\n```\n\n"
        f"User request: {user_prompt}"
    )
