"""Data models for assembled file context."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class SectionKind(str, Enum):
    """Kinds of section in an assembled context."""

    PRIMARY = "primary"
    RELATED = "related"
    TRUNCATION_NOTICE = "truncation-notice"


class ContextSection(BaseModel):
    """One rendered piece of an assembled context."""

    kind: SectionKind
    path: str  # relative to the project root
    body: str  # exact text contributed to the rendered output

    @classmethod
    def primary(cls, path: str, content: str) -> ContextSection:
        return cls(
            kind=SectionKind.PRIMARY,
            path=path,
            body=f"File: {path}\n\n```\n{content}\n```\n\n",
        )

    @classmethod
    def related(cls, path: str, content: str) -> ContextSection:
        return cls(
            kind=SectionKind.RELATED,
            path=path,
            body=f"Related file: {path}\n\n```\n{content}\n```\n\n",
        )

    @classmethod
    def truncation_notice(cls, path: str) -> ContextSection:
        return cls(
            kind=SectionKind.TRUNCATION_NOTICE,
            path=path,
            body=f"(Additional related file {path} not included due to context length limits)\n",
        )


class AssembledContext(BaseModel):
    """A primary file plus the related files that fit the budget.

    Sections keep the order they were produced in: the primary block, then
    related blocks and truncation notices in resolver order.
    """

    sections: list[ContextSection] = Field(default_factory=list)
    budget: int = 0
    total_length: int = 0  # primary + included related blocks, notices excluded

    def render(self) -> str:
        return "".join(section.body for section in self.sections)

    @property
    def primary(self) -> ContextSection | None:
        for section in self.sections:
            if section.kind == SectionKind.PRIMARY:
                return section
        return None

    @property
    def included(self) -> list[str]:
        """Relative paths of the related files that made it in."""
        return [s.path for s in self.sections if s.kind == SectionKind.RELATED]

    @property
    def skipped(self) -> list[str]:
        """Relative paths of the related files dropped for budget reasons."""
        return [s.path for s in self.sections if s.kind == SectionKind.TRUNCATION_NOTICE]

    def summary(self) -> str:
        """Human-readable summary of what's in the context."""
        primary = self.primary
        lines = [
            f"Primary: {primary.path if primary else '-'}",
            f"Length: {self.total_length:,} / {self.budget:,} chars",
            f"Related files: {len(self.included)} included, {len(self.skipped)} skipped",
        ]
        for path in self.included:
            lines.append(f"  + {path}")
        for path in self.skipped:
            lines.append(f"  - {path} (over budget)")
        return "\n".join(lines)
