from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

from paperlens.application.prompts.summary_prompts import (
    DETAILED_SUMMARY_USER,
    MEDIUM_SUMMARY_USER,
    SHORT_SUMMARY_USER,
    SUMMARY_SYSTEM,
)


@dataclass(frozen=True)
class PromptTemplate:
    name: str
    system: str
    user: str

    def render(self, **values: object) -> str:
        return self.user.format(**values)


class PromptRegistry:
    def __init__(self) -> None:
        self._templates: Dict[str, PromptTemplate] = {
            "short_summary": PromptTemplate(
                name="short_summary",
                system=SUMMARY_SYSTEM,
                user=SHORT_SUMMARY_USER,
            ),
            "medium_summary": PromptTemplate(
                name="medium_summary",
                system=SUMMARY_SYSTEM,
                user=MEDIUM_SUMMARY_USER,
            ),
            "detailed_summary": PromptTemplate(
                name="detailed_summary",
                system=SUMMARY_SYSTEM,
                user=DETAILED_SUMMARY_USER,
            ),
        }

    def get(self, name: str) -> PromptTemplate:
        key = (name or "").strip().lower()
        if key not in self._templates:
            raise KeyError(f"Unknown prompt template: {name}")
        return self._templates[key]

    def list(self) -> List[str]:
        return sorted(self._templates.keys())
