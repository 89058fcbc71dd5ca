"""
Extraction tags for reasoning models that inline their thinking.

With one tag (``think``), everything inside ``<think>...</think>`` is
reasoning and whatever follows is the answer. With two tags, the answer is
only what sits inside ``<response>...</response>`` after the reasoning.
Surrounding angle brackets are stripped, so ``"<think>"`` and ``"think"``
are the same tag.
"""

from __future__ import annotations

import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


class ExtractionTags(BaseModel):
    model_config = ConfigDict(frozen=True)

    think: str
    response: Optional[str] = None

    @field_validator("think", "response")
    @classmethod
    def _strip_brackets(cls, tag: Optional[str]) -> Optional[str]:
        if tag is None:
            return None
        if tag.startswith("<"):
            tag = tag[1:]
        if tag.endswith(">"):
            tag = tag[:-1]
        if not tag:
            raise ValueError("tag name must be non-empty")
        return tag

    @classmethod
    def of(cls, think: str, response: Optional[str] = None) -> "ExtractionTags":
        return cls(think=think, response=response)

    def open_tag(self, name: str) -> str:
        return f"<{name}>"

    def close_tag(self, name: str) -> str:
        return f"</{name}>"

    def extract_response(self, content: str) -> Optional[str]:
        """Return the visible answer contained in ``content``."""
        think = re.escape(self.think)
        if self.response is None:
            return re.sub(f"<{think}>.*?</{think}>", "", content, flags=re.DOTALL).strip()
        resp = re.escape(self.response)
        match = re.search(f"(?<=</{think}>)\\s*<{resp}>(.*)</{resp}>", content, flags=re.DOTALL)
        return match.group(1).strip() if match else None

    def extract_thinking(self, content: str) -> Optional[str]:
        """Return the reasoning contained in ``content``."""
        think = re.escape(self.think)
        pattern = f"<{think}>(.*?)</{think}>"
        if self.response is not None:
            pattern += f".*<{re.escape(self.response)}>"
        match = re.search(pattern, content, flags=re.DOTALL)
        return match.group(1).strip() if match else None


__all__ = ["ExtractionTags"]
