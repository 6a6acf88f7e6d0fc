"""
Line classifier for plans written in the prose protocol.

Recognised headings (top-level lines only):
    1. **Soil Preparation** - optional intro
    **Soil Preparation**: optional intro
    ## Soil Preparation
    1. Soil Preparation: optional intro
    Step 2 - Planting / 2. Planting

Recognised action lines: "- ", "* " or "• " bullets, "1) " items, and any
numbered line that is indented under a heading. Every other non-empty line is
continuation content for the current heading.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

_HEADING_PATTERNS = (
    re.compile(r"^\d+\.\s*\*\*(.+?)\*\*\s*[-–—:]?\s*(.*)$"),
    re.compile(r"^\*\*(.+?)\*\*\s*[-–—:]?\s*(.*)$"),
    re.compile(r"^#{1,6}\s*(.+?)\s*#*()$"),
    re.compile(r"^\d+\.\s*([^:]+?):\s*(.*)$"),
    re.compile(r"^(?:step\s*\d+\s*[-.:)]?|\d+\s*[-.:])\s*(.+?)(?::\s*(.*))?$", re.IGNORECASE),
)
_ACTION_RE = re.compile(r"^(?:[-*•]\s+|\d+[).]\s+)(.+)$")
_SENTENCE_SPLIT_RE = re.compile(r"\n|;\s+|\.\s+")
_FIRST_SENTENCE_RE = re.compile(r"(?<=[.!?])\s+")

OVERVIEW_TITLE = "Plan Overview"
MIN_CONTENT_ACTION_LENGTH = 8
MAX_CONTENT_ACTIONS = 3
TIP_MAX_LENGTH = 140

_PHASE_KEYWORDS = (
    ("protection", ("pest", "disease", "weed", "protect", "spray", "insect")),
    ("fertilizer", ("fertil", "manure", "compost", "nutrient", "npk")),
    ("water", ("water", "irrigat", "rain", "moisture")),
    ("harvest", ("harvest", "yield", "storage", "store")),
    ("soil", ("soil", "land", "till", "plough", "plow", "clear")),
    ("planting", ("plant", "sow", "seed", "spacing")),
)


class LineKind(str, Enum):
    HEADING = "heading"
    ACTION = "action"
    CONTINUATION = "continuation"


@dataclass
class PlanSection:
    title: str
    content: str = ""
    action_items: List[str] = field(default_factory=list)


def classify_line(raw_line: str) -> Tuple[LineKind, str, str]:
    """Returns (kind, text, extra). For headings text is the title and extra the inline intro."""
    line = raw_line.strip()
    indented = raw_line[:1].isspace()
    if not indented:
        for pattern in _HEADING_PATTERNS:
            match = pattern.match(line)
            if match:
                return LineKind.HEADING, match.group(1).strip(), (match.group(2) or "").strip()
    action = _ACTION_RE.match(line)
    if action:
        return LineKind.ACTION, action.group(1).strip(), ""
    return LineKind.CONTINUATION, line, ""


def _content_actions(content: str) -> List[str]:
    pieces = (p.strip() for p in _SENTENCE_SPLIT_RE.split(content))
    return [p for p in pieces if len(p) >= MIN_CONTENT_ACTION_LENGTH][:MAX_CONTENT_ACTIONS]


def parse_plan_sections(text: Optional[str]) -> List[PlanSection]:
    if not text or not isinstance(text, str):
        return []

    sections: List[PlanSection] = []
    current: Optional[PlanSection] = None

    for raw_line in text.replace("\r", "").split("\n"):
        if not raw_line.strip():
            continue
        kind, value, extra = classify_line(raw_line)

        if kind == LineKind.HEADING:
            if current:
                sections.append(current)
            current = PlanSection(title=value, content=extra)
        elif kind == LineKind.ACTION:
            if current is None:
                current = PlanSection(title=OVERVIEW_TITLE)
            current.action_items.append(value)
        elif current is None:
            current = PlanSection(title=OVERVIEW_TITLE, content=value)
        else:
            current.content = f"{current.content}\n{value}".strip() if current.content else value

    if current:
        sections.append(current)

    for section in sections:
        if not section.action_items:
            section.action_items = _content_actions(section.content)
    return [s for s in sections if s.content or s.action_items]


def infer_phase(title: str) -> Optional[str]:
    lowered = (title or "").lower()
    for phase, keywords in _PHASE_KEYWORDS:
        if any(k in lowered for k in keywords):
            return phase
    return None


def section_tip(reason: str) -> Optional[str]:
    """First sentence of a step's rationale, shortened for a one-line tip."""
    source = (reason or "").strip()
    if not source:
        return None
    first = _FIRST_SENTENCE_RE.split(source)[0].strip() or source
    return f"{first[:TIP_MAX_LENGTH - 3]}..." if len(first) > TIP_MAX_LENGTH else first
