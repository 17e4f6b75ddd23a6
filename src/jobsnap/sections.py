"""
Heading-driven slicing of flattened page text.

A heading counts only when it stands alone on its line (optionally followed
by a colon). Top-level sections are located in their canonical order with a
cursor that moves past each found heading; subsections are located
independently inside one section's text.
"""

import logging
import re
from dataclasses import dataclass

from jobsnap.markup import parse_bullets
from jobsnap.models import Block, ResponsibilitiesSection
from jobsnap.strings import normalize_whitespace

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SectionSpec:
    """A canonical key and the heading spellings accepted for it."""

    key: str
    headings: tuple[str, ...]


@dataclass(frozen=True)
class SectionRange:
    key: str
    start: int
    end: int


@dataclass(frozen=True)
class _HeadingHit:
    key: str
    heading: str
    index: int


PAGE_SECTIONS: tuple[SectionSpec, ...] = (
    SectionSpec("summary", ("Summary",)),
    SectionSpec("requirements", ("Requirements",)),
    SectionSpec(
        "responsibilities_context", ("Responsibilities & Context", "Responsibilities")
    ),
    SectionSpec("skills_expertise", ("Skills & Expertise",)),
    SectionSpec(
        "compensation_other_benefits",
        ("Compensation & Other Benefits", "Salary & Benefits"),
    ),
    SectionSpec("read_before_apply", ("Read Before Apply",)),
    SectionSpec("company_information", ("Company Information",)),
)

REQUIREMENT_SUBSECTIONS: tuple[SectionSpec, ...] = (
    SectionSpec("education", ("Education",)),
    SectionSpec("experience", ("Experience",)),
    SectionSpec("additional_requirements", ("Additional Requirements",)),
    SectionSpec("required_skills", ("Required Skills",)),
    SectionSpec("preferred_qualifications", ("Preferred Qualifications",)),
)

RESPONSIBILITY_HEADINGS: tuple[str, ...] = (
    "About Us",
    "The Role",
    "Key Responsibilities",
    "Job Context",
    "Job Responsibilities",
)


def _heading_pattern(heading: str) -> re.Pattern[str]:
    return re.compile(
        rf"(^|\n)\s*{re.escape(heading)}\s*:?(\s*\n|\s*$)", re.IGNORECASE | re.MULTILINE
    )


def find_heading(text: str, heading: str, start: int = 0) -> int | None:
    """Offset of the first standalone `heading` line at or after `start`, else None."""
    # Search a slice so "^" anchors at the cursor the same way it does at offset 0.
    match = _heading_pattern(heading).search(text[start:])
    if match is None:
        return None
    return start + match.start()


def _locate(text: str, spec: SectionSpec, start: int = 0) -> _HeadingHit | None:
    best: _HeadingHit | None = None
    for heading in spec.headings:
        index = find_heading(text, heading, start)
        if index is None:
            continue
        if best is None or index < best.index:
            best = _HeadingHit(spec.key, heading, index)
    return best


def build_section_slices(
    text: str, specs: tuple[SectionSpec, ...] = PAGE_SECTIONS
) -> list[SectionRange]:
    """
    Locate each section heading after the previous one and return the
    resulting [start, next start) ranges. Missing sections are left out.
    """
    hits: list[_HeadingHit] = []
    cursor = 0
    for spec in specs:
        hit = _locate(text, spec, cursor)
        if hit is None:
            continue
        hits.append(hit)
        cursor = hit.index + 1

    ranges = []
    for i, hit in enumerate(hits):
        end = hits[i + 1].index if i + 1 < len(hits) else len(text)
        ranges.append(SectionRange(hit.key, hit.index, end))

    logger.debug(f"Sections found: {[r.key for r in ranges]}")
    return ranges


def slice_sections(text: str, specs: tuple[SectionSpec, ...] = PAGE_SECTIONS) -> dict[str, str]:
    return {r.key: text[r.start : r.end] for r in build_section_slices(text, specs)}


def strip_heading(chunk: str | None, heading: str) -> str:
    """Drop the chunk's first non-blank line if it is `heading` (colon optional)."""
    lines = str(chunk or "").split("\n")
    while lines and not lines[0].strip():
        lines.pop(0)

    def _norm(value: str) -> str:
        return value.strip().removesuffix(":").lower()

    if lines and _norm(lines[0]) == _norm(heading):
        lines.pop(0)
    return "\n".join(lines).strip()


def strip_any_heading(chunk: str | None, headings: tuple[str, ...]) -> str:
    original = str(chunk or "").strip()
    for heading in headings:
        stripped = strip_heading(chunk, heading)
        if stripped != original:
            return stripped
    return original


def body_to_block(body: str) -> Block | None:
    """Bulleted bodies keep their bullets, anything else becomes prose."""
    bullets = parse_bullets(body)
    if bullets:
        return Block(bullets=bullets)
    text = normalize_whitespace(body)
    if not text or text == "-":
        return None
    return Block(text=text)


def _subsection_hits(text: str, specs: tuple[SectionSpec, ...]) -> list[_HeadingHit]:
    hits = [hit for spec in specs if (hit := _locate(text, spec)) is not None]
    return sorted(hits, key=lambda hit: hit.index)


def _split_subsections(text: str | None, specs: tuple[SectionSpec, ...]) -> list[tuple[str, Block]]:
    cleaned = normalize_whitespace(text)
    hits = _subsection_hits(cleaned, specs)

    blocks: list[tuple[str, Block]] = []
    for i, hit in enumerate(hits):
        end = hits[i + 1].index if i + 1 < len(hits) else len(cleaned)
        body = strip_heading(cleaned[hit.index : end], hit.heading)
        block = body_to_block(body)
        if block is not None:
            blocks.append((hit.key, block))
    return blocks


def extract_subsection_map(
    text: str | None, specs: tuple[SectionSpec, ...]
) -> dict[str, Block] | None:
    """Subsections keyed by their canonical key; None when nothing was found."""
    result: dict[str, Block] = {}
    for key, block in _split_subsections(text, specs):
        result.setdefault(key, block)
    return result or None


def extract_subsection_blocks(
    text: str | None, headings: tuple[str, ...]
) -> dict[str, Block] | None:
    """Subsections keyed by the heading text itself, in document order."""
    specs = tuple(SectionSpec(heading, (heading,)) for heading in headings)
    return extract_subsection_map(text, specs)


def parse_responsibilities(text: str | None) -> ResponsibilitiesSection | None:
    """Recognized sub-headings become named blocks; otherwise keep the whole text."""
    sections = extract_subsection_blocks(text, RESPONSIBILITY_HEADINGS)
    if sections:
        return ResponsibilitiesSection(sections=sections)
    cleaned = normalize_whitespace(text)
    return ResponsibilitiesSection(raw_text=cleaned) if cleaned else None
