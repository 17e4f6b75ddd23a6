import logging
import re

from jobsnap.kv import extract_details_from_lines, extract_label_value_pairs
from jobsnap.markup import extract_title_tag, html_to_text, parse_bullets
from jobsnap.models import (
    CompanyInformation,
    CompensationBenefits,
    JobRecord,
    SkillsExpertise,
)
from jobsnap.sections import (
    REQUIREMENT_SUBSECTIONS,
    extract_subsection_map,
    parse_responsibilities,
    slice_sections,
    strip_any_heading,
)
from jobsnap.sources.base import BaseSource, PageInput
from jobsnap.strings import normalize_whitespace

logger = logging.getLogger(__name__)

TITLE_SEPARATORS = (" - ", " : ", " | ", " \u2014 ", " \u2013 ")
SITE_TITLE_SUFFIXES = (
    re.compile(r"\s*\|\s*bdjobs(\.com)?\s*$", re.IGNORECASE),
    re.compile(r"\s*-\s*bdjobs(\.com)?\s*$", re.IGNORECASE),
)
DEADLINE_PATTERNS = (
    re.compile(r"Application Deadline\s*:\s*([^\n]+)", re.IGNORECASE),
    re.compile(r"Application Deadline\s*([^\n]+)", re.IGNORECASE),
)

# Site chrome that follows the posting itself; the page is cut at the first one.
FOOTER_MARKERS = (
    "report this job / company",
    "need any support?",
    "our contact centre",
    "job seekers",
    "recruiter",
    "download job seeker app",
    "download employer app",
    "our valuable partners",
    "stay connected with us",
)
CALLOUT_LINES = (
    re.compile(r"applicants are encouraged to submit video cv", re.IGNORECASE),
    re.compile(r"to access application insights", re.IGNORECASE),
)

RESPONSIBILITY_SECTION_HEADINGS = ("Responsibilities & Context", "Responsibilities")
COMPENSATION_HEADINGS = ("Compensation & Other Benefits", "Salary & Benefits")
COMPANY_HEADINGS = ("Company Information",)
SUGGESTED_SKILL_MARKERS = ("suggested by bdjobs", "suggested by")
_SKILL_HEADING_LINE = re.compile(r"^(skills\s*&\s*expertise|suggested by( bdjobs)?)$", re.IGNORECASE)
_MORE_JOBS_LINE = re.compile(r"more jobs from this company", re.IGNORECASE)


def clean_page_title(title: str | None) -> str:
    cleaned = str(title or "")
    for suffix in SITE_TITLE_SUFFIXES:
        cleaned = suffix.sub("", cleaned)
    return cleaned.strip()


def parse_title_company(page_title: str | None) -> tuple[str | None, str | None]:
    """
    Split "<title> - <company>" style page titles.
    The first segment is the title and the last one the company.
    """
    cleaned = clean_page_title(page_title)
    for separator in TITLE_SEPARATORS:
        if separator not in cleaned:
            continue
        parts = [part.strip() for part in cleaned.split(separator) if part.strip()]
        if len(parts) >= 2:
            return parts[0], parts[-1]
    return cleaned or None, None


def strip_footer(text: str) -> str:
    lowered = text.lower()
    positions = [idx for marker in FOOTER_MARKERS if (idx := lowered.find(marker)) != -1]
    if not positions:
        return text
    return text[: min(positions)].strip()


def remove_callout_lines(text: str) -> str:
    lines = [
        line for line in text.split("\n") if not any(p.search(line) for p in CALLOUT_LINES)
    ]
    return "\n".join(lines).strip()


def extract_deadline(text: str) -> str | None:
    for pattern in DEADLINE_PATTERNS:
        match = pattern.search(text)
        if match and match.group(1).strip():
            return normalize_whitespace(match.group(1))
    return None


def parse_summary(section_text: str) -> dict[str, str] | None:
    """Label/value pairs of the summary box, keeping the first line of each value."""
    summary: dict[str, str] = {}
    for key, value in extract_label_value_pairs(section_text).items():
        first_line = next((line.strip() for line in value.split("\n") if line.strip()), None)
        if first_line:
            summary[key] = first_line
    return summary or None


def _chip_lines(text: str) -> list[str] | None:
    bullets = parse_bullets(text)
    if bullets:
        return bullets
    lines = [
        line.strip()
        for line in text.split("\n")
        if line.strip() and not _SKILL_HEADING_LINE.match(line.strip())
    ]
    return lines or None


def parse_skills(section_text: str) -> SkillsExpertise | None:
    cleaned = normalize_whitespace(section_text)
    if not cleaned:
        return None

    lowered = cleaned.lower()
    skills_text, suggested_text = cleaned, ""
    for marker in SUGGESTED_SKILL_MARKERS:
        idx = lowered.find(marker)
        if idx != -1:
            skills_text, suggested_text = cleaned[:idx], cleaned[idx + len(marker) :]
            break

    skills = _chip_lines(skills_text)
    suggested = _chip_lines(suggested_text)
    if not skills and not suggested:
        return None
    return SkillsExpertise(skills=skills, suggested_by_bdjobs=suggested)


def parse_compensation(section_text: str) -> CompensationBenefits | None:
    cleaned = normalize_whitespace(strip_any_heading(section_text, COMPENSATION_HEADINGS))
    benefits = parse_bullets(cleaned) or None
    details = extract_details_from_lines(cleaned, skip_headings=COMPENSATION_HEADINGS) or None
    if not benefits and not details:
        return None
    return CompensationBenefits(benefits=benefits, details=details)


def parse_company_info(section_text: str) -> CompanyInformation | None:
    cleaned = normalize_whitespace(strip_any_heading(section_text, COMPANY_HEADINGS))
    cleaned = "\n".join(line for line in cleaned.split("\n") if not _MORE_JOBS_LINE.search(line))
    cleaned = normalize_whitespace(cleaned)
    details = extract_details_from_lines(cleaned, skip_headings=COMPANY_HEADINGS)
    if details:
        return CompanyInformation(details=details)
    return CompanyInformation(raw_text=cleaned) if cleaned else None


class VisibleTextSource(BaseSource):
    """
    Reads the job from the page as a visitor sees it: the <title> tag and
    the heading-delimited sections of the flattened body text.
    """

    name = "visible-text"

    def page_text(self, html: str) -> str:
        text = strip_footer(html_to_text(html))
        return normalize_whitespace(remove_callout_lines(text))

    def parse(self, page: PageInput) -> JobRecord | None:
        text = self.page_text(page.html)
        title, company = parse_title_company(extract_title_tag(page.html))
        sections = slice_sections(text)

        summary = parse_summary(sections["summary"]) if "summary" in sections else None

        requirements = None
        if "requirements" in sections:
            requirements = extract_subsection_map(sections["requirements"], REQUIREMENT_SUBSECTIONS)

        responsibilities = None
        if "responsibilities_context" in sections:
            body = strip_any_heading(
                sections["responsibilities_context"], RESPONSIBILITY_SECTION_HEADINGS
            )
            responsibilities = parse_responsibilities(body)

        skills = parse_skills(sections["skills_expertise"]) if "skills_expertise" in sections else None

        compensation = None
        if "compensation_other_benefits" in sections:
            compensation = parse_compensation(sections["compensation_other_benefits"])

        read_before_apply = None
        if "read_before_apply" in sections:
            read_before_apply = (
                normalize_whitespace(
                    strip_any_heading(sections["read_before_apply"], ("Read Before Apply",))
                )
                or None
            )

        company_info = None
        if "company_information" in sections:
            company_info = parse_company_info(sections["company_information"])

        job = JobRecord(
            job_id=page.job_id,
            url=page.url,
            saved_at=page.saved_at,
            title=title,
            company=company,
            application_deadline=extract_deadline(text),
            published=(summary or {}).get("published"),
            summary=summary,
            requirements=requirements,
            responsibilities_context=responsibilities,
            skills_expertise=skills,
            compensation_other_benefits=compensation,
            read_before_apply=read_before_apply,
            company_information=company_info,
        )
        if not job.has_structured_sections() and text:
            logger.debug("No recognizable sections, keeping the page text as raw_text")
            job = job.model_copy(update={"raw_text": text})
        return job
