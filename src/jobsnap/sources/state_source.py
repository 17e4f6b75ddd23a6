import json
import logging
from typing import Any

from bs4 import BeautifulSoup, Tag

from jobsnap.identifiers import canonical_job_url
from jobsnap.markup import html_to_text, parse_bullets, parse_html_bullets
from jobsnap.models import (
    Block,
    CompanyInformation,
    CompensationBenefits,
    JobRecord,
    SkillsExpertise,
)
from jobsnap.sections import SectionSpec, extract_subsection_map, parse_responsibilities
from jobsnap.sources.base import BaseSource, PageInput
from jobsnap.strings import normalize_whitespace

logger = logging.getLogger(__name__)

STATE_SCRIPT_ID = "ng-state"
JOB_DETAILS_MARKER = "Job-Details"
PLACEHOLDER_VALUES = {"Na", "N/A"}

ADDITIONAL_REQUIREMENT_SUBSECTIONS = (
    SectionSpec("additional_requirements", ("Requirements",)),
    SectionSpec("preferred_qualifications", ("Preferred Qualifications",)),
)


def extract_ng_state(html: str | None) -> dict[str, Any] | None:
    """Decode the page's ng-state hydration cache, or None if it is absent or broken."""
    if not html:
        return None
    soup = BeautifulSoup(html, "html.parser")
    script = soup.find("script", id=STATE_SCRIPT_ID)
    if not isinstance(script, Tag) or not script.string or not script.string.strip():
        return None
    try:
        state = json.loads(script.string)
    except (json.JSONDecodeError, TypeError, ValueError) as e:
        logger.debug(f"Failed to decode ng-state JSON: {e}")
        return None
    return state if isinstance(state, dict) else None


def find_job_details(state: dict[str, Any] | None) -> dict[str, Any] | None:
    """
    Return the first data record of the cache entry fetched from the
    job-details endpoint, or None when the cache holds no such entry.
    """
    if not isinstance(state, dict):
        return None
    for entry in state.values():
        if not isinstance(entry, dict) or JOB_DETAILS_MARKER not in str(entry.get("u") or ""):
            continue
        body = entry.get("b")
        data = body.get("data") if isinstance(body, dict) else None
        if isinstance(data, list) and data and isinstance(data[0], dict):
            return data[0]
    logger.debug("No Job-Details entry in ng-state")
    return None


def _scalar(value: Any) -> str | None:
    if value is None or isinstance(value, (dict, list)):
        return None
    text = normalize_whitespace(str(value))
    return text or None


def _first(details: dict[str, Any], *keys: str) -> str | None:
    """First of `keys` present with a non-blank value."""
    for key in keys:
        value = _scalar(details.get(key))
        if value is not None:
            return value
    return None


def _meaningful(details: dict[str, Any], key: str) -> str | None:
    value = _scalar(details.get(key))
    return None if value in PLACEHOLDER_VALUES else value


def split_comma_list(value: Any) -> list[str] | None:
    text = _scalar(value)
    if text is None:
        return None
    items = [item.strip() for item in text.split(",") if item.strip()]
    return items or None


def normalize_comma_space(value: str) -> str:
    return ", ".join(part.strip() for part in value.split(",")).strip()


def parse_loose_lines(text: str, drop_headings: tuple[str, ...] = ()) -> list[str] | None:
    drop = {heading.lower() for heading in drop_headings}
    lines = []
    for line in normalize_whitespace(text).split("\n"):
        line = line.strip()
        if not line or line.lower().removesuffix(":") in drop:
            continue
        lines.append(line)
    return lines or None


def parse_additional_requirements(fragment: str | None) -> dict[str, Block] | None:
    if not fragment:
        return None
    text = html_to_text(fragment)
    sections = extract_subsection_map(text, ADDITIONAL_REQUIREMENT_SUBSECTIONS)
    if sections:
        return sections
    bullets = parse_bullets(text)
    if bullets:
        return {"additional_requirements": Block(bullets=bullets)}
    if text:
        return {"additional_requirements": Block(text=text)}
    return None


class StateBlobSource(BaseSource):
    """
    Reads the job from the structured record the site embeds in its
    ng-state script for client-side hydration.
    """

    name = "ng-state"

    def parse(self, page: PageInput) -> JobRecord | None:
        details = find_job_details(extract_ng_state(page.html))
        if details is None:
            return None
        return self.parse_details(details, page)

    def parse_details(self, details: dict[str, Any], page: PageInput) -> JobRecord:
        """Map the raw job-details record onto the canonical JobRecord shape."""
        job_id = page.job_id or _first(details, "JobId", "JobID")

        education = parse_html_bullets(details.get("EducationRequirements"))
        experience = parse_html_bullets(details.get("experience"))

        requirements: dict[str, Block] = {}
        if education:
            requirements["education"] = Block(bullets=education)
        if experience:
            requirements["experience"] = Block(bullets=experience)
        requirements.update(parse_additional_requirements(details.get("AdditionJobRequirements")) or {})

        description = details.get("JobDescription")
        responsibilities = parse_responsibilities(html_to_text(description)) if description else None

        return JobRecord(
            job_id=job_id,
            url=page.url or canonical_job_url(job_id),
            saved_at=page.saved_at,
            title=_first(details, "JobTitle", "JobTitleEN", "JobTitleENG"),
            company=_first(
                details, "CompanyNameENG", "CompnayName", "CompanyName", "CompanyNameEn"
            ),
            application_deadline=_first(details, "Deadline", "DeadlineDB"),
            published=_first(details, "PostedOn"),
            summary=self._summary(details, experience),
            requirements=requirements or None,
            responsibilities_context=responsibilities,
            skills_expertise=self._skills(details),
            compensation_other_benefits=self._compensation(details),
            read_before_apply=html_to_text(details.get("ApplyInstruction")) or None,
            company_information=self._company(details),
        )

    @staticmethod
    def _summary(details: dict[str, Any], experience: list[str] | None) -> dict[str, str] | None:
        summary: dict[str, str] = {}
        vacancy = _meaningful(details, "JobVacancies")
        if vacancy and vacancy != "0":
            summary["vacancy"] = vacancy
        if experience:
            summary["experience"] = experience[0]
        if age := _meaningful(details, "Age"):
            summary["age"] = age
        if location := _first(details, "JobLocation"):
            summary["location"] = location
        if salary := _first(details, "JobSalaryRangeText", "JobSalaryRange"):
            summary["salary"] = salary
        if published := _first(details, "PostedOn"):
            summary["published"] = published
        return summary or None

    @staticmethod
    def _skills(details: dict[str, Any]) -> SkillsExpertise | None:
        skills = split_comma_list(details.get("SkillsRequired"))
        suggested = split_comma_list(details.get("SuggestedSkills"))
        if not skills and not suggested:
            return None
        return SkillsExpertise(skills=skills, suggested_by_bdjobs=suggested)

    @staticmethod
    def _compensation(details: dict[str, Any]) -> CompensationBenefits | None:
        benefits = None
        fragment = details.get("JobOtherBenifits")
        if fragment:
            benefits = parse_html_bullets(fragment) or parse_loose_lines(
                html_to_text(fragment), drop_headings=("What We Offer",)
            )

        extra: dict[str, str] = {}
        if workplace := _first(details, "JobWorkPlace"):
            extra["workplace"] = normalize_comma_space(workplace)
        if nature := _first(details, "JobNature"):
            extra["employment_status"] = nature
        if gender := _meaningful(details, "Gender"):
            extra["gender"] = gender
        if location := _first(details, "JobLocation"):
            extra["job_location"] = location

        if not benefits and not extra:
            return None
        return CompensationBenefits(benefits=benefits, details=extra or None)

    @staticmethod
    def _company(details: dict[str, Any]) -> CompanyInformation | None:
        company: dict[str, str] = {}
        if address := _first(details, "CompanyAddress"):
            company["address"] = address
        if business := _first(details, "CompanyBusiness"):
            company["business"] = business
        return CompanyInformation(details=company) if company else None
