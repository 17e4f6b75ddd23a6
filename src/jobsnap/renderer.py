import json
import re
from collections.abc import Mapping

from jobsnap.models import (
    Block,
    CompanyInformation,
    CompensationBenefits,
    JobRecord,
    ResponsibilitiesSection,
    SkillsExpertise,
)
from jobsnap.strings import normalize_whitespace

# Every "## " heading a rendered document may contain, in emission order.
MD_HEADINGS = (
    "Summary",
    "Requirements",
    "Responsibilities & Context",
    "Skills & Expertise",
    "Compensation & Other Benefits",
    "Read Before Apply",
    "Company Information",
    "Raw Text",
)

FRONT_MATTER_FIELDS = (
    "job_id",
    "url",
    "saved_at",
    "title",
    "company",
    "application_deadline",
    "published",
    "source",
    "parser_version",
)

REQUIREMENT_TITLES = (
    ("education", "Education"),
    ("experience", "Experience"),
    ("additional_requirements", "Additional Requirements"),
    ("required_skills", "Required Skills"),
    ("preferred_qualifications", "Preferred Qualifications"),
)

PLACEHOLDER_TITLE = "Job Circular"

_LINE_START_HASH = re.compile(r"^#", re.MULTILINE)


class JobRenderer:
    """
    Renders a JobRecord into a markdown document with a front-matter block.
    Sections are emitted in a fixed order and only when they have content.
    """

    @staticmethod
    def yaml_escape(value: object) -> str:
        """
        Quote a scalar for the front matter. Values with a colon or a line
        break become a JSON string literal; others are escaped but unquoted.
        """
        text = "" if value is None else re.sub(r"\r\n?", "\n", str(value)).strip()
        if not text:
            return '""'
        quoted = json.dumps(text, ensure_ascii=False)
        if ":" in text or "\n" in text:
            return quoted
        return quoted[1:-1]

    @staticmethod
    def body_text(text: str | None) -> str:
        """
        Normalize page text for the document body. A line starting with "#"
        is escaped so page content can never open a heading.
        """
        return _LINE_START_HASH.sub(r"\\#", normalize_whitespace(text))

    @staticmethod
    def label(key: str) -> str:
        """Title-case a slug: employment_status -> Employment Status."""
        return " ".join(word[:1].upper() + word[1:] for word in key.split("_"))

    @classmethod
    def render_front_matter(cls, job: JobRecord) -> str:
        lines = ["---"]
        lines += [f"{name}: {cls.yaml_escape(getattr(job, name))}" for name in FRONT_MATTER_FIELDS]
        lines.append("---")
        return "\n".join(lines)

    @classmethod
    def _key_value_lines(cls, mapping: Mapping[str, str]) -> list[str]:
        return [f"- {cls.label(key)}: {cls.body_text(value)}" for key, value in mapping.items()]

    @classmethod
    def _bullet_lines(cls, items: list[str]) -> list[str]:
        return [f"- {cls.body_text(item)}" for item in items if item]

    @classmethod
    def render_block(cls, title: str, block: Block | None) -> str | None:
        if block is None:
            return None
        bullets = cls._bullet_lines(block.bullets or [])
        if bullets:
            return "\n".join([f"### {title}", *bullets])
        text = cls.body_text(block.text)
        return f"### {title}\n{text}" if text else None

    @classmethod
    def render_summary(cls, summary: dict[str, str] | None) -> str | None:
        if not summary:
            return None
        return "\n".join(["## Summary", *cls._key_value_lines(summary)])

    @classmethod
    def render_requirements(cls, requirements: dict[str, Block] | None) -> str | None:
        if not requirements:
            return None
        blocks = [
            rendered
            for key, title in REQUIREMENT_TITLES
            if (rendered := cls.render_block(title, requirements.get(key)))
        ]
        if not blocks:
            return None
        return "## Requirements\n\n" + "\n\n".join(blocks)

    @classmethod
    def render_responsibilities(cls, section: ResponsibilitiesSection | None) -> str | None:
        if section is None:
            return None
        if section.sections:
            blocks = [
                rendered
                for title, block in section.sections.items()
                if (rendered := cls.render_block(title, block))
            ]
            if blocks:
                return "\n\n".join(["## Responsibilities & Context", *blocks])
        text = cls.body_text(section.raw_text)
        return f"## Responsibilities & Context\n{text}" if text else None

    @classmethod
    def render_skills(cls, skills: SkillsExpertise | None) -> str | None:
        if skills is None:
            return None
        lines = ["## Skills & Expertise"]
        if items := cls._bullet_lines(skills.skills or []):
            lines += ["### Skills", *items]
        if items := cls._bullet_lines(skills.suggested_by_bdjobs or []):
            lines += ["### Suggested By Bdjobs", *items]
        return "\n".join(lines) if len(lines) > 1 else None

    @classmethod
    def render_compensation(cls, compensation: CompensationBenefits | None) -> str | None:
        if compensation is None:
            return None
        lines = ["## Compensation & Other Benefits"]
        lines += cls._bullet_lines(compensation.benefits or [])
        if compensation.details:
            lines += ["### Details", *cls._key_value_lines(compensation.details)]
        return "\n".join(lines) if len(lines) > 1 else None

    @classmethod
    def render_text_section(cls, title: str, text: str | None) -> str | None:
        cleaned = cls.body_text(text)
        return f"## {title}\n{cleaned}" if cleaned else None

    @classmethod
    def render_company(cls, company: CompanyInformation | None) -> str | None:
        if company is None:
            return None
        if company.details:
            return "\n".join(["## Company Information", *cls._key_value_lines(company.details)])
        return cls.render_text_section("Company Information", company.raw_text)

    @classmethod
    def render(cls, job: JobRecord) -> str:
        """Render the whole document; always ends with exactly one newline."""
        chunks = [
            cls.render_front_matter(job),
            f"# {cls.body_text(job.title) or PLACEHOLDER_TITLE}",
        ]
        if company := cls.body_text(job.company):
            chunks.append(f"**Company:** {company}")
        if deadline := cls.body_text(job.application_deadline):
            chunks.append(f"**Application Deadline:** {deadline}")

        sections = [
            cls.render_summary(job.summary),
            cls.render_requirements(job.requirements),
            cls.render_responsibilities(job.responsibilities_context),
            cls.render_skills(job.skills_expertise),
            cls.render_compensation(job.compensation_other_benefits),
            cls.render_text_section("Read Before Apply", job.read_before_apply),
            cls.render_company(job.company_information),
        ]
        structured = [section for section in sections if section]
        chunks += structured

        if not structured and (raw := cls.render_text_section("Raw Text", job.raw_text)):
            chunks.append(raw)

        return "\n\n".join(chunks).strip() + "\n"


def render_job_markdown(job: JobRecord) -> str:
    return JobRenderer.render(job)
