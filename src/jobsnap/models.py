from pydantic import BaseModel, ConfigDict, model_validator

SOURCE_NAME = "bdjobs"
PARSER_VERSION = "0.3.0"


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True)


class Block(_Record):
    """
    A subsection body: either a bullet list or a prose paragraph.
    At most one of the two fields is populated.
    """

    bullets: list[str] | None = None
    text: str | None = None

    @model_validator(mode="after")
    def _one_variant(self) -> "Block":
        if self.bullets and self.text:
            raise ValueError("Block holds either bullets or text, not both")
        return self

    @property
    def is_empty(self) -> bool:
        return not self.bullets and not self.text


class ResponsibilitiesSection(_Record):
    """Named sub-blocks when sub-headings were recognized, else the whole section text."""

    sections: dict[str, Block] | None = None
    raw_text: str | None = None

    @model_validator(mode="after")
    def _one_variant(self) -> "ResponsibilitiesSection":
        if self.sections and self.raw_text:
            raise ValueError("ResponsibilitiesSection holds either sections or raw_text")
        return self


class SkillsExpertise(_Record):
    skills: list[str] | None = None
    suggested_by_bdjobs: list[str] | None = None


class CompensationBenefits(_Record):
    benefits: list[str] | None = None
    details: dict[str, str] | None = None


class CompanyInformation(_Record):
    details: dict[str, str] | None = None
    raw_text: str | None = None

    @model_validator(mode="after")
    def _one_variant(self) -> "CompanyInformation":
        if self.details and self.raw_text:
            raise ValueError("CompanyInformation holds either details or raw_text")
        return self


# Top-level fields that carry a parsed section of the posting.
STRUCTURED_FIELDS = (
    "summary",
    "requirements",
    "responsibilities_context",
    "skills_expertise",
    "compensation_other_benefits",
    "read_before_apply",
    "company_information",
)


class JobRecord(_Record):
    """
    Canonical representation of one job posting.
    Sections that could not be recovered are None, never empty.
    """

    job_id: str | None = None
    url: str | None = None
    saved_at: str | None = None
    source: str = SOURCE_NAME
    parser_version: str = PARSER_VERSION
    title: str | None = None
    company: str | None = None
    application_deadline: str | None = None
    published: str | None = None
    summary: dict[str, str] | None = None
    requirements: dict[str, Block] | None = None
    responsibilities_context: ResponsibilitiesSection | None = None
    skills_expertise: SkillsExpertise | None = None
    compensation_other_benefits: CompensationBenefits | None = None
    read_before_apply: str | None = None
    company_information: CompanyInformation | None = None
    raw_text: str | None = None

    def has_structured_sections(self) -> bool:
        return any(getattr(self, name) for name in STRUCTURED_FIELDS)


class SnapshotPaths(BaseModel):
    """Snapshot files, relative to the output root."""

    raw_html: str
    job_json: str
    job_md: str


class CatalogEntry(BaseModel):
    """One line of the snapshot catalog (index.jsonl)."""

    job_id: str
    url: str | None = None
    saved_at: str | None = None
    title: str | None = None
    company: str | None = None
    application_deadline: str | None = None
    published: str | None = None
    content_hash: str
    paths: SnapshotPaths
    parser_version: str
