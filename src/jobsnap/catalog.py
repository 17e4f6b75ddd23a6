import hashlib
import json
import logging
from datetime import date, datetime
from pathlib import Path

from pydantic import ValidationError

from jobsnap.models import CatalogEntry, JobRecord, SnapshotPaths

logger = logging.getLogger(__name__)

INDEX_FILENAME = "index.jsonl"

REQUIRED_FIELDS = (
    "job_id",
    "url",
    "saved_at",
    "source",
    "parser_version",
    "title",
    "company",
    "summary",
    "requirements",
    "responsibilities_context",
    "company_information",
)

DEADLINE_FORMATS = ("%d %b %Y", "%d %B %Y", "%b %d, %Y", "%B %d, %Y", "%Y-%m-%d")
SORT_KEYS = ("saved", "deadline", "company")
DEADLINE_STATUSES = ("active", "expired")


def validate_job_schema(job: JobRecord) -> tuple[bool, list[str]]:
    """
    Check that every field a saved snapshot relies on is present.
    Returns (ok, errors) with errors like "missing company" or "empty summary".
    """
    errors = []
    for name in REQUIRED_FIELDS:
        value = getattr(job, name)
        if value is None:
            errors.append(f"missing {name}")
        elif isinstance(value, str) and not value.strip():
            errors.append(f"empty {name}")
        elif isinstance(value, dict) and not value:
            errors.append(f"empty {name}")
    return not errors, errors


def content_hash(markdown: str) -> str:
    return hashlib.sha256(markdown.encode("utf-8")).hexdigest()


def create_catalog_entry(job: JobRecord, markdown: str, paths: SnapshotPaths) -> CatalogEntry:
    if not job.job_id:
        raise ValueError("A catalog entry needs a job_id")
    return CatalogEntry(
        job_id=job.job_id,
        url=job.url,
        saved_at=job.saved_at,
        title=job.title,
        company=job.company,
        application_deadline=job.application_deadline,
        published=job.published,
        content_hash=content_hash(markdown),
        paths=paths,
        parser_version=job.parser_version,
    )


def parse_deadline(value: str | None) -> datetime | None:
    """
    Parse a deadline as written on the site, e.g. "25 Dec 2024" or
    "Dec 25, 2024". Returns None for anything unrecognized.
    """
    if not value:
        return None
    text = " ".join(value.replace(",", ", ").split()).replace(" ,", ",")
    for fmt in DEADLINE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    logger.debug(f"Unrecognized deadline format: '{value}'")
    return None


def days_until(value: str | None, today: date | None = None) -> int | None:
    """Whole days from `today` to the deadline; negative once it has passed."""
    deadline = parse_deadline(value)
    if deadline is None:
        return None
    return (deadline.date() - (today or date.today())).days


def filter_by_deadline(
    entries: list[CatalogEntry], status: str, today: date | None = None
) -> list[CatalogEntry]:
    """
    Keep "active" entries (deadline today or later) or "expired" ones
    (deadline passed). Entries without a readable deadline match neither.
    """
    if status not in DEADLINE_STATUSES:
        raise ValueError(f"Unknown deadline status '{status}', expected one of {', '.join(DEADLINE_STATUSES)}")
    kept = []
    for entry in entries:
        days = days_until(entry.application_deadline, today)
        if days is None:
            continue
        if (days >= 0) == (status == "active"):
            kept.append(entry)
    return kept


class Catalog:
    """
    The snapshot catalog: one JSON object per line, at most one per job_id.
    The file is rewritten in full on every update.
    """

    def __init__(self, index_path: str | Path) -> None:
        self.index_path = Path(index_path)

    def read_entries(self) -> list[CatalogEntry]:
        """Load all entries. A missing file is an empty catalog; corrupt lines are skipped."""
        if not self.index_path.exists():
            return []

        entries: list[CatalogEntry] = []
        lines = self.index_path.read_text(encoding="utf-8").splitlines()
        for lineno, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            try:
                entries.append(CatalogEntry.model_validate_json(line))
            except ValidationError as e:
                logger.warning(f"Skipping corrupt catalog line {lineno} in {self.index_path}: {e}")
        return entries

    def get(self, job_id: str) -> CatalogEntry | None:
        return next((e for e in self.read_entries() if e.job_id == job_id), None)

    def has(self, job_id: str) -> bool:
        return self.get(job_id) is not None

    def upsert(self, entry: CatalogEntry) -> None:
        """Insert `entry`, replacing any existing entry for the same job."""
        entries = [e for e in self.read_entries() if e.job_id != entry.job_id]
        entries.append(entry)
        self._write(entries)
        logger.info(f"Catalog updated for job {entry.job_id} ({len(entries)} entries)")

    def sorted_entries(self, by: str = "saved") -> list[CatalogEntry]:
        """
        Entries ordered by "saved" (newest first), "deadline" (soonest first,
        unknown last) or "company" (alphabetical).
        """
        entries = self.read_entries()
        if by == "deadline":
            return sorted(
                entries, key=lambda e: parse_deadline(e.application_deadline) or datetime.max
            )
        if by == "company":
            return sorted(entries, key=lambda e: (e.company or "").lower())
        if by == "saved":
            return sorted(entries, key=lambda e: e.saved_at or "", reverse=True)
        raise ValueError(f"Unknown sort key '{by}', expected one of {', '.join(SORT_KEYS)}")

    def _write(self, entries: list[CatalogEntry]) -> None:
        self.index_path.parent.mkdir(parents=True, exist_ok=True)
        content = "".join(json.dumps(e.model_dump(mode="json"), ensure_ascii=False) + "\n" for e in entries)
        self.index_path.write_text(content, encoding="utf-8")
