import logging
from datetime import UTC, datetime
from typing import Any

from jobsnap.models import JobRecord
from jobsnap.sources.base import PageInput
from jobsnap.sources.state_source import StateBlobSource
from jobsnap.sources.text_source import VisibleTextSource

logger = logging.getLogger(__name__)


def is_empty_value(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


def merge_jobs(primary: JobRecord | None, fallback: JobRecord | None) -> JobRecord | None:
    """
    Field-by-field merge: `primary` wins wherever it has a value, empty
    fields are taken whole from `fallback`. No deep merge of nested sections.
    """
    if primary is None:
        return fallback
    if fallback is None:
        return primary

    updates = {}
    for name in JobRecord.model_fields:
        if is_empty_value(getattr(primary, name)):
            candidate = getattr(fallback, name)
            if not is_empty_value(candidate):
                updates[name] = candidate
    return primary.model_copy(update=updates) if updates else primary


def _finalize(job: JobRecord) -> JobRecord:
    # The flattened page is only kept as a last resort.
    if job.raw_text and job.has_structured_sections():
        return job.model_copy(update={"raw_text": None})
    return job


def parse_job_html(
    html: str | None,
    url: str | None = None,
    job_id: str | None = None,
    saved_at: str | None = None,
) -> JobRecord:
    """
    Parse a captured job page into one canonical JobRecord.

    The embedded ng-state record and the visible page text are parsed
    independently; the structured result takes precedence per field.
    """
    page = PageInput(
        html=html or "",
        url=url,
        job_id=job_id,
        saved_at=saved_at or datetime.now(tz=UTC).isoformat(),
    )

    text_job = VisibleTextSource().parse(page)
    state_job = StateBlobSource().parse(page)
    if state_job is None:
        logger.debug("No ng-state job record, using visible text only")

    merged = merge_jobs(state_job, text_job) or JobRecord(
        job_id=page.job_id, url=page.url, saved_at=page.saved_at
    )
    return _finalize(merged)

