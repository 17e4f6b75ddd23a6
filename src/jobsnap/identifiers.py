import re
from urllib.parse import urlparse

from jobsnap.strings import sanitize_filename_segment

BASE_URL = "https://bdjobs.com"
DEFAULT_FILENAME_TEMPLATE = "{title}_{company}_{job_id}.md"

_JOB_DETAILS_PATH = re.compile(r"/jobs/details/(\d+)")
_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9._-]+")
_UNDERSCORE_RUN = re.compile(r"_+")


def extract_job_id(url: str | None) -> str | None:
    """
    Pull the numeric id out of a ".../jobs/details/<id>" URL.
    Anything that is not such a URL yields None.
    """
    if not url:
        return None
    try:
        parsed = urlparse(str(url))
    except ValueError:
        return None
    if not parsed.scheme or not parsed.netloc:
        return None
    match = _JOB_DETAILS_PATH.search(parsed.path)
    return match.group(1) if match else None


def canonical_job_url(job_id: str | None) -> str | None:
    return f"{BASE_URL}/jobs/details/{job_id}" if job_id else None


def _sanitize_template_output(value: str) -> str:
    value = _UNSAFE_FILENAME_CHARS.sub("_", value)
    return _UNDERSCORE_RUN.sub("_", value).strip("_")


def build_filename(
    template: str | None = None,
    title: str | None = None,
    company: str | None = None,
    job_id: str | None = None,
) -> str:
    """
    Render a markdown filename from a template with {title}, {company} and
    {job_id} placeholders, e.g. "AI_Engineer_Acme_Ltd_123.md".
    """
    template = (template or "").strip() or DEFAULT_FILENAME_TEMPLATE
    result = (
        template.replace("{title}", sanitize_filename_segment(title or "job"))
        .replace("{company}", sanitize_filename_segment(company or "unknown"))
        .replace("{job_id}", sanitize_filename_segment(job_id or "unknown"))
    )

    result = _sanitize_template_output(result) or "job"
    if not result.lower().endswith(".md"):
        result += ".md"
    return result
