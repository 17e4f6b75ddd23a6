import json
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from jobsnap.catalog import INDEX_FILENAME, Catalog, create_catalog_entry, validate_job_schema
from jobsnap.errors import ExitCode, JobSnapError
from jobsnap.fetch import HTTP_TIMEOUT, fetch_html
from jobsnap.identifiers import build_filename, canonical_job_url, extract_job_id
from jobsnap.models import JobRecord, SnapshotPaths
from jobsnap.parser import parse_job_html
from jobsnap.renderer import render_job_markdown

logger = logging.getLogger(__name__)

RAW_HTML_FILENAME = "raw.html"
JOB_JSON_FILENAME = "job.json"


@dataclass(frozen=True)
class SnapshotResult:
    job_id: str
    job_dir: Path
    md_path: Path
    index_path: Path
    skipped: bool = False


def persist_snapshot(
    job: JobRecord,
    html: str,
    markdown: str,
    output_root: Path,
    job_dir: Path,
    md_filename: str,
) -> SnapshotResult:
    """Write raw.html, job.json and the markdown file, then update the catalog."""
    if not job.job_id:
        raise JobSnapError("Cannot save a job without a job_id.", ExitCode.PARSE_FAILED)

    ok, errors = validate_job_schema(job)
    if not ok:
        logger.warning(f"Job {job.job_id} is incomplete: {'; '.join(errors)}")

    raw_html_path = job_dir / RAW_HTML_FILENAME
    json_path = job_dir / JOB_JSON_FILENAME
    md_path = job_dir / md_filename
    index_path = output_root / INDEX_FILENAME

    try:
        job_dir.mkdir(parents=True, exist_ok=True)
        for stale in job_dir.glob("*.md"):
            if stale.name != md_filename:
                logger.info(f"Removing outdated markdown file {stale}")
                stale.unlink()
        raw_html_path.write_text(html, encoding="utf-8")
        json_path.write_text(job.model_dump_json(indent=2) + "\n", encoding="utf-8")
        md_path.write_text(markdown, encoding="utf-8")

        paths = SnapshotPaths(
            raw_html=raw_html_path.relative_to(output_root).as_posix(),
            job_json=json_path.relative_to(output_root).as_posix(),
            job_md=md_path.relative_to(output_root).as_posix(),
        )
        Catalog(index_path).upsert(create_catalog_entry(job, markdown, paths))
    except OSError as e:
        raise JobSnapError(f"Failed to write snapshot for job {job.job_id}: {e}", ExitCode.WRITE_FAILED) from e

    logger.info(f"Saved job {job.job_id} to {job_dir}")
    return SnapshotResult(job_id=job.job_id, job_dir=job_dir, md_path=md_path, index_path=index_path)


async def save_job_snapshot(
    url: str,
    output_root: str | Path,
    skip_existing: bool = False,
    filename_template: str | None = None,
    timeout: float = HTTP_TIMEOUT,
) -> SnapshotResult:
    """Fetch, parse, render and store one job page."""
    job_id = extract_job_id(url)
    if not job_id:
        raise JobSnapError(
            "Could not extract job_id from URL. Expected /jobs/details/<job_id>.",
            ExitCode.INVALID_ARGS,
        )

    output_root = Path(output_root)
    job_dir = output_root / job_id
    index_path = output_root / INDEX_FILENAME

    if skip_existing and job_dir.is_dir():
        existing = Catalog(index_path).get(job_id)
        if existing is not None:
            logger.info(f"Job {job_id} already saved, skipping.")
            return SnapshotResult(
                job_id=job_id,
                job_dir=job_dir,
                md_path=output_root / existing.paths.job_md,
                index_path=index_path,
                skipped=True,
            )

    html = await fetch_html(url, timeout=timeout)
    saved_at = datetime.now(tz=UTC).isoformat()
    job = parse_job_html(html, url=url, job_id=job_id, saved_at=saved_at)
    markdown = render_job_markdown(job)
    md_filename = build_filename(filename_template, job.title, job.company, job.job_id)
    return persist_snapshot(job, html, markdown, output_root, job_dir, md_filename)


def _read_saved_job(json_path: Path) -> dict:
    try:
        data = json.loads(json_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.debug(f"No usable {json_path}: {e}")
        return {}
    return data if isinstance(data, dict) else {}


def _resolve_raw_html(target: Path) -> tuple[Path, Path]:
    if not target.exists():
        raise JobSnapError(f"Path not found: {target}", ExitCode.INVALID_ARGS)
    if target.is_dir():
        return target, target / RAW_HTML_FILENAME
    return target.parent, target


def reparse_job_snapshot(target_path: str | Path, filename_template: str | None = None) -> SnapshotResult:
    """
    Re-run the parser over a stored raw.html (given directly or via its job
    directory) and rewrite job.json, the markdown file and the catalog entry.
    """
    job_dir, raw_html_path = _resolve_raw_html(Path(target_path).resolve())
    try:
        html = raw_html_path.read_text(encoding="utf-8")
    except OSError as e:
        raise JobSnapError(f"Cannot read {raw_html_path}: {e}", ExitCode.INVALID_ARGS) from e

    saved = _read_saved_job(job_dir / JOB_JSON_FILENAME)
    job_id = (
        (str(saved["job_id"]) if saved.get("job_id") else None)
        or extract_job_id(saved.get("url"))
        or (job_dir.name if job_dir.name.isdigit() else None)
    )
    url = saved.get("url") or canonical_job_url(job_id)

    job = parse_job_html(
        html, url=url, job_id=job_id, saved_at=datetime.now(tz=UTC).isoformat()
    )
    if not job.job_id:
        raise JobSnapError("Parse failed: no job_id could be determined.", ExitCode.PARSE_FAILED)

    markdown = render_job_markdown(job)
    md_filename = build_filename(filename_template, job.title, job.company, job.job_id)
    return persist_snapshot(job, html, markdown, job_dir.parent, job_dir, md_filename)
