import re
import unicodedata

MAX_FILENAME_SEGMENT = 80

_HORIZONTAL_WS = re.compile(r"[ \t]+")
_INDENTED_LINE = re.compile(r"\n[ \t]+")
_BLANK_RUN = re.compile(r"\n{3,}")
_NON_SLUG = re.compile(r"[^a-z0-9]+")
_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]+")
_COMBINING_MARKS = re.compile(r"[\u0300-\u036f]")


def normalize_whitespace(text: str | None) -> str:
    """
    Canonicalize whitespace: LF line endings, single spaces, no indented
    lines, at most one blank line in a row, trimmed ends.
    """
    if not text:
        return ""
    text = str(text).replace("\r\n", "\n").replace("\r", "\n")
    text = _HORIZONTAL_WS.sub(" ", text)
    text = _INDENTED_LINE.sub("\n", text)
    text = _BLANK_RUN.sub("\n\n", text)
    return text.strip()


def to_key(label: str | None) -> str:
    """Slug a human label: "Application Deadline" -> "application_deadline"."""
    if not label:
        return ""
    return _NON_SLUG.sub("_", str(label).strip().lower()).strip("_")


def sanitize_filename_segment(value: str | None, max_length: int = MAX_FILENAME_SEGMENT) -> str:
    """
    ASCII-only, underscore-separated filename segment.
    Diacritics are stripped (NFKD) and the result is truncated to
    max_length without leaving a trailing underscore.
    """
    decomposed = unicodedata.normalize("NFKD", str(value or ""))
    safe = _NON_ALNUM.sub("_", _COMBINING_MARKS.sub("", decomposed)).strip("_")
    if not safe:
        return "unknown"
    if len(safe) <= max_length:
        return safe
    return safe[:max_length].rstrip("_")
