import re

from bs4 import BeautifulSoup

from jobsnap.strings import normalize_whitespace

# Decoded in this order, so "&amp;lt;" ends up as "<".
HTML_ENTITIES = (
    ("&nbsp;", " "),
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&#x27;", "'"),
)

BULLET_MARKERS = ("- ", "* ")

_SCRIPT_BLOCK = re.compile(r"<script\b[^>]*>.*?</script>", re.IGNORECASE | re.DOTALL)
_STYLE_BLOCK = re.compile(r"<style\b[^>]*>.*?</style>", re.IGNORECASE | re.DOTALL)
_LINE_BREAK = re.compile(r"<br\s*/?>", re.IGNORECASE)
_BLOCK_CLOSE = re.compile(
    r"</(p|div|section|article|header|footer|tr|table|ul|ol|h[1-6])>", re.IGNORECASE
)
_LIST_ITEM_OPEN = re.compile(r"<li\b[^>]*>", re.IGNORECASE)
_LIST_ITEM_CLOSE = re.compile(r"</li>", re.IGNORECASE)
_ANY_TAG = re.compile(r"<[^>]+>")


def decode_html_entities(text: str | None) -> str:
    result = str(text or "")
    for entity, char in HTML_ENTITIES:
        result = result.replace(entity, char)
    return result


def html_to_text(html: str | None) -> str:
    """
    Linearize markup into normalized plain text.

    Scripts and styles are dropped, block-level closings become line breaks
    and list items become "- " bullet lines. Unbalanced or broken tags are
    simply stripped, so any input string is accepted.
    """
    text = str(html or "")
    text = _SCRIPT_BLOCK.sub("\n", text)
    text = _STYLE_BLOCK.sub("\n", text)

    text = _LINE_BREAK.sub("\n", text)
    text = _BLOCK_CLOSE.sub("\n", text)
    text = _LIST_ITEM_OPEN.sub("\n- ", text)
    text = _LIST_ITEM_CLOSE.sub("", text)

    text = _ANY_TAG.sub(" ", text)
    return normalize_whitespace(decode_html_entities(text))


def extract_title_tag(html: str | None) -> str | None:
    """Return the normalized text of the page's <title>, or None if there is none."""
    if not html:
        return None
    soup = BeautifulSoup(html, "html.parser")
    if soup.title is None:
        return None
    return normalize_whitespace(decode_html_entities(soup.title.get_text()))


def parse_bullets(text: str | None) -> list[str]:
    """Collect the "- " (or "* ") lines of a flattened block, without their marker."""
    bullets: list[str] = []
    for line in normalize_whitespace(text).split("\n"):
        stripped = line.strip()
        if not stripped.startswith(BULLET_MARKERS):
            continue
        bullet = stripped[2:].strip()
        if bullet:
            bullets.append(bullet)
    return bullets


def parse_html_bullets(fragment: str | None) -> list[str] | None:
    if not fragment:
        return None
    return parse_bullets(html_to_text(fragment)) or None
