import re
from collections.abc import Iterable

from jobsnap.strings import normalize_whitespace, to_key

# "Label Words : " where the label is letters, spaces, "&" and "/" and starts with a letter.
_INLINE_LABEL = re.compile(r"([A-Za-z][A-Za-z &/]+)\s*:\s*")

# Longest line still considered a label awaiting its value on the next line.
MAX_LOOSE_LABEL_LENGTH = 40


def extract_label_value_pairs(text: str | None) -> dict[str, str]:
    """
    Split "Label: value Label: value" runs into a slug -> value mapping.

    Each value spans from its label to the next label match (or the end of
    the text). Pairs with an empty label or value are dropped.
    """
    source = normalize_whitespace(text)
    if not source:
        return {}

    matches = list(_INLINE_LABEL.finditer(source))
    result: dict[str, str] = {}
    for i, match in enumerate(matches):
        label = match.group(1).strip()
        value_end = matches[i + 1].start() if i + 1 < len(matches) else len(source)
        value = source[match.end() : value_end].strip()
        if not label or not value:
            continue
        key = to_key(label)
        if key:
            result[key] = value
    return result


def extract_details_from_lines(
    text: str | None, skip_headings: Iterable[str] = ()
) -> dict[str, str]:
    """
    Line-oriented key/value recovery for blocks without inline colons.

    A line with a colon is split there. Otherwise a short line followed by a
    plain (non-bullet, non-heading) line is read as "Label" then "Value" and
    both lines are consumed. The first occurrence of a key wins.
    """
    source = normalize_whitespace(text)
    if not source:
        return {}

    skip = {heading.lower() for heading in skip_headings}
    lines = [line.strip() for line in source.split("\n") if line.strip()]

    result: dict[str, str] = {}
    i = 0
    while i < len(lines):
        line = lines[i]
        i += 1
        if line.lower() in skip or line.startswith("- "):
            continue

        colon = line.find(":")
        if colon > 0:
            label = line[:colon].strip()
            value = line[colon + 1 :].strip()
            if label and value:
                key = to_key(label)
                if key and key not in result:
                    result[key] = value
                continue

        if i >= len(lines):
            continue
        following = lines[i]
        if following.startswith("- ") or following.lower() in skip:
            continue
        if len(line) > MAX_LOOSE_LABEL_LENGTH:
            continue

        key = to_key(line)
        if key and key not in result:
            result[key] = following
            i += 1

    return result
