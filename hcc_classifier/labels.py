"""
Category label catalog parser.

Parses the legacy label definition artifact shipped with the CMS-HCC
software, e.g.::

    LABEL
     HCC1     ="HIV/AIDS"
     HCC2     ="Septicemia, Sepsis, Systemic Inflammatory Response
                Syndrome/Shock"
    ;

Entries may be wrapped across physical lines, so the text is joined into
one logical stream before it is split into ``id="name"`` tokens.
"""

import logging
import re
from pathlib import Path
from typing import List, Union

from .exceptions import ParseError
from .models import CategoryLabel

logger = logging.getLogger(__name__)

LABEL_KEYWORD = re.compile(r'^\s*LABEL\b', re.IGNORECASE)
ENTRY = re.compile(r'''([^\s=]+)\s*=\s*("[^"]*"|'[^']*'|[^\s"']\S*)''')
CATEGORY_ID = re.compile(r'^(?:HCC|CC)?([0-9]+)$', re.IGNORECASE)
QUOTES = '"\''


def parse_labels(text: str, artifact: str = "<labels>") -> List[CategoryLabel]:
    """
    Parse label definition text into an ordered category catalog.

    Args:
        text: Raw label definition text
        artifact: Artifact name used in error messages

    Returns:
        List of CategoryLabel in file order

    Raises:
        ParseError: If any entry is malformed, an id is repeated, or the
                    text contains no entries
    """
    # Re-join wrapped lines into one logical stream
    stream = " ".join(line.strip() for line in text.splitlines() if line.strip())
    stream = LABEL_KEYWORD.sub("", stream).strip()
    stream = stream.rstrip(";").strip()

    catalog = []
    seen = set()
    position = 0
    for entry in ENTRY.finditer(stream):
        _check_gap(stream[position:entry.start()], artifact)
        position = entry.end()

        label = _parse_label_entry(entry.group(1), entry.group(2), entry.group(0), artifact)
        if label.id in seen:
            raise ParseError(f"Duplicate category id {label.id}", artifact=artifact, line=entry.group(0))
        seen.add(label.id)
        catalog.append(label)
    _check_gap(stream[position:], artifact)

    if not catalog:
        raise ParseError("No category labels found", artifact=artifact)

    logger.info(f"Parsed {len(catalog)} category labels from {artifact}")
    return catalog


def _check_gap(gap: str, artifact: str) -> None:
    """Only whitespace may sit between entries."""
    leftover = gap.strip()
    if not leftover:
        return
    if any(quote in leftover for quote in QUOTES):
        raise ParseError("Unbalanced quotes in label text", artifact=artifact, line=leftover)
    raise ParseError("Label entry is not of the form id=name", artifact=artifact, line=leftover)


def _parse_label_entry(raw_id: str, raw_name: str, entry: str, artifact: str) -> CategoryLabel:
    """Turn one ``id=name`` entry into a CategoryLabel."""
    match = CATEGORY_ID.match(raw_id)
    if not match:
        raise ParseError(f"Category id {raw_id!r} is not an integer", artifact=artifact, line=entry)

    # Drop one pair of enclosing quotes; the name itself is kept verbatim
    if raw_name[:1] in QUOTES:
        raw_name = raw_name[1:-1]
    name = raw_name.strip()
    if not name:
        raise ParseError("Category label is empty", artifact=artifact, line=entry)

    return CategoryLabel(id=int(match.group(1)), name=name)


def load_labels(path: Union[str, Path]) -> List[CategoryLabel]:
    """
    Load a category catalog from a label definition file.

    Args:
        path: Path to the label definition artifact

    Returns:
        List of CategoryLabel in file order
    """
    file_path = Path(path)
    with open(file_path, 'r', encoding='utf-8-sig', errors='replace') as f:
        text = f.read()
    return parse_labels(text, artifact=file_path.name)
