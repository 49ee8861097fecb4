"""
HCC hierarchy rules.

The CMS-HCC model imposes hierarchies among related condition
categories: when a more severe category is present, less severe related
categories are zeroed out. The rules ship as a SAS macro text file::

    %* imposing hierarchies;
    /*Neoplasm 1 */   %SET0(CC=8     , HIER=%STR(9 ,10 ,11 ,12 ));
    /*Neoplasm 2 */   %SET0(CC=9     , HIER=%STR(10 ,11 ,12 ));
    ...
    %MEND V22H79H1;

Usage:
    from hcc_classifier.hierarchy import HierarchyEngine, load_hierarchy

    engine = HierarchyEngine(load_hierarchy("data/V22H79H1.TXT"))
    engine.apply(matrix)
"""

import logging
import re
from pathlib import Path
from typing import List, Sequence, Tuple, Union

import numpy as np

from .exceptions import ParseError
from .matrix import PresenceMatrix
from .models import HierarchyRule

logger = logging.getLogger(__name__)

DEFAULT_START_SENTINEL = "imposing hierarchies"

SECTION_END = re.compile(r'^\s*%MEND\b', re.IGNORECASE)
BLOCK_COMMENT = re.compile(r'/\*.*?\*/', re.DOTALL)
MACRO_HEAD = re.compile(r'%\s*SET0\s*\(', re.IGNORECASE)
KEYWORD = re.compile(r'\b(?:CC|HIER)\s*=', re.IGNORECASE)
STR_MARKER = re.compile(r'^\s*STR(?=\s*\()', re.IGNORECASE)
DECORATION = re.compile(r'[()\s;]')
INTEGER = re.compile(r'[0-9]+')


def parse_hierarchy(
    text: str,
    artifact: str = "<hierarchy>",
    start_sentinel: str = DEFAULT_START_SENTINEL
) -> List[HierarchyRule]:
    """
    Parse hierarchy definition text into an ordered rule list.

    Only the rule-bearing section is read: it starts after the first line
    containing ``start_sentinel`` and ends at ``%MEND`` or end of text.

    Args:
        text: Raw hierarchy definition text
        artifact: Artifact name used in error messages
        start_sentinel: Case-insensitive marker that opens the rule section

    Returns:
        List of HierarchyRule in file order

    Raises:
        ParseError: If the section is missing or empty, or any rule line
                    is malformed
    """
    lines = text.splitlines()
    sentinel = start_sentinel.lower()

    start = next((i for i, line in enumerate(lines) if sentinel in line.lower()), None)
    if start is None:
        raise ParseError(f"Rule section marker {start_sentinel!r} not found", artifact=artifact)

    # Blank out block comments but keep line numbering
    section = "\n".join(lines[start + 1:])
    section = BLOCK_COMMENT.sub(lambda m: "\n" * m.group().count("\n"), section)

    rules = []
    for offset, line in enumerate(section.split("\n")):
        line_number = start + 2 + offset
        if SECTION_END.match(line):
            break

        body = line.strip()
        if not body or body.startswith("%*"):
            continue

        rules.append(_parse_rule_line(body, artifact, line_number))

    if not rules:
        raise ParseError("No hierarchy rules found in rule section", artifact=artifact)

    logger.info(f"Parsed {len(rules)} hierarchy rules from {artifact}")
    return rules


def _parse_rule_line(body: str, artifact: str, line_number: int) -> HierarchyRule:
    """Parse one ``trigger%decorated-suppressed-list;`` rule line."""
    def fail(message: str) -> ParseError:
        return ParseError(message, artifact=artifact, line_number=line_number, line=body)

    text = MACRO_HEAD.sub("", body, count=1)
    text = KEYWORD.sub("", text)

    if "%" not in text:
        raise fail("Rule has no suppressed category list")
    trigger_part, list_part = text.split("%", 1)

    trigger = trigger_part.strip().strip(",").strip()
    if not trigger:
        raise fail("Rule has no trigger category")
    if not INTEGER.fullmatch(trigger):
        raise fail(f"Trigger category {trigger!r} is not an integer")

    list_part = DECORATION.sub("", STR_MARKER.sub("", list_part))
    tokens = [token for token in list_part.split(",") if token]
    if not tokens:
        raise fail("Rule has an empty suppressed category list")

    bad = [token for token in tokens if not INTEGER.fullmatch(token)]
    if bad:
        raise fail(f"Suppressed category {bad[0]!r} is not an integer")

    trigger_id = int(trigger)
    suppressed = [int(token) for token in tokens]
    if trigger_id in suppressed:
        raise fail(f"Category {trigger_id} suppresses itself")

    return HierarchyRule(trigger_category_id=trigger_id, suppressed_category_ids=suppressed)


def load_hierarchy(
    path: Union[str, Path],
    start_sentinel: str = DEFAULT_START_SENTINEL
) -> List[HierarchyRule]:
    """Load hierarchy rules from a definition file."""
    file_path = Path(path)
    with open(file_path, 'r', encoding='utf-8-sig', errors='replace') as f:
        text = f.read()
    return parse_hierarchy(text, artifact=file_path.name, start_sentinel=start_sentinel)


class HierarchyEngine:
    """
    Apply hierarchy rules to a presence matrix.

    Rules run strictly in order. Each rule reads its trigger column as
    left by the rules before it, so a category cleared by an earlier rule
    no longer triggers a later one. Reordering or batching rules changes
    results.
    """

    def __init__(self, rules: Sequence[HierarchyRule]):
        self.rules: List[HierarchyRule] = list(rules)
        self.cells_cleared = 0

    def _resolve_columns(self, matrix: PresenceMatrix) -> List[Tuple[int, np.ndarray]]:
        """
        Map every rule to integer column positions.

        Raises:
            ValueError: If a rule names a category that is not a matrix column
        """
        referenced = set()
        for rule in self.rules:
            referenced.add(rule.trigger_category_id)
            referenced.update(rule.suppressed_category_ids)

        unknown = sorted(c for c in referenced if c not in matrix.categories)
        if unknown:
            raise ValueError(f"Hierarchy rules reference categories not in the matrix: {unknown}")

        return [
            (
                matrix.column_position(rule.trigger_category_id),
                np.array([matrix.column_position(c) for c in rule.suppressed_category_ids], dtype=np.intp),
            )
            for rule in self.rules
        ]

    def apply(self, matrix: PresenceMatrix) -> PresenceMatrix:
        """
        Suppress subordinate categories in place.

        Args:
            matrix: Presence matrix; mutated in place

        Returns:
            The same matrix object
        """
        plan = self._resolve_columns(matrix)
        values = matrix.values
        self.cells_cleared = 0

        for step, (rule, (trigger_col, suppressed_cols)) in enumerate(zip(self.rules, plan), start=1):
            rows = np.flatnonzero(values[:, trigger_col] == 1)
            cleared = 0
            if rows.size:
                cells = np.ix_(rows, suppressed_cols)
                cleared = int(values[cells].sum(dtype=np.int64))
                values[cells] = 0
            self.cells_cleared += cleared

            logger.debug(
                f"Rule {step}/{len(self.rules)}: HCC{rule.trigger_category_id} present for "
                f"{rows.size:,} patients, cleared {cleared:,} cells"
            )

        logger.info(f"Applied {len(self.rules)} hierarchy rules, cleared {self.cells_cleared:,} cells")
        return matrix
