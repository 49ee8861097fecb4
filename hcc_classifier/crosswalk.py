"""
Diagnosis code to condition category crosswalk.

The crosswalk artifact is a whitespace-delimited two-column table::

    25000    19
    4280     85

Codes are normalized (periods stripped, upper-cased) when the index is
built, using the same normalization applied to diagnosis extracts.
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from .exceptions import ParseError
from .models import CodeMapping, normalize_code

logger = logging.getLogger(__name__)

DUPLICATE_POLICIES = ("reject", "first", "last")


class CrosswalkIndex:
    """
    Constant-time lookup from diagnosis code to condition category.

    A code listed more than once with different categories is handled by
    ``duplicate_policy``:

    - ``"reject"`` (default): raise ParseError
    - ``"first"``: keep the first category seen
    - ``"last"``: keep the last category seen

    Exact repeats of the same (code, category) pair are always accepted.

    Example:
        >>> index = CrosswalkIndex(["25000 19", "4280 85"])
        >>> index.lookup("250.00")
        19
    """

    def __init__(
        self,
        lines: Iterable[str],
        duplicate_policy: str = "reject",
        artifact: str = "<crosswalk>"
    ):
        """
        Build the index from crosswalk lines.

        Args:
            lines: Iterable of whitespace-delimited ``code category`` lines
            duplicate_policy: One of 'reject', 'first', 'last'
            artifact: Artifact name used in error messages
        """
        if duplicate_policy not in DUPLICATE_POLICIES:
            raise ValueError(
                f"Unknown duplicate policy {duplicate_policy!r}; "
                f"expected one of {', '.join(DUPLICATE_POLICIES)}"
            )
        self.duplicate_policy = duplicate_policy
        self.artifact = artifact
        self._index: Dict[str, int] = {}
        self._build_index(lines)

    @classmethod
    def from_path(cls, path: Union[str, Path], duplicate_policy: str = "reject") -> "CrosswalkIndex":
        """Build an index from a crosswalk file."""
        file_path = Path(path)
        with open(file_path, 'r', encoding='utf-8-sig', errors='replace') as f:
            return cls(f, duplicate_policy=duplicate_policy, artifact=file_path.name)

    def _build_index(self, lines: Iterable[str]) -> None:
        """Parse every line and populate the lookup dictionary."""
        conflicts = 0
        for line_number, line in enumerate(lines, start=1):
            fields = line.split()
            if not fields:
                continue

            if len(fields) != 2:
                raise ParseError(
                    f"Expected 2 columns, found {len(fields)}",
                    artifact=self.artifact,
                    line_number=line_number,
                    line=line.rstrip("\n")
                )

            raw_code, raw_category = fields
            code = normalize_code(raw_code)
            if not code:
                raise ParseError(
                    "Diagnosis code is empty after normalization",
                    artifact=self.artifact,
                    line_number=line_number,
                    line=line.rstrip("\n")
                )
            try:
                category_id = int(raw_category)
            except ValueError:
                raise ParseError(
                    f"Category {raw_category!r} is not an integer",
                    artifact=self.artifact,
                    line_number=line_number,
                    line=line.rstrip("\n")
                ) from None

            existing = self._index.get(code)
            if existing is None or existing == category_id:
                self._index[code] = category_id
                continue

            # Same code, different category
            if self.duplicate_policy == "reject":
                raise ParseError(
                    f"Code {code} maps to both category {existing} and {category_id}",
                    artifact=self.artifact,
                    line_number=line_number,
                    line=line.rstrip("\n")
                )
            conflicts += 1
            if self.duplicate_policy == "last":
                self._index[code] = category_id

        if conflicts:
            logger.warning(
                f"{self.artifact}: {conflicts} conflicting duplicate codes resolved "
                f"by '{self.duplicate_policy}' policy"
            )
        logger.info(f"Loaded {len(self._index)} crosswalk codes from {self.artifact}")

    def lookup(self, code: Optional[str]) -> Optional[int]:
        """
        Look up the condition category for a diagnosis code.

        The code is normalized first, so '250.00' and '25000' are
        equivalent.

        Returns:
            Category id, or None if the code is not in the crosswalk
        """
        return self._index.get(normalize_code(code))

    def as_dict(self) -> Dict[str, int]:
        """Return a copy of the normalized code to category mapping."""
        return dict(self._index)

    def mappings(self) -> List[CodeMapping]:
        """Return every mapping as a CodeMapping, in insertion order."""
        return [
            CodeMapping(diagnosis_code=code, category_id=category_id)
            for code, category_id in self._index.items()
        ]

    def categories(self) -> List[int]:
        """Return the distinct category ids referenced by the crosswalk, sorted."""
        return sorted(set(self._index.values()))

    def __len__(self) -> int:
        return len(self._index)

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and normalize_code(code) in self._index
