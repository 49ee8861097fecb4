"""
Pipeline configuration.

Artifact locations are always passed explicitly; nothing depends on the
process working directory.
"""

import os
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

from .aggregator import DEFAULT_THRESHOLD
from .exceptions import ConfigError
from .hierarchy import DEFAULT_START_SENTINEL


class PipelineConfig(BaseModel):
    """Settings for an HCC classification run."""

    label_path: Path = Field(..., description="Category label definition artifact")
    crosswalk_path: Path = Field(..., description="Diagnosis code to category crosswalk")
    hierarchy_path: Path = Field(..., description="Hierarchy rule definition artifact")

    threshold: int = Field(
        default=DEFAULT_THRESHOLD,
        ge=1,
        description="Minimum diagnosis records for a category to be present"
    )
    duplicate_policy: Literal["reject", "first", "last"] = Field(
        default="reject",
        description="How to resolve a crosswalk code listed with more than one category"
    )
    hierarchy_start_sentinel: str = Field(
        default=DEFAULT_START_SENTINEL,
        min_length=1,
        description="Marker line that opens the hierarchy rule section"
    )

    def check_paths(self) -> None:
        """
        Verify that every artifact exists and is readable.

        Raises:
            ConfigError: Naming the first missing or unreadable artifact
        """
        artifacts = {
            "label": self.label_path,
            "crosswalk": self.crosswalk_path,
            "hierarchy": self.hierarchy_path,
        }
        for name, path in artifacts.items():
            if not path.is_file():
                raise ConfigError(f"Required {name} file not found: {path}")
            if not os.access(path, os.R_OK):
                raise ConfigError(f"Required {name} file is not readable: {path}")
