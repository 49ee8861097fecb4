"""
HCC classification pipeline.

Provides the primary interface for turning diagnosis records into a
hierarchy-adjusted patient x category matrix.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Union

import pandas as pd

from .aggregator import CategoryAggregator
from .classifier import DiagnosisClassifier
from .config import PipelineConfig
from .crosswalk import CrosswalkIndex
from .exceptions import ParseError
from .hierarchy import HierarchyEngine, load_hierarchy
from .labels import load_labels
from .matrix import PresenceMatrix
from .models import CategoryLabel, DiagnosisRecord, HierarchyRule, PipelineSummary

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Output of a classification run."""

    pre_hierarchy: PresenceMatrix
    matrix: PresenceMatrix
    summary: PipelineSummary


class HCCPipeline:
    """
    Main interface for HCC classification.

    This class orchestrates the run by:
    1. Loading the category catalog, crosswalk and hierarchy rules
    2. Classifying diagnosis records through the crosswalk
    3. Aggregating repeated evidence into a presence matrix
    4. Applying hierarchy rules in file order

    All three artifacts are parsed when the pipeline is constructed, so a
    malformed artifact fails before any diagnosis data is touched.

    Example:
        >>> config = PipelineConfig(label_path=..., crosswalk_path=..., hierarchy_path=...)
        >>> pipeline = HCCPipeline(config)
        >>> result = pipeline.run(extract_df)
        >>> result.matrix.to_frame(prefix="HCC")
    """

    def __init__(self, config: PipelineConfig):
        """
        Initialize the pipeline.

        Args:
            config: Artifact locations and run settings

        Raises:
            ConfigError: If an artifact path is missing or unreadable
            ParseError: If an artifact is malformed
        """
        config.check_paths()
        self.config = config

        self.catalog: List[CategoryLabel] = load_labels(config.label_path)
        self.crosswalk = CrosswalkIndex.from_path(
            config.crosswalk_path,
            duplicate_policy=config.duplicate_policy
        )
        self.rules: List[HierarchyRule] = load_hierarchy(
            config.hierarchy_path,
            start_sentinel=config.hierarchy_start_sentinel
        )

        catalog_ids = {label.id for label in self.catalog}
        for rule in self.rules:
            unknown = [
                c for c in [rule.trigger_category_id] + rule.suppressed_category_ids
                if c not in catalog_ids
            ]
            if unknown:
                raise ParseError(
                    f"Rule for category {rule.trigger_category_id} references categories "
                    f"missing from the label catalog: {unknown}",
                    artifact=config.hierarchy_path.name
                )

        self.classifier = DiagnosisClassifier(self.crosswalk)
        self.aggregator = CategoryAggregator(self.catalog, threshold=config.threshold)
        self.engine = HierarchyEngine(self.rules)

    def run(self, diagnoses: Union[pd.DataFrame, Iterable[DiagnosisRecord]]) -> PipelineResult:
        """
        Classify diagnosis records into the final category matrix.

        Args:
            diagnoses: DataFrame with patient_id and diagnosis_code columns,
                       or an iterable of DiagnosisRecord

        Returns:
            PipelineResult with the pre- and post-hierarchy matrices
        """
        self.classifier.reset()
        classified = self.classifier.classify(diagnoses)

        matrix = self.aggregator.aggregate(classified)
        pre_hierarchy = matrix.copy()
        present_before = matrix.present_count()

        self.engine.apply(matrix)

        summary = PipelineSummary(
            classification=self.classifier.stats.model_copy(),
            patient_count=len(matrix.patients),
            category_count=len(matrix.categories),
            rule_count=len(self.rules),
            threshold=self.aggregator.threshold,
            unknown_category_pairs=self.aggregator.unknown_category_pairs,
            cells_present_before_hierarchy=present_before,
            cells_present_after_hierarchy=matrix.present_count(),
        )
        logger.info(
            f"Pipeline complete: {summary.patient_count:,} patients, "
            f"{summary.cells_present_after_hierarchy:,} categories present "
            f"({summary.cells_suppressed:,} suppressed by hierarchy)"
        )
        return PipelineResult(pre_hierarchy=pre_hierarchy, matrix=matrix, summary=summary)

    def category_name(self, category_id: int) -> str:
        """Get the label for a category id."""
        for label in self.catalog:
            if label.id == category_id:
                return label.name
        return f"HCC {category_id}"


def write_matrix(matrix: PresenceMatrix, path: Union[str, Path], prefix: str = "HCC") -> None:
    """
    Write a presence matrix as CSV.

    One row per patient, one ``<prefix><id>`` column per category in
    catalog order.
    """
    frame = matrix.to_frame(prefix=prefix)
    with open(Path(path), 'w', newline='', encoding='utf-8') as f:
        frame.to_csv(f)
    logger.info(f"Wrote {len(frame):,} x {len(frame.columns)} matrix to {path}")
