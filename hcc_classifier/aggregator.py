"""
Category aggregator.

Turns classified diagnoses into a patient x category presence matrix.
A category is present for a patient only when it is supported by at
least ``threshold`` diagnosis records (repeated evidence within the
observation window).
"""

import logging
from typing import List, Sequence

import numpy as np
import pandas as pd

from .matrix import PresenceMatrix
from .models import CategoryLabel

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 2


class CategoryAggregator:
    """
    Threshold and pivot classified diagnoses into a PresenceMatrix.

    Every catalog category becomes a column, in catalog order, for every
    patient observed in the classified diagnoses, including patients
    whose categories all fall below the threshold.
    """

    def __init__(self, catalog: Sequence[CategoryLabel], threshold: int = DEFAULT_THRESHOLD):
        """
        Args:
            catalog: Ordered category catalog
            threshold: Minimum number of records for a category to be present
        """
        if threshold < 1:
            raise ValueError("Threshold must be at least 1")
        self.catalog: List[CategoryLabel] = list(catalog)
        self.category_ids = [label.id for label in self.catalog]
        self.threshold = threshold
        self.unknown_category_pairs = 0

    def aggregate(self, classified: pd.DataFrame) -> PresenceMatrix:
        """
        Build the presence matrix.

        Args:
            classified: DataFrame with patient_id and category_id columns

        Returns:
            PresenceMatrix with rows sorted by patient id and columns in
            catalog order
        """
        patients = pd.Index(classified["patient_id"].unique()).sort_values()
        matrix = PresenceMatrix(patients, self.category_ids)
        self.unknown_category_pairs = 0
        if classified.empty:
            return matrix

        # Step 1: count records per (patient, category)
        counts = classified.groupby(["patient_id", "category_id"]).size()

        # Step 2: keep repeated evidence only
        retained = counts[counts >= self.threshold]

        # Categories outside the catalog have no column
        pair_patients = retained.index.get_level_values("patient_id")
        pair_categories = retained.index.get_level_values("category_id")
        cols = matrix.categories.get_indexer(pair_categories)
        known = cols >= 0

        self.unknown_category_pairs = int((~known).sum())
        if self.unknown_category_pairs:
            unknown = sorted(set(int(c) for c in pair_categories[~known]))
            logger.warning(
                f"Dropped {self.unknown_category_pairs} patient/category pairs for categories "
                f"not in the catalog: {unknown}"
            )

        # Steps 3-4: pivot; one cell per (patient, category), OR-ed by construction
        rows = matrix.patients.get_indexer(pair_patients[known])
        matrix.values[rows, cols[known]] = np.int8(1)

        logger.info(
            f"Aggregated {len(matrix.patients):,} patients x {len(self.category_ids)} categories "
            f"({matrix.present_count():,} cells present at threshold {self.threshold})"
        )
        return matrix
