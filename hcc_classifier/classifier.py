"""
Diagnosis classifier.

Joins raw diagnosis records against the crosswalk. Codes that are not in
the crosswalk are the normal case (most diagnoses do not belong to any
condition category); they are dropped and counted, never raised.
"""

import logging
from typing import Iterable, Optional, Union

import pandas as pd

from .crosswalk import CrosswalkIndex
from .exceptions import SchemaMismatch
from .models import ClassificationStats, ClassifiedDiagnosis, DiagnosisRecord, normalize_code

logger = logging.getLogger(__name__)

CLASSIFIED_COLUMNS = ["patient_id", "category_id"]
REQUIRED_COLUMNS = ["patient_id", "diagnosis_code"]


class DiagnosisClassifier:
    """
    Map diagnosis records to condition categories.

    Counters accumulate across calls to :meth:`classify` and
    :meth:`classify_record` and are available as :attr:`stats`.

    Example:
        >>> classifier = DiagnosisClassifier(CrosswalkIndex(["25000 19"]))
        >>> classified = classifier.classify(extract_df)
        >>> classifier.stats.records_dropped
        3
    """

    def __init__(self, crosswalk: CrosswalkIndex):
        self.crosswalk = crosswalk
        self.stats = ClassificationStats()

    def reset(self) -> None:
        """Reset the classification counters."""
        self.stats = ClassificationStats()

    def classify_record(self, record: DiagnosisRecord) -> Optional[ClassifiedDiagnosis]:
        """
        Classify a single diagnosis record.

        Returns:
            ClassifiedDiagnosis on a crosswalk hit, None on a miss
        """
        self.stats.records_in += 1
        category_id = self.crosswalk.lookup(record.diagnosis_code)
        if category_id is None:
            self.stats.records_dropped += 1
            return None

        self.stats.records_classified += 1
        return ClassifiedDiagnosis(patient_id=record.patient_id, category_id=category_id)

    def classify(self, diagnoses: Union[pd.DataFrame, Iterable[DiagnosisRecord]]) -> pd.DataFrame:
        """
        Classify a batch of diagnosis records.

        Args:
            diagnoses: DataFrame with at least patient_id and diagnosis_code
                       columns, or an iterable of DiagnosisRecord

        Returns:
            DataFrame with patient_id and category_id columns, one row per
            matched record (multiplicity preserved)

        Raises:
            SchemaMismatch: If a required column is missing
        """
        frame = self._to_frame(diagnoses)

        missing = [column for column in REQUIRED_COLUMNS if column not in frame.columns]
        if missing:
            raise SchemaMismatch(f"Diagnosis records are missing required columns: {', '.join(missing)}")

        # Same normalization the crosswalk applied to its own codes
        codes = frame["diagnosis_code"].fillna("").astype(str).map(normalize_code)
        categories = codes.map(self.crosswalk.as_dict())
        hits = categories.notna().to_numpy()

        classified = pd.DataFrame({
            "patient_id": frame["patient_id"].astype(str).to_numpy()[hits],
            "category_id": categories.to_numpy()[hits].astype("int64"),
        }, columns=CLASSIFIED_COLUMNS)

        records_in = len(frame)
        records_classified = len(classified)
        records_dropped = records_in - records_classified
        self.stats.records_in += records_in
        self.stats.records_classified += records_classified
        self.stats.records_dropped += records_dropped

        logger.info(
            f"Classified {records_classified:,} of {records_in:,} diagnosis records "
            f"({records_dropped:,} codes not in crosswalk)"
        )
        return classified

    def _to_frame(self, diagnoses: Union[pd.DataFrame, Iterable[DiagnosisRecord]]) -> pd.DataFrame:
        """Convert an iterable of records to a DataFrame."""
        if isinstance(diagnoses, pd.DataFrame):
            return diagnoses

        rows = [
            {"patient_id": record.patient_id, "diagnosis_code": record.diagnosis_code}
            for record in diagnoses
        ]
        return pd.DataFrame(rows, columns=REQUIRED_COLUMNS)
