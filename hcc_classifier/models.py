"""
Data models for HCC classification.

This module defines the records that flow through the classification
pipeline, from raw diagnosis records to the hierarchy rules applied to
the final patient-by-category matrix.
"""

from datetime import date, datetime
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

DATE_FORMAT = "%m/%d/%Y"


def normalize_code(code: Optional[str]) -> str:
    """
    Normalize a diagnosis code for crosswalk comparison.

    Strips whitespace and periods and upper-cases the code, so that
    '250.00', '25000' and ' 250.00 ' all compare equal.
    """
    if code is None:
        return ""
    return str(code).strip().replace(".", "").upper()


def parse_diagnosis_date(value: str) -> date:
    """Parse an MM/DD/YYYY date, ignoring any trailing time-of-day."""
    text = str(value).strip()
    if not text:
        raise ValueError("Diagnosis date cannot be empty")
    return datetime.strptime(text.split()[0], DATE_FORMAT).date()


class CategoryLabel(BaseModel):
    """A single entry of the condition category catalog."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="Category number, e.g. 19 for HCC19")
    name: str = Field(..., min_length=1, description="Category label, e.g. 'Diabetes without Complication'")


class CodeMapping(BaseModel):
    """One row of the diagnosis code to category crosswalk."""

    model_config = ConfigDict(frozen=True)

    diagnosis_code: str = Field(..., description="Normalized diagnosis code (no periods)")
    category_id: int = Field(..., description="Condition category the code maps to")

    @field_validator('diagnosis_code')
    @classmethod
    def validate_diagnosis_code(cls, v: str) -> str:
        """Normalize the code and reject empty values."""
        code = normalize_code(v)
        if not code:
            raise ValueError("Diagnosis code cannot be empty")
        return code


class DiagnosisRecord(BaseModel):
    """A raw diagnosis record from an external extract."""

    patient_id: str = Field(..., description="Patient identifier")
    encounter_id: Optional[str] = Field(None, description="Encounter identifier")
    diagnosis_code: str = Field(..., description="Diagnosis code as it appears in the extract")
    diagnosis_date: Optional[date] = Field(
        None,
        description="Diagnosis date; accepts MM/DD/YYYY with an optional trailing time"
    )

    @field_validator('patient_id')
    @classmethod
    def validate_patient_id(cls, v: str) -> str:
        """Validate patient identifier."""
        if not v or not str(v).strip():
            raise ValueError("Patient ID cannot be empty")
        return str(v).strip()

    @field_validator('diagnosis_date', mode='before')
    @classmethod
    def validate_diagnosis_date(cls, v: Union[str, date, None]) -> Optional[date]:
        """Accept MM/DD/YYYY strings as well as date objects."""
        if v is None or isinstance(v, date):
            return v
        return parse_diagnosis_date(v)


class ClassifiedDiagnosis(BaseModel):
    """A diagnosis record that matched a condition category."""

    patient_id: str
    category_id: int


class HierarchyRule(BaseModel):
    """
    A hierarchy exclusion rule.

    When a patient has the trigger category, every suppressed category
    is forced to absent for that patient.
    """

    model_config = ConfigDict(frozen=True)

    trigger_category_id: int = Field(..., description="More severe category that triggers the rule")
    suppressed_category_ids: List[int] = Field(
        ...,
        min_length=1,
        description="Less severe categories zeroed out when the trigger is present, in file order"
    )


class ClassificationStats(BaseModel):
    """Counters kept by the diagnosis classifier."""

    records_in: int = 0
    records_classified: int = 0
    records_dropped: int = Field(0, description="Records whose code is not in the crosswalk")


class PipelineSummary(BaseModel):
    """Summary of a complete classification run."""

    classification: ClassificationStats
    patient_count: int
    category_count: int
    rule_count: int
    threshold: int
    unknown_category_pairs: int = Field(
        0,
        description="Classified (patient, category) pairs dropped because the category is not in the catalog"
    )
    cells_present_before_hierarchy: int
    cells_present_after_hierarchy: int

    @property
    def cells_suppressed(self) -> int:
        """Number of 1 cells cleared by the hierarchy pass."""
        return self.cells_present_before_hierarchy - self.cells_present_after_hierarchy
