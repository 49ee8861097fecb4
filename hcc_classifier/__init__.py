"""
HCC Classifier

Converts patient diagnosis codes into hierarchy-adjusted Hierarchical
Condition Category (HCC) indicators for risk adjustment.
"""

from .models import (
    CategoryLabel,
    CodeMapping,
    DiagnosisRecord,
    ClassifiedDiagnosis,
    HierarchyRule,
    ClassificationStats,
    PipelineSummary,
    normalize_code,
)
from .exceptions import HCCError, ParseError, SchemaMismatch, ConfigError
from .labels import parse_labels, load_labels
from .crosswalk import CrosswalkIndex
from .classifier import DiagnosisClassifier
from .matrix import PresenceMatrix
from .aggregator import CategoryAggregator
from .hierarchy import HierarchyEngine, parse_hierarchy, load_hierarchy
from .extract import read_extract, read_extracts, validate_extract
from .config import PipelineConfig
from .pipeline import HCCPipeline, PipelineResult, write_matrix

__version__ = "1.0.0"
__all__ = [
    "CategoryLabel",
    "CodeMapping",
    "DiagnosisRecord",
    "ClassifiedDiagnosis",
    "HierarchyRule",
    "ClassificationStats",
    "PipelineSummary",
    "normalize_code",
    "HCCError",
    "ParseError",
    "SchemaMismatch",
    "ConfigError",
    "parse_labels",
    "load_labels",
    "CrosswalkIndex",
    "DiagnosisClassifier",
    "PresenceMatrix",
    "CategoryAggregator",
    "HierarchyEngine",
    "parse_hierarchy",
    "load_hierarchy",
    "read_extract",
    "read_extracts",
    "validate_extract",
    "PipelineConfig",
    "HCCPipeline",
    "PipelineResult",
    "write_matrix",
]
