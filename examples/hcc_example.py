"""
HCC Classifier Usage Examples

This script demonstrates how to classify diagnosis records into
hierarchy-adjusted Hierarchical Condition Categories.
"""

from pathlib import Path

import numpy as np
from hcc_classifier import (
    CrosswalkIndex,
    DiagnosisRecord,
    HCCPipeline,
    HierarchyEngine,
    PipelineConfig,
    PresenceMatrix,
    load_hierarchy,
    read_extract,
)

DATA_DIR = Path(__file__).parent.parent / "data"


def example_1_code_lookup():
    """Example 1: Look up diagnosis codes in the crosswalk."""
    print("=" * 70)
    print("EXAMPLE 1: Crosswalk Lookup")
    print("=" * 70)

    crosswalk = CrosswalkIndex.from_path(DATA_DIR / "F2218O1P.TXT")

    for code in ["250.00", "428.0", "401.1"]:
        category = crosswalk.lookup(code)
        print(f"  {code:<8} -> {'HCC' + str(category) if category else 'no category'}")
    print()


def example_2_single_patient():
    """Example 2: Classify a single patient's diagnoses."""
    print("=" * 70)
    print("EXAMPLE 2: Single Patient")
    print("=" * 70)

    pipeline = HCCPipeline(PipelineConfig(
        label_path=DATA_DIR / "V22H79L1.TXT",
        crosswalk_path=DATA_DIR / "F2218O1P.TXT",
        hierarchy_path=DATA_DIR / "V22H79H1.TXT",
    ))

    result = pipeline.run([
        DiagnosisRecord(patient_id="P1", diagnosis_code="250.00", diagnosis_date="01/05/2023"),
        DiagnosisRecord(patient_id="P1", diagnosis_code="250.00", diagnosis_date="02/09/2023"),
        DiagnosisRecord(patient_id="P1", diagnosis_code="250.40", diagnosis_date="03/12/2023"),
        DiagnosisRecord(patient_id="P1", diagnosis_code="250.40", diagnosis_date="06/20/2023"),
        DiagnosisRecord(patient_id="P1", diagnosis_code="428.0", diagnosis_date="06/20/2023"),
    ])

    print("\nPatient P1 diagnoses: 250.00 (x2), 250.40 (x2), 428.0")
    print("\nBefore hierarchy:")
    for category, present in result.pre_hierarchy.row("P1").items():
        if present:
            print(f"  HCC{category}: {pipeline.category_name(category)}")
    print("\nAfter hierarchy:")
    for category, present in result.matrix.row("P1").items():
        if present:
            print(f"  HCC{category}: {pipeline.category_name(category)}")
    print()


def example_3_extract_file():
    """Example 3: Classify an extract file."""
    print("=" * 70)
    print("EXAMPLE 3: Extract File")
    print("=" * 70)

    pipeline = HCCPipeline(PipelineConfig(
        label_path=DATA_DIR / "V22H79L1.TXT",
        crosswalk_path=DATA_DIR / "F2218O1P.TXT",
        hierarchy_path=DATA_DIR / "V22H79H1.TXT",
    ))

    result = pipeline.run(read_extract(DATA_DIR / "sample_diagnoses.csv"))
    frame = result.matrix.to_frame(prefix="HCC")
    present = frame.loc[:, (frame != 0).any()]

    print(f"\n{result.summary.patient_count} patients, "
          f"{result.summary.classification.records_dropped} records not in crosswalk")
    print("\nCategories present after hierarchy:")
    print(present.to_string())
    print()


def example_4_rule_order():
    """Example 4: Rules run in file order against the current matrix."""
    print("=" * 70)
    print("EXAMPLE 4: Rule Order")
    print("=" * 70)

    rules = load_hierarchy(DATA_DIR / "V22H79H1.TXT")
    diabetes_rules = [r for r in rules if r.trigger_category_id in (17, 18)]

    # Patient with acute, chronic and uncomplicated diabetes
    matrix = PresenceMatrix(["P1"], [17, 18, 19], np.array([[1, 1, 1]]))
    HierarchyEngine(diabetes_rules).apply(matrix)

    for rule in diabetes_rules:
        suppressed = ", ".join(f"HCC{c}" for c in rule.suppressed_category_ids)
        print(f"  HCC{rule.trigger_category_id} suppresses {suppressed}")
    print(f"\nResult for P1: {matrix.row('P1')}")
    print()


if __name__ == "__main__":
    example_1_code_lookup()
    example_2_single_patient()
    example_3_extract_file()
    example_4_rule_order()
