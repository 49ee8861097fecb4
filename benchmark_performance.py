"""
Performance benchmark for HCC classification.

Measures aggregation and hierarchy throughput with increasing patient
volumes. The hierarchy pass should scale linearly with patient count.
"""

import time
from pathlib import Path

import numpy as np
import pandas as pd
from hcc_classifier import CategoryAggregator, HierarchyEngine, load_hierarchy, load_labels

DATA_DIR = Path(__file__).parent / "data"


def generate_classified(num_patients: int, records_per_patient: int, category_ids, rng) -> pd.DataFrame:
    """Generate random classified diagnoses."""
    total = num_patients * records_per_patient
    patients = np.repeat([f"PAT{i:08d}" for i in range(num_patients)], records_per_patient)
    categories = rng.choice(category_ids, size=total)
    return pd.DataFrame({"patient_id": patients, "category_id": categories})


def benchmark_pipeline():
    """Benchmark aggregation and hierarchy application."""
    print("=" * 70)
    print("HCC CLASSIFICATION PERFORMANCE BENCHMARK")
    print("=" * 70)
    print()

    catalog = load_labels(DATA_DIR / "V22H79L1.TXT")
    rules = load_hierarchy(DATA_DIR / "V22H79H1.TXT")
    category_ids = [label.id for label in catalog]
    rng = np.random.default_rng(42)

    aggregator = CategoryAggregator(catalog)
    engine = HierarchyEngine(rules)

    for num_patients in [1_000, 10_000, 100_000, 500_000]:
        print(f"Testing {num_patients:,} patients with 6 classified records each...")
        classified = generate_classified(num_patients, 6, category_ids, rng)

        start = time.time()
        matrix = aggregator.aggregate(classified)
        aggregate_elapsed = time.time() - start

        start = time.time()
        engine.apply(matrix)
        hierarchy_elapsed = time.time() - start

        per_million = hierarchy_elapsed / num_patients * 1_000_000
        print(f"  Aggregate:     {aggregate_elapsed:.3f} seconds")
        print(f"  Hierarchy:     {hierarchy_elapsed:.3f} seconds ({len(rules)} rules)")
        print(f"  Hierarchy per 1M patients: {per_million:.2f} seconds")
        print(f"  Cells cleared: {engine.cells_cleared:,}")
        print()

    print("=" * 70)
    print("ANALYSIS")
    print("=" * 70)
    print()
    print("Implementation characteristics:")
    print("  - Crosswalk lookups are dictionary based (O(1) per code)")
    print("  - Aggregation is a single groupby plus indexed scatter")
    print("  - Hierarchy pass is O(rules x patients) over int8 columns")
    print()


if __name__ == "__main__":
    benchmark_pipeline()
