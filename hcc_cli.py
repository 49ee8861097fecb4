#!/usr/bin/env python
"""
Command-line interface for HCC classification.

Quick tool for classifying diagnosis extracts and inspecting the legacy
label, crosswalk and hierarchy artifacts.
"""

import argparse
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from hcc_classifier import (
    CrosswalkIndex,
    HCCError,
    HCCPipeline,
    PipelineConfig,
    load_hierarchy,
    load_labels,
    read_extracts,
    write_matrix,
)


def classify(args):
    """Run the full pipeline over one or more extracts."""
    config = PipelineConfig(
        label_path=args.labels,
        crosswalk_path=args.crosswalk,
        hierarchy_path=args.hierarchy,
        threshold=args.threshold,
        duplicate_policy=args.duplicate_policy,
    )

    # Artifacts are parsed before any extract is read
    pipeline = HCCPipeline(config)
    diagnoses = read_extracts(args.extracts, sep=args.sep)
    result = pipeline.run(diagnoses)
    summary = result.summary

    print("\n" + "=" * 60)
    print("HCC CLASSIFICATION RESULT")
    print("=" * 60)
    print(f"Diagnosis records:    {summary.classification.records_in:,}")
    print(f"  Classified:         {summary.classification.records_classified:,}")
    print(f"  Not in crosswalk:   {summary.classification.records_dropped:,}")
    print(f"Patients:             {summary.patient_count:,}")
    print(f"Categories:           {summary.category_count}")
    print(f"Hierarchy rules:      {summary.rule_count}")
    print(f"Threshold:            {summary.threshold}")
    print()
    print(f"Present before hierarchy: {summary.cells_present_before_hierarchy:,}")
    print(f"Suppressed by hierarchy:  {summary.cells_suppressed:,}")
    print(f"Present after hierarchy:  {summary.cells_present_after_hierarchy:,}")
    print("=" * 60)

    if args.output:
        write_matrix(result.matrix, args.output, prefix=args.prefix)
        print(f"\nMatrix written to {args.output}")
    print()


def list_labels(args):
    """Print the category catalog."""
    catalog = load_labels(args.labels)

    print("\n" + "=" * 60)
    print("CATEGORY CATALOG")
    print("=" * 60)
    for label in catalog:
        print(f"HCC{label.id:<6} {label.name}")
    print("=" * 60)
    print(f"{len(catalog)} categories\n")


def list_rules(args):
    """Print the parsed hierarchy rules in application order."""
    rules = load_hierarchy(args.hierarchy, start_sentinel=args.sentinel)

    print("\n" + "=" * 60)
    print("HIERARCHY RULES (applied in this order)")
    print("=" * 60)
    for step, rule in enumerate(rules, start=1):
        suppressed = ", ".join(f"HCC{c}" for c in rule.suppressed_category_ids)
        print(f"{step:>3}. HCC{rule.trigger_category_id} suppresses {suppressed}")
    print("=" * 60)
    print()


def lookup_code(args):
    """Look up the category for a diagnosis code."""
    crosswalk = CrosswalkIndex.from_path(args.crosswalk, duplicate_policy=args.duplicate_policy)
    category_id = crosswalk.lookup(args.code)

    if category_id is None:
        print(f"\n{args.code}: not in crosswalk (no condition category)\n")
        return

    print(f"\n{args.code}: HCC{category_id}\n")


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="HCC Classification CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Classify an extract with the sample artifacts
  %(prog)s classify data/V22H79L1.TXT data/F2218O1P.TXT data/V22H79H1.TXT data/sample_diagnoses.csv

  # Write the final matrix
  %(prog)s classify LABELS CROSSWALK HIERARCHY extract.csv --output hcc_matrix.csv

  # Inspect the artifacts
  %(prog)s labels data/V22H79L1.TXT
  %(prog)s rules data/V22H79H1.TXT
  %(prog)s lookup data/F2218O1P.TXT 250.00
        """
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')

    subparsers = parser.add_subparsers(dest='command', help='Command to execute')

    # Classify command
    classify_parser = subparsers.add_parser('classify', help='Classify diagnosis extracts')
    classify_parser.add_argument('labels', type=Path, help='Category label definition file')
    classify_parser.add_argument('crosswalk', type=Path, help='Diagnosis code crosswalk file')
    classify_parser.add_argument('hierarchy', type=Path, help='Hierarchy rule definition file')
    classify_parser.add_argument('extracts', type=Path, nargs='+', help='Diagnosis extract file(s)')
    classify_parser.add_argument('--threshold', type=int, default=2,
                                 help='Minimum records for a category to be present (default: 2)')
    classify_parser.add_argument('--duplicate-policy', choices=['reject', 'first', 'last'], default='reject',
                                 help='Crosswalk duplicate code policy (default: reject)')
    classify_parser.add_argument('--sep', default=',', help='Extract field separator (default: ,)')
    classify_parser.add_argument('--output', type=Path, help='Write the final matrix as CSV')
    classify_parser.add_argument('--prefix', default='HCC', help='Matrix column prefix (default: HCC)')
    classify_parser.set_defaults(func=classify)

    # Labels command
    labels_parser = subparsers.add_parser('labels', help='List the category catalog')
    labels_parser.add_argument('labels', type=Path, help='Category label definition file')
    labels_parser.set_defaults(func=list_labels)

    # Rules command
    rules_parser = subparsers.add_parser('rules', help='List hierarchy rules')
    rules_parser.add_argument('hierarchy', type=Path, help='Hierarchy rule definition file')
    rules_parser.add_argument('--sentinel', default='imposing hierarchies',
                              help='Marker that opens the rule section')
    rules_parser.set_defaults(func=list_rules)

    # Lookup command
    lookup_parser = subparsers.add_parser('lookup', help='Look up the category for a diagnosis code')
    lookup_parser.add_argument('crosswalk', type=Path, help='Diagnosis code crosswalk file')
    lookup_parser.add_argument('code', help='Diagnosis code, with or without period')
    lookup_parser.add_argument('--duplicate-policy', choices=['reject', 'first', 'last'], default='reject')
    lookup_parser.set_defaults(func=lookup_code)

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        args.func(args)
    except (HCCError, ValidationError, OSError) as e:
        print(f"\nERROR: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
