"""Validates every diagnostic tree file in a directory.

Usage: diagtree-validate [TREES_DIR] [--warnings]

Prints one line per file and a summary. Exits 0 when every file is valid,
1 when any file is invalid and 2 when the directory does not exist.
"""
import os
import sys
import argparse
from typing import List, Optional
from pydantic import BaseModel
from diagtree.core import config
from diagtree.services.tree_store import list_tree_files, load_tree_file
from diagtree.services.validator import find_unreachable_steps, validate_document

class FileReport(BaseModel):
    file: str
    valid: bool
    node_count: int = 0
    defects: List[str] = []
    warnings: List[str] = []
    error: Optional[str] = None

def validate_file(file_path: str) -> FileReport:
    name = os.path.basename(file_path)
    try:
        document = load_tree_file(file_path)
    except (OSError, ValueError) as e:
        reason = str(e).splitlines()[0] if str(e) else type(e).__name__
        return FileReport(file=name, valid=False, error=reason)

    defects = validate_document(document)
    warnings = [f"node {step_id}: unreachable from start" for step_id in find_unreachable_steps(document.tree_data)]
    return FileReport(
        file=name,
        valid=not defects,
        node_count=document.node_count,
        defects=[str(defect) for defect in defects],
        warnings=warnings,
    )

def validate_directory(trees_dir: str) -> List[FileReport]:
    return [validate_file(file_path) for file_path in list_tree_files(trees_dir)]

def print_report(reports: List[FileReport], show_warnings: bool = False) -> None:
    for report in reports:
        if report.error is not None:
            print(f"INVALID: {report.file} - {report.error}", file=sys.stderr)
        elif report.valid:
            print(f"  OK: {report.file} ({report.node_count} nodes)")
        else:
            print(f"FAIL: {report.file} ({report.node_count} nodes) - {'; '.join(report.defects)}", file=sys.stderr)

        if show_warnings and report.warnings:
            for warning in report.warnings:
                print(f"  WARN: {report.file} - {warning}")

    valid = sum(1 for report in reports if report.valid)
    total_nodes = sum(report.node_count for report in reports)
    print()
    print("=" * 50)
    print(f"Files: {len(reports)} total, {valid} valid, {len(reports) - valid} invalid")
    print(f"Nodes: {total_nodes} total across all files")
    print("=" * 50)

def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Validate diagnostic tree JSON files")
    parser.add_argument(
        "trees_dir",
        nargs="?",
        default=config.TREES_DIR,
        help="Directory of tree files (default: TREES_DIR)",
    )
    parser.add_argument(
        "--warnings",
        "-w",
        action="store_true",
        help="Also report steps unreachable from start",
    )
    args = parser.parse_args(argv)

    if not os.path.isdir(args.trees_dir):
        print(f"Trees directory not found: {args.trees_dir}", file=sys.stderr)
        return 2

    reports = validate_directory(args.trees_dir)
    print_report(reports, show_warnings=args.warnings)
    return 0 if all(report.valid for report in reports) else 1

if __name__ == "__main__":
    raise SystemExit(main())
