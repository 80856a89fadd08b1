import json

import pandas as pd

from compare_nodes import ComparisonResult
from verify_integrity import STATUS_EMPTY, ErrorScanResult, FindingKind

WIDTH = 66

CATEGORY_LABELS = {
    FindingKind.CORRUPTED_RECORD: "Corrupted JSON",
    FindingKind.BAD_HASH: "Bad Hash",
    FindingKind.TIMESTAMP_FUTURE: "Timestamp Future",
    FindingKind.TIMESTAMP_PAST: "Timestamp Past",
    FindingKind.TIMESTAMP_NOT_INCREASING: "Timestamp Not Increasing",
    FindingKind.DUPLICATE_HASH: "Duplicate Hashes",
    FindingKind.EMPTY_BLOCK: "Empty Blocks",
    FindingKind.PREVHASH_ERROR: "PrevHash Errors",
    FindingKind.HEIGHT_ERROR: "Height Errors",
    FindingKind.MISSING_BLOCK: "Missing Blocks",
    FindingKind.OUT_OF_ORDER: "Out of Order",
}


def to_json(result) -> str:
    return json.dumps(result.to_dict(), indent=2)


def format_scan_text(result: ErrorScanResult) -> str:
    lines = [
        "",
        "=" * WIDTH,
        "BLOCKCHAIN ERROR SCAN SUMMARY",
        "=" * WIDTH,
        f"Database:         {result.database_path}",
        f"Scan Time:        {result.scan_time}",
        "",
        "STATISTICS:",
        f"  Total Blocks:     {result.total_blocks}",
        f"  Blocks Scanned:   {result.blocks_scanned}",
        f"  Total Errors:     {result.total_errors}",
        f"  Health Score:     {result.health_score}%",
        f"  Status:           {result.status}",
        "",
        "ERROR CLASSIFICATION:",
    ]
    for kind, label in CATEGORY_LABELS.items():
        lines.append(f"  {label + ':':<26}{len(result.of_kind(kind))}")

    if result.findings:
        lines.append("")
        lines.append("FINDINGS:")
        for finding in result.findings:
            lines.append(f"  - [{CATEGORY_LABELS[finding.kind]}] {finding.message}")

    lines.append("")
    if result.status == STATUS_EMPTY:
        lines.append("No blocks found in database.")
    elif result.total_errors == 0:
        lines.append("No errors found! Blockchain is healthy.")
    else:
        lines.append("Errors detected.")
    lines.append("=" * WIDTH)
    return "\n".join(lines)


def format_comparison_text(result: ComparisonResult) -> str:
    lines = [
        "",
        "=" * WIDTH,
        "NODE COMPARISON SUMMARY",
        "=" * WIDTH,
        "NODE INFO:",
        f"  Node1: {result.node1_path} (Height: {result.node1_height})",
        f"  Node2: {result.node2_path} (Height: {result.node2_height})",
        "",
        "RESULTS:",
        f"  Matching Blocks:    {result.matching_blocks}",
        f"  Mismatched Blocks:  {len(result.mismatched_blocks)}",
        f"  Node1 Only:         {len(result.node1_only_blocks)}",
        f"  Node2 Only:         {len(result.node2_only_blocks)}",
        f"  Data Differences:   {len(result.data_mismatches)}",
        f"  Time Differences:   {len(result.timestamp_mismatches)}",
        f"  Sync Percentage:    {result.sync_percentage:.1f}%",
    ]
    if result.divergence_point >= 0:
        lines.append("")
        lines.append(f"Divergence Point: Block {result.divergence_point}")

    lines.append("")
    lines.append("RECOMMENDATIONS:")
    for n, rec in enumerate(result.recommendations, start=1):
        lines.append(f"  {n}. {rec}")
    lines.append("=" * WIDTH)
    return "\n".join(lines)


def output_scan_result(result: ErrorScanResult, json_mode: bool = False):
    print(to_json(result) if json_mode else format_scan_text(result))


def output_comparison_result(result: ComparisonResult, json_mode: bool = False):
    print(to_json(result) if json_mode else format_comparison_text(result))


#Tablas para el dashboard


def scan_findings_frame(result: ErrorScanResult) -> pd.DataFrame:
    rows = [
        {
            "height": f.height,
            "category": CATEGORY_LABELS[f.kind],
            "message": f.message,
        }
        for f in result.findings
    ]
    return pd.DataFrame(rows, columns=["height", "category", "message"])


def category_counts_frame(result: ErrorScanResult) -> pd.DataFrame:
    rows = [
        {"category": label, "count": len(result.of_kind(kind))}
        for kind, label in CATEGORY_LABELS.items()
    ]
    return pd.DataFrame(rows, columns=["category", "count"])


def comparison_frame(result: ComparisonResult) -> pd.DataFrame:
    """One row per height that differs, with what kind of difference it is."""
    rows = []
    for h in result.node1_only_blocks:
        rows.append({"height": h, "difference": "missing on node2"})
    for h in result.node2_only_blocks:
        rows.append({"height": h, "difference": "missing on node1"})
    for h in result.mismatched_blocks:
        rows.append({"height": h, "difference": "hash mismatch"})
    df = pd.DataFrame(rows, columns=["height", "difference"])
    return df.sort_values("height", kind="stable").reset_index(drop=True)
