"""
Report median search statistics (decisions, propagations, conflicts, restores)
per verdict from the gzip JSONL records written by generate_dataset/solve_buckets.py.
"""
import os
import sys
import glob
import gzip
import json
import numpy as np

METRICS = ["decisions", "propagations", "conflicts", "restores"]
VERDICTS = ["SAT", "UNSAT", "INDET"]


def read_records(path):
    """
    Read one .jsonl.gz file.

    Args:
    	path: File path.

    Returns:
    	List of record dicts.
    """
    records = []
    with gzip.open(path, "rt", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line:
                records.append(json.loads(line))
    return records


def read_metric(block, metric):
    if not isinstance(block, dict):
        return None
    v = block.get(metric, None)
    return float(v) if v is not None else None


def analyze_records(items):
    """
    Median of every metric per verdict.

    Args:
    	items: List of JSON records.

    Returns:
    	Dict verdict → {"count": n, metric: median or None}.
    """
    out = {}
    for verdict in VERDICTS:
        group = [it for it in items if it.get("verdict") == verdict]
        summary = {"count": len(group)}
        for m in METRICS:
            values = [read_metric(it.get("stats"), m) for it in group]
            values = np.array([v for v in values if v is not None], dtype=float)
            values = values[np.isfinite(values)]
            summary[m] = float(np.median(values)) if values.size else None
        out[verdict] = summary
    return out


def print_summary(filename, summaries):
    print(f"FILE: {filename}")
    for verdict in VERDICTS:
        s = summaries[verdict]
        if s["count"] == 0:
            continue
        cols = "  ".join(
            f"{m}={s[m]:.1f}" if s[m] is not None else f"{m}=NA" for m in METRICS
        )
        print(f"  {verdict} (n={s['count']}): {cols}")
    print("")


def main(folder):
    files = sorted(glob.glob(os.path.join(folder, "**", "*.jsonl.gz"), recursive=True))
    if not files:
        print(f"No .jsonl.gz files in {folder}")
        return {}

    all_items = []
    for path in files:
        items = read_records(path)
        print_summary(os.path.basename(path), analyze_records(items))
        all_items.extend(items)

    final = analyze_records(all_items)
    print_summary("FINAL (across all files)", final)
    return final


if __name__ == "__main__":
    main(sys.argv[1] if len(sys.argv) > 1 else "./dataset/solved")
