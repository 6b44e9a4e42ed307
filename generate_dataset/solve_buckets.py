# *************************************************************************
# SPDX-License-Identifier: Apache-2.0
# Licensed under the Apache License, Version 2.0.
# See the LICENSE file in the project root for the full license text.
# *************************************************************************
"""
Solve every formula of the bucket files with the DPLL solver and write gzip‑compressed JSONL.

Example:
    python -m generate_dataset.solve_buckets \
        --raw-dir ./dataset/train_raw/ \
        --out-dir ./dataset/solved/

Output JSONL (gzip):
    {"formula":"x1 -x2 0 ...","n_v":18,"n_c":74,"verdict":"SAT","assignment":{...},
     "key_trace":"D x1 L 1 A x3 ...","stats":{...}}
"""

import argparse, json, gzip
import sys
from multiprocessing import Pool, cpu_count
from pathlib import Path
from typing import Dict

from tqdm import tqdm
from py_dpll.dpll import DPLLSolver, Lbool
from py_dpll.cnf_reader import read_formula_text
from py_dpll.run_dpll import solver_stats
from sat_utils.trace_utils import convert_trace_to_str
from sat_utils.utils import bucket_line_to_formula_text

VERDICTS = {Lbool.TRUE: "SAT", Lbool.FALSE: "UNSAT", Lbool.UNDEF: "INDET"}


def solve_and_trace(problem_line: str, decision_budget: int = -1) -> Dict:
    """
    Solve one bucket line and keep its key trace.

    Args:
    	problem_line: One‑line formula with '0' delimiters.
    	decision_budget: Decision cap, -1 for none.

    Returns:
    	Record dict with fields: formula, n_v, n_c, verdict, assignment, key_trace, stats.
    """
    problem_line = problem_line.strip()
    solver = DPLLSolver()
    solver.verbosity = 0
    solver.decision_budget = decision_budget
    read_formula_text(bucket_line_to_formula_text(problem_line), solver)
    result = solver.solve_()

    return {
        "formula": problem_line,
        "n_v": solver.nVars(),
        "n_c": solver.nClauses(),
        "verdict": VERDICTS[result.status],
        "assignment": result.assignment,
        "key_trace": convert_trace_to_str(solver.key_trace_events),
        "stats": solver_stats(solver),
    }


def _process_one_file(raw_path: Path, out_path: Path, workers: int) -> None:
    """
    Process one .txt bucket into a .jsonl.gz of solver records.

    Args:
    	raw_path: Path to input .txt (one formula per line).
    	out_path: Destination .jsonl.gz path.
    	workers: Solver processes to use in the pool.
    """
    out_path.parent.mkdir(parents=True, exist_ok=True)

    with raw_path.open() as fh:
        lines = [line for line in fh if line.strip()]

    with Pool(processes=max(1, workers)) as pool, \
            gzip.open(out_path, "wt") as gz_out:
        for rec in tqdm(pool.imap(solve_and_trace, lines, 128),
                        total=len(lines),
                        desc=f"[{raw_path.name}]"):
            gz_out.write(json.dumps(rec, separators=(",", ":")) + "\n")


def parse_args(argv=None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Batch DPLL solver over bucket files")
    ap.add_argument("--raw-dir", default='../dataset/train_raw/',
                    help="root directory that contains *.txt buckets")
    ap.add_argument("--out-dir", default=None,
                    help="root for *.jsonl.gz (default: alongside raw file)")
    ap.add_argument("--glob", default="**/*.txt",
                    help="glob relative to --raw-dir (default: **/*.txt)")
    ap.add_argument("--workers", type=int, default=max(1, cpu_count() // 4),
                    help="Solver processes per file.")
    return ap.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    raw_root = Path(args.raw_dir).resolve()
    out_root = Path(args.out_dir).resolve() if args.out_dir else raw_root

    txt_files = sorted(raw_root.glob(args.glob))
    if not txt_files:
        print("No matching .txt files found.", file=sys.stderr)
        return 1

    for raw_path in txt_files:
        rel = raw_path.relative_to(raw_root).with_suffix(".jsonl.gz")
        out_path = out_root / rel
        if out_path.exists():
            print(f"[skip] {out_path} already exists")
            continue

        print(f"→ {rel}")
        _process_one_file(raw_path, out_path, args.workers)
    return 0


if __name__ == "__main__":
    sys.exit(main())
