"""
Generate random k-SAT formulas in variable-count buckets and write each formula on one line
(named literals with a trailing 0 per clause, e.g. "x1 -x3 x4 0 -x2 x3 x5 0").

Two modes:
    sat     formulas satisfiable by construction (planted assignment),
    random  uniform random k-SAT, satisfiable or not.

Example:
    # One bucket 5–15 with 500 items
    python ./generate_dataset/gen_cnf_buckets.py \
        --vars-min 5 --vars-max 15 --samples 500 --out-dir ./dataset/train_raw/
"""
import argparse
import random
import sys
from pathlib import Path
from typing import Dict, Iterator, List, Tuple

import numpy as np
from tqdm import tqdm


LITERAL_AGREES_PROB = 0.5


def plant_assignment(num_vars: int) -> Dict[str, bool]:
    """Hidden model for a planted formula, variables named x1..xN."""
    coins = np.random.random(num_vars) < 0.5
    return {f"x{i + 1}": bool(c) for i, c in enumerate(coins)}


def planted_clause(assignment: Dict[str, bool], width: int) -> List[str]:
    """
    Clause over `width` distinct variables of which at least one literal
    agrees with the planted assignment.
    """
    chosen = random.sample(list(assignment), k=width)
    agrees = np.random.random(width) < LITERAL_AGREES_PROB
    if not agrees.any():
        agrees[random.randrange(width)] = True
    return [v if assignment[v] == bool(a) else f"-{v}" for v, a in zip(chosen, agrees)]


def generate_sat_problem(num_vars: int, num_clauses: int, clause_size: int) -> List[List[str]]:
    assignment = plant_assignment(num_vars)
    return [planted_clause(assignment, clause_size) for _ in range(num_clauses)]


def generate_random_problem(
        num_vars: int,
        num_clauses: int,
        clause_size: int
) -> List[List[str]]:
    """
    Uniform random k-SAT: distinct variables per clause, fair coin for polarity.
    """
    vars_list = [f"x{i + 1}" for i in range(num_vars)]
    clauses = []
    for _ in range(num_clauses):
        selected_vars = random.sample(vars_list, k=clause_size)
        signs = np.random.choice([True, False], size=clause_size)
        clauses.append([f"-{v}" if neg else v for v, neg in zip(selected_vars, signs)])
    return clauses


def to_bucket_line(clauses: List[List[str]]) -> str:
    """
    Join clauses like ['x1','-x3'] into one line with '0' delimiters.
    """
    return " ".join(" ".join(clause) + " 0" for clause in clauses)


GENERATORS = {"sat": generate_sat_problem, "random": generate_random_problem}


def iter_bucket_lines(vars_min: int, vars_max: int, samples: int,
                      ratios: Tuple[float, float], clause_size: int,
                      mode: str = "sat") -> Iterator[str]:
    """Yield `samples` one-line formulas, sizes drawn per formula."""
    generate = GENERATORS[mode]
    for _ in range(samples):
        n_vars = random.randint(vars_min, vars_max)
        n_clauses = max(1, int(round(random.uniform(*ratios) * n_vars)))
        yield to_bucket_line(generate(n_vars, n_clauses, clause_size))


def write_bucket(vars_min: int, vars_max: int, samples: int,
                 ratio_min: float, ratio_max: float, clause_size: int,
                 out_dir: Path, mode: str = "sat") -> Path:
    """
    Write one bucket file named <mode>_<vars_min>_<vars_max>.txt into out_dir
    and return its path. Clause counts are ratio * #vars with the ratio drawn
    uniformly from [ratio_min, ratio_max].
    """
    if clause_size > vars_min:
        raise ValueError(f"clause size {clause_size} exceeds the minimum variable count {vars_min}")

    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / f"{mode}_{vars_min}_{vars_max}.txt"
    lines = iter_bucket_lines(vars_min, vars_max, samples, (ratio_min, ratio_max),
                              clause_size, mode)
    with path.open("w") as fh:
        for line in tqdm(lines, total=samples, desc=f"[{path.name}]"):
            fh.write(line + "\n")
    return path


def parse_args(argv=None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Write one bucket of random k-SAT formulas")

    size = ap.add_argument_group("formula size")
    size.add_argument("--vars-min", type=int, required=True, help="Fewest variables per formula")
    size.add_argument("--vars-max", type=int, required=True, help="Most variables per formula")
    size.add_argument("--ratio-min", type=float, default=4.1, help="Lowest clause/variable ratio")
    size.add_argument("--ratio-max", type=float, default=4.4, help="Highest clause/variable ratio")
    size.add_argument("--clause-size", type=int, default=3)

    ap.add_argument("--samples", type=int, required=True, help="Formulas in the bucket")
    ap.add_argument("--mode", choices=sorted(GENERATORS), default="sat")
    ap.add_argument("--seed", type=int, default=42, help="Seeds both random and numpy")
    ap.add_argument("--out-dir", type=Path, required=True)
    return ap.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    random.seed(args.seed)
    np.random.seed(args.seed)

    path = write_bucket(args.vars_min, args.vars_max, args.samples,
                        args.ratio_min, args.ratio_max, args.clause_size,
                        args.out_dir, mode=args.mode)
    print(f"wrote {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
