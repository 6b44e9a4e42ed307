"""
This file includes some general help functions.
"""
import os
import json
import itertools

from typing import Dict, List, Optional, Tuple
from pysat.formula import CNF
from pysat.solvers import Minisat22

from py_dpll.cnf_reader import ParseError, parse_literal

Clause = List[Tuple[str, bool]]


def get_cnf_files(folder_path: str) -> List[str]:
    """Returns a sorted list of .cnf files in the specified folder."""
    return sorted(
        os.path.join(folder_path, f)
        for f in os.listdir(folder_path)
        if f.endswith('.cnf')
    )


def save_dicts_to_json(results: list, output_filename: str) -> None:
    """
    Saves the results to a JSON file.

    Args:
        results (list): The results to save.
        output_filename (str): The filename for the output JSON file.
    """
    with open(output_filename, 'w') as json_file:
        json.dump(results, json_file, indent=4)


def read_sat_problems_lines(filename: str) -> List[str]:
    """
    Reads SAT problems from a file, each line is a problem, e.g., "x1 -x2 0 x3 x1 0".

    Args:
        filename (str): Path to the file containing SAT problems.

    Returns:
        list: A list of SAT problems, one per line.
    """
    with open(filename, 'r') as file:
        problems = file.readlines()
    return [line.strip() for line in problems if line.strip()]


def bucket_line_to_clauses(problem_line: str) -> List[Clause]:
    """
    Splits a one-line problem into clauses of (name, negated) pairs.

    Args:
        problem_line (str): The problem string where clauses are divided by '0'.

    Raises:
        ParseError: a token is not a literal, or the last clause has no '0'.
    """
    clauses = []
    clause = []
    for token in problem_line.strip().split():
        if token == '0':
            clauses.append(clause)
            clause = []
        else:
            clause.append(parse_literal(token))
    if clause:
        raise ParseError(f"last clause of '{problem_line.strip()}' is missing the terminating 0")
    return clauses


def clauses_to_formula_text(clauses: List[Clause]) -> str:
    """Render clauses in the one-clause-per-line format read by py_dpll."""
    lines = []
    for clause in clauses:
        tokens = [f"-{name}" if negated else name for name, negated in clause]
        lines.append(" ".join(tokens + ['0']))
    return "\n".join(lines) + "\n"


def bucket_line_to_formula_text(problem_line: str) -> str:
    return clauses_to_formula_text(bucket_line_to_clauses(problem_line))


def clauses_to_CNF_class(clauses: List[Clause]) -> Tuple[CNF, List[str]]:
    """
    Converts named clauses into a pysat CNF object.

    Variables are numbered 1..n in order of first appearance.

    Returns:
        The CNF object and the variable names, index i holding DIMACS variable i + 1.
    """
    numbering: Dict[str, int] = {}
    cnf = CNF()
    for clause in clauses:
        ints = []
        for name, negated in clause:
            if name not in numbering:
                numbering[name] = len(numbering) + 1
            ints.append(-numbering[name] if negated else numbering[name])
        cnf.append(ints)
    return cnf, list(numbering)


def write_temp_cnf_file(cnf_formula: CNF, filename: str='./temp_problem.cnf') -> None:
    cnf_formula.to_file(filename)


def check_assignment(clauses: List[Clause], assignment: Dict[str, bool],
                     default: bool = False) -> bool:
    """
    Checks every clause has a true literal. Unset variables take `default`.
    """
    for clause in clauses:
        if not any(assignment.get(name, default) != negated for name, negated in clause):
            return False
    return True


def brute_force_satisfiable(clauses: List[Clause]) -> Optional[Dict[str, bool]]:
    """
    Truth-table search over every variable. Only usable on small formulas.

    Returns:
        The first satisfying assignment found, or None.
    """
    names = []
    for clause in clauses:
        for name, _ in clause:
            if name not in names:
                names.append(name)
    for values in itertools.product([False, True], repeat=len(names)):
        assignment = dict(zip(names, values))
        if check_assignment(clauses, assignment):
            return assignment
    return None


def reference_satisfiable(clauses: List[Clause]) -> bool:
    """Verdict from pysat's MiniSAT 2.2 bindings."""
    if any(len(clause) == 0 for clause in clauses):
        return False
    cnf, _ = clauses_to_CNF_class(clauses)
    with Minisat22(bootstrap_with=cnf.clauses) as solver:
        return solver.solve()
