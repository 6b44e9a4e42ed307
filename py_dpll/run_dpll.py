# *************************************************************************
# SPDX-License-Identifier: Apache-2.0
# Licensed under the Apache License, Version 2.0.
# See the LICENSE file in the project root for the full license text.
# *************************************************************************
"""
Solve a formula file with the python DPLL solver and report the result.

Example:
    python -m py_dpll.run_dpll -i ./dataset/example.cnf -o -
"""
import sys
import time
import psutil
import argparse

from py_dpll.dpll import DPLLSolver, Lbool
from py_dpll.cnf_reader import (ParseError, read_formula_text, read_formula_file,
                                read_dimacs_file)


def solve(formula_text: str):
    """
    Solve a formula given in the line format.

    Returns Satisfiable(assignment) or Unsatisfiable(). Raises ParseError on
    malformed input.
    """
    S = DPLLSolver()
    S.verbosity = 0
    read_formula_text(formula_text, S)
    return S.solve_()


def settings_to_str(assignment) -> str:
    output = []
    for name, value in assignment.items():
        output.append(f"Variable: {name} is set to: {value}")
    return "\n".join(output)


def render_result(result) -> str:
    if result.status == Lbool.TRUE:
        settings = settings_to_str(result.assignment)
        return "SATISFIABLE\n" + settings if settings else "SATISFIABLE"
    if result.status == Lbool.FALSE:
        return "UNSATISFIABLE"
    return "INDETERMINATE"


def model_line(assignment) -> str:
    lits = [name if value else f"-{name}" for name, value in assignment.items()]
    return " ".join(lits + ["0"])


def write_result(result, output_file: str):
    if output_file == '-':
        _write_result(result, sys.stdout)
        return
    with open(output_file, 'w') as rf:
        _write_result(result, rf)


def _write_result(result, rf):
    if result.status == Lbool.TRUE:
        rf.write("SAT\n")
        rf.write(model_line(result.assignment) + "\n")
    elif result.status == Lbool.FALSE:
        rf.write("UNSAT\n")
    else:
        rf.write("INDET\n")


def solver_stats(S) -> dict:
    return {
        "vars": S.nVars(),
        "clauses": S.nClauses(),
        "remaining_clauses": S.nRemainingClauses(),
        "decisions": S.decisions,
        "propagations": S.propagations,
        "conflicts": S.conflicts,
        "restores": S.restores,
    }


def print_stats(S, start_time):
    cpu_time = time.process_time() - start_time

    process = psutil.Process()
    mem_used = process.memory_info().rss / (1024 * 1024)  # in MB

    decisions_per_sec = S.decisions / cpu_time if cpu_time > 0 else 0
    propagations_per_sec = S.propagations / cpu_time if cpu_time > 0 else 0

    print("decisions             : {:<14} ({:.0f} /sec)".format(S.decisions, decisions_per_sec))
    print("propagations          : {:<14} ({:.0f} /sec)".format(S.propagations, propagations_per_sec))
    print("conflicts             : {}".format(S.conflicts))
    print("restores              : {}".format(S.restores))
    print("Memory used           : {:.2f} MB".format(mem_used))
    print("CPU time              : {:.3f} s".format(cpu_time))


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Solve a CNF formula with the python DPLL solver."
    )
    parser.add_argument(
        "-i", "--input_file", required=True,
        help="Path to input formula file (.gz accepted)."
    )
    parser.add_argument(
        "-o", "--output_file", default=None,
        help="Path to write result (SAT/UNSAT + model). Use '-' for stdout."
    )
    parser.add_argument("--dimacs", action="store_true",
                        help="Input is DIMACS instead of the named-literal line format.")
    parser.add_argument("--decision-budget", type=int, default=-1,
                        help="Stop with INDETERMINATE after this many decisions (-1: no limit).")
    parser.add_argument("--propagation-budget", type=int, default=-1,
                        help="Stop with INDETERMINATE after this many propagations (-1: no limit).")
    parser.add_argument("-v", "--verbosity", type=int, default=1)
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    start_time = time.process_time()

    S = DPLLSolver()
    S.verbosity = args.verbosity
    S.decision_budget = args.decision_budget
    S.propagation_budget = args.propagation_budget
    try:
        if args.dimacs:
            read_dimacs_file(args.input_file, S)
        else:
            read_formula_file(args.input_file, S)
    except ParseError as e:
        print(f"PARSE ERROR! {e}")
        return 1

    result = S.solve_()

    if S.verbosity >= 1:
        print_stats(S, start_time)
    print(render_result(result))
    if args.output_file:
        write_result(result, args.output_file)

    if result.status == Lbool.TRUE:
        return 10
    if result.status == Lbool.FALSE:
        return 20
    return 0


if __name__ == "__main__":
    sys.exit(main())
