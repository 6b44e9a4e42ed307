# *************************************************************************
# SPDX-License-Identifier: Apache-2.0
# Licensed under the Apache License, Version 2.0.
# See the LICENSE file in the project root for the full license text.
# *************************************************************************
"""
Readers that load formulas into a DPLLSolver.

Line format: one clause per line, literals separated by single spaces,
'-' prefix for negation, each clause terminated by the token '0'.
    A -B C 0
    -A 0
"""
import gzip

from typing import Iterable, List, Tuple
from pysat.formula import CNF


class ParseError(ValueError):
    def __init__(self, message: str, line_no: int = 0):
        if line_no:
            message = f"line {line_no}: {message}"
        super().__init__(message)
        self.line_no = line_no


def parse_literal(token: str, line_no: int = 0) -> Tuple[str, bool]:
    if token == "":
        raise ParseError("empty literal token", line_no)
    negated = token.startswith("-")
    name = token[1:] if negated else token
    if not name:
        raise ParseError(f"literal '{token}' has no variable name", line_no)
    if name == "0":
        raise ParseError("'0' is the clause terminator, not a variable", line_no)
    # a name starting with '-' would print like a negated literal
    if name.startswith("-"):
        raise ParseError(f"variable name '{name}' starts with '-'", line_no)
    return name, negated


def parse_clause_line(line: str, line_no: int = 0) -> List[Tuple[str, bool]]:
    """
    Parse one clause line into (name, negated) pairs.

    Tokens after the first '0' are ignored. A line starting with '0' is the
    empty clause.
    """
    lits = []
    for token in line.split(" "):
        if token == "0":
            return lits
        lits.append(parse_literal(token, line_no))
    raise ParseError(f"clause '{line}' is missing the terminating 0", line_no)


def parse_formula_lines(lines: Iterable[str]) -> List[List[Tuple[str, bool]]]:
    clauses = []
    for line_no, line in enumerate(lines, start=1):
        line = line.rstrip("\r\n")
        if not line.strip():
            continue
        clauses.append(parse_clause_line(line, line_no))
    return clauses


def read_formula_text(text: str, S) -> int:
    """Add every clause of text to S. Returns the number of clauses read."""
    clauses = parse_formula_lines(text.split("\n"))
    for clause in clauses:
        S.addClause(clause)
    return len(clauses)


def read_formula_file(filename: str, S) -> int:
    open_fn = gzip.open if filename.endswith('.gz') else open
    with open_fn(filename, 'rt', encoding='utf-8') as f:
        clauses = parse_formula_lines(f)
    for clause in clauses:
        S.addClause(clause)
    return len(clauses)


def read_dimacs_file(filename: str, S) -> int:
    """
    Reads a DIMACS CNF through pysat. Variable k gets the name "k".
    """
    try:
        cnf = CNF(from_file=filename)
    except (ValueError, IndexError) as e:
        raise ParseError(f"malformed DIMACS file {filename}: {e}") from e

    for clause in cnf.clauses:
        S.addClause([(str(abs(lit)), lit < 0) for lit in clause])
    return len(cnf.clauses)
