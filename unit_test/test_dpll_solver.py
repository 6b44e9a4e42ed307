# *************************************************************************
# SPDX-License-Identifier: Apache-2.0
# Licensed under the Apache License, Version 2.0.
# See the LICENSE file in the project root for the full license text.
# *************************************************************************
"""
Unit tests for the DPLL search: verdicts, trail bookkeeping, traces and
agreement with brute force and with pysat's MiniSAT.
"""
import random
import unittest

import numpy as np

from py_dpll.dpll import (DPLLSolver, Lbool, Satisfiable, TrailEntry, TrailTag,
                          Unknown, Unsatisfiable)
from py_dpll.cnf_reader import read_formula_text
from sat_utils.trace_utils import convert_trace_to_str, get_key_trace
from sat_utils.utils import (brute_force_satisfiable, check_assignment,
                             clauses_to_formula_text, reference_satisfiable)
from generate_dataset.gen_cnf_buckets import generate_random_problem


def make_solver(text: str) -> DPLLSolver:
    S = DPLLSolver()
    S.verbosity = 0
    read_formula_text(text, S)
    return S


def random_clauses(rng: random.Random, n_vars: int, n_clauses: int):
    names = [f"v{i}" for i in range(n_vars)]
    clauses = []
    for _ in range(n_clauses):
        size = rng.randint(1, 3)
        clauses.append([(rng.choice(names), rng.random() < 0.5) for _ in range(size)])
    return clauses


class TestExampleScenarios(unittest.TestCase):
    def test_single_unit(self):
        self.assertEqual(make_solver("A 0").solve_(), Satisfiable({"A": True}))

    def test_contradicting_units(self):
        S = make_solver("A 0\n-A 0")
        self.assertEqual(S.solve_(), Unsatisfiable())
        self.assertEqual(S.trail, [])
        self.assertEqual(S.assigns, {})
        self.assertEqual(S.conflicts, 1)

    def test_all_four_binary_clauses(self):
        S = make_solver("A B 0\n-A B 0\nA -B 0\n-A -B 0")
        S.record_entire_trace = True
        self.assertEqual(S.solve_(), Unsatisfiable())
        self.assertEqual(S.trace, "D A L 1 A B BT -A L 1 A B ")
        self.assertEqual((S.decisions, S.propagations, S.conflicts, S.restores), (2, 2, 2, 1))

    def test_unit_then_forced(self):
        S = make_solver("A B 0\n-A 0")
        self.assertEqual(S.solve_(), Satisfiable({"A": False, "B": True}))
        self.assertEqual(S.trail, [TrailEntry(1, TrailTag.FORCED), TrailEntry(2, TrailTag.FORCED)])
        self.assertEqual(S.decisions, 0)

    def test_single_wide_clause(self):
        result = make_solver("A B C 0").solve_()
        self.assertEqual(result.status, Lbool.TRUE)
        self.assertTrue(any(result.assignment.get(v, False) for v in "ABC"))
        # only the first branch is needed, B and C stay free
        self.assertEqual(result.assignment, {"A": True})


class TestSearchBehaviour(unittest.TestCase):
    def test_empty_formula(self):
        S = make_solver("")
        self.assertEqual(S.solve_(), Satisfiable({}))
        self.assertEqual(S.trail, [])

    def test_empty_clause_in_input(self):
        S = make_solver("A B 0\n0\n")
        self.assertEqual(S.solve_(), Unsatisfiable())
        self.assertEqual(S.trail, [])
        self.assertEqual(S.decisions + S.propagations, 0)

    def test_pure_negative_variable_branches_negative(self):
        S = make_solver("-A B 0\n-A C 0")
        self.assertEqual(S.solve_(), Satisfiable({"A": False}))
        self.assertEqual(S.trail, [TrailEntry(1, TrailTag.BRANCH_UNTRIED)])

    def test_mixed_polarity_branches_positive(self):
        S = make_solver("-A B 0\nA C 0")
        S.record_entire_trace = True
        self.assertEqual(S.solve_(), Satisfiable({"A": True, "B": True}))
        self.assertEqual(S.trace, "D A L 1 A B ")

    def test_retry_opposite_polarity(self):
        S = make_solver("A B 0\n-A C 0\n-A -C 0")
        S.record_entire_trace = True
        self.assertEqual(S.solve_(), Satisfiable({"A": False, "B": True}))
        self.assertEqual(S.trace, "D A L 1 A C BT -A L 1 A B ")
        self.assertEqual(S.trail, [TrailEntry(1, TrailTag.BRANCH_EXHAUSTED),
                                   TrailEntry(2, TrailTag.FORCED)])
        self.assertEqual(S.key_trace_events, [("BT", "-A", 1), ("A", "B", 1)])
        self.assertEqual((S.conflicts, S.restores), (1, 1))
        self.assertEqual(S.decisionLevel(), 1)
        self.assertEqual(S.trail_lim, [0])

    def test_backtrack_replays_earlier_decisions(self):
        S = make_solver("X Y 0\nA B 0\n-A B 0\nA -B 0\n-A -B 0")
        S.record_entire_trace = True
        self.assertEqual(S.solve_(), Unsatisfiable())
        self.assertEqual(
            S.trace,
            "D X L 1 D A L 2 A B BT -A L 2 A B BT -X L 1 A Y D A L 2 A B BT -A L 2 A B "
        )
        self.assertEqual((S.decisions, S.propagations, S.conflicts, S.restores), (6, 5, 4, 3))
        self.assertEqual(S.key_trace_events,
                         [("BT", "-X", 1), ("A", "Y", 1), ("BT", "-A", 2), ("A", "B", 2)])
        self.assertEqual(get_key_trace(S.trace), convert_trace_to_str(S.key_trace_events))
        self.assertEqual(S.trail, [])
        self.assertEqual(S.trail_lim, [])

    def test_assignment_matches_trail(self):
        S = make_solver("A B 0\n-A C 0\n-A -C 0\nD -B 0")
        result = S.solve_()
        self.assertEqual(S.decisionLevel(), sum(1 for e in S.trail if e.is_branch()))
        self.assertEqual(result.status, Lbool.TRUE)
        decided = {S.encoder.decode(e.lit)[0] for e in S.trail}
        self.assertEqual(set(result.assignment), decided)

    def test_tautology_does_not_crash(self):
        result = make_solver("A -A 0\nB 0").solve_()
        self.assertEqual(result, Satisfiable({"A": True, "B": True}))

    def test_decision_budget(self):
        S = make_solver("A B 0\n-A B 0")
        S.decision_budget = 0
        self.assertEqual(S.solve_(), Unknown())

    def test_propagation_budget(self):
        S = make_solver("A 0\nB -A 0")
        S.propagation_budget = 1
        self.assertEqual(S.solve_(), Unknown())
        self.assertEqual(S.propagations, 1)

    def test_verbose_trace_printed(self):
        import io
        from contextlib import redirect_stdout

        S = make_solver("A B 0\n-A 0")
        S.verbosity = 2
        buf = io.StringIO()
        with redirect_stdout(buf):
            S.solve_()
        out = buf.getvalue()
        self.assertIn("Original: A ---> Encoded to: 0", out)
        self.assertIn("A B # ", out)
        self.assertIn("A -A A B \n", out)


class TestAgainstOracles(unittest.TestCase):
    def test_all_formulas_over_two_variables(self):
        literals = [("A", False), ("A", True), ("B", False), ("B", True)]
        candidates = [[lit] for lit in literals]
        candidates += [[a, b] for a in literals[:2] for b in literals[2:]]
        for mask in range(1 << len(candidates)):
            clauses = [c for i, c in enumerate(candidates) if mask >> i & 1]
            with self.subTest(mask=mask):
                self._check(clauses)

    def test_random_small_formulas(self):
        rng = random.Random(7)
        for i in range(300):
            n_vars = rng.randint(1, 6)
            clauses = random_clauses(rng, n_vars, rng.randint(1, 14))
            with self.subTest(i=i):
                self._check(clauses)

    def test_random_3sat_against_minisat(self):
        random.seed(3)
        np.random.seed(3)
        for i in range(25):
            n_vars = random.randint(8, 14)
            raw = generate_random_problem(n_vars, int(round(4.26 * n_vars)), 3)
            clauses = [[(lit.lstrip("-"), lit.startswith("-")) for lit in c] for c in raw]
            with self.subTest(i=i):
                result = make_solver(clauses_to_formula_text(clauses)).solve_()
                self.assertEqual(result.status == Lbool.TRUE, reference_satisfiable(clauses))
                if result.status == Lbool.TRUE:
                    self.assertTrue(check_assignment(clauses, result.assignment))

    def test_determinism(self):
        rng = random.Random(11)
        for i in range(50):
            text = clauses_to_formula_text(random_clauses(rng, 6, 12))
            with self.subTest(i=i):
                first = make_solver(text)
                second = make_solver(text)
                first.record_entire_trace = second.record_entire_trace = True
                self.assertEqual(first.solve_(), second.solve_())
                self.assertEqual(first.trace, second.trace)

    def _check(self, clauses):
        result = make_solver(clauses_to_formula_text(clauses)).solve_()
        expected = brute_force_satisfiable(clauses)
        self.assertEqual(result.status == Lbool.TRUE, expected is not None)
        if result.status == Lbool.TRUE:
            # unset variables are free: any extension must satisfy the formula
            self.assertTrue(check_assignment(clauses, result.assignment, default=False))
            self.assertTrue(check_assignment(clauses, result.assignment, default=True))
        else:
            self.assertEqual(result.status, Lbool.FALSE)


if __name__ == '__main__':
    unittest.main()
