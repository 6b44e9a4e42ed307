# *************************************************************************
# SPDX-License-Identifier: Apache-2.0
# Licensed under the Apache License, Version 2.0.
# See the LICENSE file in the project root for the full license text.
# *************************************************************************
"""
Python DPLL implementation.

Clauses are sets of small integers. A variable with index v is encoded as
the literal 2*v (positive) or 2*v + 1 (negated), so the complement of a
literal is one xor away. The solver keeps a single working clause store,
simplifies it destructively while deciding literals, and rebuilds it from a
snapshot taken before the search whenever it has to backtrack.
"""
from typing import Dict, List, Optional, Set, Tuple


class Lbool:
    TRUE = 0
    FALSE = 1
    UNDEF = 2


def sign(lit) -> bool:
    return lit & 1 == 1


def var(lit) -> int:
    return lit >> 1


def mkLit(var_index: int, sign_bit: bool) -> int:
    return (var_index << 1) | (1 if sign_bit else 0)


def complement(lit: int) -> int:
    return lit ^ 1


class UnknownLiteralError(LookupError):
    """A literal refers to a variable index that was never allocated."""


class LiteralEncoder:
    """
    Maps variable names to dense indices in order of first appearance.
    """

    def __init__(self):
        self.index_of: Dict[str, int] = {}
        self.name_of: List[str] = []

    def nVars(self) -> int:
        return len(self.name_of)

    def names(self) -> List[str]:
        return list(self.name_of)

    def encode(self, name: str, negated: bool) -> int:
        v = self.index_of.get(name)
        if v is None:
            v = len(self.name_of)
            self.index_of[name] = v
            self.name_of.append(name)
        return mkLit(v, negated)

    def decode(self, lit: int) -> Tuple[str, bool]:
        v = var(lit)
        if lit < 0 or v >= len(self.name_of):
            raise UnknownLiteralError(f"Literal {lit} refers to unknown variable index {v}.")
        return self.name_of[v], sign(lit)

    def literal_to_str(self, lit: int) -> str:
        name, negated = self.decode(lit)
        return f"-{name}" if negated else name

    def to_str(self) -> str:
        """Encoding table, one variable per line."""
        output = []
        for name in self.name_of:
            output.append(f"Original: {name} ---> Encoded to: {self.index_of[name] << 1}")
        return "\n".join(output)


class ClauseStore:
    """
    Working set of clauses, keyed by clause id in insertion order.

    simplify() mutates the clauses in place; snapshot()/restore() give a
    deep copy that can be restored any number of times.
    """

    def __init__(self):
        self.clauses: Dict[int, Set[int]] = {}
        self._seen = set()
        self._next_id = 0

    def add(self, lits) -> bool:
        """Add a clause. Returns False if the same literal set is already stored."""
        key = frozenset(lits)
        if key in self._seen:
            return False
        self._seen.add(key)
        self.clauses[self._next_id] = set(key)
        self._next_id += 1
        return True

    def size(self) -> int:
        return len(self.clauses)

    def simplify(self, lit: int):
        neg = complement(lit)
        satisfied = [cid for cid, c in self.clauses.items() if lit in c]
        for cid in satisfied:
            del self.clauses[cid]
        for c in self.clauses.values():
            c.discard(neg)

    def isEmpty(self) -> bool:
        return len(self.clauses) == 0

    def hasEmptyClause(self) -> bool:
        return any(len(c) == 0 for c in self.clauses.values())

    def findUnitClause(self) -> Optional[int]:
        # dict order is ascending clause id
        for c in self.clauses.values():
            if len(c) == 1:
                return min(c)
        return None

    def literals(self) -> Set[int]:
        occurring = set()
        for c in self.clauses.values():
            occurring.update(c)
        return occurring

    def snapshot(self) -> Dict[int, Set[int]]:
        return {cid: set(c) for cid, c in self.clauses.items()}

    def restore(self, snapshot: Dict[int, Set[int]]):
        self.clauses = {cid: set(c) for cid, c in snapshot.items()}

    def to_str(self, encoder: LiteralEncoder) -> str:
        output = []
        for c in self.clauses.values():
            output.append(" ".join(encoder.literal_to_str(lit) for lit in sorted(c)) + " # ")
        return "\n".join(output)


class TrailTag:
    FORCED = 0
    BRANCH_UNTRIED = 1
    BRANCH_EXHAUSTED = 2


class TrailEntry:
    def __init__(self, lit: int, tag: int):
        self.lit = lit
        self.tag = tag

    def __eq__(self, other) -> bool:
        return isinstance(other, TrailEntry) and self.lit == other.lit and self.tag == other.tag

    def __repr__(self) -> str:
        return f"TrailEntry({self.lit}, {self.tag})"

    def is_branch(self) -> bool:
        return self.tag != TrailTag.FORCED


class Satisfiable:
    """Satisfiable verdict. The assignment covers decided variables only."""
    status = Lbool.TRUE

    def __init__(self, assignment: Dict[str, bool]):
        self.assignment = assignment

    def __eq__(self, other) -> bool:
        return isinstance(other, Satisfiable) and self.assignment == other.assignment

    def __repr__(self) -> str:
        return f"Satisfiable({self.assignment!r})"


class Unsatisfiable:
    status = Lbool.FALSE
    assignment = None

    def __eq__(self, other) -> bool:
        return isinstance(other, Unsatisfiable)

    def __repr__(self) -> str:
        return "Unsatisfiable()"


class Unknown:
    """A budget ran out before the search finished."""
    status = Lbool.UNDEF
    assignment = None

    def __eq__(self, other) -> bool:
        return isinstance(other, Unknown)

    def __repr__(self) -> str:
        return "Unknown()"


class DPLLSolver:
    def __init__(self):
        self.verbosity = 1
        self.encoder = LiteralEncoder()
        self.store = ClauseStore()

        self.assigns: Dict[int, bool] = {}
        self.trail: List[TrailEntry] = []
        self.trail_lim: List[int] = []
        self.saved_clauses = None
        self.num_clauses = 0

        self.decisions = 0
        self.propagations = 0
        self.conflicts = 0
        self.restores = 0

        self.decision_budget = -1
        self.propagation_budget = -1

        self.trace = ''
        self.record_entire_trace = False
        self.record_key_trace = True
        self.key_trace_events = []

    def nVars(self) -> int:
        return self.encoder.nVars()

    def nClauses(self) -> int:
        """Distinct clauses loaded from the input."""
        return self.num_clauses

    def nRemainingClauses(self) -> int:
        return self.store.size()

    def decisionLevel(self) -> int:
        return len(self.trail_lim)

    def addClause(self, lits: List[Tuple[str, bool]]) -> bool:
        """Encode and store a clause given as (name, negated) pairs."""
        assert not self.trail
        encoded = [self.encoder.encode(name, negated) for name, negated in lits]
        if not self.store.add(encoded):
            return False
        self.num_clauses += 1
        return True

    def _log_event(self, etype: str, lit: int, level: int):
        val = self.encoder.literal_to_str(lit)
        if etype == "A":
            token = f"A {val} "
        else:
            token = f"{etype} {val} L {level} "
        if self.record_entire_trace:
            self.trace += token
        if self.record_key_trace:
            if etype == "BT":
                self.key_trace_events = [
                    (t, v, lvl) for (t, v, lvl) in self.key_trace_events if lvl < level
                ]
            self.key_trace_events.append((etype, val, level))
        if self.verbosity >= 1:
            print(token, end='')

    def decide(self, lit: int, tag: int):
        """
        Record lit in the assignment and on the trail, then simplify the store.

        Unit propagation and branching both go through here; only the tag differs.
        """
        v = var(lit)
        assert v not in self.assigns
        self.assigns[v] = not sign(lit)
        if tag != TrailTag.FORCED:
            self.trail_lim.append(len(self.trail))
        self.trail.append(TrailEntry(lit, tag))
        self.store.simplify(lit)

        if tag == TrailTag.FORCED:
            self.propagations += 1
            self._log_event("A", lit, self.decisionLevel())
        else:
            self.decisions += 1
            etype = "D" if tag == TrailTag.BRANCH_UNTRIED else "BT"
            self._log_event(etype, lit, self.decisionLevel())

    def pickBranchLit(self) -> Optional[int]:
        """
        First variable in input order that still occurs in the store.

        Negative polarity if the variable only occurs negated, positive otherwise.
        """
        occurring = self.store.literals()
        for v in range(self.nVars()):
            pos = mkLit(v, False)
            neg = mkLit(v, True)
            if pos in occurring:
                return pos
            if neg in occurring:
                return neg
        return None

    def backtrack(self) -> bool:
        """
        Undo the trail up to the most recent untried branch and retry it negated.

        Returns False when no untried branch is left; the trail is empty then.
        """
        while self.trail:
            entry = self.trail.pop()
            del self.assigns[var(entry.lit)]
            if entry.is_branch():
                self.trail_lim.pop()
            if entry.tag == TrailTag.BRANCH_UNTRIED:
                self.store.restore(self.saved_clauses)
                self.restores += 1
                for e in self.trail:
                    self.store.simplify(e.lit)
                self.decide(complement(entry.lit), TrailTag.BRANCH_EXHAUSTED)
                return True
        return False

    def withinBudget(self) -> bool:
        if self.decision_budget >= 0 and self.decisions >= self.decision_budget:
            return False
        if self.propagation_budget >= 0 and self.propagations >= self.propagation_budget:
            return False
        return True

    def search(self) -> int:
        if self.store.hasEmptyClause():
            return Lbool.FALSE
        if self.store.isEmpty():
            return Lbool.TRUE

        self.saved_clauses = self.store.snapshot()
        while True:
            if not self.withinBudget():
                return Lbool.UNDEF

            lit = self.store.findUnitClause()
            if lit is not None:
                self.decide(lit, TrailTag.FORCED)
            else:
                lit = self.pickBranchLit()
                # a non-empty store without empty clauses always has a literal
                assert lit is not None
                self.decide(lit, TrailTag.BRANCH_UNTRIED)

            while self.store.hasEmptyClause():
                self.conflicts += 1
                if not self.backtrack():
                    return Lbool.FALSE
            if self.store.isEmpty():
                return Lbool.TRUE

    def model(self) -> Dict[str, bool]:
        names = self.encoder.name_of
        return {names[v]: self.assigns[v] for v in sorted(self.assigns)}

    def solve_(self):
        if self.verbosity >= 2:
            print("Encoded variables:")
            print(self.encoder.to_str())
            print("Original expression after formatting:")
            print(self.store.to_str(self.encoder))

        status = self.search()

        if self.verbosity >= 1 and self.decisions + self.propagations > 0:
            print()
        if status == Lbool.TRUE:
            return Satisfiable(self.model())
        if status == Lbool.FALSE:
            return Unsatisfiable()
        return Unknown()
