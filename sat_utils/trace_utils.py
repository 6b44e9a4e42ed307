"""
This file includes some help functions for DPLL search traces.

A trace is a flat token string built from three kinds of events:
  * "D <lit> L <level>"   branch decision opening decision level <level>,
  * "A <lit>"             literal forced by unit propagation,
  * "BT <lit> L <level>"  opposite-polarity retry of the branch at <level>.
"""
import re

from typing import List


def convert_trace_to_str(events) -> str:
    """
    Converts a list of tuples like:
        [('D', 'A', 1), ('A', 'B', 1), ('BT', '-A', 1), ('A', 'B', 1)]
    into a string like:
        "D A L 1 A B BT -A L 1 A B"
    """
    out_tokens = []
    for etype, val, lvl in events:
        if etype in ("D", "BT"):
            out_tokens.extend([etype, str(val), "L", str(lvl)])
        elif etype == "A":
            out_tokens.extend(["A", str(val)])
    return " ".join(out_tokens)


TRACE_EVENT = r'(?:D|BT)\s+\S+\s+L\s+\d+|A\s+\S+'
TRACE_LINE = re.compile(rf'\s*(?:{TRACE_EVENT})(?:\s+(?:{TRACE_EVENT}))*\s*')


def extract_trace(solver_output: str) -> str:
    """
    Extracts the trace from solver console output, focusing on 'D', 'A', and 'BT' entries.

    Args:
        solver_output (str): The output of a solver run with verbosity >= 1.

    Returns:
        str: The extracted trace as a single string.
    """
    trace_pattern = re.compile(rf'({TRACE_EVENT})')
    trace_lines = [line for line in solver_output.splitlines() if TRACE_LINE.fullmatch(line)]
    if not trace_lines:
        return ''
    # the trace is printed after any clause listing
    return ' '.join(trace_pattern.findall(trace_lines[-1]))


def extract_decisions_in_order(trace_string: str) -> List[str]:
    """
    Extracts the branch literals ('D' and 'BT') in order of the trace.
    """
    tokens = trace_string.split()
    decisions = []
    for i, token in enumerate(tokens[:-1]):
        if token in ("D", "BT"):
            decisions.append(tokens[i + 1])
    return decisions


def get_key_trace(trace: str) -> str:
    """
    Extract the key trace from the entire trace.

    The key trace keeps the events that are still on the trail when the
    search ends: a BT at level k discards every event recorded at level k
    or deeper before it.
    """
    tokens = trace.split()
    index = 0
    stack = []
    current_level = 0
    while index < len(tokens):
        token = tokens[index]
        if token in ('D', 'BT'):
            lit = tokens[index + 1]
            if index + 3 >= len(tokens) or tokens[index + 2] != 'L':
                raise ValueError(f"Expected 'L' after {token} literal")
            level = int(tokens[index + 3])
            if token == 'BT':
                stack = [(lvl, s) for (lvl, s) in stack if lvl < level]
            current_level = level
            stack.append((level, [token, lit, 'L', str(level)]))
            index += 4
        elif token == 'A':
            if index + 1 >= len(tokens):
                raise ValueError("Expected literal after 'A'")
            stack.append((current_level, ['A', tokens[index + 1]]))
            index += 2
        else:
            raise ValueError(f"Unknown token '{token}'")

    final_trace = []
    for lvl, step in stack:
        final_trace.extend(step)
    return ' '.join(final_trace)
