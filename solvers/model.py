from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Dict, List, Optional, Sequence, Tuple


class TBool(IntEnum):
    UNASSIGNED = -1
    FALSE = 0
    TRUE = 1


class ClauseState(Enum):
    UNKNOWN = "unknown"
    SATISFIED = "satisfied"
    FALSIFIED = "falsified"


Assignment = List[TBool]

FIXED = -99999


def literal_index(literal: int) -> int:
    return abs(literal) - 1


def literal_polarity(literal: int) -> bool:
    return literal > 0


def unassigned(num_vars: int) -> Assignment:
    return [TBool.UNASSIGNED] * num_vars


def flip(assignment: Assignment, index: int) -> None:
    assignment[index] = TBool.FALSE if assignment[index] == TBool.TRUE else TBool.TRUE


def is_complete(assignment: Sequence[TBool]) -> bool:
    return all(value != TBool.UNASSIGNED for value in assignment)


def to_bits(assignment: Sequence[TBool]) -> str:
    symbols = {TBool.TRUE: "1", TBool.FALSE: "0", TBool.UNASSIGNED: "?"}
    return "".join(symbols[value] for value in assignment)


class Clause:
    __slots__ = ("literals",)

    def __init__(self, literals: Sequence[int]):
        if not literals:
            raise ValueError("a clause needs at least one literal")
        if any(literal == 0 for literal in literals):
            raise ValueError("0 terminates a clause and is not a literal")
        self.literals: Tuple[int, ...] = tuple(literals)

    def __repr__(self) -> str:
        return f"Clause({list(self.literals)})"

    def __len__(self) -> int:
        return len(self.literals)

    def variables(self) -> List[int]:
        return [literal_index(literal) for literal in self.literals]

    def contains(self, index: int) -> bool:
        return any(literal_index(literal) == index for literal in self.literals)

    def is_satisfied(self, assignment: Sequence[TBool]) -> bool:
        for literal in self.literals:
            value = assignment[literal_index(literal)]
            if value == TBool.UNASSIGNED:
                continue
            if literal_polarity(literal) == (value == TBool.TRUE):
                return True
        return False

    def state(self, assignment: Sequence[TBool]) -> ClauseState:
        pending = False
        for literal in self.literals:
            value = assignment[literal_index(literal)]
            if value == TBool.UNASSIGNED:
                pending = True
            elif literal_polarity(literal) == (value == TBool.TRUE):
                return ClauseState.SATISFIED
        return ClauseState.UNKNOWN if pending else ClauseState.FALSIFIED


class FrequencyTable:
    """Positive and negative occurrence counts per variable.

    Decided variables carry the ``FIXED`` sentinel on both counts, so they can
    never again win a maximum. Every run works on its own ``copy()``.
    """

    __slots__ = ("pos", "neg")

    def __init__(self, pos: List[int], neg: List[int]):
        self.pos = pos
        self.neg = neg

    @classmethod
    def from_clauses(cls, num_vars: int, clauses: Sequence[Clause]) -> FrequencyTable:
        table = cls([0] * num_vars, [0] * num_vars)
        for clause in clauses:
            for literal in clause.literals:
                if literal > 0:
                    table.pos[literal_index(literal)] += 1
                else:
                    table.neg[literal_index(literal)] += 1
        return table

    def __len__(self) -> int:
        return len(self.pos)

    def copy(self) -> FrequencyTable:
        return FrequencyTable(list(self.pos), list(self.neg))

    def total(self, index: int) -> int:
        return self.pos[index] + self.neg[index]

    def benefit(self, index: int) -> int:
        return max(self.pos[index], self.neg[index])

    def polarity(self, index: int) -> bool:
        return self.pos[index] >= self.neg[index]

    def decrement(self, literal: int) -> None:
        if literal > 0:
            self.pos[literal_index(literal)] -= 1
        else:
            self.neg[literal_index(literal)] -= 1

    def fix(self, index: int) -> None:
        self.pos[index] = FIXED
        self.neg[index] = FIXED

    def is_fixed(self, index: int) -> bool:
        return self.pos[index] == FIXED and self.neg[index] == FIXED


class Formula:
    """Read-only clause set and the cost evaluator every procedure minimises."""

    def __init__(self, num_vars: int, clauses: Sequence[Sequence[int]]):
        self.num_vars = num_vars
        self.clauses: List[Clause] = [Clause(literals) for literals in clauses]
        for clause in self.clauses:
            for literal in clause.literals:
                if literal_index(literal) >= num_vars:
                    raise ValueError(f"literal {literal} outside {num_vars} variables")
        self.occurrences: List[List[int]] = [[] for _ in range(num_vars)]
        for position, clause in enumerate(self.clauses):
            for index in sorted(set(clause.variables())):
                self.occurrences[index].append(position)

    @classmethod
    def from_cnf(cls, cnf) -> Formula:
        return cls(cnf.num_vars, cnf.clauses)

    def __len__(self) -> int:
        return len(self.clauses)

    def frequencies(self) -> FrequencyTable:
        return FrequencyTable.from_clauses(self.num_vars, self.clauses)

    def cost(self, assignment: Sequence[TBool]) -> int:
        return sum(1 for clause in self.clauses if clause.state(assignment) is ClauseState.FALSIFIED)

    def flip_delta(self, assignment: Assignment, index: int) -> int:
        """Cost change caused by flipping ``index``; the assignment is left as it was."""
        touched = [self.clauses[position] for position in self.occurrences[index]]
        before = sum(1 for clause in touched if clause.state(assignment) is ClauseState.FALSIFIED)
        flip(assignment, index)
        after = sum(1 for clause in touched if clause.state(assignment) is ClauseState.FALSIFIED)
        flip(assignment, index)
        return after - before

    def unsatisfied(self, assignment: Sequence[TBool]) -> List[Clause]:
        return [clause for clause in self.clauses if clause.state(assignment) is ClauseState.FALSIFIED]

    def candidate_variables(self, assignment: Sequence[TBool]) -> List[int]:
        candidates = set()
        for clause in self.clauses:
            if clause.state(assignment) is ClauseState.FALSIFIED:
                candidates.update(clause.variables())
        return sorted(candidates)


@dataclass
class Incumbent:
    assignment: Optional[Assignment] = None
    cost: Optional[int] = None

    def offer(self, assignment: Assignment, cost: int) -> bool:
        if self.cost is not None and cost >= self.cost:
            return False
        self.assignment = list(assignment)
        self.cost = cost
        return True


@dataclass
class SearchStats:
    flips: int = 0
    evaluations: int = 0
    worsening_accepted: int = 0
    iterations: int = 0
    restarts: int = 0

    def as_dict(self) -> Dict[str, int]:
        return {
            "flips": self.flips,
            "evaluations": self.evaluations,
            "worsening_accepted": self.worsening_accepted,
            "iterations": self.iterations,
            "restarts": self.restarts,
        }
