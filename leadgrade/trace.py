"""
leadgrade/trace.py — The decision log returned by both evaluators.

Operators read it when a classification or eligibility verdict is disputed
("why did this lead get grade B?"). Entries are appended in evaluation order
and never removed; the trace lives only as long as the result that owns it.
"""

import enum
from dataclasses import asdict, dataclass
from typing import Iterator


class TraceOutcome(str, enum.Enum):
    MATCHED = "matched"
    NOT_MATCHED = "not_matched"
    EXCLUDED = "excluded"
    OVERRIDE = "override"
    DEFAULT = "default"


@dataclass(frozen=True)
class TraceEntry:
    subject_id: str                 # rule id, or grade id for override/default entries
    subject_name: str               # grade name or distribution rule name
    predicate_description: str
    matched: bool
    detail: str
    outcome: TraceOutcome


class EvaluationTrace:
    """Append-only, ordered list of TraceEntry."""

    def __init__(self) -> None:
        self._entries: list[TraceEntry] = []

    def record(
        self,
        subject_id: str,
        subject_name: str,
        predicate_description: str,
        matched: bool,
        detail: str,
        outcome: TraceOutcome | None = None,
    ) -> TraceEntry:
        if outcome is None:
            outcome = TraceOutcome.MATCHED if matched else TraceOutcome.NOT_MATCHED
        entry = TraceEntry(
            subject_id=subject_id,
            subject_name=subject_name,
            predicate_description=predicate_description,
            matched=matched,
            detail=detail,
            outcome=outcome,
        )
        self._entries.append(entry)
        return entry

    @property
    def entries(self) -> tuple[TraceEntry, ...]:
        return tuple(self._entries)

    def __iter__(self) -> Iterator[TraceEntry]:
        return iter(tuple(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, index: int) -> TraceEntry:
        return self._entries[index]

    def outcomes(self) -> list[TraceOutcome]:
        return [e.outcome for e in self._entries]

    def to_dicts(self) -> list[dict]:
        """JSON-friendly form for API responses and audit screens."""
        rows = []
        for entry in self._entries:
            row = asdict(entry)
            row["outcome"] = entry.outcome.value
            rows.append(row)
        return rows

    def render(self) -> str:
        """Plain-text rendering, one line per entry."""
        lines = []
        for i, e in enumerate(self._entries, start=1):
            lines.append(
                f"{i:>2}. [{e.subject_name}] {e.predicate_description} "
                f"=> {e.outcome.value}: {e.detail}"
            )
        return "\n".join(lines)
