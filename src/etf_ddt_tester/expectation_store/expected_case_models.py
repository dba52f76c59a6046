"""Expectation store entities."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from etf_ddt_tester.validator_client.validator_models import ResultStatus

WILDCARD_LABEL = "*"


@dataclass(frozen=True)
class ExpectedCase:
    """Declarative expectation for one assertion label or the wildcard."""

    label: str
    expected_result: ResultStatus
    description: str | None = None
    max_duration_ms: int | None = None
    expected_messages: frozenset[str] | None = None
    expected_message_count: int | None = None

    @property
    def is_wildcard(self) -> bool:
        return self.label == WILDCARD_LABEL


@dataclass(frozen=True)
class ExpectationStore:
    """Expected cases of one suite, with the wildcard case split out."""

    cases: Mapping[str, ExpectedCase] = field(default_factory=dict)
    wildcard: ExpectedCase | None = None

    @property
    def is_empty(self) -> bool:
        return not self.cases and self.wildcard is None

    def __len__(self) -> int:
        return len(self.cases) + (1 if self.wildcard is not None else 0)
