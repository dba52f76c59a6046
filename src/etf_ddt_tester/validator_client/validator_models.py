"""Validator domain entities shared by the client and the test harness."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class ItemNotFoundError(LookupError):
    """Raised when a catalog does not contain a requested item."""


class ResultStatus(str, Enum):
    """Result status vocabulary of the remote validator."""

    PASSED = "PASSED"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"
    NOT_APPLICABLE = "NOT_APPLICABLE"
    INFO = "INFO"
    WARNING = "WARNING"
    UNDEFINED = "UNDEFINED"
    PASSED_MANUAL = "PASSED_MANUAL"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    @classmethod
    def from_string(cls, value: str) -> ResultStatus:
        """Parse a status string, case-sensitively."""
        try:
            return cls(value)
        except ValueError as exc:
            raise ValueError(f"Unknown result status: {value!r}") from exc


@dataclass(frozen=True)
class TestAssertionResult:
    """Outcome of one named assertion produced by a remote test run."""

    __test__ = False

    label: str
    status: ResultStatus
    duration_ms: int
    messages: tuple[str, ...] = ()


@dataclass(frozen=True)
class TestRunResult:
    """A completed remote test run."""

    __test__ = False

    label: str
    assertion_results: tuple[TestAssertionResult, ...]

    def __iter__(self) -> Iterator[TestAssertionResult]:
        return iter(self.assertion_results)

    def __len__(self) -> int:
        return len(self.assertion_results)


@dataclass(frozen=True)
class CatalogItem:
    """Run template, executable test suite or tag published by the validator."""

    item_id: str
    label: str
    description: str = ""
    tag_ids: tuple[str, ...] = ()
    parameters: Mapping[str, str] = field(default_factory=dict)

    def __str__(self) -> str:
        return f"{self.label} ({self.item_id})"


class Catalog:
    """Immutable, ordered collection of catalog items with lookup helpers."""

    def __init__(self, kind: str, items: Iterable[CatalogItem]) -> None:
        self.kind = kind
        self._items = tuple(items)

    def __iter__(self) -> Iterator[CatalogItem]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def item_by_id(self, item_id: str) -> CatalogItem:
        for item in self._items:
            if item.item_id == item_id:
                return item
        raise ItemNotFoundError(f"{self.kind} with id '{item_id}' not found.")

    def item_by_label(self, label: str) -> CatalogItem:
        for item in self._items:
            if item.label == label:
                return item
        raise ItemNotFoundError(f"{self.kind} with label '{label}' not found.")

    def items_by_id(self, item_ids: Sequence[str]) -> tuple[CatalogItem, ...]:
        """Return all items for the ids; fails when any id is unknown."""
        return tuple(self.item_by_id(item_id) for item_id in item_ids)

    def items_by_tag(self, tag: CatalogItem) -> tuple[CatalogItem, ...]:
        return tuple(item for item in self._items if tag.item_id in item.tag_ids)


class ExecutableKind(str, Enum):
    """What a resolved test run executable points at."""

    TEST_RUN_TEMPLATE = "Test Run Template"
    EXECUTABLE_TEST_SUITES = "Executable Test Suite"


@dataclass(frozen=True)
class TestRunExecutable:
    """Concrete target of one remote test run."""

    __test__ = False

    kind: ExecutableKind
    items: tuple[CatalogItem, ...]

    def parameters(self) -> dict[str, str]:
        """Return the merged default parameters of all items."""
        merged: dict[str, str] = {}
        for item in self.items:
            merged.update(item.parameters)
        return merged

    def parameters_with(self, arguments: Mapping[str, str] | None) -> dict[str, str] | None:
        """Return default parameters overridden by the run arguments, or None without arguments."""
        if arguments is None:
            return None
        merged = self.parameters()
        merged.update({key: str(value) for key, value in arguments.items()})
        return merged

    @property
    def item_ids(self) -> tuple[str, ...]:
        return tuple(item.item_id for item in self.items)


class DataSourceKind(str, Enum):
    """Supported forms of test object data."""

    ARCHIVE = "archive"
    SERVICE = "service"
    DATASET = "dataset"


@dataclass(frozen=True)
class DataSource:
    """Data the remote run validates: an uploaded archive, a service or a dataset URL."""

    kind: DataSourceKind
    location: str

    @staticmethod
    def archive(path: Path) -> DataSource:
        return DataSource(kind=DataSourceKind.ARCHIVE, location=str(path))

    @staticmethod
    def service(url: str) -> DataSource:
        return DataSource(kind=DataSourceKind.SERVICE, location=url)

    @staticmethod
    def dataset(url: str) -> DataSource:
        return DataSource(kind=DataSourceKind.DATASET, location=url)


@dataclass(frozen=True)
class TestObjectReference:
    """Remote test object created for one run."""

    __test__ = False

    test_object_id: str | None
    resources: Mapping[str, str] = field(default_factory=dict)
