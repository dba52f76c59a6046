"""Shared fakes for tests exercising the validator endpoint contract."""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable, Mapping
from typing import Any

import pytest
from etf_ddt_tester.validator_client import (
    Catalog,
    CatalogItem,
    DataSource,
    RemoteRunError,
    TestAssertionResult,
    TestObjectReference,
    TestRunExecutable,
    TestRunObserver,
    TestRunResult,
)


class FakeTestRun:
    def __init__(self, run_result: TestRunResult, failure: Exception | None) -> None:
        self.run_id = "run-1"
        self._run_result = run_result
        self._failure = failure

    def result(self) -> TestRunResult:
        if self._failure is not None:
            raise self._failure
        return self._run_result


class FakeEndpoint:
    """In-memory validator delivering every result one by one from a producer thread."""

    def __init__(
        self,
        *,
        templates: Iterable[CatalogItem] = (),
        suites: Iterable[CatalogItem] = (),
        tags: Iterable[CatalogItem] = (),
        results: Iterable[TestAssertionResult] = (),
        failure: Exception | None = None,
        available: bool = True,
    ) -> None:
        self.session_id = "fake-session"
        self._templates = Catalog("Test Run Template", templates)
        self._suites = Catalog("Executable Test Suite", suites)
        self._tags = Catalog("Tag", tags)
        self.run_result = TestRunResult(label="fake run", assertion_results=tuple(results))
        self.failure = failure
        self.is_available = available
        self.data_sources: list[DataSource] = []
        self.executions: list[dict[str, Any]] = []
        self.producers: list[threading.Thread] = []
        self.closed = False

    def available(self) -> bool:
        return self.is_available

    def test_run_templates(self) -> Catalog:
        return self._templates

    def executable_test_suites(self) -> Catalog:
        return self._suites

    def tags(self) -> Catalog:
        return self._tags

    def create_test_object(self, data_source: DataSource) -> TestObjectReference:
        self.data_sources.append(data_source)
        return TestObjectReference(test_object_id="test-object-1")

    def execute(
        self,
        executable: TestRunExecutable,
        test_object: TestObjectReference,
        parameters: Mapping[str, str] | None,
        observer: TestRunObserver | None = None,
    ) -> FakeTestRun:
        self.executions.append(
            {
                "executable": executable,
                "test_object": test_object,
                "parameters": parameters,
                "observed": observer is not None,
            }
        )
        if observer is not None:
            producer = threading.Thread(target=self._deliver, args=(observer,), daemon=True)
            self.producers.append(producer)
            producer.start()
        return FakeTestRun(self.run_result, self.failure)

    def close(self) -> None:
        self.closed = True

    def _deliver(self, observer: TestRunObserver) -> None:
        if self.failure is not None:
            observer.exception_occurred(self.failure)
            return
        for result in self.run_result:
            observer.result_delivered(result)
        observer.run_finished()


def catalog_item(
    item_id: str,
    label: str,
    *,
    tag_ids: tuple[str, ...] = (),
    parameters: Mapping[str, str] | None = None,
) -> CatalogItem:
    return CatalogItem(
        item_id=item_id, label=label, tag_ids=tag_ids, parameters=dict(parameters or {})
    )


@pytest.fixture
def make_endpoint() -> Callable[..., FakeEndpoint]:
    """Factory building fake endpoints; keyword arguments as FakeEndpoint."""
    return FakeEndpoint


@pytest.fixture
def make_catalog_item() -> Callable[..., CatalogItem]:
    return catalog_item


@pytest.fixture
def remote_failure() -> RemoteRunError:
    return RemoteRunError("validator crashed")
