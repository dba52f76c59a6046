"""Validator client speaking the ETF v2 REST API over httpx."""

from __future__ import annotations

import logging
import threading
import time
import uuid
from collections.abc import Iterator, Mapping, Sequence
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import httpx

from etf_ddt_tester.configuration.runtime_settings import EndpointSettings

from .endpoint_protocols import RemoteInvocationError, RemoteRunError, TestRunObserver
from .validator_models import (
    Catalog,
    CatalogItem,
    DataSource,
    DataSourceKind,
    ExecutableKind,
    ResultStatus,
    TestAssertionResult,
    TestObjectReference,
    TestRunExecutable,
    TestRunResult,
)

logger = logging.getLogger(__name__)

logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

_API = "/v2"


class HttpValidatorClient:
    """Validator endpoint backed by a remote ETF web application."""

    def __init__(
        self,
        settings: EndpointSettings,
        *,
        transport: httpx.BaseTransport | None = None,
        sleep=time.sleep,
    ) -> None:
        self._settings = settings
        self._sleep = sleep
        auth = (
            httpx.BasicAuth(settings.username, settings.password or "")
            if settings.username
            else None
        )
        self._http = httpx.Client(
            base_url=settings.url + _API,
            auth=auth,
            timeout=float(settings.timeout_seconds),
            transport=transport,
            headers={"Accept": "application/json"},
        )
        self.session_id = uuid.uuid4().hex
        self._catalog_lock = threading.Lock()
        self._catalogs: dict[str, Catalog] = {}

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> HttpValidatorClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def available(self) -> bool:
        """Return True when the validator answers its heartbeat."""
        try:
            response = self._http.get("/heartbeat")
        except httpx.HTTPError as exc:
            logger.warning("Validator heartbeat failed: %s", exc)
            return False
        return response.is_success

    def test_run_templates(self) -> Catalog:
        return self._catalog(
            "Test Run Template", "/TestRunTemplates.json", ("testRunTemplates", "TestRunTemplate")
        )

    def executable_test_suites(self) -> Catalog:
        return self._catalog(
            "Executable Test Suite",
            "/ExecutableTestSuites.json",
            ("executableTestSuites", "ExecutableTestSuite"),
        )

    def tags(self) -> Catalog:
        return self._catalog("Tag", "/Tags.json", ("tags", "Tag"))

    def create_test_object(self, data_source: DataSource) -> TestObjectReference:
        """Upload an archive or describe a remote resource as test object."""
        if data_source.kind == DataSourceKind.SERVICE:
            return TestObjectReference(
                test_object_id=None, resources={"serviceEndpoint": data_source.location}
            )
        if data_source.kind == DataSourceKind.DATASET:
            return TestObjectReference(
                test_object_id=None, resources={"data": data_source.location}
            )

        archive = Path(data_source.location)
        logger.info("Uploading %s", archive.name)
        with archive.open("rb") as handle:
            payload = self.request_json(
                "POST",
                "/TestObjects",
                params={"action": "upload"},
                files={"fileupload": (archive.name, handle, "application/zip")},
            )
        test_object_id = _dig(payload, "testObject", "id")
        if not isinstance(test_object_id, str):
            raise RemoteInvocationError("Upload response does not contain a test object id.")
        return TestObjectReference(test_object_id=test_object_id)

    def execute(
        self,
        executable: TestRunExecutable,
        test_object: TestObjectReference,
        parameters: Mapping[str, str] | None,
        observer: TestRunObserver | None = None,
    ) -> HttpTestRun:
        """Start a test run; with an observer the result is delivered from a background thread."""
        request: dict[str, Any] = {
            "label": f"Test run {self.session_id} {datetime.now(UTC).isoformat()}",
            "arguments": dict(parameters or {}),
            "testObject": _test_object_payload(test_object),
        }
        if executable.kind == ExecutableKind.TEST_RUN_TEMPLATE:
            request["testRunTemplateId"] = executable.items[0].item_id
        else:
            request["executableTestSuiteIds"] = list(executable.item_ids)

        payload = self.request_json("POST", "/TestRuns", json=request)
        run_node = _first(_dig(payload, "EtfItemCollection", "testRuns", "TestRun")) or payload
        run_id = run_node.get("id") if isinstance(run_node, Mapping) else None
        if not isinstance(run_id, str):
            raise RemoteInvocationError("Test run response does not contain a test run id.")
        logger.info("Started test run %s", run_id)

        test_run = HttpTestRun(self, run_id, settings=self._settings, sleep=self._sleep)
        if observer is not None:
            test_run.observe(observer)
        return test_run

    def _catalog(self, kind: str, path: str, keys: Sequence[str]) -> Catalog:
        with self._catalog_lock:
            cached = self._catalogs.get(path)
            if cached is None:
                payload = self.request_json("GET", path)
                nodes = _as_list(_dig(payload, "EtfItemCollection", *keys))
                cached = Catalog(kind, (_catalog_item(node) for node in nodes))
                self._catalogs[path] = cached
            return cached

    def request_json(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = self._http.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise RemoteInvocationError(
                f"Validator rejected {method} {path} with status {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise RemoteInvocationError(f"Validator request {method} {path} failed: {exc}") from exc
        try:
            return response.json()
        except ValueError as exc:
            raise RemoteInvocationError(f"Validator returned invalid JSON for {path}") from exc


class HttpTestRun:
    """Remote test run polled until the validator reports completion."""

    def __init__(
        self,
        client: HttpValidatorClient,
        run_id: str,
        *,
        settings: EndpointSettings,
        sleep=time.sleep,
    ) -> None:
        self._client = client
        self.run_id = run_id
        self._settings = settings
        self._sleep = sleep
        self._result: TestRunResult | None = None
        self._lock = threading.Lock()

    def result(self) -> TestRunResult:
        """Block until the run completed and return its assertion results."""
        with self._lock:
            if self._result is None:
                self._wait_until_finished()
                payload = self._client.request_json("GET", f"/TestRuns/{self.run_id}.json")
                self._result = parse_test_run_result(payload)
            return self._result

    def observe(self, observer: TestRunObserver) -> threading.Thread:
        """Deliver the result to the observer from a background thread."""
        thread = threading.Thread(
            target=self._deliver, args=(observer,), name=f"test-run-{self.run_id}", daemon=True
        )
        thread.start()
        return thread

    def _deliver(self, observer: TestRunObserver) -> None:
        try:
            run_result = self.result()
        except Exception as exc:  # pylint: disable=broad-exception-caught
            logger.error("Test run %s failed: %s", self.run_id, exc)
            observer.exception_occurred(exc)
            return
        observer.run_finished(run_result)

    def _wait_until_finished(self) -> None:
        settings = self._settings
        deadline = time.monotonic() + settings.timeout_seconds
        while True:
            progress = self._client.request_json("GET", f"/TestRuns/{self.run_id}/progress")
            current = progress.get("val", 0) if isinstance(progress, Mapping) else 0
            maximum = progress.get("max", 0) if isinstance(progress, Mapping) else 0
            if maximum and current >= maximum:
                return
            if time.monotonic() >= deadline:
                raise RemoteRunError(
                    f"Test run {self.run_id} did not finish within {settings.timeout_seconds}s."
                )
            self._sleep(settings.poll_interval_ms / 1000.0)


def parse_test_run_result(payload: Any) -> TestRunResult:
    """Extract the assertion results of one ETF test run document."""
    collection = _dig(payload, "EtfItemCollection")
    if not isinstance(collection, Mapping):
        raise RemoteRunError("Test run document is not an EtfItemCollection.")
    run_node = _first(_dig(collection, "testRuns", "TestRun"))
    if not isinstance(run_node, Mapping):
        raise RemoteRunError("Test run document does not contain a test run.")
    status = run_node.get("status")
    if status == ResultStatus.INTERNAL_ERROR.value:
        raise RemoteRunError(f"Test run {run_node.get('id')} ended with an internal error.")

    assertion_labels = {
        node.get("id"): node.get("label", "")
        for node in _as_list(_dig(collection, "referencedItems", "testAssertions", "TestAssertion"))
        if isinstance(node, Mapping)
    }
    results = tuple(
        _assertion_result(node, assertion_labels)
        for node in _walk_assertion_results(run_node)
    )
    return TestRunResult(label=str(run_node.get("label", "")), assertion_results=results)


def _assertion_result(node: Mapping[str, Any], labels: Mapping[Any, str]) -> TestAssertionResult:
    resulted_from = node.get("resultedFrom") or {}
    reference = resulted_from.get("ref") if isinstance(resulted_from, Mapping) else None
    label = labels.get(reference) or str(reference or node.get("id", ""))
    try:
        status = ResultStatus.from_string(str(node.get("status", "UNDEFINED")))
    except ValueError as exc:
        raise RemoteRunError(str(exc)) from exc
    return TestAssertionResult(
        label=label,
        status=status,
        duration_ms=int(node.get("duration", 0) or 0),
        messages=tuple(_render_message(message) for message in _messages(node)),
    )


def _walk_assertion_results(node: Any) -> Iterator[Mapping[str, Any]]:
    if isinstance(node, Mapping):
        for key, value in node.items():
            if key == "TestAssertionResult":
                yield from (item for item in _as_list(value) if isinstance(item, Mapping))
            else:
                yield from _walk_assertion_results(value)
    elif isinstance(node, list):
        for item in node:
            yield from _walk_assertion_results(item)


def _messages(node: Mapping[str, Any]) -> list[Any]:
    messages = node.get("messages")
    if isinstance(messages, Mapping):
        return _as_list(messages.get("message"))
    return _as_list(messages)


def _render_message(message: Any) -> str:
    if isinstance(message, str):
        return message
    if not isinstance(message, Mapping):
        return str(message)
    text = str(message.get("ref", ""))
    arguments = _as_list(_dig(message, "translationArguments", "argument"))
    rendered = [
        f"{argument.get('token')}={argument.get('$', argument.get('value', ''))}"
        for argument in arguments
        if isinstance(argument, Mapping)
    ]
    return " ".join([text, *rendered]) if rendered else text


def _catalog_item(node: Mapping[str, Any]) -> CatalogItem:
    parameters = {
        str(parameter.get("name")): str(parameter.get("defaultValue", ""))
        for parameter in _as_list(_dig(node, "ParameterList", "parameter"))
        if isinstance(parameter, Mapping) and parameter.get("name")
    }
    tag_ids = tuple(
        str(tag.get("ref", tag.get("href", "")))
        for tag in _as_list(_dig(node, "tags", "tag"))
        if isinstance(tag, Mapping)
    )
    return CatalogItem(
        item_id=str(node.get("id", "")),
        label=str(node.get("label", "")),
        description=str(node.get("description", "")),
        tag_ids=tag_ids,
        parameters=parameters,
    )


def _test_object_payload(test_object: TestObjectReference) -> dict[str, Any]:
    if test_object.test_object_id is not None:
        return {"id": test_object.test_object_id}
    return {"resources": dict(test_object.resources)}


def _dig(node: Any, *keys: str) -> Any:
    for key in keys:
        if not isinstance(node, Mapping):
            return None
        node = node.get(key)
    return node


def _first(node: Any) -> Any:
    items = _as_list(node)
    return items[0] if items else None


def _as_list(node: Any) -> list[Any]:
    if node is None:
        return []
    if isinstance(node, list):
        return node
    return [node]
