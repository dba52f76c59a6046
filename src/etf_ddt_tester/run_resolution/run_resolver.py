"""Resolution of run specifications into remote test run executables.

Resolution strategies form a fixed priority table. Every strategy whose property
is present in the run specification is evaluated in table order and each
successful lookup replaces the previous candidate, so the last matching
strategy wins. A run specification can therefore carry a fallback property
(for example ``executableTestSuiteId``) next to an overriding one (``tagName``).
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

from etf_ddt_tester.validator_client.endpoint_protocols import ValidatorEndpoint
from etf_ddt_tester.validator_client.validator_models import (
    Catalog,
    ExecutableKind,
    ItemNotFoundError,
    TestRunExecutable,
)

from .run_specification import RunSpecification, RunSpecificationError, read_run_specification

logger = logging.getLogger(__name__)

CatalogLookup = Callable[[ValidatorEndpoint, Sequence[str]], TestRunExecutable]
CatalogListing = Callable[[ValidatorEndpoint], Catalog]


class ResolutionNotFoundError(ValueError):
    """Raised when a resolution property names an item the validator does not know."""


@dataclass(frozen=True)
class ResolutionStrategy:
    """One row of the resolution table."""

    property_name: str
    kind: ExecutableKind
    multi_valued: bool
    lookup: CatalogLookup
    listing: CatalogListing


def _templates_by_id(endpoint: ValidatorEndpoint, values: Sequence[str]) -> TestRunExecutable:
    template = endpoint.test_run_templates().item_by_id(values[0])
    return TestRunExecutable(ExecutableKind.TEST_RUN_TEMPLATE, (template,))


def _templates_by_label(endpoint: ValidatorEndpoint, values: Sequence[str]) -> TestRunExecutable:
    template = endpoint.test_run_templates().item_by_label(values[0])
    return TestRunExecutable(ExecutableKind.TEST_RUN_TEMPLATE, (template,))


def _suites_by_id(endpoint: ValidatorEndpoint, values: Sequence[str]) -> TestRunExecutable:
    suites = endpoint.executable_test_suites().items_by_id(values)
    return TestRunExecutable(ExecutableKind.EXECUTABLE_TEST_SUITES, suites)


def _suites_by_label(endpoint: ValidatorEndpoint, values: Sequence[str]) -> TestRunExecutable:
    suite = endpoint.executable_test_suites().item_by_label(values[0])
    return TestRunExecutable(ExecutableKind.EXECUTABLE_TEST_SUITES, (suite,))


def _suites_by_tag(endpoint: ValidatorEndpoint, values: Sequence[str]) -> TestRunExecutable:
    tag = endpoint.tags().item_by_label(values[0])
    suites = endpoint.executable_test_suites().items_by_tag(tag)
    if not suites:
        raise ItemNotFoundError(f"No Executable Test Suite is tagged with '{tag.label}'.")
    return TestRunExecutable(ExecutableKind.EXECUTABLE_TEST_SUITES, suites)


def _list_templates(endpoint: ValidatorEndpoint) -> Catalog:
    return endpoint.test_run_templates()


def _list_suites(endpoint: ValidatorEndpoint) -> Catalog:
    return endpoint.executable_test_suites()


def _list_tags(endpoint: ValidatorEndpoint) -> Catalog:
    return endpoint.tags()


_TEMPLATE = ExecutableKind.TEST_RUN_TEMPLATE
_SUITES = ExecutableKind.EXECUTABLE_TEST_SUITES

RESOLUTION_STRATEGIES: tuple[ResolutionStrategy, ...] = (
    ResolutionStrategy("testRunTemplateId", _TEMPLATE, False, _templates_by_id, _list_templates),
    ResolutionStrategy(
        "testRunTemplateName", _TEMPLATE, False, _templates_by_label, _list_templates
    ),
    ResolutionStrategy("executableTestSuiteId", _SUITES, False, _suites_by_id, _list_suites),
    ResolutionStrategy("executableTestSuiteName", _SUITES, False, _suites_by_label, _list_suites),
    ResolutionStrategy("executableTestSuiteIds", _SUITES, True, _suites_by_id, _list_suites),
    # Last row: a tag overrides any id or name given next to it.
    ResolutionStrategy("tagName", _SUITES, False, _suites_by_tag, _list_tags),
)


def load_run_specification(run_path: Path | str) -> RunSpecification:
    """Read a run file recognizing every property of the resolution table."""
    return read_run_specification(
        run_path,
        single_valued=[s.property_name for s in RESOLUTION_STRATEGIES if not s.multi_valued],
        multi_valued=[s.property_name for s in RESOLUTION_STRATEGIES if s.multi_valued],
    )


def resolve_executable(
    specification: RunSpecification,
    endpoint: ValidatorEndpoint,
    strategies: Sequence[ResolutionStrategy] = RESOLUTION_STRATEGIES,
) -> TestRunExecutable:
    """Resolve the run specification; the last present strategy in table order wins."""
    candidate: TestRunExecutable | None = None
    for strategy in strategies:
        values = specification.properties.get(strategy.property_name)
        if values is None:
            continue
        candidate = _evaluate(strategy, values, endpoint)
    if candidate is None:
        accepted = ", ".join(strategy.property_name for strategy in strategies)
        raise RunSpecificationError(
            f"{specification.source_path}: no resolvable property provided, expected one of "
            f"{accepted}."
        )
    return candidate


def _evaluate(
    strategy: ResolutionStrategy, values: Sequence[str], endpoint: ValidatorEndpoint
) -> TestRunExecutable:
    kind = strategy.kind.value
    if strategy.multi_valued:
        logger.info("Using %ss %s", kind, ",".join(values))
    else:
        logger.info("Using %s %s", kind, values[0])
    try:
        return strategy.lookup(endpoint, values)
    except ItemNotFoundError as exc:
        logger.error("At least one %s could not be found", kind)
        log_available_items(strategy.listing(endpoint))
        raise ResolutionNotFoundError(f"At least one {kind} could not be found. {exc}") from exc


def log_available_items(catalog: Catalog) -> None:
    """Log the full catalog listing as resolution help."""
    logger.info("Available %ss: ", catalog.kind)
    for item in catalog:
        logger.info(" - %s", item)
