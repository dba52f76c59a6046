"""Template generation exports."""

from .expectation_template_writer import (
    GENERATED_DESCRIPTION,
    ExpectationTemplateWriter,
    expected_case_details,
    generate_expectation_template,
)

__all__ = [
    "GENERATED_DESCRIPTION",
    "ExpectationTemplateWriter",
    "expected_case_details",
    "generate_expectation_template",
]
