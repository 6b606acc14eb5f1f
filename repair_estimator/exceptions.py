from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from repair_estimator.models.enums import QuoteStatus


class RepairEstimatorError(Exception):
    """Base class for every error raised by this package."""


# Repository / persistence


class RepositoryError(RepairEstimatorError):
    pass


class RecordNotFoundError(RepositoryError):
    pass


class RecordDecodeError(RepositoryError):
    def __init__(self, model_name: str, missing: list[str] | None = None, detail: str = "") -> None:
        self.model_name = model_name
        self.missing = missing or []
        message = f"Invalid record data for {model_name}"
        if self.missing:
            message += f": missing {', '.join(sorted(self.missing))}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)


# Pricing configuration


class PricingError(RepairEstimatorError):
    pass


class NoPricingRuleFoundError(PricingError):
    def __init__(self, company_id: str, service_name: str = "") -> None:
        self.company_id = company_id
        self.service_name = service_name
        super().__init__(f"No pricing rule found for this service (company={company_id})")


# Workflow violations


class WorkflowError(RepairEstimatorError):
    pass


class QuoteNotFoundError(WorkflowError):
    def __init__(self, quote_id: str) -> None:
        self.quote_id = quote_id
        super().__init__(f"Quote not found: {quote_id}")


class InvalidStatusTransitionError(WorkflowError):
    def __init__(self, current: "QuoteStatus", target: "QuoteStatus") -> None:
        self.current = current
        self.target = target
        super().__init__(
            f"Cannot change status from {current.display_name} to {target.display_name}"
        )


class EstimateNotApprovedError(WorkflowError):
    def __init__(self) -> None:
        super().__init__("Estimate must be approved before starting work")


class WorkCannotStartError(WorkflowError):
    def __init__(self) -> None:
        super().__init__("Work cannot be started in current status")


class QualityControlNotApplicableError(WorkflowError):
    def __init__(self) -> None:
        super().__init__("Quality control not applicable for current status")


class QualityControlRequiredError(WorkflowError):
    def __init__(self) -> None:
        super().__init__("Quality control must be completed first")


class StaleQuoteError(WorkflowError):
    def __init__(self, quote_id: str, expected_version: int, actual_version: int) -> None:
        self.quote_id = quote_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Quote {quote_id} changed concurrently "
            f"(snapshot version {expected_version}, stored version {actual_version})"
        )


# Quote identifiers


class QuoteIdError(RepairEstimatorError):
    pass


class QuoteIdCollisionError(QuoteIdError):
    def __init__(self, quote_id: str) -> None:
        self.quote_id = quote_id
        super().__init__(f"Quote ID already taken: {quote_id}")


class QuoteIdExhaustedError(QuoteIdError):
    def __init__(self, company_id: str, attempts: int) -> None:
        self.company_id = company_id
        self.attempts = attempts
        super().__init__(
            f"Could not allocate a unique quote ID for {company_id} after {attempts} attempts"
        )


class SequenceOverflowError(QuoteIdError):
    def __init__(self, year: int) -> None:
        self.year = year
        super().__init__(f"Quote sequence number for {year} has exceeded maximum value")
