import logging
import threading
from dataclasses import replace
from datetime import datetime

from repair_estimator.exceptions import (
    EstimateNotApprovedError,
    InvalidStatusTransitionError,
    QualityControlNotApplicableError,
    QualityControlRequiredError,
    QuoteNotFoundError,
    StaleQuoteError,
    WorkCannotStartError,
)
from repair_estimator.models import (
    NotificationPurpose,
    Quote,
    QuotePriority,
    QuoteStatus,
    RushType,
    ServiceCategory,
    StatusChangeLog,
)
from repair_estimator.repository import Repository, SortDescriptor
from repair_estimator.services.notifier import LoggingNotifier, Notification, Notifier
from repair_estimator.utils import add_business_days

logger = logging.getLogger(__name__)

DEFAULT_WORKING_DAYS = 5
WORKING_DAYS_BY_CATEGORY = {
    ServiceCategory.JEWELRY_REPAIR: 3,
    ServiceCategory.WATCH_SERVICE: 5,
    ServiceCategory.CARE_PLAN: 2,
    ServiceCategory.APPRAISAL: 7,
}
SAME_DAY_WORKING_DAYS = 1
# Categories whose turnaround shortens for a same-day rush.
SAME_DAY_CATEGORIES = frozenset({ServiceCategory.JEWELRY_REPAIR, ServiceCategory.WATCH_SERVICE})
LOCK_STRIPES = 64

_CUSTOMER_MESSAGES = {
    NotificationPurpose.ESTIMATE_READY: "Your repair estimate is ready for review.",
    NotificationPurpose.APPROVAL_REQUEST: "Please approve your repair estimate so work can begin.",
    NotificationPurpose.DELAY_NOTIFICATION: "Your item is at our vendor and is taking longer than promised.",
    NotificationPurpose.READY_FOR_PICKUP: "Your item is ready for pickup.",
}


def estimated_working_days(quote: Quote) -> int:
    if quote.rush_type is RushType.SAME_DAY and quote.primary_service_category in SAME_DAY_CATEGORIES:
        return SAME_DAY_WORKING_DAYS
    return WORKING_DAYS_BY_CATEGORY.get(quote.primary_service_category, DEFAULT_WORKING_DAYS)


def validate_transition(quote: Quote, new_status: QuoteStatus) -> None:
    """Raise the matching ``WorkflowError`` if ``quote`` may not move to ``new_status``."""
    current = quote.status
    if not current.can_transition_to(new_status):
        raise InvalidStatusTransitionError(current, new_status)

    if new_status is QuoteStatus.APPROVED and quote.needs_estimate_approval:
        raise EstimateNotApprovedError()
    if new_status is QuoteStatus.IN_SHOP and not current.can_start_work:
        raise WorkCannotStartError()
    if new_status is QuoteStatus.QUALITY_REVIEW and not current.is_active_work:
        raise QualityControlNotApplicableError()
    if new_status is QuoteStatus.READY_FOR_PICKUP and current is not QuoteStatus.QUALITY_REVIEW:
        raise QualityControlRequiredError()


class WorkflowService:
    """Moves quotes through their lifecycle.

    Transitions for the same quote are serialized and checked against the
    stored ``version``; a caller holding an outdated copy gets
    ``StaleQuoteError`` and must re-fetch. Notifications are sent after the
    quote and its log entry are saved, and a failed delivery never undoes
    the transition.
    """

    def __init__(self, repository: Repository, notifier: Notifier | None = None) -> None:
        self.repository = repository
        self.notifier = notifier or LoggingNotifier()
        self._locks = tuple(threading.Lock() for _ in range(LOCK_STRIPES))

    def _quote_lock(self, quote_id: str) -> threading.Lock:
        # Striped: unrelated quotes may share a lock, but the pool never grows.
        return self._locks[hash(quote_id) % LOCK_STRIPES]

    def update_quote_status(
        self,
        quote_id: str,
        new_status: QuoteStatus,
        actor_id: str,
        notes: str | None = None,
        *,
        now: datetime | None = None,
    ) -> Quote:
        quote = self.repository.fetch(Quote, quote_id)
        if quote is None:
            raise QuoteNotFoundError(quote_id)
        return self.transition(quote, new_status, actor_id, notes, now=now)

    def transition(
        self,
        quote: Quote,
        new_status: QuoteStatus,
        actor_id: str,
        notes: str | None = None,
        *,
        now: datetime | None = None,
    ) -> Quote:
        now = now or datetime.now()
        previous_status = quote.status

        with self._quote_lock(quote.id):
            stored = self.repository.fetch(Quote, quote.id)
            if stored is not None and stored.version != quote.version:
                logger.warning(
                    "Rejected %s transition for quote %s: stale version %s (stored %s)",
                    new_status.value,
                    quote.id,
                    quote.version,
                    stored.version,
                )
                raise StaleQuoteError(quote.id, quote.version, stored.version)

            validate_transition(quote, new_status)

            updated = replace(quote, status=new_status, updated_at=now, version=quote.version + 1)
            self._apply_side_effects(updated, now)
            notification = self._notification_for(updated, now)

            saved = self.repository.save(updated)
            self.repository.save(
                StatusChangeLog(
                    quote_id=saved.id,
                    previous_status=previous_status,
                    new_status=new_status,
                    changed_by=actor_id,
                    changed_at=now,
                    notes=notes,
                )
            )

        logger.info(f"Updated quote {saved.id} status: {previous_status.value} -> {new_status.value}")
        if notification is not None:
            self._deliver(notification)
        return saved

    @staticmethod
    def _apply_side_effects(quote: Quote, now: datetime) -> None:
        if quote.status is QuoteStatus.APPROVED:
            if quote.promised_due_date is None:
                quote.promised_due_date = add_business_days(now, estimated_working_days(quote))
        elif quote.status is QuoteStatus.IN_SHOP:
            quote.priority = QuotePriority.URGENT if quote.rush_type is RushType.SAME_DAY else QuotePriority.HIGH
        elif quote.status is QuoteStatus.QUALITY_FAILED:
            quote.priority = QuotePriority.URGENT
        elif quote.status is QuoteStatus.COMPLETED:
            quote.priority = QuotePriority.LOW

    @staticmethod
    def _notification_for(quote: Quote, now: datetime) -> Notification | None:
        purpose: NotificationPurpose | None = None
        internal = False
        message = ""

        if quote.status is QuoteStatus.PRESENTED:
            purpose = NotificationPurpose.ESTIMATE_READY
        elif quote.status is QuoteStatus.AWAITING_APPROVAL:
            purpose = NotificationPurpose.APPROVAL_REQUEST
        elif quote.status is QuoteStatus.AT_VENDOR and quote.is_overdue(now):
            purpose = NotificationPurpose.DELAY_NOTIFICATION
        elif quote.status is QuoteStatus.QUALITY_FAILED:
            purpose = NotificationPurpose.QUALITY_ISSUE
            internal = True
            message = f"Quality control failed for quote {quote.id}; coordinator review needed."
        elif quote.status is QuoteStatus.READY_FOR_PICKUP:
            purpose = NotificationPurpose.READY_FOR_PICKUP

        if purpose is None:
            return None

        return Notification(
            quote_id=quote.id,
            purpose=purpose,
            status=quote.status,
            message=message or _CUSTOMER_MESSAGES[purpose],
            guest_id=None if internal else quote.guest_id,
            internal=internal,
            created_at=now,
        )

    def _deliver(self, notification: Notification) -> None:
        try:
            delivered = self.notifier.notify(notification)
        except Exception:
            logger.exception(f"Notifier failed for quote {notification.quote_id}")
            return
        if not delivered:
            logger.warning(
                "Notification %s for quote %s was not delivered", notification.purpose.value, notification.quote_id
            )

    def queued_quotes(self, company_id: str, store_id: str | None = None) -> list[Quote]:
        quotes = self.repository.query(
            Quote,
            lambda quote: quote.company_id == company_id
            and (store_id is None or quote.store_id == store_id)
            and quote.status.is_active_work,
            (SortDescriptor("promised_due_date"),),
        )
        # Stable sort keeps due-date order within each priority.
        return sorted(quotes, key=lambda quote: quote.priority.sort_order)

    def overdue_quotes(self, company_id: str, *, now: datetime | None = None) -> list[Quote]:
        now = now or datetime.now()
        return self.repository.query(
            Quote,
            lambda quote: quote.company_id == company_id and quote.is_overdue(now),
            (SortDescriptor("promised_due_date"),),
        )

    def recalculate_priorities(self, company_id: str, *, now: datetime | None = None) -> list[Quote]:
        now = now or datetime.now()
        quotes = self.repository.query(
            Quote,
            lambda quote: quote.company_id == company_id and not quote.status.is_finished,
        )
        updated_quotes = []
        for quote in quotes:
            with self._quote_lock(quote.id):
                current = self.repository.fetch(Quote, quote.id)
                if current is None:
                    continue
                current.update_priority(now)
                current.version += 1
                updated_quotes.append(self.repository.save(current))
        logger.info("Recalculated priorities for %d quotes in %s", len(updated_quotes), company_id)
        return updated_quotes

    def status_history(self, quote_id: str) -> list[StatusChangeLog]:
        return self.repository.query(
            StatusChangeLog,
            lambda entry: entry.quote_id == quote_id,
            (SortDescriptor("changed_at"),),
        )
