import logging
from dataclasses import dataclass, field
from datetime import datetime
from http import HTTPStatus
from typing import Protocol

import requests
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential
from tenacity.wait import wait_base

from repair_estimator.config import get_settings
from repair_estimator.config.sections import Notifications
from repair_estimator.models import NotificationPurpose, QuoteStatus
from repair_estimator.type_defs import JsonObject

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    quote_id: str
    purpose: NotificationPurpose
    status: QuoteStatus
    message: str
    guest_id: str | None = None
    internal: bool = False
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def idempotency_key(self) -> str:
        return f"quote-{self.quote_id}-{self.status.value}-{self.purpose.value}"

    def to_payload(self) -> JsonObject:
        return {
            "quote_id": self.quote_id,
            "purpose": self.purpose.value,
            "status": self.status.value,
            "message": self.message,
            "guest_id": self.guest_id,
            "internal": self.internal,
            "created_at": self.created_at.isoformat(),
        }


class Notifier(Protocol):
    def notify(self, notification: Notification) -> bool:
        ...


class LoggingNotifier:
    def notify(self, notification: Notification) -> bool:
        audience = "staff" if notification.internal else "customer"
        logger.info(
            "Notification %s for quote %s (%s): %s",
            notification.purpose.value,
            notification.quote_id,
            audience,
            notification.message,
        )
        return True


class WebhookNotifier(requests.Session):
    """POSTs notifications as JSON to a webhook.

    Delivery is retried on network errors and non-2xx responses. A delivery
    that still fails is logged and reported as ``False``.
    """

    def __init__(
        self,
        webhook_url: str = "",
        policy: Notifications | None = None,
        wait: wait_base | None = None,
    ) -> None:
        super().__init__()
        self.policy = policy or get_settings().notifications
        self.webhook_url = webhook_url or self.policy.webhook_url
        self.wait = wait or wait_exponential(min=1, max=10)
        self.headers.update({"accept": "application/json", "Content-Type": "application/json"})

    def notify(self, notification: Notification) -> bool:
        if not self.webhook_url:
            logger.warning(
                "No webhook URL configured; dropping %s for quote %s",
                notification.purpose.value,
                notification.quote_id,
            )
            return False

        try:
            for attempt in Retrying(
                stop=stop_after_attempt(max(1, int(self.policy.max_retries))),
                wait=self.wait,
                retry=retry_if_exception_type(requests.RequestException),
                reraise=True,
            ):
                with attempt:
                    self.post_notification(notification)
        except requests.RequestException as error:
            logger.exception(f"Failed to deliver notification for quote {notification.quote_id}: {error}")
            return False

        logger.info("Delivered %s for quote %s", notification.purpose.value, notification.quote_id)
        return True

    def post_notification(self, notification: Notification) -> requests.Response:
        response = self.post(
            self.webhook_url,
            json=notification.to_payload(),
            headers={"Idempotency-Key": notification.idempotency_key},
            timeout=self.policy.timeout_seconds,
        )
        if response.status_code == HTTPStatus.TOO_MANY_REQUESTS.value:
            logger.info("Webhook rate limited. Waiting and retrying...")
            raise requests.RequestException("Rate limit reached")
        if not 200 <= response.status_code < 300:
            logger.warning("Webhook returned status code %s. Retrying...", response.status_code)
            raise requests.RequestException(f"Received unexpected status code: {response.status_code}")
        return response
