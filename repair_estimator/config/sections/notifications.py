from repair_estimator.config.serializable import Serializable


class Notifications(Serializable):
    title = "Notifications"

    # Empty disables webhook delivery.
    webhook_url: str = ""
    timeout_seconds: float = 5.0
    max_retries: int = 3

    def check(self) -> list[str]:
        problems = []
        if self.webhook_url and not self.webhook_url.startswith(("http://", "https://")):
            problems.append(f"webhook_url is not an http(s) URL: {self.webhook_url}")
        if self.timeout_seconds <= 0:
            problems.append("timeout_seconds must be positive")
        if self.max_retries < 1:
            problems.append("max_retries must be at least 1")
        return problems
