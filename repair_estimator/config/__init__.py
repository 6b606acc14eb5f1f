from repair_estimator.config.base import AppSettings


def get_settings() -> AppSettings:
    return AppSettings.get_instance()


__all__ = ["AppSettings", "get_settings"]
