from repair_estimator.config.base import AppSettings
from repair_estimator.type_defs import JsonObject


def display_settings(settings: AppSettings | None = None) -> list[JsonObject]:
    """Sections with their current values and any range problems, for an admin screen."""
    settings = settings or AppSettings.get_instance()
    return [
        {
            "section": getattr(section, "title", name),
            "fields": section.to_dict(),
            "problems": list(section.check()),
        }
        for name, section in settings.sections.items()
    ]
