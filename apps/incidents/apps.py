"""Django app configuration for the incidents app."""

from django.apps import AppConfig


class IncidentsConfig(AppConfig):
    """Configuration for the incident history app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.incidents"
    verbose_name = "Incident History"

    def ready(self):
        from apps.incidents.polling import warn_if_run_guard_is_process_local

        warn_if_run_guard_is_process_local()
