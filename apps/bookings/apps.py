from django.apps import AppConfig


class BookingsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.bookings"
    label = "bookings"
    verbose_name = "Bookings"

    def ready(self) -> None:
        # Wire the process-wide message bus once the models are loaded
        from apps.bookings.application.bootstrap import bootstrap

        bootstrap()
