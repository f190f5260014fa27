from django.apps import AppConfig
from django.conf import settings
from django.utils.module_loading import import_string


class CoreConfig(AppConfig):
    """Owns the process-wide collaborators of the request pipeline.

    ``token_verifier`` and ``rate_limit_counter`` are built once when the
    app registry is ready and live as long as the process.  Tests replace
    them on the app config instead of patching module globals.
    """

    default_auto_field = "django.db.models.BigAutoField"
    name = "modules.core"
    label = "core"

    def ready(self) -> None:
        from modules.core.ratelimit import FixedWindowCounter

        verifier_class = import_string(settings.TOKEN_VERIFIER_CLASS)
        self.token_verifier = verifier_class.from_settings(settings)
        self.rate_limit_counter = FixedWindowCounter(
            key_prefix=settings.RATE_LIMIT_KEY_PREFIX,
        )
