from django.apps import AppConfig
from django.conf import settings


class AccountsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "accounts"

    def ready(self) -> None:
        from accounts.tokens import AuthConfig, TokenService

        self.token_service = TokenService(AuthConfig.from_settings(settings))
