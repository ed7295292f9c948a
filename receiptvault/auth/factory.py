from receiptvault.auth.base import BaseTokenProvider
from receiptvault.auth.static_provider import StaticTokenProvider
from receiptvault.config.settings import Settings


class TokenProviderFactory:
    """Creates the token provider from application settings."""

    @classmethod
    def create(cls, settings: Settings) -> BaseTokenProvider:
        return StaticTokenProvider(
            token=settings.google_access_token,
            expires_at=settings.google_token_expires_at,
        )
