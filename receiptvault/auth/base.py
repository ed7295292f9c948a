from abc import ABC, abstractmethod


class BaseTokenProvider(ABC):
    """Contract for suppliers of the remote store's bearer credential."""

    @abstractmethod
    def get_token(self) -> str | None:
        """Return the current bearer token, or None when signed out."""

    @abstractmethod
    def is_valid(self) -> bool:
        """Return True when a token is present and not expired."""
