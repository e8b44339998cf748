"""
Generative Insight Provider Interface

A provider turns a text prompt into free-form text. The analysis pipeline
needs to tell "not configured" apart from "call failed", so the interface
reports missing configuration without touching the network.

Calls happen inside a session, opened per analysis request with
`async with provider.session() as session:` and released on every exit
path, including exceptions raised while generating.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager


class InsightProviderError(Exception):
    """Base exception for insight provider failures."""
    pass


class ConfigurationError(InsightProviderError):
    """Credential or project id is missing."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(
            f"Insight provider is not configured (missing: {', '.join(missing)})"
        )


class ConnectivityError(InsightProviderError):
    """The connectivity check failed."""
    pass


class ProviderError(InsightProviderError):
    """The generation call failed."""
    pass


class ProviderSession(ABC):
    """An open connection to the provider."""

    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """
        Send one prompt and return the response text.

        Raises whatever the underlying client raises; callers wrap it.
        """
        pass


class InsightProvider(ABC):
    """Abstract generative-insight provider."""

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Identifier of the model answering prompts."""
        pass

    @abstractmethod
    def missing_configuration(self) -> list[str]:
        """
        Names of required settings that are absent.

        An empty list means the provider is configured. Never does I/O.
        """
        pass

    @abstractmethod
    def session(self) -> AbstractAsyncContextManager[ProviderSession]:
        """Open a session scoped to one analysis request."""
        pass

    def is_configured(self) -> bool:
        return not self.missing_configuration()
