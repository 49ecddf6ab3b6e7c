"""
Base Service Interface

Services wrap the pure engine functions for callers that work in batches
(one refresh cycle, many tickers).
"""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")


class BaseService(ABC, Generic[InputT, OutputT]):
    """
    Base class for engine services.

    A service declares its input and output contracts, runs without I/O of
    its own and reports whether it can accept work.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Service name used in log lines and error messages."""

    @abstractmethod
    async def execute(self, input_data: InputT) -> OutputT:
        """
        Run the service over one batch.

        Raises:
            ServiceError: If the batch as a whole cannot be processed
        """

    @abstractmethod
    async def health_check(self) -> bool:
        """Whether the service can accept work."""

    async def validate_input(self, input_data: InputT) -> InputT:
        """Pydantic already validated the models; override for extra checks."""
        return input_data


class ServiceError(Exception):
    """Base exception for service errors."""

    def __init__(self, service_name: str, message: str, details: dict = None):
        self.service_name = service_name
        self.message = message
        self.details = details or {}
        super().__init__(f"[{service_name}] {message}")


class ValidationError(ServiceError):
    """Input violates the bar-series contract."""


class InsufficientDataError(ValidationError):
    """Bar series too short to aggregate (fewer than two bars)."""
