"""
Agent error classes.

This module defines the error classes used by the agent and reflection
components. All of them inherit from the core error system.
"""

from typing import Any, Dict, Optional, Union

from reflectlib.core.errors.errors import BaseError
from reflectlib.core.errors.errors import ErrorContext as CoreErrorContext


class AgentError(BaseError):
    """Base error class for agent errors.

    All errors in the agent system inherit from this class.
    """

    def __init__(
        self,
        message: str,
        cause: Optional[Exception] = None,
        component: str = "agent",
        operation: str = "unknown",
        **context: Union[str, int, bool, None]
    ):
        """Initialize agent error.

        Args:
            message: Error message
            cause: Original exception that caused this error
            component: Agent component name
            operation: Operation being performed
            **context: Additional context information
        """
        error_context = CoreErrorContext.create(
            component=component,
            operation=operation,
            error_type=self.__class__.__name__,
            error_location=f"{component}.{operation}",
        )

        super().__init__(message, error_context, cause)

        self.additional_context: Dict[str, Any] = {k: v for k, v in context.items() if v is not None}

    def __str__(self) -> str:
        """String representation - just the message and its cause."""
        if self.cause:
            return f"{self.message} (caused by: {self.cause})"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary.

        Returns:
            Dictionary representation of the error
        """
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.additional_context,
        }

        if self.cause:
            if hasattr(self.cause, "to_dict") and callable(self.cause.to_dict):
                result["cause"] = self.cause.to_dict()
            else:
                result["cause"] = {
                    "error_type": self.cause.__class__.__name__,
                    "message": str(self.cause),
                }

        return result


class ReflectionConfigurationError(AgentError):
    """Invalid reflection configuration.

    Raised before any round runs: bad policy bounds or an agent with no
    termination predicates. Never retried.
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        invalid_value: Optional[Any] = None,
        agent: Optional[str] = None,
        cause: Optional[Exception] = None,
    ):
        """Initialize configuration error.

        Args:
            message: Error message
            config_key: Key of the problematic configuration
            invalid_value: Invalid value that caused the error
            agent: Name of the agent being configured
            cause: Original exception that caused this error
        """
        self.config_key = config_key
        super().__init__(
            message,
            cause,
            "reflection",
            "validate_configuration",
            config_key=config_key,
            invalid_value=str(invalid_value) if invalid_value is not None else None,
            agent=agent,
        )


class EvaluationContractError(AgentError):
    """The evaluator response violated the evaluation contract.

    Raised for malformed structured payloads and for scores outside
    [1, 10]. Fatal for the run; never defaulted or clamped.
    """

    def __init__(
        self,
        message: str,
        raw_text: str,
        cause: Optional[Exception] = None,
        round_number: Optional[int] = None,
    ):
        """Initialize evaluation contract error.

        Args:
            message: Error message
            raw_text: The raw evaluator response that failed validation
            cause: Original decode/validation exception
            round_number: Round in which the evaluation was produced
        """
        self.raw_text = raw_text
        super().__init__(
            message,
            cause,
            "reflection",
            "parse_evaluation",
            round_number=round_number,
        )


class ReflectionStateError(AgentError):
    """Reflection lifecycle misuse, e.g. re-running a controller."""

    def __init__(self, message: str, operation: str = "state_transition"):
        super().__init__(message, None, "reflection", operation)


class ReflectionError(AgentError):
    """Error during agent reflection.

    Raised by ``ReflectionController.execute`` for any failure inside the
    loop; ``cause`` holds the original error.
    """

    def __init__(
        self,
        message: str,
        agent: Optional[str] = None,
        round_number: Optional[int] = None,
        cause: Optional[Exception] = None,
    ):
        """Initialize reflection error.

        Args:
            message: Error message
            agent: Name of the agent being reflected on
            round_number: Round in which the failure happened
            cause: Original exception that caused this error
        """
        super().__init__(
            message,
            cause,
            "reflection",
            "execute",
            agent=agent,
            round_number=round_number,
            stage="reflection",
        )
