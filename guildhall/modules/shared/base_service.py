"""
Base Service Foundation

Purpose
-------
Foundation class for every Guildhall domain service. Services own the
transaction boundary for their operations, enforce business rules, raise
domain exceptions and emit domain events once a write has committed.

Design Notes
------------
This base class provides:
- Structured logging with operation context
- Config access with a required-key guard
- Event emission helpers

What this class does NOT do:
- Open sessions itself (services call DatabaseService.get_transaction())
- Validate input shape (InputValidator does that)

Usage
-----
    class TeamService(BaseService):
        def __init__(self, config, event_bus, logger):
            super().__init__(config, event_bus, logger)
            self._teams = BaseRepository(Team, logger)

        async def join_team(self, team_id: int, user_id: int):
            ...
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional, Type

from guildhall.core.exceptions import ConfigurationError

if TYPE_CHECKING:
    from logging import Logger

    from guildhall.core.config.config import Config
    from guildhall.core.event.bus import EventBus


class BaseService:
    """
    Base class for all domain services.

    Args:
        config: Configuration class (``guildhall.core.config.Config``)
        event_bus: Event bus for cross-module communication
        logger: Structured logger instance
    """

    def __init__(
        self,
        config: Type[Config],
        event_bus: EventBus,
        logger: Logger,
    ) -> None:
        self._config = config
        self._events = event_bus
        self.log = logger

    def get_config(
        self, key: str, default: Optional[Any] = None, required: bool = False
    ) -> Any:
        """
        Read a configuration attribute.

        Raises:
            ConfigurationError: If required=True and the key is missing
        """
        value = getattr(self._config, key, default)
        if required and value is None:
            raise ConfigurationError(key, f"Required configuration key '{key}' is missing")
        return value

    async def emit_event(
        self,
        event_type: str,
        data: Dict[str, Any],
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Publish a domain event. Call only after the transaction has committed."""
        await self._events.publish(event_type, {**data, **(context or {})})

    def log_operation(self, operation: str, **context: Any) -> None:
        self.log.info(
            f"Service operation: {operation}",
            extra={"service_operation": operation, **context},
        )

    def log_rejection(self, operation: str, error: Exception, **context: Any) -> None:
        """Log a business-rule rejection; these are expected and not errors."""
        self.log.info(
            f"Rejected {operation}: {getattr(error, 'message', str(error))}",
            extra={
                "service_operation": operation,
                "error_type": type(error).__name__,
                **context,
            },
        )
