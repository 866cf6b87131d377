"""Base class for components that react to session events."""

import logging
from typing import Any, ClassVar

from bubus import BaseEvent, EventBus
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr


class BaseWatchdog(BaseModel):
	"""
	A watchdog subscribes `on_<EventName>` methods to the session's event bus.

	Subclasses list the events they handle in LISTENS_TO (each needs a matching
	method) and the events they dispatch in EMITS.
	"""

	model_config = ConfigDict(arbitrary_types_allowed=True, extra='forbid', validate_assignment=False)

	LISTENS_TO: ClassVar[list[type[BaseEvent[Any]]]] = []
	EMITS: ClassVar[list[type[BaseEvent[Any]]]] = []

	event_bus: EventBus = Field(exclude=True)
	session: Any = Field(exclude=True)  # ElderlyModeSession, typed loosely to avoid an import cycle

	_attached: bool = PrivateAttr(default=False)

	@property
	def logger(self) -> logging.Logger:
		return self.session.logger

	def attach_to_session(self) -> None:
		if self._attached:
			return
		for event_class in self.LISTENS_TO:
			handler = getattr(self, f'on_{event_class.__name__}', None)
			if handler is None:
				raise TypeError(f'{type(self).__name__} listens to {event_class.__name__} but has no on_{event_class.__name__}()')
			self.event_bus.on(event_class, handler)
		self._attached = True

	def detach_from_session(self) -> None:
		if not self._attached:
			return
		for event_class in self.LISTENS_TO:
			handler = getattr(self, f'on_{event_class.__name__}')
			handlers = self.event_bus.handlers.get(event_class.__name__, [])
			if handler in handlers:
				handlers.remove(handler)
		self._attached = False
