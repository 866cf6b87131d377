"""Events exchanged on a session's event bus."""

from typing import Literal

from bubus import BaseEvent


class ActivationCompletedEvent(BaseEvent[None]):
	"""The engine finished an activation pass, possibly in degraded mode."""

	url: str
	strategy: str
	engine: str
	binding_count: int = 0
	degraded: bool = False


class InteractiveNodesAddedEvent(BaseEvent[None]):
	"""The page inserted unbound controls and the debounce window closed."""

	root_count: int

	event_timeout: float | None = 10.0


class ExitRequestedEvent(BaseEvent[None]):
	"""The user asked to leave the mode, the page is restored by reloading it."""

	reason: str = 'control_panel'


class NotificationEvent(BaseEvent[None]):
	"""Show a banner to the user. Non-persistent banners dismiss themselves."""

	message: str
	level: Literal['error', 'warning', 'info'] = 'error'
	persistent: bool = False


class NotificationDismissedEvent(BaseEvent[None]):
	notification_id: str
