from elderly_mode.session.events import (
	ActivationCompletedEvent,
	ExitRequestedEvent,
	InteractiveNodesAddedEvent,
	NotificationDismissedEvent,
	NotificationEvent,
)
from elderly_mode.session.service import ElderlyModeSession
from elderly_mode.session.views import ActivationResult, ElderlyModeError, MaterializationError, RuleLoadError, SessionState

__all__ = [
	'ActivationCompletedEvent',
	'ActivationResult',
	'ElderlyModeError',
	'ElderlyModeSession',
	'ExitRequestedEvent',
	'InteractiveNodesAddedEvent',
	'MaterializationError',
	'NotificationDismissedEvent',
	'NotificationEvent',
	'RuleLoadError',
	'SessionState',
]
