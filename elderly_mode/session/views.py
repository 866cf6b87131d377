from enum import Enum

from pydantic import BaseModel


class SessionState(str, Enum):
	UNINITIALIZED = 'uninitialized'
	ACTIVE = 'active'
	TORN_DOWN = 'torn_down'
	FAILED = 'failed'


class ActivationResult(BaseModel):
	session_id: str
	state: SessionState
	strategy: str | None = None
	rules_source: str | None = None
	binding_count: int = 0
	degraded: bool = False
	error: str | None = None


class ElderlyModeError(Exception):
	"""Base class for errors raised by the engine."""


class MaterializationError(ElderlyModeError):
	"""Building the action area or binding a control failed."""


class RuleLoadError(ElderlyModeError):
	"""No rule document could be produced for a site."""
