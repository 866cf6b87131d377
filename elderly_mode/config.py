"""Configuration for elderly-mode, read from the environment (and a .env file) on access."""

import os
from enum import Enum
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()


class EngineGeneration(str, Enum):
	SEMANTIC = 'semantic'  # block recognition + zone classification
	SELECTORS = 'selectors'  # rule-document selectors + every interactive element


class SyncMode(str, Enum):
	PROXY = 'proxy'  # brand-new mirror per control, bidirectional sync
	CLONE = 'clone'  # structural copy of the block with value/click forwarding


def _env_bool(name: str, default: bool) -> bool:
	value = os.getenv(name)
	if value is None:
		return default
	return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
	"""Lazily evaluated settings, so tests can change the environment after import."""

	@property
	def ELDERLY_MODE_LOGGING_LEVEL(self) -> str:
		return os.getenv('ELDERLY_MODE_LOGGING_LEVEL', 'info').lower()

	@property
	def ELDERLY_MODE_SETUP_LOGGING(self) -> bool:
		return _env_bool('ELDERLY_MODE_SETUP_LOGGING', True)

	@property
	def ELDERLY_MODE_CONFIG_DIR(self) -> Path:
		path = Path(os.getenv('ELDERLY_MODE_CONFIG_DIR', '~/.config/elderly-mode')).expanduser()
		return path

	@property
	def ELDERLY_MODE_RULES_BASE_URL(self) -> str:
		return os.getenv('ELDERLY_MODE_RULES_BASE_URL', 'https://stanh123h.github.io/elderly-mode').rstrip('/')

	@property
	def ELDERLY_MODE_RULES_CACHE_DIR(self) -> Path:
		cache_dir = os.getenv('ELDERLY_MODE_RULES_CACHE_DIR')
		if cache_dir:
			return Path(cache_dir).expanduser()
		return self.ELDERLY_MODE_CONFIG_DIR / 'rules'

	@property
	def ELDERLY_MODE_RULES_CACHE_TTL(self) -> float:
		"""Seconds a cached rule document stays valid (7 days)."""
		return float(os.getenv('ELDERLY_MODE_RULES_CACHE_TTL', str(7 * 24 * 60 * 60)))

	@property
	def ELDERLY_MODE_RULES_TIMEOUT(self) -> float:
		return float(os.getenv('ELDERLY_MODE_RULES_TIMEOUT', '5'))

	@property
	def ELDERLY_MODE_REMOTE_RULES(self) -> bool:
		return _env_bool('ELDERLY_MODE_REMOTE_RULES', True)

	@property
	def ELDERLY_MODE_ENGINE(self) -> EngineGeneration:
		return EngineGeneration(os.getenv('ELDERLY_MODE_ENGINE', EngineGeneration.SEMANTIC.value).lower())

	@property
	def ELDERLY_MODE_SYNC_MODE(self) -> SyncMode:
		return SyncMode(os.getenv('ELDERLY_MODE_SYNC_MODE', SyncMode.PROXY.value).lower())

	@property
	def ELDERLY_MODE_POLL_INTERVAL(self) -> float:
		return float(os.getenv('ELDERLY_MODE_POLL_INTERVAL', '0.1'))

	@property
	def ELDERLY_MODE_DEBOUNCE_SECONDS(self) -> float:
		return float(os.getenv('ELDERLY_MODE_DEBOUNCE_SECONDS', '0.3'))


CONFIG = Config()


class EngineSettings(BaseModel):
	"""Per-session engine settings. Defaults come from CONFIG, any field can be overridden."""

	engine: EngineGeneration = Field(default_factory=lambda: CONFIG.ELDERLY_MODE_ENGINE)
	sync_mode: SyncMode = Field(default_factory=lambda: CONFIG.ELDERLY_MODE_SYNC_MODE)
	poll_interval: float = Field(default_factory=lambda: CONFIG.ELDERLY_MODE_POLL_INTERVAL, gt=0)
	debounce_seconds: float = Field(default_factory=lambda: CONFIG.ELDERLY_MODE_DEBOUNCE_SECONDS, ge=0)
	notification_seconds: float = Field(default=5.0, gt=0, description='Auto-dismiss delay of transient notices')

	# Visual directive parameters
	font_size: str = '20px'
	line_height: str = '1.8'
	min_touch_target: str = '48px'
	split_ratio: tuple[int, int] = (70, 30)

	# Copy shown by the engine
	action_area_title: str = 'Actions'
	empty_action_area_text: str = 'No input fields or buttons were detected on this page.'
	control_panel_text: str = 'Elderly Mode ON'
	control_panel_title: str = 'Click to disable Elderly Mode'
	degraded_notice: str = 'Some features failed to load, basic mode is enabled.'
	fatal_notice: str = 'Elderly Mode failed to start, please reload the page and try again.'
