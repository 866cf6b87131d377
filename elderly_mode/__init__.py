import os

from elderly_mode.logging_config import setup_logging

# Embedding applications can opt out and configure logging themselves
if os.environ.get('ELDERLY_MODE_SETUP_LOGGING', 'true').lower() != 'false':
	logger = setup_logging()
else:
	import logging

	logger = logging.getLogger('elderly_mode')

from elderly_mode.config import CONFIG, EngineSettings  # noqa: E402
from elderly_mode.dom.page import LivePage  # noqa: E402
from elderly_mode.rules.service import RulesService  # noqa: E402
from elderly_mode.rules.views import RuleDocument  # noqa: E402
from elderly_mode.session.service import ElderlyModeSession  # noqa: E402
from elderly_mode.session.views import ActivationResult, ElderlyModeError, SessionState  # noqa: E402

__all__ = [
	'CONFIG',
	'ActivationResult',
	'ElderlyModeError',
	'ElderlyModeSession',
	'EngineSettings',
	'LivePage',
	'RuleDocument',
	'RulesService',
	'SessionState',
]
