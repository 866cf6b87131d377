"""
Shared fixtures for the elderly-mode test suite.

Pages are built from inline HTML; sessions run with short timers and an offline
rules service backed by a temporary cache directory.
"""

import os

# pytest's own logging capture is used instead of the package's console handler
os.environ.setdefault('ELDERLY_MODE_SETUP_LOGGING', 'false')

import pytest  # noqa: E402

from elderly_mode.config import EngineGeneration, EngineSettings, SyncMode  # noqa: E402
from elderly_mode.dom.page import LivePage  # noqa: E402
from elderly_mode.rules.service import RuleCache, RulesService  # noqa: E402
from elderly_mode.session.service import ElderlyModeSession  # noqa: E402

TEST_URL = 'https://news.example.org/story'

LOGIN_PAGE = """
<html><head><title>Sign in</title></head><body>
	<h1>Sign in</h1>
	<form id="login" action="/login">
		<label for="email">Email</label>
		<input id="email" type="email" name="email">
		<label for="password">Password</label>
		<input id="password" type="password" name="password">
		<button type="submit">Sign in</button>
	</form>
</body></html>
"""

ARTICLE_WITH_SEARCH_PAGE = f"""
<html><body>
	<header class="site-header">
		<input type="text" name="q" placeholder="Search">
		<button type="button">Go</button>
	</header>
	<article id="story">
		<h1>Gardening in autumn</h1>
		<p>{' '.join(['word'] * 500)}</p>
	</article>
</body></html>
"""

ACTION_GROUP_PAGE = """
<html><body>
	<main id="content"><p>Hello there</p></main>
	<div class="actions">
		<button type="button" id="one">One</button>
		<button type="button" id="two">Two</button>
		<button type="button" id="three">Three</button>
	</div>
</body></html>
"""


@pytest.fixture
def settings() -> EngineSettings:
	return EngineSettings(
		engine=EngineGeneration.SEMANTIC,
		sync_mode=SyncMode.PROXY,
		poll_interval=0.01,
		debounce_seconds=0.05,
		notification_seconds=0.1,
	)


@pytest.fixture
def rules_service(tmp_path) -> RulesService:
	return RulesService(
		base_url='http://127.0.0.1:9',
		cache=RuleCache(tmp_path / 'rules'),
		remote_enabled=False,
	)


@pytest.fixture
def make_page():
	def factory(html: str, url: str = TEST_URL) -> LivePage:
		return LivePage(html, url=url)

	return factory


@pytest.fixture
async def make_session(settings, rules_service):
	"""Factory for sessions that are closed (timers, polls, event bus) after the test."""
	sessions: list[ElderlyModeSession] = []

	def factory(html: str, url: str = TEST_URL, rules: RulesService | None = None, **overrides) -> ElderlyModeSession:
		page = LivePage(html, url=url)
		session_settings = settings.model_copy(update=overrides) if overrides else settings
		session = ElderlyModeSession.for_page(page, settings=session_settings, rules_service=rules or rules_service)
		sessions.append(session)
		return session

	yield factory

	for session in sessions:
		await session.close()


@pytest.fixture
def login_page() -> str:
	return LOGIN_PAGE


@pytest.fixture
def article_page() -> str:
	return ARTICLE_WITH_SEARCH_PAGE


@pytest.fixture
def action_group_page() -> str:
	return ACTION_GROUP_PAGE
