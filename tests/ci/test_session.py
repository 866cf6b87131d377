"""End-to-end activation passes: scenarios, restart, degraded and fatal paths, exit"""

import asyncio

import pytest

from elderly_mode.config import EngineGeneration
from elderly_mode.dom.interactive import CONTROL_PANEL_CLASS
from elderly_mode.dom.views import MARKER_ATTRIBUTE
from elderly_mode.layout.styles import (
	ACTION_AREA_ID,
	BASE_STYLES_ID,
	HIDDEN_CLASS,
	HIGH_CONTRAST_ID,
	NOTIFICATION_CLASS,
	ROOT_CLASS,
	SPLIT_LAYOUT_CLASS,
)
from elderly_mode.rules.service import RuleCache, RulesService
from elderly_mode.rules.views import RuleDocument
from elderly_mode.session.events import ActivationCompletedEvent
from elderly_mode.session.service import ACTIVE_FLAG, SESSION_KEY, ElderlyModeSession
from elderly_mode.session.views import SessionState

DUPLICATE_SEARCH_PAGE = f"""
<html><body>
	<div id="top" class="search-top"><input type="search" name="q"><button>Go</button></div>
	<main><p>{' '.join(['text'] * 200)}</p></main>
	<div id="bottom" class="search-bottom"><input id="q2" type="search" name="q"><button id="go2">Go</button></div>
</body></html>
"""

ADS_PAGE = """
<html><body>
	<main id="story"><p>Story text</p><button id="share" type="button">Share</button></main>
	<div id="ad" class="ad-slot"><button id="buy" type="button">Buy now</button></div>
	<div id="side" class="sidebar"><a href="/more">More</a></div>
	<p id="note" class="ad-note">Not hidden: paragraphs are kept</p>
</body></html>
"""


def rules_for(tmp_path, **fields) -> RulesService:
	"""A service that resolves the test site to a fixed rule document."""
	return RulesService(
		cache=RuleCache(tmp_path / 'pinned'),
		remote_enabled=False,
		built_in={'news-example-org': RuleDocument.default().model_copy(update=fields)},
	)


def banners(page):
	return page.query_selector_all(f'.{NOTIFICATION_CLASS}')


class TestScenarios:
	async def test_login_page_is_only_enlarged(self, make_session, login_page):
		session = make_session(login_page)
		result = await session.activate()

		page = session.page
		assert result.state is SessionState.ACTIVE
		assert result.strategy == 'enlarge-only'
		assert result.binding_count == 0
		assert page.get_element_by_id(ACTION_AREA_ID) is None
		assert page.document_element.has_class(ROOT_CLASS)
		assert page.has_style_sheet(BASE_STYLES_ID)
		assert page.query_selector(f'.{CONTROL_PANEL_CLASS}') is not None
		assert page.globals[ACTIVE_FLAG] is True
		assert session.control_panel.is_installed

	async def test_article_with_header_search_is_split(self, make_session, article_page):
		session = make_session(article_page)
		completed = []

		async def on_completed(event: ActivationCompletedEvent) -> None:
			completed.append(event)

		session.event_bus.on(ActivationCompletedEvent, on_completed)
		result = await session.activate()

		page = session.page
		assert result.strategy == 'split'
		assert result.binding_count == 2
		assert result.rules_source == 'default'
		assert page.body.has_class(SPLIT_LAYOUT_CLASS)
		area = page.get_element_by_id(ACTION_AREA_ID)
		assert [label.text_content for label in area.query_all('label')] == ['Search', 'Go']
		assert page.query_selector('header input').get_attribute(MARKER_ATTRIBUTE) == 'elderly-ref-1'
		assert page.query_selector('article').get_attribute(MARKER_ATTRIBUTE) is None
		assert len(completed) == 1 and completed[0].strategy == 'split' and completed[0].binding_count == 2

	async def test_only_one_search_bar_is_relocated(self, make_session):
		session = make_session(DUPLICATE_SEARCH_PAGE)
		result = await session.activate()

		page = session.page
		assert result.binding_count == 2
		assert page.get_element_by_id('q2').get_attribute(MARKER_ATTRIBUTE) is None
		assert page.get_element_by_id('go2').get_attribute(MARKER_ATTRIBUTE) is None
		assert all(binding.original.closest(lambda el: el.id == 'top') is not None for binding in session.bindings)

	async def test_ads_and_sidebars_are_hidden(self, make_session):
		session = make_session(ADS_PAGE)
		await session.activate()

		page = session.page
		assert page.get_element_by_id('ad').has_class(HIDDEN_CLASS)
		assert page.get_element_by_id('side').has_class(HIDDEN_CLASS)
		assert not page.get_element_by_id('story').has_class(HIDDEN_CLASS)


class TestLifecycle:
	async def test_for_page_reuses_the_bound_session(self, make_session, login_page):
		session = make_session(login_page)
		assert ElderlyModeSession.for_page(session.page) is session
		assert session.page.globals[SESSION_KEY] is session

	async def test_restart_tears_down_before_reapplying(self, make_session, article_page):
		session = make_session(article_page)
		await session.activate()
		result = await session.activate()

		page = session.page
		assert result.state is SessionState.ACTIVE
		assert len(page.query_selector_all(f'#{ACTION_AREA_ID}')) == 1
		assert len(page.query_selector_all(f'.{CONTROL_PANEL_CLASS}')) == 1
		assert len(page.query_selector_all(f'#{BASE_STYLES_ID}')) == 1
		assert sorted(binding.index for binding in session.bindings) == [1, 2]

	async def test_teardown_restores_the_page(self, make_session, article_page):
		session = make_session(article_page)
		await session.activate()

		session.teardown()

		page = session.page
		assert session.state is SessionState.TORN_DOWN
		assert ACTIVE_FLAG not in page.globals
		assert page.get_element_by_id(ACTION_AREA_ID) is None
		assert page.query_selector(f'.{CONTROL_PANEL_CLASS}') is None
		assert not page.has_style_sheet(BASE_STYLES_ID)
		assert not page.document_element.has_class(ROOT_CLASS)
		assert not page.body.has_class(SPLIT_LAYOUT_CLASS)
		assert page.query_selector(f'[{MARKER_ATTRIBUTE}]') is None

	async def test_layout_failure_degrades_to_basic_mode(self, make_session, article_page, monkeypatch):
		session = make_session(article_page)

		def broken(zones):
			raise RuntimeError('layout exploded')

		monkeypatch.setattr(session.materializer, 'materialize', broken)
		result = await session.activate()

		page = session.page
		assert result.state is SessionState.ACTIVE
		assert result.degraded is True
		assert page.has_style_sheet(BASE_STYLES_ID)
		assert page.document_element.has_class(ROOT_CLASS)
		assert page.query_selector(f'.{CONTROL_PANEL_CLASS}') is not None
		assert not page.body.has_class(SPLIT_LAYOUT_CLASS)
		assert page.query_selector(f'[{MARKER_ATTRIBUTE}]') is None
		assert session.notifications_watchdog.messages == [session.settings.degraded_notice]

		await asyncio.sleep(0.3)
		assert banners(page) == []

	async def test_fatal_failure_leaves_a_persistent_notice(self, make_session, article_page, tmp_path):
		class BrokenRules(RulesService):
			async def load_rules(self, site: str) -> RuleDocument:
				raise RuntimeError('no rules today')

		session = make_session(article_page, rules=BrokenRules(cache=RuleCache(tmp_path / 'broken'), remote_enabled=False))
		result = await session.activate()

		page = session.page
		assert result.state is SessionState.FAILED
		assert result.error.startswith('RuleLoadError')
		assert 'no rules today' in result.error
		assert not page.has_style_sheet(BASE_STYLES_ID)
		assert page.query_selector(f'.{CONTROL_PANEL_CLASS}') is None

		await asyncio.sleep(0.3)
		assert [banner.text_content for banner in banners(page)] == [session.settings.fatal_notice]

	async def test_control_panel_exit_reloads_the_page(self, make_session, article_page):
		session = make_session(article_page)
		await session.activate()
		page = session.page

		session.control_panel.button.click()
		await session.event_bus.wait_until_idle(timeout=2)

		assert page.reload_count == 1
		assert session.state is SessionState.TORN_DOWN
		assert ACTIVE_FLAG not in page.globals
		assert not session.control_panel.is_installed
		assert page.get_element_by_id(ACTION_AREA_ID) is None


class TestRuleOptions:
	async def test_layout_normal_forces_enlarge_only(self, make_session, article_page, tmp_path):
		session = make_session(article_page, rules=rules_for(tmp_path, layout='normal'))
		result = await session.activate()

		assert result.rules_source == 'builtin'
		assert result.strategy == 'enlarge-only'
		assert session.page.get_element_by_id(ACTION_AREA_ID) is None

	async def test_remove_ads_off_keeps_ads(self, make_session, tmp_path):
		session = make_session(ADS_PAGE, rules=rules_for(tmp_path, remove_ads=False))
		await session.activate()
		assert not session.page.get_element_by_id('ad').has_class(HIDDEN_CLASS)

	async def test_enlarge_text_off(self, make_session, login_page, tmp_path):
		session = make_session(login_page, rules=rules_for(tmp_path, enlarge_text=False))
		await session.activate()
		assert not session.page.document_element.has_class(ROOT_CLASS)
		assert session.page.has_style_sheet(BASE_STYLES_ID)

	async def test_high_contrast(self, make_session, login_page, tmp_path):
		session = make_session(login_page, rules=rules_for(tmp_path, high_contrast=True))
		await session.activate()
		assert session.page.has_style_sheet(HIGH_CONTRAST_ID)

		session.teardown()
		assert not session.page.has_style_sheet(HIGH_CONTRAST_ID)

	@pytest.mark.parametrize('simplify_nav, relocated', [(True, True), (False, False)])
	async def test_simplify_nav_controls_navigation_relocation(self, make_session, tmp_path, simplify_nav, relocated):
		html = """
		<html><body>
			<nav id="menu"><a href="/a">A</a><a href="/b">B</a></nav>
			<article><p>Story</p></article>
		</body></html>
		"""
		session = make_session(html, rules=rules_for(tmp_path, simplify_nav=simplify_nav))
		await session.activate()
		link = session.page.query_selector('#menu a')
		assert (link.get_attribute(MARKER_ATTRIBUTE) is not None) is relocated


class TestSelectorEngine:
	async def test_rule_selectors_hide_and_every_control_is_mirrored(self, make_session):
		session = make_session(ADS_PAGE, engine=EngineGeneration.SELECTORS)
		result = await session.activate()

		page = session.page
		assert result.strategy == 'split'
		assert page.get_element_by_id('ad').has_class(HIDDEN_CLASS)
		assert page.get_element_by_id('side').has_class(HIDDEN_CLASS)
		# Matches a keep selector
		assert not page.get_element_by_id('note').has_class(HIDDEN_CLASS)

		mirrored = {binding.original.id for binding in session.bindings}
		assert 'share' in mirrored
		assert 'buy' not in mirrored

	async def test_selector_engine_with_normal_layout(self, make_session, tmp_path):
		session = make_session(ADS_PAGE, engine=EngineGeneration.SELECTORS, rules=rules_for(tmp_path, layout='normal'))
		result = await session.activate()
		assert result.strategy == 'enlarge-only'
		assert session.bindings == []
