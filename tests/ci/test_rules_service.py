"""Rule document resolution: built-in table, disk cache, remote document, defaults"""

import json
import logging
import time

import pytest
from pytest_httpserver import HTTPServer

from elderly_mode.rules.builtin import BUILT_IN_RULES
from elderly_mode.rules.service import RuleCache, RulesService, normalize_site_identifier
from elderly_mode.rules.views import RuleDocument


@pytest.mark.parametrize(
	'url, expected',
	[
		('https://www.amazon.com/dp/B000', 'amazon-com'),
		('https://edition.cnn.com/world', 'edition-cnn-com'),
		('http://localhost:8000/page', 'localhost'),
		('news.example.org', 'news-example-org'),
		('about:blank', ''),
		('file:///tmp/page.html', ''),
	],
)
def test_normalize_site_identifier(url, expected):
	assert normalize_site_identifier(url) == expected


@pytest.fixture
def cache(tmp_path) -> RuleCache:
	return RuleCache(tmp_path / 'rules', ttl=60)


def service_for(cache: RuleCache, base_url: str = 'http://127.0.0.1:9', remote: bool = False) -> RulesService:
	return RulesService(base_url=base_url, cache=cache, timeout=2, remote_enabled=remote)


async def test_built_in_rules_are_copied(cache):
	service = service_for(cache)
	rules = await service.load_rules('amazon-com')

	assert service.last_source == 'builtin'
	assert rules == BUILT_IN_RULES['amazon-com']
	rules.remove_selectors.append('.mine')
	assert '.mine' not in BUILT_IN_RULES['amazon-com'].remove_selectors


async def test_defaults_when_nothing_else_is_known(cache):
	service = service_for(cache)
	rules = await service.load_rules('unknown-example-org')

	assert service.last_source == 'default'
	assert rules.layout == 'split'
	assert rules.enlarge_text and rules.simplify_nav and rules.remove_ads
	assert not rules.high_contrast
	assert '.sidebar' in rules.remove_selectors
	assert 'input' in rules.keep_selectors


async def test_pages_without_a_host_get_defaults(cache):
	service = service_for(cache)
	await service.load_rules('')
	assert service.last_source == 'default'


class TestCache:
	def test_store_then_load(self, cache):
		assert cache.store('example-org', RuleDocument(layout='normal', high_contrast=True))
		stored = json.loads(cache.path_for('example-org').read_text())
		assert stored['rules']['highContrast'] is True
		assert cache.path_for('example-org').name == 'elderly-rules-example-org.json'

		rules = cache.load('example-org')
		assert rules.layout == 'normal'
		assert rules.high_contrast is True

	def test_entries_expire(self, cache):
		cache.store('example-org', RuleDocument(), now=1000.0)
		assert cache.load('example-org', now=1059.0) is not None
		assert cache.load('example-org', now=1060.0) is None

	def test_corrupt_entry_is_ignored(self, cache, caplog):
		cache.directory.mkdir(parents=True)
		cache.path_for('example-org').write_text('{not json')
		with caplog.at_level(logging.WARNING):
			assert cache.load('example-org') is None
		assert 'Failed to load cached rules' in caplog.text

	async def test_service_prefers_a_fresh_cache_entry(self, cache):
		cache.store('example-org', RuleDocument(layout='normal'))
		service = service_for(cache)
		rules = await service.load_rules('example-org')
		assert service.last_source == 'cache'
		assert rules.layout == 'normal'

	async def test_service_skips_an_expired_cache_entry(self, cache):
		cache.store('example-org', RuleDocument(layout='normal'), now=time.time() - 120)
		service = service_for(cache)
		rules = await service.load_rules('example-org')
		assert service.last_source == 'default'
		assert rules.layout == 'split'


class TestRemote:
	async def test_remote_document_is_used_and_cached(self, cache, httpserver: HTTPServer):
		httpserver.expect_request('/rules/example-org.json').respond_with_json(
			{
				'layout': 'normal',
				'highContrast': True,
				'removeSelectors': ['.promo'],
				'keepSelectors': ['.promo .price'],
				'somethingNew': 1,
			}
		)
		service = service_for(cache, base_url=httpserver.url_for('/'), remote=True)

		rules = await service.load_rules('example-org')

		assert service.last_source == 'remote'
		assert rules.layout == 'normal'
		assert rules.high_contrast is True
		assert rules.remove_selectors == ['.promo']
		assert rules.keep_selectors == ['.promo .price']
		assert cache.path_for('example-org').exists()

		again = await service.load_rules('example-org')
		assert service.last_source == 'cache'
		assert again == rules

	@pytest.mark.parametrize(
		'status, body',
		[
			(404, 'not found'),
			(500, 'oops'),
			(200, '{broken'),
			(200, '{"layout": "sideways"}'),
		],
	)
	async def test_remote_failures_fall_back_to_defaults(self, cache, httpserver: HTTPServer, status, body):
		httpserver.expect_request('/rules/example-org.json').respond_with_data(body, status=status, content_type='application/json')
		service = service_for(cache, base_url=httpserver.url_for('/'), remote=True)

		rules = await service.load_rules('example-org')

		assert service.last_source == 'default'
		assert rules == RuleDocument.default()
		assert not cache.path_for('example-org').exists()

	async def test_unreachable_server_falls_back_to_defaults(self, cache):
		service = service_for(cache, base_url='http://127.0.0.1:9', remote=True)
		await service.load_rules('example-org')
		assert service.last_source == 'default'

	async def test_remote_disabled_never_fetches(self, cache, httpserver: HTTPServer):
		httpserver.expect_request('/rules/example-org.json').respond_with_json({'layout': 'normal'})
		service = service_for(cache, base_url=httpserver.url_for('/'), remote=False)

		await service.load_rules('example-org')

		assert service.last_source == 'default'
		assert httpserver.log == []
