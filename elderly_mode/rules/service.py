import logging
import time
from pathlib import Path
from urllib.parse import urlparse

import httpx
from pydantic import ValidationError

from elderly_mode.config import CONFIG
from elderly_mode.rules.builtin import BUILT_IN_RULES
from elderly_mode.rules.views import CachedRuleDocument, RuleDocument, RuleSource

logger = logging.getLogger(__name__)

NON_HOST_SCHEMES = ('about:', 'data:', 'file:', 'javascript:', 'blob:')


def normalize_site_identifier(url_or_host: str) -> str:
	"""'https://www.amazon.com/dp/1' -> 'amazon-com'. Empty for pages without a host."""
	if '//' in url_or_host or url_or_host.startswith(NON_HOST_SCHEMES):
		host = urlparse(url_or_host).hostname
	else:
		host = url_or_host
	host = (host or '').strip().lower()
	return host.replace('www.', '', 1).replace('.', '-')


class RuleCache:
	"""One timestamped JSON file per site. Entries older than the TTL are ignored."""

	def __init__(self, directory: Path | None = None, ttl: float | None = None):
		self.directory = directory if directory is not None else CONFIG.ELDERLY_MODE_RULES_CACHE_DIR
		self.ttl = ttl if ttl is not None else CONFIG.ELDERLY_MODE_RULES_CACHE_TTL

	def path_for(self, site: str) -> Path:
		return self.directory / f'elderly-rules-{site}.json'

	def load(self, site: str, now: float | None = None) -> RuleDocument | None:
		path = self.path_for(site)
		if not path.exists():
			return None
		try:
			entry = CachedRuleDocument.model_validate_json(path.read_text(encoding='utf-8'))
		except (OSError, ValidationError) as e:
			logger.warning(f'⚠️ Failed to load cached rules for {site}: {type(e).__name__}: {e}')
			return None

		age = (now if now is not None else time.time()) - entry.timestamp
		if age >= self.ttl:
			logger.debug(f'⌛ Cached rules for {site} expired ({age / 3600:.1f}h old)')
			return None
		return entry.rules

	def store(self, site: str, rules: RuleDocument, now: float | None = None) -> bool:
		entry = CachedRuleDocument(rules=rules, timestamp=now if now is not None else time.time())
		try:
			self.directory.mkdir(parents=True, exist_ok=True)
			self.path_for(site).write_text(entry.model_dump_json(by_alias=True), encoding='utf-8')
		except OSError as e:
			logger.warning(f'⚠️ Failed to cache rules for {site}: {type(e).__name__}: {e}')
			return False
		return True


class RulesService:
	"""
	Resolves the rule document for a site.

	Lookup order: built-in table, local cache (7 days), remote document (cached on
	success), defaults. Every failure falls through to the next source and is only logged.
	"""

	def __init__(
		self,
		base_url: str | None = None,
		cache: RuleCache | None = None,
		timeout: float | None = None,
		remote_enabled: bool | None = None,
		built_in: dict[str, RuleDocument] | None = None,
	):
		self.base_url = (base_url or CONFIG.ELDERLY_MODE_RULES_BASE_URL).rstrip('/')
		self.cache = cache if cache is not None else RuleCache()
		self.timeout = timeout if timeout is not None else CONFIG.ELDERLY_MODE_RULES_TIMEOUT
		self.remote_enabled = remote_enabled if remote_enabled is not None else CONFIG.ELDERLY_MODE_REMOTE_RULES
		self.built_in = built_in if built_in is not None else BUILT_IN_RULES
		self.last_source: RuleSource | None = None

	async def load_rules(self, site: str) -> RuleDocument:
		if site in self.built_in:
			logger.debug(f'📚 Using built-in rules for {site}')
			return self._resolved('builtin', self.built_in[site].model_copy(deep=True))

		if site:
			cached = self.cache.load(site)
			if cached is not None:
				logger.debug(f'💾 Using cached rules for {site}')
				return self._resolved('cache', cached)

			if self.remote_enabled:
				remote = await self.fetch_remote(site)
				if remote is not None:
					self.cache.store(site, remote)
					logger.info(f'🌐 Loaded remote rules for {site}')
					return self._resolved('remote', remote)

		logger.debug(f'📄 Using default rules for {site or "<no host>"}')
		return self._resolved('default', RuleDocument.default())

	async def fetch_remote(self, site: str) -> RuleDocument | None:
		url = f'{self.base_url}/rules/{site}.json'
		try:
			async with httpx.AsyncClient(timeout=self.timeout) as client:
				response = await client.get(url)
			if response.status_code != 200:
				logger.debug(f'🌐 No remote rules for {site} (HTTP {response.status_code})')
				return None
			return RuleDocument.model_validate_json(response.content)
		except (httpx.HTTPError, ValidationError, ValueError) as e:
			logger.debug(f'🌐 Remote rules for {site} unavailable: {type(e).__name__}: {e}')
			return None

	def _resolved(self, source: RuleSource, rules: RuleDocument) -> RuleDocument:
		self.last_source = source
		return rules
