# @file purpose: One elderly-mode session per page view: activation, restart, teardown and exit
"""
ElderlyModeSession drives a full activation pass over a LivePage:

	rules → style directives → identify → deduplicate → classify → strategy → materialize → watch

Everything the pass adds to the page is tracked so that teardown can undo it
completely before a restart. The page-wide `elderlyModeActive` flag guarantees a
single running instance per page view.
"""

import logging
from collections.abc import Callable

from bubus import EventBus
from uuid_extensions import uuid7str

from elderly_mode.blocks.classifier import classify_blocks
from elderly_mode.blocks.deduplicator import deduplicate_blocks
from elderly_mode.blocks.identifiers import count_page_structure, identify_blocks
from elderly_mode.blocks.views import ZoneAssignment
from elderly_mode.config import EngineGeneration, EngineSettings
from elderly_mode.dom.interactive import InteractiveElementDetector
from elderly_mode.dom.page import LivePage
from elderly_mode.dom.utils import is_engine_owned, safe_matches, safe_select
from elderly_mode.dom.views import ElementHandle
from elderly_mode.layout.control_panel import ControlPanel
from elderly_mode.layout.materializer import ZoneMaterializer
from elderly_mode.layout.strategy import LayoutStrategy, decide_layout_strategy
from elderly_mode.layout.styles import (
	BASE_STYLES_ID,
	HIDDEN_CLASS,
	HIGH_CONTRAST,
	HIGH_CONTRAST_ID,
	ROOT_CLASS,
	SPLIT_LAYOUT_CLASS,
	apply_directive,
	base_styles,
	enlarge_text,
	hide_node,
	remove_directive,
)
from elderly_mode.layout.views import ProxyBinding
from elderly_mode.rules.service import RulesService, normalize_site_identifier
from elderly_mode.rules.views import RuleDocument
from elderly_mode.session.events import ActivationCompletedEvent, ExitRequestedEvent, NotificationEvent
from elderly_mode.session.views import ActivationResult, MaterializationError, RuleLoadError, SessionState
from elderly_mode.session.watchdogs.live_tree_watchdog import LiveTreeWatchdog
from elderly_mode.session.watchdogs.notifications_watchdog import NotificationsWatchdog
from elderly_mode.utils import time_execution_async

ACTIVE_FLAG = 'elderlyModeActive'
SESSION_KEY = 'elderlyModeSession'


class ElderlyModeSession:
	def __init__(
		self,
		page: LivePage,
		settings: EngineSettings | None = None,
		rules_service: RulesService | None = None,
		session_id: str | None = None,
	):
		self.id = session_id or uuid7str()
		self.page = page
		self.settings = settings or EngineSettings()
		self.rules_service = rules_service or RulesService()
		self.event_bus = EventBus(name=f'ElderlyMode_{self.id[-8:]}')

		self.state = SessionState.UNINITIALIZED
		self.rules: RuleDocument | None = None
		self.strategy: LayoutStrategy | None = None
		self.zones: ZoneAssignment | None = None
		self.degraded = False

		self.materializer = ZoneMaterializer(page, self.settings)
		self.control_panel = ControlPanel(page, self.settings, on_exit=self.request_exit)
		self._hidden_nodes: list[ElementHandle] = []

		self.live_tree_watchdog = LiveTreeWatchdog(event_bus=self.event_bus, session=self)
		self.notifications_watchdog = NotificationsWatchdog(event_bus=self.event_bus, session=self)
		self.live_tree_watchdog.attach_to_session()
		self.notifications_watchdog.attach_to_session()
		self.event_bus.on(ExitRequestedEvent, self.on_ExitRequestedEvent)

	def __repr__(self) -> str:
		return f'ElderlyModeSession#{self.id[-4:]}({self.state.value}, {self.page.url})'

	@classmethod
	def for_page(cls, page: LivePage, **kwargs) -> 'ElderlyModeSession':
		"""The session bound to this page view, created on first use."""
		existing = page.globals.get(SESSION_KEY)
		if isinstance(existing, cls):
			return existing
		session = cls(page, **kwargs)
		page.globals[SESSION_KEY] = session
		return session

	@property
	def logger(self) -> logging.Logger:
		return logging.getLogger(f'elderly_mode.ElderlyModeSession🅴 {self.id[-4:]}')

	@property
	def bindings(self) -> list[ProxyBinding]:
		return list(self.materializer.registry)

	@property
	def is_active(self) -> bool:
		return self.state is SessionState.ACTIVE

	# Activation

	@time_execution_async('--activate')
	async def activate(self) -> ActivationResult:
		"""
		Run a full activation pass. Re-activating an active page tears it down first.

		Failures while applying the layout degrade to base styles, enlarged text and the
		control panel with a transient notice. Anything else leaves the page untouched
		apart from a persistent notice advising a reload.
		"""
		if self.state is SessionState.ACTIVE or self.page.globals.get(ACTIVE_FLAG):
			self.logger.info('🔁 Elderly mode already active on this page, restarting')
			self.teardown()
			previous = self.page.globals.get(SESSION_KEY)
			if isinstance(previous, ElderlyModeSession) and previous is not self:
				previous.teardown()

		self.page.globals[ACTIVE_FLAG] = True
		self.page.globals[SESSION_KEY] = self
		self.degraded = False
		self.logger.info(f'🚀 Activating elderly mode on {self.page.url}')

		try:
			site = normalize_site_identifier(self.page.url)
			try:
				self.rules = await self.rules_service.load_rules(site)
			except Exception as e:
				raise RuleLoadError(f'Could not resolve rules for {site or "<no host>"}: {e}') from e
			try:
				binding_count = self._apply(self.rules)
			except Exception as e:
				self.logger.warning(f'⚠️ Failed to apply optimizations, falling back to basic mode: {type(e).__name__}: {e}')
				self._rollback_layout()
				self._apply_fallback()
				self.degraded = True
				binding_count = 0
				await self.notify(self.settings.degraded_notice, level='warning')
		except Exception as e:
			self.logger.error(f'❌ Elderly mode failed to start: {type(e).__name__}: {e}')
			self._rollback_layout()
			self._remove_chrome()
			self.state = SessionState.FAILED
			await self.notify(self.settings.fatal_notice, persistent=True)
			return ActivationResult(session_id=self.id, state=self.state, error=f'{type(e).__name__}: {e}')

		self.state = SessionState.ACTIVE
		strategy = self.strategy.value if self.strategy is not None else LayoutStrategy.ENLARGE_ONLY.value
		await self.event_bus.dispatch(
			ActivationCompletedEvent(
				url=self.page.url,
				strategy=strategy,
				engine=self.settings.engine.value,
				binding_count=binding_count,
				degraded=self.degraded,
			)
		)
		self.logger.info(f'✅ Elderly mode active ({strategy}, {binding_count} mirrored controls)')
		return ActivationResult(
			session_id=self.id,
			state=self.state,
			strategy=strategy,
			rules_source=self.rules_service.last_source,
			binding_count=binding_count,
			degraded=self.degraded,
		)

	def _apply(self, rules: RuleDocument) -> int:
		apply_directive(self.page, base_styles(self.settings))
		if rules.enlarge_text:
			enlarge_text(self.page)

		if self.settings.engine is EngineGeneration.SELECTORS:
			binding_count = self._apply_selector_layout(rules)
		else:
			binding_count = self._apply_semantic_layout(rules)

		if rules.high_contrast:
			apply_directive(self.page, HIGH_CONTRAST)
		self.control_panel.install()
		return binding_count

	def _apply_semantic_layout(self, rules: RuleDocument) -> int:
		# Every identifier runs against the untouched tree, mutations come after
		blocks = deduplicate_blocks(identify_blocks(self.page))
		self.zones = classify_blocks(blocks, relocate_navigation=rules.simplify_nav)
		counts = count_page_structure(self.page)
		self.strategy = decide_layout_strategy(self.zones, counts)
		if rules.layout == 'normal':
			self.strategy = LayoutStrategy.ENLARGE_ONLY
		self.logger.debug(f'🧭 {len(blocks)} blocks, zones={self.zones.summary()}, counts={counts}, strategy={self.strategy.value}')

		if rules.remove_ads:
			for block in self.zones.remove_zone:
				self._hide(block.node)

		if self.strategy is not LayoutStrategy.SPLIT:
			return 0
		return self._materialize_split(lambda: self.materializer.materialize(self.zones))

	def _apply_selector_layout(self, rules: RuleDocument) -> int:
		if rules.remove_ads:
			root = self.page.document_element
			for selector in rules.remove_selectors:
				for node in safe_select(root, selector):
					if is_engine_owned(node) or any(safe_matches(node, keep) for keep in rules.keep_selectors):
						continue
					self._hide(node)

		if rules.layout != 'split':
			self.strategy = LayoutStrategy.ENLARGE_ONLY
			return 0
		self.strategy = LayoutStrategy.SPLIT
		nodes = InteractiveElementDetector.collect_interactive(self.page.body, include_root=False)
		return self._materialize_split(lambda: self.materializer.materialize_nodes(nodes))

	def _materialize_split(self, build: Callable[[], list[ProxyBinding]]) -> int:
		self.page.body.add_class(SPLIT_LAYOUT_CLASS)
		try:
			bindings = build()
		except Exception as e:
			raise MaterializationError(f'Could not build the action area: {e}') from e
		self.live_tree_watchdog.arm()
		return len(bindings)

	def _apply_fallback(self) -> None:
		apply_directive(self.page, base_styles(self.settings))
		enlarge_text(self.page)
		self.control_panel.install()

	def _hide(self, node: ElementHandle) -> None:
		if node.has_class(HIDDEN_CLASS):
			return
		hide_node(node)
		self._hidden_nodes.append(node)

	def extend_action_zone(self, nodes: list[ElementHandle]) -> list[ProxyBinding]:
		"""Mirror controls inserted after activation, appending to the existing action area."""
		if not self.is_active or self.materializer.action_area is None:
			return []
		return self.materializer.materialize_nodes(nodes)

	# Teardown

	def _rollback_layout(self) -> None:
		self.live_tree_watchdog.disarm()
		self.materializer.teardown()
		for node in self._hidden_nodes:
			node.remove_class(HIDDEN_CLASS)
		self._hidden_nodes = []
		self.page.body.remove_class(SPLIT_LAYOUT_CLASS)
		self.zones = None
		self.strategy = None

	def _remove_chrome(self) -> None:
		self.control_panel.remove()
		self.page.document_element.remove_class(ROOT_CLASS)
		remove_directive(self.page, BASE_STYLES_ID)
		remove_directive(self.page, HIGH_CONTRAST_ID)

	def teardown(self) -> None:
		"""Undo everything the session put on the page and clear the active flag."""
		if self.state is SessionState.UNINITIALIZED:
			return
		self._rollback_layout()
		self._remove_chrome()
		self.notifications_watchdog.clear()
		self.page.globals.pop(ACTIVE_FLAG, None)
		self.state = SessionState.TORN_DOWN
		self.logger.debug('🧹 Elderly mode torn down')

	# Exit and notifications

	def request_exit(self) -> ExitRequestedEvent:
		return self.event_bus.dispatch(ExitRequestedEvent())

	async def on_ExitRequestedEvent(self, event: ExitRequestedEvent) -> None:
		self.teardown()
		self.page.reload()

	async def notify(self, message: str, level: str = 'error', persistent: bool = False) -> NotificationEvent:
		event = self.event_bus.dispatch(NotificationEvent(message=message, level=level, persistent=persistent))
		await event
		return event

	async def close(self) -> None:
		"""Tear down (if needed) and stop the event bus."""
		if self.state in (SessionState.ACTIVE, SessionState.FAILED):
			self.teardown()
		self.notifications_watchdog.clear()
		self.live_tree_watchdog.detach_from_session()
		self.notifications_watchdog.detach_from_session()
		await self.event_bus.stop(clear=True)
		if self.page.globals.get(SESSION_KEY) is self:
			self.page.globals.pop(SESSION_KEY, None)
