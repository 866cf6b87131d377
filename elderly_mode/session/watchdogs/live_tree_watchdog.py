"""Watchdog that mirrors controls the page inserts after activation."""

# @file purpose: Observes the page for inserted controls and extends the action area after a debounce

import asyncio
from typing import Any, ClassVar

from bubus import BaseEvent
from pydantic import PrivateAttr

from elderly_mode.dom.interactive import PROXY_CLASS, InteractiveElementDetector
from elderly_mode.dom.page import MutationObserver
from elderly_mode.dom.utils import is_engine_owned, outermost
from elderly_mode.dom.views import ElementHandle, MutationRecord
from elderly_mode.session.events import InteractiveNodesAddedEvent
from elderly_mode.session.watchdog_base import BaseWatchdog


class LiveTreeWatchdog(BaseWatchdog):
	"""
	Watches the body for child-list mutations while the split layout is active.

	Inserted subtrees holding unbound input/button/select/textarea nodes are
	remembered and a single debounce timer is (re)started. When it fires, an
	InteractiveNodesAddedEvent goes out on the bus and the handler mirrors the new
	controls into the existing action area.
	"""

	LISTENS_TO: ClassVar[list[type[BaseEvent[Any]]]] = [InteractiveNodesAddedEvent]
	EMITS: ClassVar[list[type[BaseEvent[Any]]]] = [InteractiveNodesAddedEvent]

	_observer: MutationObserver | None = PrivateAttr(default=None)
	_debounce_handle: asyncio.TimerHandle | None = PrivateAttr(default=None)
	_pending_roots: list[ElementHandle] = PrivateAttr(default_factory=list)

	@property
	def is_armed(self) -> bool:
		return self._observer is not None

	@property
	def pending_roots(self) -> list[ElementHandle]:
		return list(self._pending_roots)

	@property
	def has_pending_timer(self) -> bool:
		return self._debounce_handle is not None

	def arm(self) -> None:
		if self._observer is not None:
			return
		page = self.session.page
		self._observer = page.observe(page.body, self._on_mutations, subtree=True)
		self.logger.debug('👀 Live-tree watcher armed')

	def disarm(self) -> None:
		if self._observer is not None:
			self._observer.disconnect()
			self._observer = None
		if self._debounce_handle is not None:
			self._debounce_handle.cancel()
			self._debounce_handle = None
		self._pending_roots = []

	@staticmethod
	def _holds_candidate(node: ElementHandle) -> bool:
		if InteractiveElementDetector.is_watch_candidate(node):
			return True
		return any(InteractiveElementDetector.is_watch_candidate(descendant) for descendant in node.iter_descendants())

	def _on_mutations(self, records: list[MutationRecord], observer: MutationObserver) -> None:
		qualifying = False
		for record in records:
			if record.type != 'childList':
				continue
			for node in record.added_nodes:
				if node.has_class(PROXY_CLASS) or is_engine_owned(node):
					continue
				if not self._holds_candidate(node):
					continue
				if not any(root is node for root in self._pending_roots):
					self._pending_roots.append(node)
				qualifying = True

		if qualifying:
			self._schedule()

	def _schedule(self) -> None:
		# One timer at a time: every qualifying burst replaces the pending one
		if self._debounce_handle is not None:
			self._debounce_handle.cancel()
			self._debounce_handle = None
		try:
			loop = asyncio.get_running_loop()
		except RuntimeError:
			self.logger.debug('⏸️ No running loop, inserted controls stay queued')
			return
		self._debounce_handle = loop.call_later(self.session.settings.debounce_seconds, self._fire)

	def _fire(self) -> None:
		self._debounce_handle = None
		if not self._pending_roots or self._observer is None:
			return
		self.logger.debug(f'🆕 Detected new interactive elements in {len(self._pending_roots)} inserted subtrees')
		self.event_bus.dispatch(InteractiveNodesAddedEvent(root_count=len(self._pending_roots)))

	def collect_new_nodes(self) -> list[ElementHandle]:
		"""Take the remembered roots and return their unbound controls that are still attached."""
		roots, self._pending_roots = self._pending_roots, []
		live_roots = outermost(root for root in roots if root.is_connected)

		nodes: list[ElementHandle] = []
		seen: set[int] = set()
		for root in live_roots:
			for node in InteractiveElementDetector.collect_interactive(root):
				if id(node) not in seen:
					seen.add(id(node))
					nodes.append(node)
		return nodes

	async def on_InteractiveNodesAddedEvent(self, event: InteractiveNodesAddedEvent) -> None:
		if self._observer is None:
			return
		nodes = self.collect_new_nodes()
		if not nodes:
			self.logger.debug('🫥 Inserted subtrees hold no unbound visible controls')
			return
		bindings = self.session.extend_action_zone(nodes)
		self.logger.info(f'➕ Added {len(bindings)} new controls to the action area')
