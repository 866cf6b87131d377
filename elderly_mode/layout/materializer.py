# @file purpose: Builds the action area and binds every relocated control to a mirror in it
"""
The zone materializer turns the action zone into the action area: an engine-owned
`<aside>` appended to `<body>` with one section per action block and one
`.elderly-action-item` per interactive control.

Originals are never moved or removed. Each one stays where the page put it,
marked with `data-elderly-ref="elderly-ref-<index>"` and visually suppressed,
while its mirror in the action area forwards everything the user does.
"""

import logging

from elderly_mode.blocks.views import Block, ZoneAssignment
from elderly_mode.config import EngineSettings, SyncMode
from elderly_mode.dom.interactive import PROXY_CLASS, InteractiveElementDetector
from elderly_mode.dom.page import LivePage
from elderly_mode.dom.utils import is_engine_owned, is_marked, is_visible, marker_for, max_marker_index
from elderly_mode.dom.views import MARKER_ATTRIBUTE, OWNED_ATTRIBUTE, DOMEvent, ElementHandle, EventListener
from elderly_mode.layout.labels import get_element_label
from elderly_mode.layout.proxy import PROXY_ATTRIBUTE, ProxyElementFactory, forward_click, forward_value
from elderly_mode.layout.styles import (
	ACTION_AREA_CLASS,
	ACTION_AREA_ID,
	ACTION_ITEM_CLASS,
	ACTION_SECTION_CLASS,
	PLACEHOLDER_CLASS,
)
from elderly_mode.layout.views import BindingRegistry, ProxyBinding, hide_original, restore_original
from elderly_mode.utils import time_execution_sync

logger = logging.getLogger(__name__)

CLONE_ID_PREFIX = 'elderly-clone-'
MIRROR_ID_PREFIX = 'elderly-proxy-'


class ZoneMaterializer:
	def __init__(self, page: LivePage, settings: EngineSettings | None = None, registry: BindingRegistry | None = None):
		self.page = page
		self.settings = settings or EngineSettings()
		self.registry = registry if registry is not None else BindingRegistry()
		self.factory = ProxyElementFactory(page)
		self.action_area: ElementHandle | None = None

		self._hidden_blocks: list[tuple[ElementHandle, dict[str, str | None]]] = []
		self._cloned_roots: list[ElementHandle] = []
		self._form_listeners: list[tuple[ElementHandle, str, EventListener]] = []

	@property
	def sync_mode(self) -> SyncMode:
		return self.settings.sync_mode

	# Action area

	def ensure_action_area(self) -> ElementHandle:
		if self.action_area is not None and self.action_area.is_connected:
			return self.action_area

		area = self.page.create_element(
			'aside',
			{
				'id': ACTION_AREA_ID,
				'class': ACTION_AREA_CLASS,
				'aria-label': self.settings.action_area_title,
				OWNED_ATTRIBUTE: 'true',
			},
		)
		self.page.append_child(area, self.page.create_element('h2', text=self.settings.action_area_title))
		self.page.append_child(self.page.body, area)
		self.action_area = area
		logger.debug(f'🧱 Action area created in {self.page.url}')
		return area

	def _section(self, block: Block) -> ElementHandle:
		section = self.page.create_element(
			'section',
			{'class': ACTION_SECTION_CLASS, 'data-block-kind': block.kind.value, 'aria-label': block.kind.value},
		)
		self.page.append_child(self.ensure_action_area(), section)
		return section

	def _placeholder(self) -> ElementHandle | None:
		if self.action_area is None:
			return None
		for child in self.action_area.children:
			if child.has_class(PLACEHOLDER_CLASS):
				return child
		return None

	def _update_placeholder(self) -> None:
		placeholder = self._placeholder()
		if len(self.registry) == 0 and placeholder is None:
			self.page.append_child(
				self.ensure_action_area(),
				self.page.create_element('p', {'class': PLACEHOLDER_CLASS}, text=self.settings.empty_action_area_text),
			)
		elif len(self.registry) and placeholder is not None:
			self.page.remove_node(placeholder)

	def next_index(self) -> int:
		"""First free marker index: one past the highest index on the page or in the registry."""
		return max(max_marker_index(self.page.document_element), self.registry.max_index) + 1

	# Materialization

	@time_execution_sync('--materialize')
	def materialize(self, zones: ZoneAssignment) -> list[ProxyBinding]:
		"""Build the action area from the action zone. Content, remove and keep zones are left in place."""
		self.ensure_action_area()
		bindings: list[ProxyBinding] = []
		for block in zones.action_zone:
			bindings.extend(self.materialize_block(block))
		self._update_placeholder()
		logger.info(f'🧩 Materialized {len(bindings)} controls from {len(zones.action_zone)} action blocks ({self.sync_mode.value} mode)')
		return bindings

	def materialize_block(self, block: Block) -> list[ProxyBinding]:
		if self.sync_mode is SyncMode.CLONE:
			return self._clone_block(block)

		nodes = InteractiveElementDetector.collect_interactive(block.node)
		if not nodes:
			logger.debug(f'🫥 {block!r} has no unbound visible controls, skipped')
			return []
		return self.materialize_nodes(nodes, parent=self._section(block))

	def materialize_nodes(self, nodes: list[ElementHandle], parent: ElementHandle | None = None) -> list[ProxyBinding]:
		"""Mirror each unmarked node with a proxy, numbering from the next free index."""
		container = parent if parent is not None else self.ensure_action_area()
		index = self.next_index()
		bindings: list[ProxyBinding] = []
		for node in nodes:
			if is_marked(node):
				continue
			binding = self.factory.create_binding(node, index)
			mirror_id = f'{MIRROR_ID_PREFIX}{index}'
			binding.mirror.set_attribute('id', mirror_id)
			binding.item = self._action_item(index, binding.mirror, get_element_label(node), mirror_id)
			self.page.append_child(container, binding.item)
			self._register(binding)
			bindings.append(binding)
			index += 1

		self._update_placeholder()
		return bindings

	def _action_item(self, index: int, content: ElementHandle, label: str | None, mirror_id: str | None = None) -> ElementHandle:
		item = self.page.create_element('div', {'class': ACTION_ITEM_CLASS, 'data-original-element-id': marker_for(index)})
		if label:
			attributes = {'for': mirror_id} if mirror_id else {}
			self.page.append_child(item, self.page.create_element('label', attributes, text=label))
		self.page.append_child(item, content)
		return item

	def _register(self, binding: ProxyBinding) -> None:
		binding.saved_attributes = hide_original(binding.original, marker_for(binding.index))
		self.registry.register(binding)
		binding.start_polling(self.settings.poll_interval)
		logger.debug(f'🔗 Bound {binding!r}')

	# Clone mode

	def _clone_block(self, block: Block) -> list[ProxyBinding]:
		source = block.node
		if any(root.contains(source) for root in self._cloned_roots):
			logger.debug(f'🪞 {block!r} is inside an already cloned block, skipped')
			return []
		self._cloned_roots.append(source)

		originals = [source, *source.iter_descendants()]
		clone = self.page.clone_node(source)
		copies = [clone, *clone.iter_descendants()]

		for copy in copies:
			if copy.id:
				copy.set_attribute('id', f'{CLONE_ID_PREFIX}{copy.id}')
			if copy.tag_name == 'label' and copy.get_attribute('for'):
				copy.set_attribute('for', f'{CLONE_ID_PREFIX}{copy.get_attribute("for")}')
			if copy.tag_name == 'input' and (copy.get_attribute('type') or '').lower() == 'radio' and copy.get_attribute('name'):
				# Copies form their own radio group, apart from the originals
				copy.set_attribute('name', f'{CLONE_ID_PREFIX}{copy.get_attribute("name")}')
			copy.remove_attribute(MARKER_ATTRIBUTE)

		index = self.next_index()
		item = self._action_item(index, clone, None)
		self.page.append_child(self._section(block), item)

		bindings: list[ProxyBinding] = []
		for original, copy in zip(originals, copies, strict=True):
			if original.tag_name == 'form' and copy.is_connected:
				self._forward_submit(original, copy)
			if not InteractiveElementDetector.is_interactive(original) or is_engine_owned(original):
				continue
			if not copy.is_connected:
				continue
			if is_marked(original) or not is_visible(original):
				# Already mirrored elsewhere (or not rendered): drop the dead duplicate
				self.page.remove_node(copy)
				continue

			binding = ProxyBinding(original=original, mirror=copy, index=index, item=item)
			copy.set_attribute(PROXY_ATTRIBUTE, str(index))
			copy.add_class(PROXY_CLASS)
			if InteractiveElementDetector.is_input_like(original) and not InteractiveElementDetector.is_button_like(original):
				if binding.is_checkable:
					copy.checked = original.checked
				else:
					copy.value = original.value
				forward_value(binding, 'input')
				forward_value(binding, 'change')
			else:
				forward_click(binding)
			self._register(binding)
			bindings.append(binding)
			index += 1

		if self.registry.for_original(source) is None:
			self._hidden_blocks.append((source, hide_original(source)))
		logger.debug(f'🪞 Cloned {block!r} with {len(bindings)} forwarded controls')
		return bindings

	def _forward_submit(self, original_form: ElementHandle, copy_form: ElementHandle) -> None:
		def on_copy_submit(event: DOMEvent) -> None:
			event.prevent_default()
			self.page.submit(original_form)

		copy_form.add_event_listener('submit', on_copy_submit)
		self._form_listeners.append((copy_form, 'submit', on_copy_submit))

	# Teardown

	def teardown(self) -> int:
		"""Unbind everything, restore every original and remove the action area. Returns the binding count."""
		bindings = self.registry.clear()
		for binding in bindings:
			binding.unbind()
			restore_original(binding.original, binding.saved_attributes)
		for node, saved in self._hidden_blocks:
			restore_original(node, saved)
		self._hidden_blocks = []
		self._cloned_roots = []
		for node, event_type, listener in self._form_listeners:
			node.remove_event_listener(event_type, listener)
		self._form_listeners = []

		if self.action_area is not None and self.action_area.is_connected:
			self.page.remove_node(self.action_area)
		self.action_area = None
		logger.debug(f'🧹 Materializer torn down, {len(bindings)} bindings released')
		return len(bindings)
