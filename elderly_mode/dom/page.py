# @file purpose: In-process live page model (handles, listeners, live values, mutation observers)
"""
LivePage wraps a parsed HTML document so it can be driven like a browser tree.

BeautifulSoup (lxml parser) holds the structure and soupsieve evaluates selectors.
Everything a browser keeps outside the markup lives in side tables keyed by node
identity: event listeners, `value` / `checked` properties and observer subscriptions.
Structural writes made through the page are reported to MutationObservers in
batches on the running asyncio loop, the way a browser delivers them after the
current task.
"""

import asyncio
import copy
import logging
from collections.abc import Callable
from typing import Any

import soupsieve
from bs4 import BeautifulSoup, Tag

from elderly_mode.dom.views import (
	DOMEvent,
	ElementHandle,
	EventListener,
	FormSubmission,
	MutationRecord,
	OWNED_ATTRIBUTE,
)

logger = logging.getLogger(__name__)

MutationCallback = Callable[[list[MutationRecord], 'MutationObserver'], None]

CHECKABLE_INPUT_TYPES = {'checkbox', 'radio'}
SUBMIT_INPUT_TYPES = {'submit', 'image'}


class MutationObserver:
	"""Batches mutation records for one callback, like the browser API of the same name."""

	def __init__(self, page: 'LivePage', callback: MutationCallback):
		self.page = page
		self.callback = callback
		self._targets: list[tuple[ElementHandle, bool, bool]] = []
		self._queue: list[MutationRecord] = []
		self._delivery_scheduled = False

	def observe(self, target: ElementHandle, subtree: bool = True, attributes: bool = False) -> None:
		self._targets = [entry for entry in self._targets if entry[0] is not target]
		self._targets.append((target, subtree, attributes))
		self.page._register_observer(self)

	def disconnect(self) -> None:
		self._targets = []
		self._queue = []
		self.page._unregister_observer(self)

	def take_records(self) -> list[MutationRecord]:
		records, self._queue = self._queue, []
		return records

	def _wants(self, record: MutationRecord) -> bool:
		for target, subtree, attributes in self._targets:
			if record.type == 'attributes' and not attributes:
				continue
			if record.target is target or (subtree and target.contains(record.target)):
				return True
		return False

	def _enqueue(self, record: MutationRecord) -> None:
		self._queue.append(record)
		if self._delivery_scheduled:
			return
		try:
			loop = asyncio.get_running_loop()
		except RuntimeError:
			# No loop: records wait for LivePage.flush_mutations()
			return
		self._delivery_scheduled = True
		loop.call_soon(self._deliver)

	def _deliver(self) -> None:
		self._delivery_scheduled = False
		records = self.take_records()
		if records:
			self.callback(records, self)


class LivePage:
	"""A mutable page view: one document, its live element state and its `window` globals."""

	def __init__(self, html: str, url: str = 'about:blank'):
		self.url = url
		self._original_html = html
		self.reload_count = 0
		self._load(html)

	def _load(self, html: str) -> None:
		self.soup = BeautifulSoup(html, 'lxml')
		if self.soup.html is None:
			self.soup.append(self.soup.new_tag('html'))
		root = self.soup.html
		if root.head is None:
			root.insert(0, self.soup.new_tag('head'))
		if root.body is None:
			root.append(self.soup.new_tag('body'))

		self.globals: dict[str, Any] = {}
		self.submissions: list[FormSubmission] = []
		self.navigations: list[str] = []
		self.focused: ElementHandle | None = None
		self._handles: dict[int, ElementHandle] = {}
		self._listeners: dict[int, dict[str, list[EventListener]]] = {}
		self._values: dict[int, str] = {}
		self._checked: dict[int, bool] = {}
		self._observers: list[MutationObserver] = []
		self._style_sheets: dict[str, frozenset[str]] = {}

	def __repr__(self) -> str:
		return f'LivePage(url={self.url!r}, reloads={self.reload_count})'

	# Handles and lookup

	def handle(self, tag: Tag) -> ElementHandle:
		key = id(tag)
		handle = self._handles.get(key)
		if handle is None or handle.tag is not tag:
			handle = ElementHandle(self, tag)
			self._handles[key] = handle
		return handle

	@property
	def document_element(self) -> ElementHandle:
		return self.handle(self.soup.html)

	@property
	def head(self) -> ElementHandle:
		return self.handle(self.soup.html.head)

	@property
	def body(self) -> ElementHandle:
		return self.handle(self.soup.html.body)

	def query_selector_all(self, selector: str, root: ElementHandle | None = None) -> list[ElementHandle]:
		"""Raises soupsieve.SelectorSyntaxError when the selector is malformed."""
		scope = root.tag if root is not None else self.soup
		return [self.handle(tag) for tag in soupsieve.select(selector, scope)]

	def query_selector(self, selector: str, root: ElementHandle | None = None) -> ElementHandle | None:
		results = self.query_selector_all(selector, root=root)
		return results[0] if results else None

	def get_element_by_id(self, element_id: str) -> ElementHandle | None:
		tag = self.soup.find(id=element_id)
		return self.handle(tag) if isinstance(tag, Tag) else None

	def matches(self, node: ElementHandle, selector: str) -> bool:
		return soupsieve.match(selector, node.tag)

	def contains(self, node: ElementHandle) -> bool:
		current = node.tag
		while current is not None:
			if current is self.soup:
				return True
			current = current.parent
		return False

	# Structure

	def create_element(self, tag_name: str, attributes: dict[str, str] | None = None, text: str | None = None) -> ElementHandle:
		tag = self.soup.new_tag(tag_name)
		for name, value in (attributes or {}).items():
			tag[name] = value.split() if name == 'class' else value
		if text:
			tag.string = text
		return self.handle(tag)

	def clone_node(self, node: ElementHandle) -> ElementHandle:
		"""Structural deep copy: attributes and children only, no listeners or live values."""
		return self.handle(copy.copy(node.tag))

	def append_child(self, parent: ElementHandle, child: ElementHandle) -> ElementHandle:
		self._detach(child)
		parent.tag.append(child.tag)
		self._notify(MutationRecord(type='childList', target=parent, added_nodes=[child]))
		return child

	def insert_before(self, parent: ElementHandle, child: ElementHandle, reference: ElementHandle | None) -> ElementHandle:
		if reference is None:
			return self.append_child(parent, child)
		if reference.parent is not parent:
			raise ValueError(f'{reference!r} is not a child of {parent!r}')
		self._detach(child)
		reference.tag.insert_before(child.tag)
		self._notify(MutationRecord(type='childList', target=parent, added_nodes=[child]))
		return child

	def remove_node(self, node: ElementHandle) -> None:
		self._detach(node)

	def _detach(self, node: ElementHandle) -> None:
		parent_tag = node.tag.parent
		if parent_tag is None:
			return
		parent = self.handle(parent_tag) if parent_tag is not self.soup else None
		node.tag.extract()
		if parent is not None:
			self._notify(MutationRecord(type='childList', target=parent, removed_nodes=[node]))

	def set_attribute(self, node: ElementHandle, name: str, value: str) -> None:
		node.tag[name] = value.split() if name == 'class' else value
		self._notify(MutationRecord(type='attributes', target=node, attribute_name=name))

	def remove_attribute(self, node: ElementHandle, name: str) -> None:
		if name not in node.tag.attrs:
			return
		del node.tag[name]
		self._notify(MutationRecord(type='attributes', target=node, attribute_name=name))

	# Mutation observers

	def observe(self, target: ElementHandle, callback: MutationCallback, subtree: bool = True) -> MutationObserver:
		observer = MutationObserver(self, callback)
		observer.observe(target, subtree=subtree)
		return observer

	def _register_observer(self, observer: MutationObserver) -> None:
		if observer not in self._observers:
			self._observers.append(observer)

	def _unregister_observer(self, observer: MutationObserver) -> None:
		if observer in self._observers:
			self._observers.remove(observer)

	def _notify(self, record: MutationRecord) -> None:
		for observer in list(self._observers):
			if observer._wants(record):
				observer._enqueue(record)

	def flush_mutations(self) -> None:
		"""Deliver queued records synchronously (for callers without a running loop)."""
		for observer in list(self._observers):
			observer._deliver()

	# Events

	def add_event_listener(self, node: ElementHandle, event_type: str, listener: EventListener) -> None:
		listeners = self._listeners.setdefault(id(node.tag), {}).setdefault(event_type, [])
		if listener not in listeners:
			listeners.append(listener)

	def remove_event_listener(self, node: ElementHandle, event_type: str, listener: EventListener) -> None:
		listeners = self._listeners.get(id(node.tag), {}).get(event_type, [])
		if listener in listeners:
			listeners.remove(listener)

	def listener_count(self, node: ElementHandle, event_type: str) -> int:
		return len(self._listeners.get(id(node.tag), {}).get(event_type, []))

	def dispatch_event(self, node: ElementHandle, event: DOMEvent) -> bool:
		"""Run listeners on the target, then on its ancestors if the event bubbles.

		Returns False if a listener cancelled the event.
		"""
		event.target = node
		path = [node]
		if event.bubbles:
			path.extend(node.iter_ancestors())
		for current in path:
			event.current_target = current
			for listener in list(self._listeners.get(id(current.tag), {}).get(event.type, [])):
				try:
					listener(event)
				except Exception as e:
					# Listener errors are reported and do not stop the dispatch, as in a browser
					logger.error(f'❌ Listener for {event.type!r} on {current!r} raised: {type(e).__name__}: {e}')
			if event.propagation_stopped:
				break
		event.current_target = None
		return not event.default_prevented

	def click(self, node: ElementHandle) -> None:
		"""Native activation: dispatch `click`, then run the element's default action."""
		if node.has_attribute('disabled'):
			return
		self.focus(node)

		input_type = (node.get_attribute('type') or '').lower()
		is_checkable = node.tag_name == 'input' and input_type in CHECKABLE_INPUT_TYPES
		previous = self.is_checked(node) if is_checkable else None
		if is_checkable:
			self.set_checked(node, True if input_type == 'radio' else not previous)

		if not self.dispatch_event(node, DOMEvent('click')):
			if is_checkable:
				self.set_checked(node, bool(previous))
			return

		if is_checkable and self.is_checked(node) != previous:
			self.dispatch_event(node, DOMEvent('input', cancelable=False))
			self.dispatch_event(node, DOMEvent('change', cancelable=False))
			return

		if self._is_submit_control(node):
			form = node.closest(lambda el: el.tag_name == 'form')
			if form is not None:
				self.submit(form, submitter=node)
			return

		anchor = node.closest(lambda el: el.tag_name == 'a' and el.has_attribute('href'))
		if anchor is not None:
			self.navigations.append(anchor.get_attribute('href') or '')

	@staticmethod
	def _is_submit_control(node: ElementHandle) -> bool:
		input_type = (node.get_attribute('type') or '').lower()
		if node.tag_name == 'button':
			return input_type in ('', 'submit')
		return node.tag_name == 'input' and input_type in SUBMIT_INPUT_TYPES

	def submit(self, form: ElementHandle, submitter: ElementHandle | None = None) -> bool:
		if not self.dispatch_event(form, DOMEvent('submit')):
			return False
		self.submissions.append(FormSubmission(form=form, data=self.form_data(form), submitter=submitter))
		return True

	def form_data(self, form: ElementHandle) -> dict[str, str]:
		data: dict[str, str] = {}
		for node in form.iter_descendants():
			name = node.get_attribute('name')
			if not name or node.tag_name not in ('input', 'select', 'textarea'):
				continue
			input_type = (node.get_attribute('type') or '').lower()
			if input_type in CHECKABLE_INPUT_TYPES and not self.is_checked(node):
				continue
			if input_type in ('submit', 'button', 'reset', 'image'):
				continue
			data[name] = self.get_value(node)
		return data

	def focus(self, node: ElementHandle) -> None:
		self.focused = node

	# User input simulation

	def type_text(self, node: ElementHandle, text: str, commit: bool = True) -> None:
		"""Replace the value as a user would, firing `input` (and `change` when committed)."""
		self.focus(node)
		self.set_value(node, text)
		self.dispatch_event(node, DOMEvent('input', cancelable=False))
		if commit:
			self.dispatch_event(node, DOMEvent('change', cancelable=False))

	def select_option(self, node: ElementHandle, value: str) -> None:
		self.set_value(node, value)
		self.dispatch_event(node, DOMEvent('input', cancelable=False))
		self.dispatch_event(node, DOMEvent('change', cancelable=False))

	# Live values

	def get_value(self, node: ElementHandle) -> str:
		key = id(node.tag)
		if key in self._values:
			return self._values[key]
		if node.tag_name == 'textarea':
			return node.text_content
		if node.tag_name == 'select':
			selected = self._default_selected_option(node)
			return self.option_value(selected) if selected is not None else ''
		if node.tag_name == 'input':
			input_type = (node.get_attribute('type') or '').lower()
			default = 'on' if input_type in CHECKABLE_INPUT_TYPES else ''
			return node.get_attribute('value') or default
		return node.get_attribute('value') or ''

	def set_value(self, node: ElementHandle, value: str) -> None:
		self._values[id(node.tag)] = '' if value is None else str(value)

	def is_checked(self, node: ElementHandle) -> bool:
		key = id(node.tag)
		if key in self._checked:
			return self._checked[key]
		return node.has_attribute('checked')

	def set_checked(self, node: ElementHandle, checked: bool) -> None:
		self._checked[id(node.tag)] = bool(checked)
		if checked and (node.get_attribute('type') or '').lower() == 'radio':
			for other in self._radio_group(node):
				if other is not node:
					self._checked[id(other.tag)] = False

	def _radio_group(self, node: ElementHandle) -> list[ElementHandle]:
		name = node.get_attribute('name')
		if not name:
			return [node]
		# A group is scoped to the owning form, radios outside any form group together
		form = node.closest(lambda el: el.tag_name == 'form')
		scope = form or self.document_element
		return [
			el
			for el in scope.iter_descendants()
			if el.tag_name == 'input'
			and (el.get_attribute('type') or '').lower() == 'radio'
			and el.get_attribute('name') == name
			and el.closest(lambda ancestor: ancestor.tag_name == 'form') is form
		]

	def options(self, select: ElementHandle) -> list[ElementHandle]:
		return [node for node in select.iter_descendants() if node.tag_name == 'option']

	@staticmethod
	def option_value(option: ElementHandle) -> str:
		value = option.get_attribute('value')
		return value if value is not None else option.text_content.strip()

	def _default_selected_option(self, select: ElementHandle) -> ElementHandle | None:
		options = self.options(select)
		for option in options:
			if option.has_attribute('selected'):
				return option
		return options[0] if options else None

	# Style sheets

	def add_style_sheet(self, key: str, css_text: str, hidden_classes: frozenset[str] = frozenset()) -> bool:
		"""Insert `<style id=key>` once. Returns False if it is already present."""
		if key in self._style_sheets and self.get_element_by_id(key) is not None:
			return False
		style = self.create_element('style', {'id': key, OWNED_ATTRIBUTE: 'true'}, text=css_text)
		self.append_child(self.head, style)
		self._style_sheets[key] = frozenset(hidden_classes)
		return True

	def remove_style_sheet(self, key: str) -> bool:
		if key not in self._style_sheets:
			return False
		del self._style_sheets[key]
		style = self.get_element_by_id(key)
		if style is not None:
			self.remove_node(style)
		return True

	def has_style_sheet(self, key: str) -> bool:
		return key in self._style_sheets

	@property
	def hidden_classes(self) -> frozenset[str]:
		"""Classes that the injected style sheets render as `display: none`."""
		hidden: set[str] = set()
		for classes in self._style_sheets.values():
			hidden.update(classes)
		return frozenset(hidden)

	# Page lifecycle

	def reload(self) -> None:
		"""Restore the document as originally loaded and clear every page-view state."""
		for observer in list(self._observers):
			observer.disconnect()
		self.reload_count += 1
		self._load(self._original_html)
		logger.info(f'🔄 Page reloaded: {self.url}')

	def to_html(self) -> str:
		return str(self.soup)

