from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from bs4 import Tag

if TYPE_CHECKING:
	from elderly_mode.dom.page import LivePage

ElementPredicate = Callable[['ElementHandle'], bool]
EventListener = Callable[['DOMEvent'], Any]

# Marker attribute stamped on every original node that has a mirror in the action area
MARKER_ATTRIBUTE = 'data-elderly-ref'
MARKER_PREFIX = 'elderly-ref-'
# Stamped on the root of every node tree the engine creates
OWNED_ATTRIBUTE = 'data-elderly-owned'


class ElementHandle:
	"""
	Identity-stable reference to one element of a LivePage.

	Handles are created and cached by the page, so two lookups of the same element
	return the same handle and `is` / `==` compare node identity, never structure.
	Every structural or attribute write goes through the page so mutation observers see it.
	"""

	def __init__(self, page: 'LivePage', tag: Tag):
		self.page = page
		self.tag = tag

	def __repr__(self) -> str:
		ident = f'#{self.id}' if self.id else ''
		classes = ''.join(f'.{name}' for name in self.class_names)
		return f'<{self.tag_name}{ident}{classes}>'

	# Attributes

	@property
	def tag_name(self) -> str:
		return (self.tag.name or '').lower()

	@property
	def attributes(self) -> dict[str, str]:
		return {name: self.get_attribute(name) or '' for name in self.tag.attrs}

	def get_attribute(self, name: str) -> str | None:
		value = self.tag.attrs.get(name)
		if value is None:
			return None
		if isinstance(value, list):
			return ' '.join(value)
		return str(value)

	def has_attribute(self, name: str) -> bool:
		return name in self.tag.attrs

	def set_attribute(self, name: str, value: str) -> None:
		self.page.set_attribute(self, name, value)

	def remove_attribute(self, name: str) -> None:
		self.page.remove_attribute(self, name)

	@property
	def id(self) -> str:
		return self.get_attribute('id') or ''

	@property
	def class_names(self) -> list[str]:
		return (self.get_attribute('class') or '').split()

	def has_class(self, name: str) -> bool:
		return name in self.class_names

	def add_class(self, *names: str) -> None:
		classes = self.class_names
		missing = [name for name in names if name not in classes]
		if missing:
			self.page.set_attribute(self, 'class', ' '.join(classes + missing))

	def remove_class(self, *names: str) -> None:
		classes = self.class_names
		remaining = [name for name in classes if name not in names]
		if len(remaining) == len(classes):
			return
		if remaining:
			self.page.set_attribute(self, 'class', ' '.join(remaining))
		else:
			self.page.remove_attribute(self, 'class')

	@property
	def text_content(self) -> str:
		return self.tag.get_text()

	# Tree navigation

	@property
	def parent(self) -> 'ElementHandle | None':
		parent = self.tag.parent
		if parent is None or parent is self.page.soup or not isinstance(parent, Tag):
			return None
		return self.page.handle(parent)

	@property
	def children(self) -> list['ElementHandle']:
		return [self.page.handle(child) for child in self.tag.children if isinstance(child, Tag)]

	def iter_ancestors(self) -> Iterator['ElementHandle']:
		node = self.parent
		while node is not None:
			yield node
			node = node.parent

	def iter_descendants(self) -> Iterator['ElementHandle']:
		"""Descendant elements in document order (the node itself excluded)."""
		for descendant in self.tag.descendants:
			if isinstance(descendant, Tag):
				yield self.page.handle(descendant)

	def closest(self, predicate: ElementPredicate, include_self: bool = True) -> 'ElementHandle | None':
		if include_self and predicate(self):
			return self
		for ancestor in self.iter_ancestors():
			if predicate(ancestor):
				return ancestor
		return None

	def query_all(self, selector: str) -> list['ElementHandle']:
		"""CSS query over descendants. Raises soupsieve.SelectorSyntaxError on malformed selectors."""
		return self.page.query_selector_all(selector, root=self)

	def query(self, selector: str) -> 'ElementHandle | None':
		results = self.query_all(selector)
		return results[0] if results else None

	def matches(self, selector: str) -> bool:
		return self.page.matches(self, selector)

	def contains(self, other: 'ElementHandle') -> bool:
		"""True if `other` is this node or one of its descendants."""
		if other is self:
			return True
		return any(ancestor is self for ancestor in other.iter_ancestors())

	@property
	def is_connected(self) -> bool:
		return self.page.contains(self)

	# Live properties

	@property
	def value(self) -> str:
		return self.page.get_value(self)

	@value.setter
	def value(self, value: str) -> None:
		self.page.set_value(self, value)

	@property
	def checked(self) -> bool:
		return self.page.is_checked(self)

	@checked.setter
	def checked(self, checked: bool) -> None:
		self.page.set_checked(self, checked)

	# Behaviour

	def click(self) -> None:
		self.page.click(self)

	def add_event_listener(self, event_type: str, listener: EventListener) -> None:
		self.page.add_event_listener(self, event_type, listener)

	def remove_event_listener(self, event_type: str, listener: EventListener) -> None:
		self.page.remove_event_listener(self, event_type, listener)

	def dispatch_event(self, event: 'DOMEvent') -> bool:
		return self.page.dispatch_event(self, event)


@dataclass(eq=False)
class DOMEvent:
	"""A notification dispatched through the page's listener registry."""

	type: str
	bubbles: bool = True
	cancelable: bool = True
	target: ElementHandle | None = None
	current_target: ElementHandle | None = None
	default_prevented: bool = False
	propagation_stopped: bool = False
	detail: dict[str, Any] = field(default_factory=dict)

	def prevent_default(self) -> None:
		if self.cancelable:
			self.default_prevented = True

	def stop_propagation(self) -> None:
		self.propagation_stopped = True


@dataclass
class MutationRecord:
	"""One structural or attribute change, delivered in batches to MutationObservers."""

	type: str  # 'childList' or 'attributes'
	target: ElementHandle
	added_nodes: list[ElementHandle] = field(default_factory=list)
	removed_nodes: list[ElementHandle] = field(default_factory=list)
	attribute_name: str | None = None


@dataclass
class FormSubmission:
	form: ElementHandle
	data: dict[str, str]
	submitter: ElementHandle | None = None
