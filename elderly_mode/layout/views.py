import asyncio
import logging
from dataclasses import dataclass, field

from elderly_mode.dom.views import MARKER_ATTRIBUTE, ElementHandle, EventListener
from elderly_mode.layout.styles import ORIGINAL_CLASS

logger = logging.getLogger(__name__)

VALUE_TAGS = {'input', 'textarea', 'select'}
CHECKABLE_TYPES = {'checkbox', 'radio'}


@dataclass(eq=False)
class ProxyBinding:
	"""
	One original control paired with its mirror in the action area.

	Holds the mirror→original listeners and the original→mirror poll task so both
	can be released on teardown. The marker on the original is the only engine
	state that lives on the foreign node.
	"""

	original: ElementHandle
	mirror: ElementHandle
	index: int
	item: ElementHandle | None = None  # .elderly-action-item wrapping the mirror
	listeners: list[tuple[ElementHandle, str, EventListener]] = field(default_factory=list)
	poll_task: asyncio.Task | None = None
	saved_attributes: dict[str, str | None] = field(default_factory=dict)

	def __repr__(self) -> str:
		return f'ProxyBinding(#{self.index}, {self.original!r} -> {self.mirror!r})'

	@property
	def is_live(self) -> bool:
		return self.original.is_connected and self.mirror.is_connected

	@property
	def syncs_value(self) -> bool:
		return self.original.tag_name in VALUE_TAGS and self.mirror.tag_name in VALUE_TAGS

	@property
	def is_checkable(self) -> bool:
		return self.original.tag_name == 'input' and (self.original.get_attribute('type') or '').lower() in CHECKABLE_TYPES

	def listen(self, node: ElementHandle, event_type: str, listener: EventListener) -> None:
		node.add_event_listener(event_type, listener)
		self.listeners.append((node, event_type, listener))

	def refresh_mirror(self) -> bool:
		"""Push the original's current value into the mirror. Returns True if anything changed."""
		if not self.syncs_value:
			return False
		changed = False
		if self.is_checkable:
			if self.mirror.checked != self.original.checked:
				self.mirror.checked = self.original.checked
				changed = True
		elif self.mirror.value != self.original.value:
			self.mirror.value = self.original.value
			changed = True
		return changed

	def start_polling(self, interval: float) -> None:
		if self.poll_task is not None or not self.syncs_value:
			return
		try:
			loop = asyncio.get_running_loop()
		except RuntimeError:
			logger.debug(f'⏸️ No running loop, original→mirror polling disabled for {self!r}')
			return
		self.poll_task = loop.create_task(self._poll(interval))

	async def _poll(self, interval: float) -> None:
		while self.is_live:
			self.refresh_mirror()
			await asyncio.sleep(interval)
		logger.debug(f'⏹️ Stopped polling {self!r}, node detached')

	def unbind(self) -> None:
		"""Drop listeners and the poll task. The caller restores the original's attributes."""
		for node, event_type, listener in self.listeners:
			node.remove_event_listener(event_type, listener)
		self.listeners = []
		if self.poll_task is not None and not self.poll_task.done():
			self.poll_task.cancel()
		self.poll_task = None


class BindingRegistry:
	"""Index-addressed shadow registry of every binding made during one activation."""

	def __init__(self):
		self._bindings: dict[int, ProxyBinding] = {}

	def __len__(self) -> int:
		return len(self._bindings)

	def __iter__(self):
		return iter(list(self._bindings.values()))

	def register(self, binding: ProxyBinding) -> None:
		if binding.index in self._bindings:
			raise ValueError(f'Binding index {binding.index} is already registered')
		self._bindings[binding.index] = binding

	def get(self, index: int) -> ProxyBinding | None:
		return self._bindings.get(index)

	def for_original(self, node: ElementHandle) -> ProxyBinding | None:
		for binding in self._bindings.values():
			if binding.original is node:
				return binding
		return None

	@property
	def max_index(self) -> int:
		return max(self._bindings, default=0)

	def clear(self) -> list[ProxyBinding]:
		bindings = list(self._bindings.values())
		self._bindings = {}
		return bindings


# Attributes the engine overwrites on a hidden original, restored on teardown
HIDING_ATTRIBUTES = ('aria-hidden', 'tabindex')


def hide_original(node: ElementHandle, marker: str | None = None) -> dict[str, str | None]:
	"""Visually suppress an original without removing it. Returns what teardown needs to undo it."""
	saved: dict[str, str | None] = {name: node.get_attribute(name) for name in HIDING_ATTRIBUTES}
	saved['class'] = None if node.has_class(ORIGINAL_CLASS) else ORIGINAL_CLASS
	node.add_class(ORIGINAL_CLASS)
	node.set_attribute('aria-hidden', 'true')
	node.set_attribute('tabindex', '-1')
	if marker is not None:
		node.set_attribute(MARKER_ATTRIBUTE, marker)
	return saved


def restore_original(node: ElementHandle, saved: dict[str, str | None]) -> None:
	node.remove_attribute(MARKER_ATTRIBUTE)
	added_class = saved.get('class')
	if added_class:
		node.remove_class(added_class)
	for name in HIDING_ATTRIBUTES:
		previous = saved.get(name)
		if previous is None:
			node.remove_attribute(name)
		else:
			node.set_attribute(name, previous)
