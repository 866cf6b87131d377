from elderly_mode.dom.utils import is_engine_owned, is_marked, is_visible
from elderly_mode.dom.views import ElementHandle

INPUT_LIKE_TAGS = {'input', 'select', 'textarea'}
BUTTON_INPUT_TYPES = {'submit', 'button', 'reset', 'image'}
NON_EDITABLE_INPUT_TYPES = {'hidden'} | BUTTON_INPUT_TYPES
# Tags the live-tree watcher reacts to when they are inserted
WATCHED_TAGS = {'input', 'button', 'select', 'textarea'}

PROXY_CLASS = 'elderly-proxy-element'
CONTROL_PANEL_CLASS = 'elderly-control-panel'


class InteractiveElementDetector:
	@staticmethod
	def _input_type(node: ElementHandle) -> str:
		return (node.get_attribute('type') or 'text').lower()

	@staticmethod
	def is_input_like(node: ElementHandle) -> bool:
		"""Form controls that carry a value (inputs of any type, select, textarea)."""
		return node.tag_name in INPUT_LIKE_TAGS

	@staticmethod
	def is_editable_input(node: ElementHandle) -> bool:
		"""Input-like controls a user fills in (no hidden fields, no push buttons)."""
		if node.tag_name in ('select', 'textarea'):
			return True
		return node.tag_name == 'input' and InteractiveElementDetector._input_type(node) not in NON_EDITABLE_INPUT_TYPES

	@staticmethod
	def is_button_like(node: ElementHandle) -> bool:
		if node.tag_name == 'button':
			return True
		if node.tag_name == 'input' and InteractiveElementDetector._input_type(node) in BUTTON_INPUT_TYPES:
			return True
		return (node.get_attribute('role') or '').lower() == 'button'

	@staticmethod
	def is_password_input(node: ElementHandle) -> bool:
		return node.tag_name == 'input' and InteractiveElementDetector._input_type(node) == 'password'

	@staticmethod
	def is_username_input(node: ElementHandle) -> bool:
		"""Username / e-mail style inputs, the other half of a login form."""
		if node.tag_name != 'input':
			return False
		input_type = InteractiveElementDetector._input_type(node)
		if input_type == 'email':
			return True
		if input_type not in ('text', 'tel'):
			return False
		hints = ' '.join(
			(node.get_attribute(name) or '') for name in ('name', 'id', 'autocomplete', 'placeholder', 'aria-label')
		).lower()
		return any(token in hints for token in ('user', 'email', 'e-mail', 'login', 'account'))

	@staticmethod
	def _has_event_handlers_or_interactive_attributes(node: ElementHandle) -> bool:
		if node.has_attribute('onclick'):
			return True
		return (node.get_attribute('role') or '').lower() == 'button'

	@staticmethod
	def is_interactive(node: ElementHandle) -> bool:
		"""Check if this node is a control that gets a mirror in the action area."""
		if node.tag_name in {'html', 'body'}:
			return False
		if node.has_class(CONTROL_PANEL_CLASS) or node.has_class(PROXY_CLASS):
			return False

		if node.tag_name == 'input':
			return InteractiveElementDetector._input_type(node) != 'hidden'
		if node.tag_name in {'button', 'select', 'textarea'}:
			return True
		if node.tag_name == 'a':
			return node.has_attribute('href')

		return InteractiveElementDetector._has_event_handlers_or_interactive_attributes(node)

	@staticmethod
	def is_watch_candidate(node: ElementHandle) -> bool:
		"""Inserted node the live-tree watcher should react to."""
		if node.tag_name not in WATCHED_TAGS:
			return False
		if node.has_class(PROXY_CLASS) or is_marked(node):
			return False
		return not is_engine_owned(node)

	@staticmethod
	def collect_interactive(root: ElementHandle, include_root: bool = True) -> list[ElementHandle]:
		"""Unbound, visible interactive nodes under `root`, in document order."""
		nodes = [root] if include_root else []
		nodes.extend(root.iter_descendants())
		return [
			node
			for node in nodes
			if InteractiveElementDetector.is_interactive(node)
			and not is_marked(node)
			and not is_engine_owned(node)
			and is_visible(node)
		]
