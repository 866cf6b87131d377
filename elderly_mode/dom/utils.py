import logging
import re
from collections.abc import Iterable

from soupsieve import SelectorSyntaxError

from elderly_mode.dom.views import MARKER_ATTRIBUTE, MARKER_PREFIX, OWNED_ATTRIBUTE, ElementHandle

logger = logging.getLogger(__name__)

_HIDDEN_STYLE_RE = re.compile(r'(display\s*:\s*none|visibility\s*:\s*hidden)', re.IGNORECASE)
_WHITESPACE_RE = re.compile(r'\s+')

# Elements that never render, whatever their content
NON_RENDERED_TAGS = {'head', 'script', 'style', 'template', 'noscript', 'meta', 'link', 'title'}


def has_hiding_inline_style(node: ElementHandle) -> bool:
	style = node.get_attribute('style')
	return bool(style and _HIDDEN_STYLE_RE.search(style))


def is_visible(node: ElementHandle) -> bool:
	"""
	Check if a node is currently rendered.

	A node is hidden when it is detached, is an `<input type=hidden>`, or when it or
	any ancestor is non-rendered, carries the `hidden` attribute, an inline
	`display:none` / `visibility:hidden`, or a class hidden by an injected style sheet.
	"""
	if not node.is_connected:
		return False
	if node.tag_name == 'input' and (node.get_attribute('type') or '').lower() == 'hidden':
		return False

	hidden_classes = node.page.hidden_classes
	current: ElementHandle | None = node
	while current is not None:
		if current.tag_name in NON_RENDERED_TAGS:
			return False
		if current.has_attribute('hidden') or has_hiding_inline_style(current):
			return False
		if hidden_classes and hidden_classes.intersection(current.class_names):
			return False
		current = current.parent
	return True


def identifying_text(node: ElementHandle) -> str:
	"""Lower-cased `id` and `class` values, the attributes page authors name things with."""
	return f'{node.id} {node.get_attribute("class") or ""}'.strip().lower()


def identifying_tokens(node: ElementHandle) -> list[str]:
	return identifying_text(node).split()


def normalize_text(text: str) -> str:
	return _WHITESPACE_RE.sub(' ', text).strip()


def has_ancestor(node: ElementHandle, predicate) -> bool:
	"""True if a strict ancestor of `node` satisfies `predicate`."""
	return node.closest(predicate, include_self=False) is not None


def outermost(nodes: Iterable[ElementHandle]) -> list[ElementHandle]:
	"""Drop nodes contained in another node of the same collection, keeping document order."""
	candidates = list(nodes)
	candidate_ids = {id(node) for node in candidates}
	return [node for node in candidates if not any(id(ancestor) in candidate_ids for ancestor in node.iter_ancestors())]


def safe_select(root: ElementHandle, selector: str) -> list[ElementHandle]:
	"""CSS query that skips (and logs) a malformed selector instead of raising."""
	try:
		return root.query_all(selector)
	except SelectorSyntaxError as e:
		logger.warning(f'⚠️ Invalid selector skipped: {selector!r} ({e.__class__.__name__})')
		return []


def safe_matches(node: ElementHandle, selector: str) -> bool:
	try:
		return node.matches(selector)
	except SelectorSyntaxError as e:
		logger.warning(f'⚠️ Invalid selector skipped: {selector!r} ({e.__class__.__name__})')
		return False


def is_engine_owned(node: ElementHandle) -> bool:
	"""True for nodes inside a tree the engine created (action area, panel, banners, styles)."""
	return node.closest(lambda el: el.has_attribute(OWNED_ATTRIBUTE)) is not None


def marker_for(index: int) -> str:
	return f'{MARKER_PREFIX}{index}'


def marker_index(node: ElementHandle) -> int | None:
	"""Index carried by the node's marker attribute, or None if the node is not bound."""
	marker = node.get_attribute(MARKER_ATTRIBUTE)
	if not marker or not marker.startswith(MARKER_PREFIX):
		return None
	try:
		return int(marker[len(MARKER_PREFIX) :])
	except ValueError:
		return None


def is_marked(node: ElementHandle) -> bool:
	return node.has_attribute(MARKER_ATTRIBUTE)


def max_marker_index(root: ElementHandle) -> int:
	"""Highest marker index found under `root` (0 when nothing is marked)."""
	highest = 0
	for node in root.iter_descendants():
		index = marker_index(node)
		if index is not None and index > highest:
			highest = index
	return highest
