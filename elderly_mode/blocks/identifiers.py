# @file purpose: Heuristic block identifiers, one independent predicate pass per block kind
"""
Block identification for pages with no schema.

Each `identify_*` function scans the page and returns candidate blocks of one kind.
They only read the tree: `identify_blocks` runs all of them against the same
snapshot before anything is hidden or materialized, so no identifier ever sees
another identifier's effects.
"""

import logging
from collections.abc import Callable

from elderly_mode.blocks.views import Block, BlockKind, BlockMetadata, PageCounts
from elderly_mode.dom.interactive import InteractiveElementDetector
from elderly_mode.dom.page import LivePage
from elderly_mode.dom.utils import (
	has_ancestor,
	identifying_text,
	identifying_tokens,
	is_engine_owned,
	is_visible,
	outermost,
)
from elderly_mode.dom.views import ElementHandle
from elderly_mode.utils import time_execution_sync

logger = logging.getLogger(__name__)

SEARCH_TOKEN = 'search'
FORM_TOKENS = ('form-', '-form')
ACTION_GROUP_TOKENS = ('button', 'btn', 'action', 'controls')
SIDEBAR_TOKEN = 'sidebar'
AD_TOKENS_EXACT = {'ad', 'ads', 'adsbygoogle', 'advert'}
AD_SUBSTRINGS = ('advertisement', 'sponsored')
AD_SLOT_ATTRIBUTES = ('data-ad-slot', 'data-ad-type', 'data-ad', 'data-ad-unit', 'data-google-query-id')
CONTENT_TAGS = {'article', 'main'}
CONTENT_ROLES = {'main', 'article'}
# Controls and void elements are never block containers
NON_CONTAINER_TAGS = {'input', 'button', 'select', 'textarea', 'option', 'img', 'a', 'label', 'br', 'hr'}


def _role(node: ElementHandle) -> str:
	return (node.get_attribute('role') or '').lower()


def _is_explicit_form(node: ElementHandle) -> bool:
	return node.tag_name == 'form'


def _candidates(page: LivePage, predicate: Callable[[ElementHandle], bool]) -> list[ElementHandle]:
	"""Visible, foreign elements of the body satisfying `predicate`, in document order."""
	return [
		node
		for node in page.body.iter_descendants()
		if predicate(node) and not is_engine_owned(node) and is_visible(node)
	]


# Forms


def _has_form_token(node: ElementHandle) -> bool:
	text = identifying_text(node)
	if any(token in text for token in FORM_TOKENS):
		return True
	return 'form' in identifying_tokens(node)


def _is_implicit_form_candidate(node: ElementHandle) -> bool:
	if node.tag_name in NON_CONTAINER_TAGS or _is_explicit_form(node):
		return False
	if not _has_form_token(node):
		return False
	if has_ancestor(node, _is_explicit_form):
		return False
	descendants = list(node.iter_descendants())
	if any(_is_explicit_form(descendant) for descendant in descendants):
		return False
	return any(InteractiveElementDetector.is_editable_input(descendant) for descendant in descendants)


def _is_search_input(node: ElementHandle, labels: dict[str, str]) -> bool:
	if node.tag_name not in ('input', 'textarea'):
		return False
	if node.tag_name == 'input' and (node.get_attribute('type') or 'text').lower() in ('hidden', 'submit', 'button', 'reset', 'image'):
		return False
	if _role(node) == 'searchbox':
		return True
	hints = [node.get_attribute(name) or '' for name in ('type', 'name', 'placeholder', 'id', 'aria-label')]
	hints.append(_label_text(node, labels))
	return any(SEARCH_TOKEN in hint.lower() for hint in hints)


def label_index(page: LivePage) -> dict[str, str]:
	"""Text of the first `label[for]` per target id, built once per identification pass."""
	labels: dict[str, str] = {}
	for node in page.body.iter_descendants():
		target = node.get_attribute('for') if node.tag_name == 'label' else None
		if target:
			labels.setdefault(target, node.text_content)
	return labels


def _label_text(node: ElementHandle, labels: dict[str, str]) -> str:
	if node.id and node.id in labels:
		return labels[node.id]
	enclosing = node.closest(lambda el: el.tag_name == 'label', include_self=False)
	return enclosing.text_content if enclosing is not None else ''


def form_metadata(form: ElementHandle, labels: dict[str, str] | None = None) -> BlockMetadata:
	if labels is None:
		labels = label_index(form.page)
	descendants = list(form.iter_descendants())
	editable = [node for node in descendants if InteractiveElementDetector.is_editable_input(node)]
	has_password = any(InteractiveElementDetector.is_password_input(node) for node in descendants)
	has_username = any(InteractiveElementDetector.is_username_input(node) for node in descendants)
	return BlockMetadata(
		has_login=has_password and has_username,
		has_search=any(_is_search_input(node, labels) for node in descendants),
		input_count=len(editable),
	)


def identify_forms(page: LivePage, labels: dict[str, str] | None = None) -> list[Block]:
	"""Explicit `<form>` elements plus outermost implicit form containers, visible only."""
	if labels is None:
		labels = label_index(page)
	implicit_ids = {id(node) for node in outermost(_candidates(page, _is_implicit_form_candidate))}
	forms = _candidates(page, lambda el: _is_explicit_form(el) or id(el) in implicit_ids)
	return [Block.create(node, BlockKind.FORM, form_metadata(node, labels)) for node in forms]


# Search


def _search_container(input_node: ElementHandle) -> ElementHandle | None:
	def is_search_container(el: ElementHandle) -> bool:
		return el.tag_name not in NON_CONTAINER_TAGS and (SEARCH_TOKEN in identifying_text(el) or _role(el) == 'search')

	container = input_node.closest(is_search_container, include_self=False)
	if container is not None and container.tag_name not in ('body', 'html'):
		return container

	parent = input_node.parent
	if parent is None or parent.tag_name in ('body', 'html'):
		return None
	if any(InteractiveElementDetector.is_button_like(sibling) for sibling in parent.iter_descendants()):
		return parent
	return None


def identify_search(page: LivePage, forms: list[Block] | None = None, labels: dict[str, str] | None = None) -> list[Block]:
	"""Search bars: search-like inputs grouped by container, minus those absorbed by a form."""
	if labels is None:
		labels = label_index(page)
	if forms is None:
		forms = identify_forms(page, labels)
	form_nodes = [block.node for block in forms]

	containers: list[ElementHandle] = []
	for input_node in _candidates(page, lambda el: _is_search_input(el, labels)):
		container = _search_container(input_node)
		if container is None:
			continue
		if any(container is seen for seen in containers):
			continue
		if has_ancestor(container, _is_explicit_form) or any(form.contains(container) for form in form_nodes):
			continue
		containers.append(container)
	return [Block.create(node, BlockKind.SEARCH) for node in containers]


# Navigation, sidebar, content


def count_links(node: ElementHandle) -> int:
	return sum(1 for el in node.iter_descendants() if el.tag_name == 'a' and el.has_attribute('href'))


def identify_navigation(page: LivePage) -> list[Block]:
	nodes = _candidates(page, lambda el: el.tag_name == 'nav' or _role(el) == 'navigation')
	return [Block.create(node, BlockKind.NAVIGATION) for node in outermost(nodes)]


def _is_sidebar(node: ElementHandle) -> bool:
	if node.tag_name == 'aside' or _role(node) == 'complementary':
		return True
	return node.tag_name not in NON_CONTAINER_TAGS and SIDEBAR_TOKEN in identifying_text(node)


def identify_sidebars(page: LivePage) -> list[Block]:
	return [Block.create(node, BlockKind.SIDEBAR) for node in outermost(_candidates(page, _is_sidebar))]


def _is_content(node: ElementHandle) -> bool:
	return node.tag_name in CONTENT_TAGS or _role(node) in CONTENT_ROLES


def identify_content(page: LivePage) -> list[Block]:
	"""Reading regions. Non-atomic: blocks found inside them are handled on their own."""
	return [Block.create(node, BlockKind.CONTENT) for node in outermost(_candidates(page, _is_content))]


# Action groups and ads


def _is_action_group(node: ElementHandle) -> bool:
	if node.tag_name in NON_CONTAINER_TAGS or _is_explicit_form(node):
		return False
	if InteractiveElementDetector.is_button_like(node):
		return False
	text = identifying_text(node)
	if not any(token in text for token in ACTION_GROUP_TOKENS):
		return False
	buttons = [el for el in node.iter_descendants() if InteractiveElementDetector.is_button_like(el) and is_visible(el)]
	return len(buttons) >= 2


def identify_action_groups(page: LivePage) -> list[Block]:
	return [Block.create(node, BlockKind.ACTION) for node in _candidates(page, _is_action_group)]


def _is_ad(node: ElementHandle) -> bool:
	if node.tag_name in NON_CONTAINER_TAGS or node.tag_name in ('body', 'html'):
		return False
	if any(node.has_attribute(name) for name in AD_SLOT_ATTRIBUTES):
		return True
	for token in identifying_tokens(node):
		if token in AD_TOKENS_EXACT or token.startswith('ad-') or '-ad-' in token or token.endswith('-ad'):
			return True
		if any(substring in token for substring in AD_SUBSTRINGS):
			return True
	return False


def identify_ads(page: LivePage) -> list[Block]:
	return [Block.create(node, BlockKind.AD) for node in outermost(_candidates(page, _is_ad))]


# Whole pass


@time_execution_sync('--identify_blocks')
def identify_blocks(page: LivePage) -> list[Block]:
	"""Run every identifier against the current (unmodified) tree."""
	labels = label_index(page)
	forms = identify_forms(page, labels)
	blocks = [
		*forms,
		*identify_search(page, forms, labels),
		*identify_navigation(page),
		*identify_sidebars(page),
		*identify_content(page),
		*identify_action_groups(page),
		*identify_ads(page),
	]
	logger.debug(f'🧩 Identified {len(blocks)} candidate blocks: {[block.kind.value for block in blocks]}')
	return blocks


def count_page_structure(page: LivePage) -> PageCounts:
	"""Global form / content-container counts for the layout strategy."""
	forms = _candidates(page, _is_explicit_form)
	implicit = outermost(_candidates(page, _is_implicit_form_candidate))
	content = _candidates(page, _is_content)
	return PageCounts(form_count=len(forms) + len(implicit), content_count=len(content))
