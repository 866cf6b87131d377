import logging

from elderly_mode.blocks.views import Block, BlockKind
from elderly_mode.dom.utils import normalize_text

logger = logging.getLogger(__name__)


def deduplicate_blocks(blocks: list[Block]) -> list[Block]:
	"""
	Suppress candidate blocks that stand for the same functional unit.

	- Only one search bar per pass: the first Search block wins.
	- A Form holding a search field takes that single search slot, and is
	  dropped when the slot is already taken.
	- Action groups with the same normalized text collapse to the first one.

	Everything else passes through. Input order is preserved.
	"""
	result: list[Block] = []
	search_slot_taken = False
	seen_action_texts: set[str] = set()

	for block in blocks:
		if block.kind is BlockKind.SEARCH:
			if search_slot_taken:
				logger.debug(f'🧹 Dropping duplicate search block {block!r}')
				continue
			search_slot_taken = True

		elif block.kind is BlockKind.FORM and block.metadata is not None and block.metadata.has_search:
			if search_slot_taken:
				logger.debug(f'🧹 Dropping search form {block!r}, a search bar is already kept')
				continue
			search_slot_taken = True

		elif block.kind is BlockKind.ACTION:
			text = normalize_text(block.node.text_content)
			if text in seen_action_texts:
				logger.debug(f'🧹 Dropping duplicate action group {block!r} ({text[:40]!r})')
				continue
			seen_action_texts.add(text)

		result.append(block)

	if len(result) != len(blocks):
		logger.debug(f'🧹 Deduplicated {len(blocks)} blocks down to {len(result)}')
	return result
