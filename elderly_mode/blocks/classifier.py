import logging

from elderly_mode.blocks.identifiers import count_links
from elderly_mode.blocks.views import Block, BlockKind, Zone, ZoneAssignment

logger = logging.getLogger(__name__)

# Forms with more fields than this are primary content (surveys, applications)
MAX_RELOCATED_FORM_INPUTS = 5
# Denser menus stay where the author put them
MAX_RELOCATED_NAV_LINKS = 10


def classify_block(block: Block, relocate_navigation: bool = True) -> Zone:
	"""Destination zone of one block, by its kind and metadata."""
	match block.kind:
		case BlockKind.FORM:
			metadata = block.metadata
			if metadata is not None and (metadata.has_login or metadata.input_count <= MAX_RELOCATED_FORM_INPUTS):
				return Zone.ACTION
			return Zone.KEEP_IN_PLACE
		case BlockKind.SEARCH | BlockKind.ACTION:
			return Zone.ACTION
		case BlockKind.CONTENT:
			return Zone.CONTENT
		case BlockKind.NAVIGATION:
			if relocate_navigation and count_links(block.node) <= MAX_RELOCATED_NAV_LINKS:
				return Zone.ACTION
			return Zone.KEEP_IN_PLACE
		case BlockKind.SIDEBAR | BlockKind.AD:
			return Zone.REMOVE
		case _:
			return Zone.KEEP_IN_PLACE


def classify_blocks(blocks: list[Block], relocate_navigation: bool = True) -> ZoneAssignment:
	"""Partition blocks into the four zones. Every block lands in exactly one."""
	zones = ZoneAssignment()
	for block in blocks:
		zones.assign(block, classify_block(block, relocate_navigation=relocate_navigation))
	logger.debug(f'🗂️ Zone assignment: {zones.summary()}')
	return zones
