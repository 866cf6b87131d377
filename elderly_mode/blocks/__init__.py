from elderly_mode.blocks.classifier import classify_block, classify_blocks
from elderly_mode.blocks.deduplicator import deduplicate_blocks
from elderly_mode.blocks.identifiers import count_page_structure, identify_blocks
from elderly_mode.blocks.views import Block, BlockKind, BlockMetadata, PageCounts, Zone, ZoneAssignment

__all__ = [
	'Block',
	'BlockKind',
	'BlockMetadata',
	'PageCounts',
	'Zone',
	'ZoneAssignment',
	'classify_block',
	'classify_blocks',
	'count_page_structure',
	'deduplicate_blocks',
	'identify_blocks',
]
