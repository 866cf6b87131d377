from dataclasses import dataclass, field
from enum import Enum

from elderly_mode.dom.views import ElementHandle


class BlockKind(str, Enum):
	FORM = 'form'
	SEARCH = 'search'
	ACTION = 'action'
	CONTENT = 'content'
	SIDEBAR = 'sidebar'
	AD = 'ad'
	NAVIGATION = 'navigation'
	MIXED = 'mixed'
	UNKNOWN = 'unknown'


# Tie-break / documentation signal only, output order is document order
BLOCK_PRIORITIES: dict[BlockKind, int] = {
	BlockKind.FORM: 100,
	BlockKind.CONTENT: 95,
	BlockKind.SEARCH: 90,
	BlockKind.ACTION: 85,
	BlockKind.NAVIGATION: 80,
	BlockKind.MIXED: 50,
	BlockKind.SIDEBAR: 20,
	BlockKind.UNKNOWN: 10,
	BlockKind.AD: 0,
}


class Zone(str, Enum):
	CONTENT = 'content'
	ACTION = 'action'
	REMOVE = 'remove'
	KEEP_IN_PLACE = 'keep_in_place'


@dataclass(frozen=True)
class BlockMetadata:
	"""Form-only facts the classifier and deduplicator decide on."""

	has_login: bool = False
	has_search: bool = False
	input_count: int = 0


@dataclass(frozen=True, eq=False)
class Block:
	"""A detected functional unit of the page. Compared by identity."""

	node: ElementHandle
	kind: BlockKind
	priority: int
	atomic: bool
	metadata: BlockMetadata | None = None

	@classmethod
	def create(cls, node: ElementHandle, kind: BlockKind, metadata: BlockMetadata | None = None) -> 'Block':
		return cls(
			node=node,
			kind=kind,
			priority=BLOCK_PRIORITIES[kind],
			atomic=kind is not BlockKind.CONTENT,
			metadata=metadata,
		)

	def __repr__(self) -> str:
		return f'Block({self.kind.value}, {self.node!r})'


@dataclass
class ZoneAssignment:
	"""Partition of the surviving blocks into the four destinations."""

	content_zone: list[Block] = field(default_factory=list)
	action_zone: list[Block] = field(default_factory=list)
	remove_zone: list[Block] = field(default_factory=list)
	keep_in_place: list[Block] = field(default_factory=list)

	def zone(self, zone: Zone) -> list[Block]:
		return {
			Zone.CONTENT: self.content_zone,
			Zone.ACTION: self.action_zone,
			Zone.REMOVE: self.remove_zone,
			Zone.KEEP_IN_PLACE: self.keep_in_place,
		}[zone]

	def assign(self, block: Block, zone: Zone) -> None:
		self.zone(zone).append(block)

	def zone_of(self, block: Block) -> Zone | None:
		for zone in Zone:
			if any(member is block for member in self.zone(zone)):
				return zone
		return None

	def all_blocks(self) -> list[Block]:
		return [*self.content_zone, *self.action_zone, *self.remove_zone, *self.keep_in_place]

	def summary(self) -> dict[str, int]:
		return {zone.value: len(self.zone(zone)) for zone in Zone}


@dataclass(frozen=True)
class PageCounts:
	"""Page-level structure counts the strategy selector looks at."""

	form_count: int
	content_count: int
