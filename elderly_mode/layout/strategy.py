import logging
from enum import Enum

from elderly_mode.blocks.views import PageCounts, ZoneAssignment

logger = logging.getLogger(__name__)


class LayoutStrategy(str, Enum):
	SPLIT = 'split'
	ENLARGE_ONLY = 'enlarge-only'


def decide_layout_strategy(zones: ZoneAssignment, counts: PageCounts) -> LayoutStrategy:
	"""
	Pick the layout for one activation. Pure: same inputs, same answer.

	A page made of forms with no content-like container (a login or checkout page)
	only gets enlarged, splitting it would leave an empty reading column. Otherwise
	split when both columns would have something in them, or when the page is
	mostly reading material.
	"""
	if counts.form_count >= 1 and counts.content_count == 0:
		return LayoutStrategy.ENLARGE_ONLY

	content_blocks = len(zones.content_zone)
	action_blocks = len(zones.action_zone)
	if content_blocks and action_blocks:
		return LayoutStrategy.SPLIT
	if content_blocks > action_blocks:
		return LayoutStrategy.SPLIT
	return LayoutStrategy.ENLARGE_ONLY
