from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class RuleDocument(BaseModel):
	"""Per-site optimization rules. camelCase on the wire, snake_case in Python."""

	model_config = ConfigDict(
		alias_generator=to_camel,
		populate_by_name=True,
		extra='ignore',
	)

	layout: Literal['split', 'normal'] = 'split'
	enlarge_text: bool = True
	simplify_nav: bool = True
	remove_ads: bool = True
	high_contrast: bool = False
	remove_selectors: list[str] = Field(default_factory=list)
	keep_selectors: list[str] = Field(default_factory=list)

	@classmethod
	def default(cls) -> 'RuleDocument':
		"""Rules for sites with no built-in, cached or remote document."""
		return cls(
			remove_selectors=[
				'[class*="ad-"]',
				'[id*="ad-"]',
				'[class*="advertisement"]',
				'.sidebar',
				'[class*="popup"]',
				'[class*="modal"]',
			],
			keep_selectors=[
				'input',
				'button',
				'select',
				'textarea',
				'form',
				'a',
				'img',
				'video',
				'h1',
				'h2',
				'h3',
				'p',
				'article',
				'main',
			],
		)


class CachedRuleDocument(BaseModel):
	"""On-disk cache entry: the document plus when it was fetched (unix seconds)."""

	rules: RuleDocument
	timestamp: float


RuleSource = Literal['builtin', 'cache', 'remote', 'default']
