# @file purpose: Visual directives (injected style sheets) and the class names they style
"""
Style directives are engine-owned `<style>` elements. Each one is keyed by its
element id so applying it twice is a no-op, and each declares the classes it
renders as `display: none` so the visibility primitive can honour them.
"""

import logging
from dataclasses import dataclass, field

from elderly_mode.config import EngineSettings
from elderly_mode.dom.page import LivePage
from elderly_mode.dom.views import ElementHandle

logger = logging.getLogger(__name__)

ROOT_CLASS = 'elderly-mode-active'
SPLIT_LAYOUT_CLASS = 'elderly-split-layout'
HIDDEN_CLASS = 'elderly-hidden'
ORIGINAL_CLASS = 'elderly-original-element'
ACTION_AREA_ID = 'elderly-action-area'
ACTION_AREA_CLASS = 'elderly-action-area'
ACTION_SECTION_CLASS = 'elderly-action-section'
ACTION_ITEM_CLASS = 'elderly-action-item'
PLACEHOLDER_CLASS = 'elderly-action-placeholder'
NOTIFICATION_CLASS = 'elderly-notification'

BASE_STYLES_ID = 'elderly-mode-base-styles'
HIGH_CONTRAST_ID = 'elderly-mode-high-contrast'


@dataclass(frozen=True)
class StyleDirective:
	key: str
	css_text: str
	hidden_classes: frozenset[str] = field(default_factory=frozenset)


def base_styles(settings: EngineSettings) -> StyleDirective:
	content_share, action_share = settings.split_ratio
	css_text = f"""
.{ROOT_CLASS} * {{ box-sizing: border-box; }}
.{ROOT_CLASS} body {{
	font-size: {settings.font_size} !important;
	line-height: {settings.line_height} !important;
	font-family: Arial, sans-serif !important;
}}
.{ROOT_CLASS} button, .{ROOT_CLASS} a, .{ROOT_CLASS} input, .{ROOT_CLASS} select {{
	min-height: {settings.min_touch_target} !important;
	min-width: {settings.min_touch_target} !important;
	padding: 12px 20px !important;
	font-size: 18px !important;
	cursor: pointer !important;
}}
.{ROOT_CLASS} *:focus {{ outline: 3px solid #0066CC !important; outline-offset: 2px !important; }}
body.{SPLIT_LAYOUT_CLASS} {{
	display: grid !important;
	grid-template-columns: {content_share}fr {action_share}fr !important;
	gap: 20px !important;
	padding: 20px !important;
}}
body.{SPLIT_LAYOUT_CLASS} > :not(.{ACTION_AREA_CLASS}) {{ grid-column: 1 !important; }}
.{ORIGINAL_CLASS} {{
	position: absolute !important;
	left: -9999px !important;
	width: 1px !important;
	height: 1px !important;
	opacity: 0 !important;
	pointer-events: none !important;
}}
.{ACTION_AREA_CLASS} {{
	grid-column: 2 !important;
	grid-row: 1 / span 100 !important;
	padding: 30px !important;
	background: #F5F5F5 !important;
	border: 2px solid #E0E0E0 !important;
	border-radius: 8px !important;
	position: sticky !important;
	top: 20px !important;
	max-height: calc(100vh - 40px) !important;
	overflow-y: auto !important;
}}
.{ACTION_AREA_CLASS} h2 {{ font-size: 24px !important; margin-bottom: 20px !important; color: #333333 !important; }}
.{ACTION_ITEM_CLASS} {{
	margin-bottom: 20px !important;
	padding: 15px !important;
	background: #FFFFFF !important;
	border: 1px solid #CCCCCC !important;
	border-radius: 6px !important;
}}
.{ACTION_ITEM_CLASS} label {{
	display: block !important;
	font-size: 16px !important;
	font-weight: bold !important;
	margin-bottom: 8px !important;
	color: #333333 !important;
}}
.{PLACEHOLDER_CLASS} {{ color: #666666 !important; }}
.elderly-control-panel {{
	position: fixed !important;
	bottom: 20px !important;
	right: 20px !important;
	z-index: 999999 !important;
	background: #0066CC !important;
	color: white !important;
	padding: 15px 25px !important;
	border-radius: 30px !important;
	font-size: 18px !important;
	font-weight: bold !important;
	border: none !important;
}}
.{HIDDEN_CLASS} {{ display: none !important; }}
"""
	return StyleDirective(key=BASE_STYLES_ID, css_text=css_text, hidden_classes=frozenset({HIDDEN_CLASS}))


HIGH_CONTRAST = StyleDirective(
	key=HIGH_CONTRAST_ID,
	css_text=f"""
.{ROOT_CLASS} {{ filter: contrast(1.3) !important; }}
.{ROOT_CLASS} body {{ background: #FFFFFF !important; color: #000000 !important; }}
.{ROOT_CLASS} a {{ color: #0000EE !important; text-decoration: underline !important; }}
""",
)


def apply_directive(page: LivePage, directive: StyleDirective) -> bool:
	"""Inject the directive once. Returns False when it was already there."""
	added = page.add_style_sheet(directive.key, directive.css_text, directive.hidden_classes)
	if added:
		logger.debug(f'🎨 Applied style directive {directive.key}')
	return added


def remove_directive(page: LivePage, key: str) -> bool:
	return page.remove_style_sheet(key)


def enlarge_text(page: LivePage) -> None:
	page.document_element.add_class(ROOT_CLASS)


def hide_node(node: ElementHandle) -> None:
	node.add_class(HIDDEN_CLASS)
