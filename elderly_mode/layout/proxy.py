# @file purpose: Builds mirror controls for the action area and wires them to their originals
import logging

from elderly_mode.dom.interactive import PROXY_CLASS, InteractiveElementDetector
from elderly_mode.dom.page import LivePage
from elderly_mode.dom.utils import normalize_text
from elderly_mode.dom.views import OWNED_ATTRIBUTE, DOMEvent, ElementHandle
from elderly_mode.layout.views import ProxyBinding

logger = logging.getLogger(__name__)

PROXY_ATTRIBUTE = 'data-elderly-proxy'
PROXY_BUTTON_CLASS = 'elderly-proxy-button'
DEFAULT_BUTTON_TEXT = 'Button'
DEFAULT_INTERACTIVE_TEXT = 'Interactive element'


class ProxyElementFactory:
	"""
	Creates brand-new mirror nodes (never clones) for original controls.

	Mirror→original: `input` / `change` on the mirror write the value into the
	original and re-emit the same event on it, so listeners see the original as
	target. Click-bearing mirrors call `click()` on the original so native activation
	(focus, form submission, navigation) runs for real.
	"""

	def __init__(self, page: LivePage):
		self.page = page

	def create_binding(self, original: ElementHandle, index: int) -> ProxyBinding:
		tag_name = original.tag_name
		if tag_name in ('input', 'textarea') and not InteractiveElementDetector.is_button_like(original):
			binding = self._value_proxy(original, index)
		elif tag_name == 'select':
			binding = self._select_proxy(original, index)
		elif tag_name in ('button', 'a') or InteractiveElementDetector.is_button_like(original):
			binding = self._button_proxy(original, index)
		else:
			binding = self._generic_proxy(original, index)

		binding.mirror.set_attribute(PROXY_ATTRIBUTE, str(index))
		binding.mirror.add_class(PROXY_CLASS)
		return binding

	def _mirror(self, tag_name: str, attributes: dict[str, str] | None = None, text: str | None = None) -> ElementHandle:
		return self.page.create_element(tag_name, {OWNED_ATTRIBUTE: 'true', **(attributes or {})}, text=text)

	def _value_proxy(self, original: ElementHandle, index: int) -> ProxyBinding:
		attributes: dict[str, str] = {}
		if original.tag_name == 'input':
			attributes['type'] = original.get_attribute('type') or 'text'
		# No `name`: a mirror sharing it would join the original's radio group
		placeholder = original.get_attribute('placeholder')
		if placeholder:
			attributes['placeholder'] = placeholder

		mirror = self._mirror(original.tag_name, attributes)
		binding = ProxyBinding(original=original, mirror=mirror, index=index)
		if binding.is_checkable:
			mirror.checked = original.checked
		else:
			mirror.value = original.value

		forward_value(binding, 'input')
		forward_value(binding, 'change')
		return binding

	def _select_proxy(self, original: ElementHandle, index: int) -> ProxyBinding:
		mirror = self._mirror('select')
		current = original.value
		for option in self.page.options(original):
			value = self.page.option_value(option)
			option_attributes = {'value': value}
			if value == current:
				option_attributes['selected'] = 'selected'
			self.page.append_child(mirror, self.page.create_element('option', option_attributes, text=normalize_text(option.text_content)))
		mirror.value = current

		binding = ProxyBinding(original=original, mirror=mirror, index=index)
		forward_value(binding, 'input')
		forward_value(binding, 'change')
		return binding

	def _button_proxy(self, original: ElementHandle, index: int) -> ProxyBinding:
		text = normalize_text(original.text_content) or original.get_attribute('value') or DEFAULT_BUTTON_TEXT
		mirror = self._mirror('button', {'type': 'button', 'class': PROXY_BUTTON_CLASS}, text=text)
		binding = ProxyBinding(original=original, mirror=mirror, index=index)
		forward_click(binding)
		return binding

	def _generic_proxy(self, original: ElementHandle, index: int) -> ProxyBinding:
		text = normalize_text(original.text_content) or DEFAULT_INTERACTIVE_TEXT
		mirror = self._mirror('button', {'type': 'button'}, text=text)
		binding = ProxyBinding(original=original, mirror=mirror, index=index)
		forward_click(binding)
		return binding


def forward_value(binding: ProxyBinding, event_type: str) -> None:
	"""Mirror `event_type` → write value/checked into the original and re-emit it there."""
	original = binding.original
	mirror = binding.mirror

	def on_mirror_event(event: DOMEvent) -> None:
		if binding.is_checkable:
			original.checked = mirror.checked
		else:
			original.value = mirror.value
		original.dispatch_event(DOMEvent(event_type, cancelable=False))

	binding.listen(mirror, event_type, on_mirror_event)


def forward_click(binding: ProxyBinding) -> None:
	original = binding.original

	def on_mirror_click(event: DOMEvent) -> None:
		event.prevent_default()
		event.stop_propagation()
		logger.debug(f'👆 Mirror #{binding.index} clicked, clicking original {original!r}')
		original.click()

	binding.listen(binding.mirror, 'click', on_mirror_click)
