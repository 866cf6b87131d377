from elderly_mode.dom.utils import normalize_text
from elderly_mode.dom.views import ElementHandle

DEFAULT_LABEL = 'Input Field'


def get_element_label(node: ElementHandle) -> str:
	"""Human-readable caption for a control, shown above its mirror in the action area."""
	# <label for="...">
	if node.id:
		for label in node.page.document_element.iter_descendants():
			if label.tag_name == 'label' and label.get_attribute('for') == node.id:
				return normalize_text(label.text_content)

	# <label> wrapping the control
	enclosing = node.closest(lambda el: el.tag_name == 'label', include_self=False)
	if enclosing is not None:
		own_text = node.text_content
		text = enclosing.text_content
		if own_text:
			text = text.replace(own_text, '', 1)
		return normalize_text(text)

	placeholder = node.get_attribute('placeholder')
	if placeholder:
		return placeholder

	if node.tag_name in ('button', 'a'):
		return normalize_text(node.text_content)

	aria_label = node.get_attribute('aria-label')
	if aria_label:
		return aria_label

	name = node.get_attribute('name')
	if name:
		return name.replace('-', ' ').replace('_', ' ')

	input_type = node.get_attribute('type')
	if input_type:
		return input_type[:1].upper() + input_type[1:]
	if node.tag_name in ('select', 'textarea'):
		return node.tag_name.capitalize()

	return DEFAULT_LABEL
