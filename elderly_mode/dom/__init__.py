from elderly_mode.dom.interactive import InteractiveElementDetector
from elderly_mode.dom.page import LivePage, MutationObserver
from elderly_mode.dom.views import DOMEvent, ElementHandle, FormSubmission, MutationRecord

__all__ = [
	'DOMEvent',
	'ElementHandle',
	'FormSubmission',
	'InteractiveElementDetector',
	'LivePage',
	'MutationObserver',
	'MutationRecord',
]
