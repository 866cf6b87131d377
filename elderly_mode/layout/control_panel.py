import logging
from collections.abc import Callable

from elderly_mode.config import EngineSettings
from elderly_mode.dom.interactive import CONTROL_PANEL_CLASS
from elderly_mode.dom.page import LivePage
from elderly_mode.dom.views import OWNED_ATTRIBUTE, DOMEvent, ElementHandle

logger = logging.getLogger(__name__)


class ControlPanel:
	"""The floating toggle button. Clicking it asks to leave the mode."""

	def __init__(self, page: LivePage, settings: EngineSettings, on_exit: Callable[[], object]):
		self.page = page
		self.settings = settings
		self.on_exit = on_exit
		self.button: ElementHandle | None = None

	@property
	def is_installed(self) -> bool:
		return self.button is not None and self.button.is_connected

	def install(self) -> ElementHandle:
		if self.button is not None and self.button.is_connected:
			return self.button
		button = self.page.create_element(
			'button',
			{
				'type': 'button',
				'class': CONTROL_PANEL_CLASS,
				'title': self.settings.control_panel_title,
				OWNED_ATTRIBUTE: 'true',
			},
			text=self.settings.control_panel_text,
		)
		button.add_event_listener('click', self._on_click)
		self.page.append_child(self.page.body, button)
		self.button = button
		return button

	def _on_click(self, event: DOMEvent) -> None:
		event.prevent_default()
		logger.info('👋 Exit requested from the control panel')
		self.on_exit()

	def remove(self) -> None:
		if self.button is None:
			return
		self.button.remove_event_listener('click', self._on_click)
		if self.button.is_connected:
			self.page.remove_node(self.button)
		self.button = None
