"""Watchdog that renders notification banners and dismisses transient ones."""

import asyncio
from typing import Any, ClassVar

from bubus import BaseEvent
from pydantic import PrivateAttr

from elderly_mode.dom.views import OWNED_ATTRIBUTE, ElementHandle
from elderly_mode.layout.styles import NOTIFICATION_CLASS
from elderly_mode.session.events import NotificationDismissedEvent, NotificationEvent
from elderly_mode.session.watchdog_base import BaseWatchdog

# Inline so banners render even when no style directive could be injected
BANNER_STYLE = (
	'position: fixed; top: 20px; right: 20px; z-index: 1000000; background: #FF6B6B; color: white; '
	'padding: 20px 30px; border-radius: 8px; font-size: 18px; max-width: 400px;'
)


class NotificationsWatchdog(BaseWatchdog):
	"""Shows banners for NotificationEvents. Non-persistent ones go away after `notification_seconds`."""

	LISTENS_TO: ClassVar[list[type[BaseEvent[Any]]]] = [NotificationEvent]
	EMITS: ClassVar[list[type[BaseEvent[Any]]]] = [NotificationDismissedEvent]

	_banners: dict[str, ElementHandle] = PrivateAttr(default_factory=dict)
	_timers: dict[str, asyncio.TimerHandle] = PrivateAttr(default_factory=dict)

	@property
	def messages(self) -> list[str]:
		return [banner.text_content for banner in self._banners.values() if banner.is_connected]

	async def on_NotificationEvent(self, event: NotificationEvent) -> None:
		page = self.session.page
		banner = page.create_element(
			'div',
			{
				'class': NOTIFICATION_CLASS,
				'role': 'alert',
				'style': BANNER_STYLE,
				'data-notification-id': event.event_id,
				'data-level': event.level,
				OWNED_ATTRIBUTE: 'true',
			},
			text=event.message,
		)
		page.append_child(page.body, banner)
		self._banners[event.event_id] = banner
		log = self.logger.error if event.level == 'error' else self.logger.warning if event.level == 'warning' else self.logger.info
		log(f'📢 {event.message}')

		if not event.persistent:
			loop = asyncio.get_running_loop()
			self._timers[event.event_id] = loop.call_later(self.session.settings.notification_seconds, self.dismiss, event.event_id)

	def dismiss(self, notification_id: str) -> bool:
		timer = self._timers.pop(notification_id, None)
		if timer is not None:
			timer.cancel()
		banner = self._banners.pop(notification_id, None)
		if banner is None:
			return False
		if banner.is_connected:
			self.session.page.remove_node(banner)
		self.event_bus.dispatch(NotificationDismissedEvent(notification_id=notification_id))
		return True

	def clear(self) -> None:
		"""Remove every banner without announcing it (teardown, reload)."""
		for timer in self._timers.values():
			timer.cancel()
		self._timers = {}
		for banner in self._banners.values():
			if banner.is_connected:
				self.session.page.remove_node(banner)
		self._banners = {}
