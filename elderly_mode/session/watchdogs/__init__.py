from elderly_mode.session.watchdogs.live_tree_watchdog import LiveTreeWatchdog
from elderly_mode.session.watchdogs.notifications_watchdog import NotificationsWatchdog

__all__ = ['LiveTreeWatchdog', 'NotificationsWatchdog']
