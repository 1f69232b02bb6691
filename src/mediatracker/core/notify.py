"""
Transient user notifications.

Stands in for toast messages: each notification is printed once to the
console and remembered in ``history`` so callers and tests can inspect
what the user was told.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from rich.console import Console
from rich.markup import escape

LEVEL_STYLES = {
    "info": "cyan",
    "success": "green",
    "warning": "yellow",
    "error": "red",
}


@dataclass
class Notification:
    """A single message shown to the user."""

    level: str
    title: str
    message: str = ""


@dataclass
class Notifier:
    """Prints notifications to a rich console."""

    console: Console = field(default_factory=Console)
    quiet: bool = False
    history: list[Notification] = field(default_factory=list)

    def notify(self, level: str, title: str, message: str = "") -> Notification:
        note = Notification(level=level, title=title, message=message)
        self.history.append(note)
        if not self.quiet:
            style = LEVEL_STYLES.get(level, "white")
            text = f"[{style}]{escape(title)}[/{style}]"
            if message:
                text += f" {escape(message)}"
            self.console.print(text)
        return note

    def info(self, title: str, message: str = "") -> Notification:
        return self.notify("info", title, message)

    def success(self, title: str, message: str = "") -> Notification:
        return self.notify("success", title, message)

    def warning(self, title: str, message: str = "") -> Notification:
        return self.notify("warning", title, message)

    def error(self, title: str, message: str = "") -> Notification:
        return self.notify("error", title, message)
