"""
Reminder notifiers.

- console.py: prints reminders to the terminal
- matrix.py: sends reminders to a Matrix room (matrix-nio)
- fanout.py: delivers to several notifiers
- rendering.py: shared reminder text
"""

from .console import ConsoleNotifier
from .fanout import FanoutNotifier
from .rendering import render_reminder_text

__all__ = ["ConsoleNotifier", "FanoutNotifier", "render_reminder_text"]
