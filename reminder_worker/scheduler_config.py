"""
Scheduler Configuration for Deadline Reminders

Defines polling intervals and the overdue digest time.
"""

# How often the scheduler checks for due reminders (in seconds)
SCHEDULER_CHECK_INTERVAL = 60  # Every 1 minute

# A reminder is sent when "now" is within this many minutes of its instant
REMINDER_TOLERANCE_MINUTES = 1

# Daily overdue notice (24h clock, configured timezone)
OVERDUE_DIGEST_HOUR = 9
OVERDUE_DIGEST_MINUTE = 0

# Seconds to wait for the task feed and the notification webhook
HTTP_TIMEOUT = 10
