"""
Reminder and scheduling constants shared by the engine, the API and the worker.
"""

MINUTES = {
    "minute": 1,
    "hour": 60,
    "day": 1440,
}

# 7 days, 3 days, 1 day before the deadline
DEFAULT_REMINDER_OFFSETS = (10080, 4320, 1440)

DEFAULT_TIMEZONE = "Asia/Singapore"

# Format of the datetime-local inputs on the task forms
LOCAL_INPUT_FORMAT = "%Y-%m-%dT%H:%M"

# Upper bound for a reminder offset, roughly a century
MAX_OFFSET_MINUTES = 100 * 366 * MINUTES["day"]
