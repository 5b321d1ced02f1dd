import enum
# =========================================================
# ENUMS
# =========================================================
class Frequency(str, enum.Enum):
    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"

class RecurrenceEnds(str, enum.Enum):
    never = "never"
    on_date = "onDate"

class OffsetUnit(str, enum.Enum):
    minute = "minute"
    hour = "hour"
    day = "day"

class TaskStatus(str, enum.Enum):
    todo = "To Do"
    in_progress = "In Progress"
    done = "Done"
