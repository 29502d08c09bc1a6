"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_WORK_START = "08:00"
DEFAULT_WORK_END = "14:00"
DEFAULT_LATE_GRACE_MINUTES = 10

# Friday, Saturday (date.weekday() numbering)
DEFAULT_WEEKEND_DAYS = (4, 5)

DEFAULT_WAGE_DIVISOR_DAYS = 30
WORK_HOURS_PER_DAY = 8

CASUAL_LEAVE_DAYS = 6
ANNUAL_LEAVE_DAYS_JUNIOR = 21
ANNUAL_LEAVE_DAYS_SENIOR = 30
ANNUAL_LEAVE_SENIOR_AFTER_YEARS = 10
SICK_LEAVE_DAYS = 180
CHILD_CARE_LEAVE_DAYS = 730
MATERNITY_LEAVE_DAYS = 90
UNPAID_LEAVE_DAYS = 365

MONEY_PLACES = 2
