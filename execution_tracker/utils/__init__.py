"""
Utility package exports
"""

from execution_tracker.utils.helpers import flatten_labels, as_utc, start_of_local_day, end_of_local_day, month_week_index

__all__ = ["flatten_labels", "as_utc", "start_of_local_day", "end_of_local_day", "month_week_index"]
