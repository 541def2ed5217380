from .holidays import HolidayCalendar
from .sessions import SessionFilter

__all__ = ["HolidayCalendar", "SessionFilter"]
