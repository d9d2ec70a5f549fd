# Session-data providers: callables city -> list[CourseSession]
from .api import ApiSessionProvider, fetch_stages_payload
from .parser import to_course_session, to_course_sessions, parse_date
from .static import StaticSessionProvider

__all__ = [
    "ApiSessionProvider",
    "fetch_stages_payload",
    "to_course_session",
    "to_course_sessions",
    "parse_date",
    "StaticSessionProvider",
]
