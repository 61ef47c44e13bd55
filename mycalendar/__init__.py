"""
MyCalendar: console calendar with conflict detection (interactive + headless).
"""
