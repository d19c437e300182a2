"""Timetable views built on the intranet schedule."""
