"""School intranet adapter: student profile, schedule, attendance, announcements."""
