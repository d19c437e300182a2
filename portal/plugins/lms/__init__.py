"""LMS (Blackboard Learn) adapter: courses, content, assignments, grades, announcements."""
