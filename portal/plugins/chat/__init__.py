"""AI chat assistant: persona sessions with persisted transcripts."""
