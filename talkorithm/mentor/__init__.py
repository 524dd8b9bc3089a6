"""Mentor persona — system prompt and memory summaries."""
