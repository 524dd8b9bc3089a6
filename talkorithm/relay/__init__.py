"""Chat relay — the HTTP service in front of Gemini and its client."""
