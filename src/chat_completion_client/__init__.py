"""Client-side request builder for chat completion services."""
