"""Route planning assistant backed by the Gemini API."""
