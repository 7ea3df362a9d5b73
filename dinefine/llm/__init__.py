"""
LLM integration layer.

Responsibilities:
- Manage Groq API configuration and credentials.
- Phrase assistant chat replies from the preferences the keyword rules found.
- Graceful fallback when the LLM is unavailable or returns unusable output.
"""
