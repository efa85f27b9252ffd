"""
Besto: voice-powered notes and todos.

Capture ideas instantly, act on them effortlessly:
- Speak, confirm a type, saved locally
- Notes and todos kept in on-device JSON slots
- Optional LLM intent classification and spoken summaries
"""

__version__ = "1.0.0"
