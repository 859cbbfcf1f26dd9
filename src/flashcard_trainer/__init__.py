"""
# Flashcard Trainer

Spaced-repetition vocabulary flashcards: a FastAPI + MongoDB API that schedules reviews
with a simplified SM-2 algorithm, and a terminal client for studying and bulk entry.
"""

__version__ = "0.1.0"
