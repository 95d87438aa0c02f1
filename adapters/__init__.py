"""
Adapters package - External service connections.
MongoDB persistence, the OpenAI client and third-party HTTP APIs.
"""

from adapters import mongo_adapter, openai_adapter, food_api_adapter, exercise_api_adapter

__all__ = [
    "mongo_adapter",
    "openai_adapter",
    "food_api_adapter",
    "exercise_api_adapter",
]
