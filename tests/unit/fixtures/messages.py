"""Test message fixtures and utilities."""

from typing import Any, Dict, List


def news(content: str = "Hello, world!", **extra: Any) -> Dict[str, Any]:
    """Create a message on the news topic."""
    return {"topic": "news", "content": content, **extra}


def topic_messages(topic: str, *contents: str) -> List[Dict[str, Any]]:
    """Create one message per content on the given topic."""
    return [{"topic": topic, "content": content} for content in contents]


def contents(messages: List[Dict[str, Any]]) -> List[str]:
    """Extract the content field of each message."""
    return [message["content"] for message in messages]
