"""Optional LLM interpretation of creator briefs."""

from .parser import ConversationalParser, ConversationalParserError

__all__ = [
    "ConversationalParser",
    "ConversationalParserError",
]
