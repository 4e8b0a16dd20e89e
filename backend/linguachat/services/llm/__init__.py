"""Completion providers.

Imports are intentionally NOT eagerly loaded here so the openai SDK is only
imported where a concrete provider is built. Use explicit imports:
    from linguachat.services.llm.openai_chat import OpenAIChatProvider
"""
