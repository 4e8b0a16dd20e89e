"""Chat services: conversation store, response generation, message pipeline.

Use explicit imports:
    from linguachat.services.chat.pipeline import MessagePipeline
"""
