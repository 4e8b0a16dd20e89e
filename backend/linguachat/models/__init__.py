"""SQLAlchemy ORM models.

Individual models should be imported explicitly:
    from linguachat.models.conversation import Conversation

All models are imported here so metadata.create_all() sees every table.
"""

from linguachat.models.conversation import Conversation
from linguachat.models.message import Message

__all__ = [
    "Conversation",
    "Message",
]
