# notsoai/models/__init__.py

from .client import (
    Client,
    User
)
from .conversation import (
    Conversation,
    Message
)
from .chat_session import (
    ChatSession,
    ChatSessionAnalysis
)
