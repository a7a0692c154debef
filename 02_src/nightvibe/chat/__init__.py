"""Chat view-models."""

from .chat_list import ChatListViewModel
from .transcript import Draft, Transcript, TranscriptEntry
from .view_model import ChatViewModel

__all__ = [
    "ChatListViewModel",
    "ChatViewModel",
    "Draft",
    "Transcript",
    "TranscriptEntry",
]
