"""Async client: HTTP API wrapper, auth/chat stores and the chat view model."""
from direct_chat.client.api import ChatApi
from direct_chat.client.auth_store import AuthStore
from direct_chat.client.chat_store import ChatStore
from direct_chat.client.errors import ChatApiError, ChatClientError
from direct_chat.client.feed import LocalFeed, MessageFeed
from direct_chat.client.models import ChatMessage, ChatUser
from direct_chat.client.view import ChatScreen, ChatView, MessageRow
from direct_chat.client.ws_feed import WebSocketFeed

__all__ = [
    "AuthStore",
    "ChatApi",
    "ChatApiError",
    "ChatClientError",
    "ChatMessage",
    "ChatScreen",
    "ChatStore",
    "ChatUser",
    "ChatView",
    "LocalFeed",
    "MessageFeed",
    "MessageRow",
    "WebSocketFeed",
]
