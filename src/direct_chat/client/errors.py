from __future__ import annotations


class ChatClientError(Exception):
    """Base client-side error."""


class ChatApiError(ChatClientError):
    """A request to the chat API failed (transport error or non-2xx answer)."""

    def __init__(self, status_code: int | None, detail: str) -> None:
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"{status_code or 'network'}: {detail}")
