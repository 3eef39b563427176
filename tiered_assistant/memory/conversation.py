"""
Conversation memory.

ConversationMemory is the append-only history owned by the console
session. Steps and responders only ever receive a ReadOnlyMemory view,
which aliases the same underlying list and therefore always reflects
the latest appended state.
"""

from collections.abc import Sequence
from typing import Iterable, Iterator, List, overload

from .message import Message


class MessagesView(Sequence):
    """Live, read-only sequence over a list of messages."""

    __slots__ = ("_items",)

    def __init__(self, items: List[Message]):
        self._items = items

    @overload
    def __getitem__(self, index: int) -> Message: ...

    @overload
    def __getitem__(self, index: slice) -> List[Message]: ...

    def __getitem__(self, index):
        if isinstance(index, slice):
            return list(self._items[index])
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Message]:
        return iter(self._items)

    def __repr__(self) -> str:
        return f"MessagesView({self._items!r})"


class ReadOnlyMemory:
    """
    Read-only view of a conversation history.

    Exposes ``messages`` only; there is no way to append through it.
    """

    def __init__(self, source: "ConversationMemory"):
        self._view = MessagesView(source._messages)

    @property
    def messages(self) -> MessagesView:
        return self._view

    def __len__(self) -> int:
        return len(self._view)

    def __iter__(self) -> Iterator[Message]:
        return iter(self._view)

    def __repr__(self) -> str:
        return f"ReadOnlyMemory(messages={len(self._view)})"


class ConversationMemory:
    """
    Ordered, append-only message history.

    Insertion order is the canonical conversational order; once appended,
    a message is never removed or reordered.
    """

    def __init__(self, messages: Iterable[Message] = ()):
        self._messages: List[Message] = []
        self._read_only = ReadOnlyMemory(self)
        self.add_many(messages)

    @property
    def messages(self) -> MessagesView:
        return self._read_only.messages

    def add(self, message: Message) -> None:
        """Append a message to the end of the history."""
        if not isinstance(message, Message):
            raise TypeError(
                f"Only Message instances can be stored, got {type(message).__name__}"
            )
        self._messages.append(message)

    def add_many(self, messages: Iterable[Message]) -> None:
        for message in messages:
            self.add(message)

    def as_read_only(self) -> ReadOnlyMemory:
        """Return the read-only view aliasing this history."""
        return self._read_only

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(self._messages)

    def __repr__(self) -> str:
        return f"ConversationMemory(messages={len(self._messages)})"
