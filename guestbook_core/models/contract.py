"""Contract read-side data: fetched, never owned or mutated by the core."""

from typing import List

from pydantic import BaseModel


class Message(BaseModel):
    """A guestbook entry."""

    sender: str
    message: str
    name: str
    timestamp: int                          # Block time, seconds


class Todo(BaseModel):
    """A community todo item."""

    id: int
    creator: str
    title: str
    description: str = ""
    completed: bool = False
    likes: int = 0
    timestamp: int


class ContractSnapshot(BaseModel):
    """Messages and todos in arrival order, as returned by the contract."""

    messages: List[Message] = []
    todos: List[Todo] = []

    @property
    def completed_todo_count(self) -> int:
        return sum(1 for t in self.todos if t.completed)
