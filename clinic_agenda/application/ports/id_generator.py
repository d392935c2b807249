from typing import Protocol


class IdGenerator(Protocol):
    def new_id(self) -> str:
        ...


class TokenGenerator(Protocol):
    def new_token(self) -> str:
        ...
