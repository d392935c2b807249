import random
import string
import uuid
from typing import Optional

from ...application.ports.id_generator import IdGenerator, TokenGenerator


BASE36 = string.digits + string.ascii_lowercase


class UuidIdGenerator(IdGenerator):
    def new_id(self) -> str:
        return uuid.uuid4().hex


class RandomTokenGenerator(TokenGenerator):
    """Short base-36 room tokens. Not meant to be unguessable."""

    def __init__(self, seed: Optional[int] = None, length: int = 9) -> None:
        self._rng = random.Random(seed)
        self._length = length

    def new_token(self) -> str:
        return "".join(self._rng.choice(BASE36) for _ in range(self._length))
