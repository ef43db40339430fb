import uuid
from functools import total_ordering


class IncompatibleIdError(TypeError):
    left: "Id"
    right: "Id"

    def __init__(self, left: "Id", right: "Id"):
        super().__init__(
            f"cannot compare {left.__class__.__name__} with {right.__class__.__name__}"
        )
        self.left = left
        self.right = right


@total_ordering
class Id:
    """
    Unique identifier with a readable prefix.

    Ids of different subclasses are never interchangeable, comparing them raises an
    `IncompatibleIdError` instead of silently returning `False`.
    """

    _value: str

    def __init__(self, prefix: str):
        unique = uuid.uuid4().hex[:12]
        self._value = f"{prefix}-{unique}"

    def _check(self, other: object) -> bool:
        if not isinstance(other, Id):
            return False
        if type(self) is not type(other):
            raise IncompatibleIdError(self, other)
        return True

    def __eq__(self, other):
        if not self._check(other):
            return NotImplemented
        return self._value == other._value

    def __lt__(self, other):
        if not self._check(other):
            return NotImplemented
        return self._value < other._value

    def __hash__(self):
        return hash((type(self), self._value))

    def __str__(self):
        return self._value

    def __repr__(self):
        return f"{self.__class__.__name__}({self._value})"


class RequestId(Id):
    def __init__(self):
        super().__init__("request")
