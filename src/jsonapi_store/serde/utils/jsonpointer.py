import typing


def _escape(component: str) -> str:
    return component.replace("~", "~0").replace("/", "~1")


def _unescape(component: str) -> str:
    return component.replace("~1", "/").replace("~0", "~")


class JSONPointer:
    """
    An immutable pointer to a node of a parsed JSON document.

    The root is rendered as ``/`` and every other pointer as a sequence of
    ``/``-prefixed, RFC 6901 escaped components (``/data/relationships/author``).
    Pointers are extended with ``/`` for object members and ``[]`` for array indices:

    .. code-block:: python

       (JSONPointer() / "included")[0] / "attributes"
    """

    _components: typing.Tuple[str, ...]

    @property
    def components(self) -> typing.Tuple[str, ...]:
        return self._components

    @classmethod
    def from_components(cls, components: typing.Iterable[str]) -> "JSONPointer":
        pointer = cls()
        pointer._components = tuple(components)
        return pointer

    def __truediv__(self, component: str) -> "JSONPointer":
        return self.from_components(self._components + (component,))

    def __getitem__(self, index: int) -> "JSONPointer":
        return self.from_components(self._components + (str(index),))

    def __str__(self) -> str:
        if not self._components:
            return "/"
        return "".join("/" + _escape(c) for c in self._components)

    def __repr__(self) -> str:
        return f"JSONPointer({str(self)!r})"

    def __eq__(self, other: typing.Any) -> bool:
        if not isinstance(other, JSONPointer):
            return NotImplemented
        return self._components == other._components

    def __hash__(self) -> int:
        return hash(self._components)

    def __init__(self, path: str = "/"):
        if not path.startswith("/"):
            raise ValueError(f"invalid JSON pointer: {path!r}")
        if path == "/":
            self._components = ()
        else:
            self._components = tuple(_unescape(c) for c in path[1:].split("/"))
