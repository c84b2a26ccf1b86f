import abc
import typing


class JSONAPIStoreException(Exception, metaclass=abc.ABCMeta):
    @property
    @abc.abstractmethod
    def message(self) -> str:
        ...  # pragma: nocover

    def __str__(self):
        return self.message


class InvalidRecordError(JSONAPIStoreException):
    """
    Raised when something that cannot become a canonical record is handed to a collection.
    """

    _message: str

    @property
    def message(self) -> str:
        return self._message

    def __init__(self, message: str):
        super().__init__(message)
        self._message = message


class DuplicateRecordError(JSONAPIStoreException):
    type: str
    id: str

    @property
    def message(self) -> str:
        return f'another record is already registered as ("{self.type}", "{self.id}")'

    def __init__(self, type: str, id: str):
        super().__init__(type, id)
        self.type = type
        self.id = id


class TransportError(JSONAPIStoreException):
    """
    Describes why a request did not produce a usable response.

    Transport errors are never raised out of the request functions; they are carried by the
    :py:attr:`jsonapi_store.response.Response.error` of the envelope. ``status`` is
    :py:const:`None` when the failure happened before any response was received.
    The underlying exception, if any, is available as ``__cause__``.
    """

    status: typing.Optional[int]
    _message: str

    @property
    def message(self) -> str:
        return self._message

    def __init__(self, message: str, status: typing.Optional[int] = None):
        super().__init__(message, status)
        self._message = message
        self.status = status
