from .exceptions import (  # noqa
    DuplicateRecordError,
    InvalidRecordError,
    JSONAPIStoreException,
    TransportError,
)
from .flattening import flatten_record  # noqa
from .records import Record, RecordRef  # noqa
from .response import Response  # noqa
from .serde.exceptions import DeserializationError  # noqa
from .store import Collection, Store  # noqa
from .network import (  # noqa
    RequestOptions,
    create,
    fetch_link,
    read,
    remove,
    update,
)
