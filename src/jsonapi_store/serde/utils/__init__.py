from .jsonpointer import JSONPointer  # noqa
from .formatting import english_enumerate  # noqa
