import typing
from collections import OrderedDict

from .serde.models import ResourceRepr

FlatRecord = typing.MutableMapping[str, typing.Any]

LINKS_SUFFIX = "Links"


def links_attribute_name(relationship_name: str) -> str:
    return f"{relationship_name}{LINKS_SUFFIX}"


def flatten_record(resource: ResourceRepr) -> FlatRecord:
    """
    Flatten a resource object into the mapping a canonical record is built or updated from.

    ``id`` and ``type`` are copied verbatim, followed by every attribute, followed by a
    ``"<name>Links"`` entry for every relationship that carries ``links``.
    Relationship ``data`` is left alone; linking happens once the whole document is in the store.

    :param ResourceRepr resource: the resource object.
    :return: a new mapping; values are not copied.
    """
    data: FlatRecord = OrderedDict(
        (
            ("id", resource.id),
            ("type", resource.type),
        )
    )

    for key, value in resource.attributes.items():
        data[key] = value

    for name, linkage in resource.relationships.items():
        if linkage.links is not None:
            data[links_attribute_name(name)] = linkage.links

    return data
