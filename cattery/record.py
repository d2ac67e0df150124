from collections import namedtuple
from typing import Any, Dict, List, Optional, Union


class ResourceIdentifier(namedtuple("ResourceIdentifier", ["type", "id"])):
    """
    (type, id) reference to a record that hasn't been loaded
    """

    __slots__ = ()

    @property
    def identifier(self) -> "ResourceIdentifier":
        return self


class Record:
    """
    Read-only projection of a stored resource, fetched by the loader for a single request

    `relationships` maps every relationship name declared on the type to an ordered list of
    related `Record`s (when the relationship was included) or `ResourceIdentifier`s.
    The same `Record` instance may be referenced by multiple owners.
    """

    def __init__(
        self,
        type: str,
        id: str,
        attributes: Optional[Dict[str, Any]] = None,
        relationships: Optional[Dict[str, List[Union["Record", ResourceIdentifier]]]] = None,
    ) -> None:
        # pylint: disable=redefined-builtin
        self.type = type
        self.id = str(id)
        self.attributes = dict(attributes or {})
        self.relationships = relationships if relationships is not None else {}

    @property
    def identifier(self) -> ResourceIdentifier:
        return ResourceIdentifier(self.type, self.id)

    def __repr__(self) -> str:
        return f"<Record {self.type}/{self.id}>"
