"""Tree representation of container image metadata.

OpenShift reports the metadata of an imported image as an arbitrary JSON
document (``image.dockerImageMetadata`` of an ``ImageStreamTag``). These
classes wrap that document in an immutable tree of typed nodes whose
navigation never fails: looking up a path that does not exist returns the
`UNDEFINED` node, and each caller decides whether absence is an error.
"""

from __future__ import annotations

from abc import ABCMeta, abstractmethod
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, ClassVar, TypeAlias, override

from ..exceptions import MetadataFormatError

__all__ = [
    "UNDEFINED",
    "MappingNode",
    "MetadataNode",
    "MetadataPath",
    "NodeType",
    "ScalarNode",
    "SequenceNode",
    "UndefinedNode",
]

Segment: TypeAlias = str | int
"""One step of a path through the metadata tree."""


class NodeType(str, Enum):
    """Type of a node in the metadata tree."""

    UNDEFINED = "undefined"
    SCALAR = "scalar"
    SEQUENCE = "sequence"
    MAPPING = "mapping"


class MetadataPath(Enum):
    """Paths to fields of the container runtime configuration."""

    COMMAND = ("Config", "Cmd")
    ENTRYPOINT = ("Config", "Entrypoint")
    ENV = ("Config", "Env")
    EXPOSED_PORTS = ("Config", "ExposedPorts")
    LABELS = ("Config", "Labels")
    USER = ("Config", "User")
    WORKING_DIR = ("Config", "WorkingDir")

    @override
    def __str__(self) -> str:
        return ".".join(self.value)


class MetadataNode(metaclass=ABCMeta):
    """Node in the metadata tree.

    Use `from_json` to construct a tree from a parsed JSON document. The
    enumeration methods raise `~ocphelpers.exceptions.MetadataFormatError` if
    called on a node of the wrong type, except on `UNDEFINED`, which behaves
    as an empty collection.
    """

    type: ClassVar[NodeType]
    """Type of this node."""

    @classmethod
    def from_json(cls, value: Any) -> MetadataNode:
        """Convert a parsed JSON value into a metadata tree.

        Parameters
        ----------
        value
            Parsed JSON. JSON ``null`` is converted to `UNDEFINED`.

        Returns
        -------
        MetadataNode
            Root of the tree.

        Raises
        ------
        MetadataFormatError
            Raised if the value contains something other than JSON types.
        """
        match value:
            case None:
                return UNDEFINED
            case bool() | int() | float() | str():
                return ScalarNode(value)
            case Mapping():
                entries = {str(k): cls.from_json(v) for k, v in value.items()}
                return MappingNode(MappingProxyType(entries))
            case list() | tuple():
                return SequenceNode(tuple(cls.from_json(v) for v in value))
            case _:
                msg = f"Unsupported metadata value of type {type(value)}"
                raise MetadataFormatError(msg)

    @property
    def defined(self) -> bool:
        """Whether this node holds a value."""
        return self.type != NodeType.UNDEFINED

    def get(self, *segments: Segment) -> MetadataNode:
        """Navigate to a descendant node.

        Parameters
        ----------
        *segments
            Mapping keys or sequence indices, in order.

        Returns
        -------
        MetadataNode
            Node at that path, or `UNDEFINED` if any step is missing.
        """
        node: MetadataNode = self
        for segment in segments:
            node = node._child(segment)
        return node

    def as_string(self) -> str:
        """Return the value of a scalar node as a string."""
        msg = f"Cannot convert {self.type.value} to a string"
        raise MetadataFormatError(msg)

    def as_list(self) -> list[MetadataNode]:
        """Return the elements of a sequence node."""
        msg = f"Cannot convert {self.type.value} to a list"
        raise MetadataFormatError(msg)

    def as_properties(self) -> list[tuple[str, MetadataNode]]:
        """Return the entries of a mapping node in document order."""
        msg = f"Cannot convert {self.type.value} to a property list"
        raise MetadataFormatError(msg)

    def keys(self) -> list[str]:
        """Return the keys of a mapping node in document order."""
        return [name for name, _ in self.as_properties()]

    @abstractmethod
    def to_json(self) -> Any:
        """Convert the tree back to plain JSON types."""

    def _child(self, segment: Segment) -> MetadataNode:
        return UNDEFINED


@dataclass(frozen=True, slots=True)
class UndefinedNode(MetadataNode):
    """Absent value."""

    type: ClassVar[NodeType] = NodeType.UNDEFINED

    @override
    def as_list(self) -> list[MetadataNode]:
        return []

    @override
    def as_properties(self) -> list[tuple[str, MetadataNode]]:
        return []

    @override
    def to_json(self) -> None:
        return None


UNDEFINED = UndefinedNode()
"""Shared node returned for every missing path."""


@dataclass(frozen=True, slots=True)
class ScalarNode(MetadataNode):
    """String, number, or boolean value."""

    value: str | int | float | bool

    type: ClassVar[NodeType] = NodeType.SCALAR

    @override
    def as_string(self) -> str:
        if isinstance(self.value, bool):
            return "true" if self.value else "false"
        return str(self.value)

    @override
    def to_json(self) -> str | int | float | bool:
        return self.value


@dataclass(frozen=True, slots=True)
class SequenceNode(MetadataNode):
    """Ordered list of nodes."""

    items: tuple[MetadataNode, ...]

    type: ClassVar[NodeType] = NodeType.SEQUENCE

    def __iter__(self) -> Iterator[MetadataNode]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    @override
    def as_list(self) -> list[MetadataNode]:
        return list(self.items)

    @override
    def to_json(self) -> list[Any]:
        return [i.to_json() for i in self.items]

    @override
    def _child(self, segment: Segment) -> MetadataNode:
        if not isinstance(segment, int) or isinstance(segment, bool):
            return UNDEFINED
        if 0 <= segment < len(self.items):
            return self.items[segment]
        return UNDEFINED


@dataclass(frozen=True, slots=True)
class MappingNode(MetadataNode):
    """Mapping from string keys to nodes, in document order."""

    entries: Mapping[str, MetadataNode]

    type: ClassVar[NodeType] = NodeType.MAPPING

    def __len__(self) -> int:
        return len(self.entries)

    @override
    def as_properties(self) -> list[tuple[str, MetadataNode]]:
        return list(self.entries.items())

    @override
    def to_json(self) -> dict[str, Any]:
        return {k: v.to_json() for k, v in self.entries.items()}

    @override
    def _child(self, segment: Segment) -> MetadataNode:
        if not isinstance(segment, str):
            return UNDEFINED
        return self.entries.get(segment, UNDEFINED)
