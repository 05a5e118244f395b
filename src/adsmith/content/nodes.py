"""Typed content document model for ad block HTML.

Block content is a small tree built from a closed set of node variants:

- TextRun: a run of text
- Image: an inline image (void element, no children)
- Link: a hyperlink wrapper around other nodes
- Element: any other inline styling or structural container (p, b, span, br, ...)

Positions inside the tree are addressed by paths: tuples of child indices
starting at the document root. Nodes compare by identity, so a node object
can be remembered and found again as long as it is still part of the tree.
"""

from dataclasses import dataclass, field
from typing import Iterator, Optional, Union


NodePath = tuple[int, ...]


@dataclass(eq=False)
class TextRun:
    """A run of text (entities already decoded)."""

    text: str


@dataclass(eq=False)
class Image:
    """Inline image. Attributes keep their original order."""

    attrs: dict[str, str] = field(default_factory=dict)

    @property
    def src(self) -> str:
        return self.attrs.get("src", "")


@dataclass(eq=False)
class Link:
    """Hyperlink wrapper (``<a>``) around child nodes."""

    attrs: dict[str, str] = field(default_factory=dict)
    children: list["Node"] = field(default_factory=list)

    @property
    def href(self) -> str:
        return self.attrs.get("href", "")


@dataclass(eq=False)
class Element:
    """Styling or structural container identified by its tag name."""

    tag: str
    attrs: dict[str, str] = field(default_factory=dict)
    children: list["Node"] = field(default_factory=list)


Node = Union[TextRun, Image, Link, Element]

# Elements whose text is code, not visible content
HIDDEN_TEXT_TAGS = frozenset({"script", "style"})

# Node types that own a children list
CONTAINER_TYPES = (Link, Element)


def child_nodes(node: Node) -> list[Node]:
    """Return the children list of a node (empty for leaves).

    Raises:
        TypeError: If node is not one of the known variants
    """
    if isinstance(node, (Link, Element)):
        return node.children
    if isinstance(node, (TextRun, Image)):
        return []
    raise TypeError(f"Unknown content node type: {type(node).__name__}")


def node_attrs(node: Node) -> Optional[dict[str, str]]:
    """Return the attribute dict of a node, or None for text runs."""
    if isinstance(node, (Image, Link, Element)):
        return node.attrs
    if isinstance(node, TextRun):
        return None
    raise TypeError(f"Unknown content node type: {type(node).__name__}")


def common_prefix(a: NodePath, b: NodePath) -> NodePath:
    """Longest common prefix of two paths (their nearest common ancestor)."""
    length = 0
    for x, y in zip(a, b):
        if x != y:
            break
        length += 1
    return a[:length]


@dataclass(eq=False)
class Document:
    """Root of a block's content tree.

    Attributes:
        children: Top-level nodes
        revision: Incremented on every mutation; selections captured at an
                  older revision are stale
    """

    children: list[Node] = field(default_factory=list)
    revision: int = 0

    def touch(self) -> None:
        """Record a mutation."""
        self.revision += 1

    def children_at(self, path: NodePath) -> Optional[list[Node]]:
        """Children list of the container at path (root for the empty path)."""
        if not path:
            return self.children
        node = self.node_at(path)
        if node is None or not isinstance(node, CONTAINER_TYPES):
            return None
        return node.children

    def node_at(self, path: NodePath) -> Optional[Node]:
        """Node addressed by path, or None if the path does not exist.

        The empty path addresses the document itself, which is not a node,
        so None is returned for it.
        """
        if not path:
            return None
        siblings = self.children
        node: Optional[Node] = None
        for index in path:
            if index < 0 or index >= len(siblings):
                return None
            node = siblings[index]
            siblings = child_nodes(node)
        return node

    def path_of(self, target: Node) -> Optional[NodePath]:
        """Find the path of a node by identity."""
        for path, node in self.walk():
            if node is target:
                return path
        return None

    def walk(self) -> Iterator[tuple[NodePath, Node]]:
        """Yield (path, node) pairs in document order (pre-order)."""
        stack: list[tuple[NodePath, Node]] = [
            ((i,), node) for i, node in reversed(list(enumerate(self.children)))
        ]
        while stack:
            path, node = stack.pop()
            yield path, node
            children = child_nodes(node)
            for i in range(len(children) - 1, -1, -1):
                stack.append((path + (i,), children[i]))

    def find_all(self, node_type: type) -> list[Node]:
        """All nodes of the given type in document order."""
        return [node for _, node in self.walk() if isinstance(node, node_type)]

    def replace_at(self, path: NodePath, replacements: list[Node]) -> None:
        """Replace the node at path with zero or more nodes, in place.

        Raises:
            IndexError: If path does not address a node
        """
        if not path:
            raise IndexError("Cannot replace the document root")
        siblings = self.children_at(path[:-1])
        index = path[-1]
        if siblings is None or index >= len(siblings):
            raise IndexError(f"No node at path {path}")
        siblings[index:index + 1] = replacements
        self.touch()

    def insert_at(self, parent_path: NodePath, index: int, node: Node) -> NodePath:
        """Insert node as child number ``index`` of the container at parent_path.

        Returns:
            Path of the inserted node

        Raises:
            IndexError: If parent_path is not a container
        """
        siblings = self.children_at(parent_path)
        if siblings is None:
            raise IndexError(f"No container at path {parent_path}")
        index = max(0, min(index, len(siblings)))
        siblings.insert(index, node)
        self.touch()
        return parent_path + (index,)

    def text_content(self) -> str:
        """Concatenated visible text; script and style bodies are skipped."""
        hidden = [
            path for path, node in self.walk()
            if isinstance(node, Element) and node.tag in HIDDEN_TEXT_TAGS
        ]
        return "".join(
            node.text for path, node in self.walk()
            if isinstance(node, TextRun) and not any(path[:len(h)] == h for h in hidden)
        )

    def is_blank(self) -> bool:
        """True when there is no visible text and no image."""
        if self.text_content().strip():
            return False
        return not self.find_all(Image)
