"""
Statement arena

Design:
- Every top-level statement lives in an arena entry addressed by a NodeId.
- Replacing a statement swaps the node the id points to; the id, the
  statement's comments and its spacing stay where they were, so ids captured
  by an earlier scan remain valid.
- Removing a statement retires its id; any later lookup raises StaleNodeError
  instead of silently touching the wrong statement. Its comments move on to
  the next statement (or the footer).
- Ids are allocated from a single increasing counter and never reused.

The Leading Comment Block lives on the tree (header), not on a statement: the
renderer always prints it first, whatever statement ends up first.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple
import logging

from .errors import EsmifyImplementationError
from .nodes import Comment, Node, Statement

logger = logging.getLogger(__name__)


@dataclass(frozen=True, order=True)
class NodeId:
    """
    Stable identifier of one top-level statement slot.

    - index: sequential, strictly increasing within one tree
    - Immutable (frozen) so it can key dicts and sets
    """
    index: int

    def __str__(self) -> str:
        return f"#{self.index}"


class StaleNodeError(EsmifyImplementationError):
    """Raised when a retired NodeId is used."""
    def __init__(self, node_id: NodeId):
        super().__init__(f"statement {node_id} was removed from the tree", error_code="E9001")
        self.node_id = node_id


@dataclass
class StatementEntry:
    """
    Arena entry: the statement plus the trivia that belongs to its slot.

    leading_comments: comments on the lines above the statement
    trailing_comments: comments starting on the statement's last line
    blank_line_before: the statement was separated from what precedes it by
    at least one empty line
    """
    node: Statement
    leading_comments: Tuple[Comment, ...] = ()
    trailing_comments: Tuple[Comment, ...] = ()
    blank_line_before: bool = False


class SyntaxTree:
    """
    One parsed file: source text, Leading Comment Block, ordered statement body.

    Mutated in place by one pass at a time. modified flips to True on the
    first structural change; the renderer returns the original text verbatim
    while it is False.
    """

    def __init__(
        self,
        file_path: str,
        source: bytes,
        hashbang: Optional[str] = None,
        header: Tuple[Comment, ...] = (),
        header_gap: bool = False,
        footer: Tuple[Comment, ...] = (),
    ):
        self.file_path = file_path
        self.source = source
        self.hashbang = hashbang
        self.header = header
        self.header_gap = header_gap
        self.footer = footer
        self.modified = False
        self._entries: Dict[NodeId, StatementEntry] = {}
        self._order: List[NodeId] = []
        self._retired: set = set()
        self._next_index = 0

    # ------------------------------------------------------------------
    # Allocation
    # ------------------------------------------------------------------

    def _allocate(self, entry: StatementEntry) -> NodeId:
        node_id = NodeId(self._next_index)
        self._next_index += 1
        self._entries[node_id] = entry
        return node_id

    def append(self, entry: StatementEntry) -> NodeId:
        """Append a parsed statement (front end only; does not mark modified)."""
        node_id = self._allocate(entry)
        self._order.append(node_id)
        return node_id

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def body(self) -> Tuple[NodeId, ...]:
        return tuple(self._order)

    def __len__(self) -> int:
        return len(self._order)

    def entry(self, node_id: NodeId) -> StatementEntry:
        if node_id in self._retired:
            raise StaleNodeError(node_id)
        try:
            return self._entries[node_id]
        except KeyError:
            raise EsmifyImplementationError(f"unknown statement id {node_id}") from None

    def get(self, node_id: NodeId) -> Statement:
        return self.entry(node_id).node

    def is_live(self, node_id: NodeId) -> bool:
        return node_id in self._entries and node_id not in self._retired

    def statements(self) -> List[Tuple[NodeId, Statement]]:
        """Snapshot of (id, statement) pairs in body order; safe to mutate while iterating."""
        return [(node_id, self._entries[node_id].node) for node_id in self._order]

    def entries(self) -> Iterator[StatementEntry]:
        for node_id in self._order:
            yield self._entries[node_id]

    def walk(self) -> Iterator[Node]:
        """Every node of every statement, depth first, statements in body order."""
        from .ast_visitor import iter_nodes
        for node_id in list(self._order):
            yield from iter_nodes(self._entries[node_id].node)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def replace(self, node_id: NodeId, node: Statement, *extra: Statement) -> List[NodeId]:
        """
        Swap the statement at node_id for node; extra statements follow it.

        Returns the ids of all statements now occupying the slot, node_id first.
        """
        entry = self.entry(node_id)
        entry.node = node
        ids = [node_id]
        position = self._order.index(node_id) + 1
        for offset, stmt in enumerate(extra):
            new_id = self._allocate(StatementEntry(stmt))
            self._order.insert(position + offset, new_id)
            ids.append(new_id)
        self.modified = True
        logger.debug(f"replaced {node_id} with {len(ids)} statement(s)")
        return ids

    def remove(self, node_id: NodeId) -> None:
        """
        Remove the statement and retire its id.

        The statement's comments survive it: they move in front of the next
        statement's own leading comments, or to the footer when it was last.
        """
        entry = self.entry(node_id)
        position = self._order.index(node_id)
        orphaned = entry.leading_comments + entry.trailing_comments
        if orphaned:
            if position + 1 < len(self._order):
                following = self._entries[self._order[position + 1]]
                following.leading_comments = orphaned + following.leading_comments
                following.blank_line_before = following.blank_line_before or entry.blank_line_before
            else:
                self.footer = orphaned + self.footer
        del self._order[position]
        self._retired.add(node_id)
        del self._entries[node_id]
        self.modified = True

    def prepend(self, *nodes: Statement) -> List[NodeId]:
        """
        Insert statements at the front of the body, in the given order.

        They land after the Leading Comment Block, which stays on the tree.
        """
        ids = []
        for offset, stmt in enumerate(nodes):
            new_id = self._allocate(StatementEntry(stmt))
            self._order.insert(offset, new_id)
            ids.append(new_id)
        if ids:
            self.modified = True
        return ids

    # ------------------------------------------------------------------
    # Source access
    # ------------------------------------------------------------------

    def text_of(self, node: Node) -> str:
        """Original text of a parsed node."""
        loc = node.location
        if loc is None:
            raise EsmifyImplementationError(f"{type(node).__name__} has no source text")
        return self.source[loc.start:loc.end].decode("utf-8")

    @property
    def source_text(self) -> str:
        return self.source.decode("utf-8")
