"""
Tests for the mutation engine: create, move and delete.

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""

import random

import pytest

from nested_set.core.exceptions import (
    InvalidArgumentError,
    InvalidMoveError,
    InvalidStateError,
    UnresolvedTargetError,
)
from nested_set.core.node import Node

FLAT = [("R", None), ("A", "R"), ("B", "R")]
DEEP = [("R", None), ("A", "R"), ("B", "A"), ("C", "R"), ("D", "C")]


class TestCreate:
    """Test node creation through the host table."""

    def test_first_root(self, table, snapshot):
        """The first node spans (1, 2) at depth 0."""
        table.create(name="R")
        assert snapshot() == {"R": (1, 2, 0, None)}

    def test_children_are_appended(self, build, snapshot, assert_consistent):
        """New children become the last child of their parent."""
        build(FLAT)
        assert snapshot() == {
            "R": (1, 6, 0, None),
            "A": (2, 3, 1, "R"),
            "B": (4, 5, 1, "R"),
        }
        assert_consistent()

    def test_nested_creation(self, build, snapshot, assert_consistent):
        """Grandchildren nest inside their parent's interval."""
        build(DEEP)
        assert snapshot() == {
            "R": (1, 10, 0, None),
            "A": (2, 5, 1, "R"),
            "B": (3, 4, 2, "A"),
            "C": (6, 9, 1, "R"),
            "D": (7, 8, 2, "C"),
        }
        assert_consistent()

    def test_second_root_uses_next_free_pair(self, build, table, snapshot):
        """Roots are appended after the highest right bound."""
        build(FLAT)
        table.create(name="S")
        assert snapshot()["S"] == (7, 8, 0, None)

    def test_returned_node_is_current(self, build, table):
        """create() returns the handle with final bounds."""
        nodes = build([("R", None)])
        child = table.create(nodes["R"].id, name="X")
        assert (child.left, child.right, child.depth) == (2, 3, 1)
        assert child.exists
        assert child.parent_id == nodes["R"].id

    def test_missing_parent_rolls_back(self, build, table):
        """Creation under an unknown parent leaves no row behind."""
        build([("R", None)])
        node = table.new_node(999, name="orphan")
        with pytest.raises(UnresolvedTargetError, match="Cannot resolve target node."):
            table.save(node)
        assert table.store.count() == 1
        assert node.id is None
        assert not node.exists
        assert node.left is None

    def test_unknown_payload_column(self, table):
        """Payload keys must be declared columns."""
        with pytest.raises(InvalidArgumentError, match="Unknown payload columns"):
            table.new_node(None, colour="red")


class TestMove:
    """Test move_to and its validation."""

    def test_move_into_sibling(self, build, table, snapshot, assert_consistent):
        """B becomes a child of A; bounds swap in one pass."""
        nodes = build(FLAT)
        moved = table.behavior.make_child_of(nodes["B"], nodes["A"])
        assert (moved.left, moved.right, moved.depth) == (3, 4, 2)
        assert moved.parent_id == nodes["A"].id
        assert snapshot() == {
            "R": (1, 6, 0, None),
            "A": (2, 5, 1, "R"),
            "B": (3, 4, 2, "A"),
        }
        assert_consistent()

    def test_move_by_target_id(self, build, table, snapshot):
        """Targets may be given as keys."""
        nodes = build(FLAT)
        table.behavior.move_to(nodes["B"], nodes["A"].id, "child")
        assert snapshot()["B"] == (3, 4, 2, "A")

    def test_move_subtree_updates_descendant_depths(
        self, build, table, snapshot, assert_consistent
    ):
        """Every node of the moved subtree gets its new depth."""
        nodes = build(DEEP)
        table.behavior.make_child_of(nodes["A"], nodes["C"])
        assert snapshot() == {
            "R": (1, 10, 0, None),
            "C": (2, 9, 1, "R"),
            "D": (3, 4, 2, "C"),
            "A": (5, 8, 2, "C"),
            "B": (6, 7, 3, "A"),
        }
        assert_consistent()

    def test_move_to_right_of(self, build, table, snapshot, assert_consistent):
        """Right-of places the node directly after the target."""
        nodes = build(DEEP)
        table.behavior.move_to_right_of(nodes["B"], nodes["C"])
        state = snapshot()
        assert state["B"] == (8, 9, 1, "R")
        assert state["C"][:2] == (4, 7)
        assert_consistent()

    def test_move_to_left_of(self, build, table, snapshot, assert_consistent):
        """Left-of places the node directly before the target."""
        nodes = build(DEEP)
        table.behavior.move_to_left_of(nodes["D"], nodes["A"])
        state = snapshot()
        assert state["D"] == (2, 3, 1, "R")
        assert state["A"] == (4, 7, 1, "R")
        assert_consistent()

    def test_move_between_trees(self, build, table, snapshot, assert_consistent):
        """Subtrees can move across roots."""
        nodes = build(FLAT + [("S", None), ("T", "S")])
        table.behavior.make_child_of(nodes["A"], nodes["T"])
        state = snapshot()
        assert state["A"][2:] == (2, "T")
        assert state["R"] == (1, 4, 0, None)
        assert_consistent()

    def test_root_under_other_tree(self, build, table, snapshot, assert_consistent):
        """A whole tree can become a subtree of another."""
        nodes = build(FLAT + [("S", None)])
        table.behavior.make_child_of(nodes["R"], nodes["S"])
        state = snapshot()
        assert state["S"] == (1, 8, 0, None)
        assert state["R"] == (2, 7, 1, "S")
        assert state["A"][2] == 2
        assert_consistent()

    def test_stale_target_handle_is_refreshed(self, build, table, snapshot):
        """Bounds are re-read from the store before moving."""
        nodes = build(DEEP)
        stale_d = nodes["D"]
        table.behavior.make_child_of(nodes["A"], nodes["C"])
        table.behavior.move_to_left_of(nodes["B"], stale_d)
        state = snapshot()
        assert state["B"][2:] == (2, "C")
        assert state["B"][1] + 1 == state["D"][0]

    def test_convenience_aliases(self, build, table, snapshot, assert_consistent):
        """Sibling helpers map onto left/right moves."""
        nodes = build([("R", None), ("A", "R"), ("B", "R"), ("C", "R")])
        behavior = table.behavior
        behavior.make_previous_sibling_of(nodes["C"], nodes["A"])
        assert [n["name"] for n in behavior.children(nodes["R"])] == ["C", "A", "B"]
        behavior.make_next_sibling_of(nodes["C"], nodes["B"])
        assert [n["name"] for n in behavior.children(nodes["R"])] == ["A", "B", "C"]
        behavior.make_sibling_of(nodes["A"], nodes["C"])
        assert [n["name"] for n in behavior.children(nodes["R"])] == ["B", "C", "A"]
        assert_consistent()


class TestMoveValidation:
    """Test rejected and no-op moves."""

    def test_cycle_is_rejected(self, build, table, snapshot):
        """A node cannot move into its own subtree; nothing changes."""
        nodes = build(DEEP)
        before = snapshot()
        with pytest.raises(InvalidMoveError, match="descendant of itself") as exc_info:
            table.behavior.make_child_of(nodes["A"], nodes["B"])
        assert exc_info.value.code == "INVALID_MOVE"
        assert exc_info.value.target_id == nodes["B"].id
        assert snapshot() == before

    def test_root_into_descendant_is_rejected(self, build, table):
        """Moving a root under its own child is a cycle too."""
        nodes = build(DEEP)
        with pytest.raises(InvalidMoveError):
            table.behavior.move_to_left_of(nodes["R"], nodes["D"])

    def test_move_to_self(self, build, table):
        """A node cannot be its own target."""
        nodes = build(FLAT)
        with pytest.raises(InvalidMoveError, match="moved to itself"):
            table.behavior.make_child_of(nodes["A"], nodes["A"].id)

    def test_unsaved_node(self, build, table):
        """Only persisted nodes can move."""
        nodes = build(FLAT)
        with pytest.raises(InvalidStateError, match="A new node cannot be moved."):
            table.behavior.make_child_of(Node(payload={"name": "x"}), nodes["A"])

    def test_invalid_position(self, build, table):
        """Position must be child, left or right."""
        nodes = build(FLAT)
        with pytest.raises(InvalidArgumentError, match='Supplied position is "inside"'):
            table.behavior.move_to(nodes["B"], nodes["A"], "inside")

    def test_unresolved_target(self, build, table, snapshot):
        """Unknown target keys are reported."""
        nodes = build(FLAT)
        before = snapshot()
        with pytest.raises(
            UnresolvedTargetError, match=r"^Cannot resolve target node\.$"
        ):
            table.behavior.make_child_of(nodes["A"], 12345)
        assert snapshot() == before

    def test_unsaved_target(self, build, table):
        """A target that was never saved cannot be resolved."""
        nodes = build(FLAT)
        with pytest.raises(UnresolvedTargetError):
            table.behavior.make_child_of(nodes["A"], Node())

    def test_noop_move_returns_unchanged(self, build, table, snapshot):
        """Moving the last child to be a child of its parent does nothing."""
        nodes = build(FLAT)
        before = snapshot()
        node = table.behavior.make_child_of(nodes["B"], nodes["R"])
        assert (node.left, node.right) == (4, 5)
        assert snapshot() == before

    def test_noop_left_of_right_neighbour(self, build, table, snapshot):
        """A node already left of its neighbour stays put."""
        nodes = build(FLAT)
        before = snapshot()
        table.behavior.move_to_left_of(nodes["A"], nodes["B"])
        assert snapshot() == before

    def test_failed_move_is_atomic(self, build, table, snapshot, monkeypatch):
        """A failure after the bound swap rolls the whole move back."""
        nodes = build(DEEP)
        before = snapshot()

        def fail(node):
            raise RuntimeError("depth refresh failed")

        monkeypatch.setattr(table.behavior.engine, "refresh_descendant_depths", fail)
        with pytest.raises(RuntimeError, match="depth refresh failed"):
            table.behavior.make_child_of(nodes["A"], nodes["C"])
        assert snapshot() == before
        assert not table.store.in_transaction()


class TestSiblingMoves:
    """Test move_left, move_right and make_root."""

    def test_move_right_swaps_with_right_sibling(self, build, table, assert_consistent):
        """A and B trade places."""
        nodes = build([("R", None), ("A", "R"), ("B", "R"), ("C", "R")])
        table.behavior.move_right(nodes["A"])
        names = [n["name"] for n in table.behavior.children(nodes["R"])]
        assert names == ["B", "A", "C"]
        assert_consistent()

    def test_move_left_swaps_with_left_sibling(self, build, table, assert_consistent):
        """C and B trade places."""
        nodes = build([("R", None), ("A", "R"), ("B", "R"), ("C", "R")])
        table.behavior.move_left(nodes["C"])
        names = [n["name"] for n in table.behavior.children(nodes["R"])]
        assert names == ["A", "C", "B"]
        assert_consistent()

    def test_move_left_of_first_child(self, build, table):
        """The first child has nowhere further left to go."""
        nodes = build(FLAT)
        with pytest.raises(
            UnresolvedTargetError, match="cannot move any further to the left"
        ) as exc_info:
            table.behavior.move_left(nodes["A"])
        assert exc_info.value.position == "left"

    def test_move_right_of_last_child(self, build, table):
        """The last child has nowhere further right to go."""
        nodes = build(FLAT)
        with pytest.raises(
            UnresolvedTargetError, match="cannot move any further to the right"
        ):
            table.behavior.move_right(nodes["B"])

    def test_make_root(self, build, table, snapshot, assert_consistent):
        """A child subtree becomes a tree of its own after its old root."""
        nodes = build(DEEP)
        node = table.behavior.make_root(nodes["A"])
        assert node.parent_id is None
        assert node.depth == 0
        state = snapshot()
        assert state["R"] == (1, 6, 0, None)
        assert state["A"] == (7, 10, 0, None)
        assert state["B"] == (8, 9, 1, "A")
        assert_consistent()

    def test_make_root_on_root(self, build, table, snapshot):
        """A root cannot be moved next to itself."""
        nodes = build(FLAT)
        before = snapshot()
        with pytest.raises(InvalidMoveError, match="moved to itself"):
            table.behavior.make_root(nodes["R"])
        assert snapshot() == before


class TestRealignOnSave:
    """Test moves triggered by changing the parent column directly."""

    def test_change_parent(self, build, table, snapshot, assert_consistent):
        """Saving a new parent moves the node under it."""
        nodes = build(FLAT)
        node = nodes["B"]
        node.parent_id = nodes["A"].id
        table.save(node)
        assert snapshot()["B"] == (3, 4, 2, "A")
        assert node.depth == 2
        assert_consistent()

    def test_clear_parent(self, build, table, snapshot, assert_consistent):
        """Clearing the parent makes the node a root."""
        nodes = build(FLAT)
        node = nodes["A"]
        node.parent_id = None
        table.save(node)
        assert snapshot() == {
            "R": (1, 4, 0, None),
            "B": (2, 3, 1, "R"),
            "A": (5, 6, 0, None),
        }
        assert_consistent()

    def test_payload_only_save(self, build, table, snapshot):
        """Saving without a parent change does not move the node."""
        nodes = build(FLAT)
        before = snapshot()
        node = nodes["A"]
        node.payload["name"] = "A"
        table.save(node)
        assert snapshot() == before

    def test_invalid_parent_change_rolls_back(self, build, table, snapshot):
        """A cyclic parent change is rejected and the row restored."""
        nodes = build(DEEP)
        before = snapshot()
        node = nodes["A"]
        node.parent_id = nodes["B"].id
        with pytest.raises(InvalidMoveError):
            table.save(node)
        assert snapshot() == before
        assert node.original_parent_id == nodes["R"].id


class TestDelete:
    """Test subtree deletion and gap closing."""

    def test_delete_repacks(self, build, table, snapshot, assert_consistent):
        """Deleting A removes B and shifts C, D left by A's width."""
        nodes = build(DEEP)
        table.delete(nodes["A"])
        assert snapshot() == {
            "R": (1, 6, 0, None),
            "C": (2, 5, 1, "R"),
            "D": (3, 4, 2, "C"),
        }
        assert not nodes["A"].exists
        assert_consistent()

    def test_delete_root_of_one_tree(self, build, table, snapshot, assert_consistent):
        """Other trees are repacked after a whole tree is deleted."""
        nodes = build(FLAT + [("S", None), ("T", "S")])
        table.delete(nodes["R"])
        assert snapshot() == {"S": (1, 4, 0, None), "T": (2, 3, 1, "S")}
        assert_consistent()

    def test_delete_leaf(self, build, table, snapshot, assert_consistent):
        """A leaf has no descendants to remove."""
        nodes = build(DEEP)
        table.delete(nodes["B"])
        assert snapshot()["A"] == (2, 3, 1, "R")
        assert_consistent()

    def test_delete_descendants_count(self, build, table):
        """delete_descendants reports the removed rows."""
        nodes = build(DEEP)
        assert table.behavior.delete_descendants(nodes["R"]) == 4

    def test_delete_descendants_unsaved(self, table):
        """An unsaved node has nothing to delete."""
        assert table.behavior.delete_descendants(Node()) == 0

    def test_delete_unsaved(self, table):
        """The host refuses to delete a node that was never saved."""
        with pytest.raises(InvalidStateError):
            table.delete(Node())


class TestSequences:
    """Invariants hold after arbitrary move sequences."""

    def test_random_moves_keep_invariants(self, build, table, assert_consistent):
        """Packing, nesting, parent and depth stay consistent."""
        layout = [("n0", None)]
        for i in range(1, 12):
            layout.append((f"n{i}", f"n{(i - 1) // 2}"))
        layout.append(("m0", None))
        nodes = build(layout)
        handles = list(nodes.values())

        rng = random.Random(7)
        applied = 0
        for _ in range(60):
            node, target = rng.choice(handles), rng.choice(handles)
            position = rng.choice(["child", "left", "right"])
            try:
                table.behavior.move_to(node, target, position)
            except InvalidMoveError:
                continue
            applied += 1
            assert_consistent()
        assert applied > 0
        assert table.store.count() == len(layout)

    def test_containment_matches_parent_chain(self, build, table):
        """Interval containment agrees with walking parent pointers."""
        nodes = build(DEEP + [("E", "D"), ("F", None)])
        table.behavior.make_child_of(nodes["C"], nodes["B"])
        table.behavior.move_to_left_of(nodes["F"], nodes["E"])

        rows = {node.id: node for node in table.all()}

        def ancestors_by_chain(node):
            found = set()
            parent_id = node.parent_id
            while parent_id is not None:
                found.add(parent_id)
                parent_id = rows[parent_id].parent_id
            return found

        for a in rows.values():
            for b in rows.values():
                contains = a.left < b.left and b.right < a.right
                assert contains == (a.id in ancestors_by_chain(b))
