"""Tests for tree assembly."""

from app.core.tree import NodeRow, build_tree


def _rows() -> list[NodeRow]:
    # Deliberately shuffled; sort_order decides sibling order, id breaks ties
    return [
        NodeRow(id=5, name="Tablets", parent_id=1, sort_order=1),
        NodeRow(id=3, name="Smartphones", parent_id=2, sort_order=0),
        NodeRow(id=1, name="Electronics", sort_order=0),
        NodeRow(id=4, name="Audio", sort_order=1),
        NodeRow(id=2, name="Phones", parent_id=1, sort_order=0),
        NodeRow(id=6, name="Laptops", parent_id=1, sort_order=1),
    ]


class TestBuildTree:
    """Nested and flat shapes built from the same rows."""

    def test_roots_ordered_by_sort_order(self):
        tree = build_tree(_rows())
        assert [root.id for root in tree.roots] == [1, 4]

    def test_children_match_parent_links(self):
        rows = _rows()
        tree = build_tree(rows)

        def check(node):
            expected = sorted(
                (row for row in rows if row.parent_id == node.id),
                key=lambda r: (r.sort_order, r.id),
            )
            assert [child.id for child in node.children] == [row.id for row in expected]
            for child in node.children:
                check(child)

        for root in tree.roots:
            check(root)

    def test_sibling_ties_broken_by_id(self):
        tree = build_tree(_rows())
        electronics = tree.roots[0]
        assert [child.id for child in electronics.children] == [2, 5, 6]

    def test_flat_list_is_preorder(self):
        tree = build_tree(_rows())
        assert [node.id for node in tree.flat] == [1, 2, 3, 5, 6, 4]

    def test_flat_levels_follow_parents(self):
        tree = build_tree(_rows())
        levels = {node.id: node.level for node in tree.flat}

        for node in tree.flat:
            if node.parent_id is None:
                assert node.level == 0
            else:
                assert node.level == levels[node.parent_id] + 1

    def test_flat_paths_and_children_count(self):
        tree = build_tree(_rows())
        smartphones = tree.find(3)

        assert smartphones is not None
        assert smartphones.path == (1, 2, 3)
        assert tree.find(1).children_count == 3
        assert tree.find(3).children_count == 0

    def test_subtrees_are_contiguous(self):
        tree = build_tree(_rows())
        ids = [node.id for node in tree.flat]
        # Electronics subtree occupies the first five slots
        assert set(ids[: ids.index(4)]) == {1, 2, 3, 5, 6}

    def test_empty_input(self):
        tree = build_tree([])
        assert tree.roots == []
        assert tree.flat == []
        assert len(tree) == 0

    def test_does_not_mutate_input(self):
        rows = _rows()
        snapshot = list(rows)
        build_tree(rows)
        assert rows == snapshot

    def test_rebuild_is_identical(self):
        first = build_tree(_rows())
        second = build_tree(_rows())

        assert [n.as_dict() for n in first.roots] == [n.as_dict() for n in second.roots]
        assert [n.as_dict() for n in first.flat] == [n.as_dict() for n in second.flat]


class TestInconsistentRows:
    """Rows left behind by earlier inconsistent states stay visible."""

    def test_missing_parent_becomes_root(self):
        rows = [
            NodeRow(id=1, name="Root"),
            NodeRow(id=2, name="Orphan", parent_id=99),
        ]
        tree = build_tree(rows)

        assert [root.id for root in tree.roots] == [1, 2]
        assert tree.find(2).level == 0
        assert tree.find(2).parent_id == 99

    def test_self_parent_becomes_root(self):
        tree = build_tree([NodeRow(id=7, name="Loop", parent_id=7)])

        assert [root.id for root in tree.roots] == [7]
        assert tree.roots[0].children == []

    def test_stored_cycle_is_surfaced_without_hanging(self):
        rows = [
            NodeRow(id=1, name="Root"),
            NodeRow(id=2, name="A", parent_id=3),
            NodeRow(id=3, name="B", parent_id=2),
        ]
        tree = build_tree(rows)

        assert sorted(node.id for node in tree.flat) == [1, 2, 3]
        assert len(tree.flat) == 3
        # 2 is promoted first, 3 hangs below it
        assert [root.id for root in tree.roots] == [1, 2]
        assert [child.id for child in tree.roots[1].children] == [3]

    def test_deep_chain_does_not_recurse(self):
        rows = [NodeRow(id=1, name="n1")] + [
            NodeRow(id=i, name=f"n{i}", parent_id=i - 1) for i in range(2, 5001)
        ]
        tree = build_tree(rows)

        assert len(tree) == 5000
        assert tree.flat[-1].level == 4999


class TestSerialization:
    """Dict shapes used by the listing endpoint."""

    def test_nested_dict_carries_extras_and_children(self):
        rows = [
            NodeRow(id=1, name="Display", extra={"values": [{"id": 1, "value": "OLED"}]}),
            NodeRow(id=2, name="Panel", parent_id=1),
        ]
        data = build_tree(rows).roots[0].as_dict()

        assert data["values"] == [{"id": 1, "value": "OLED"}]
        assert data["children_count"] == 1
        assert data["children"][0]["name"] == "Panel"
        assert data["children"][0]["level"] == 1

    def test_flat_dict_has_path_list_and_no_children(self):
        rows = [NodeRow(id=1, name="Root"), NodeRow(id=2, name="Leaf", parent_id=1)]
        data = build_tree(rows).flat[1].as_dict()

        assert data["path"] == [1, 2]
        assert "children" not in data
