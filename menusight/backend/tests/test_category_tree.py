"""
Tests for the menu category tree builder.
"""
import pytest

from menusight.exceptions import InvalidParentError
from menusight.schemas.catalog import MenuCategory, MenuProduct
from menusight.schemas.menu_tree import VIEW_CUSTOMER
from menusight.services.category_tree import (
    active_nodes,
    build_category_tree,
    descendant_ids,
    effective_parents,
    parent_options,
    products_in_category,
    validate_parent,
)


def mc(node_id, name, parent=None, order=0, active=True):
    return MenuCategory.model_validate({
        "_id": node_id,
        "menu": "menu1",
        "category": {"_id": f"cat-{node_id}", "name": name, "isActive": active},
        "parent": parent,
        "order": order,
    })


def assert_well_formed(nodes):
    """Every node appears once, after its parent, one level deeper."""
    position = {}
    for index, node in enumerate(nodes):
        assert node.id not in position
        position[node.id] = index
        if node.parent_id is None:
            assert node.depth == 0
        else:
            parent = nodes[position[node.parent_id]]
            assert node.depth == parent.depth + 1


def test_empty_input_gives_empty_tree():
    assert build_category_tree([]) == []


def test_admin_view_orders_siblings_by_order_then_depth_first():
    nodes = build_category_tree([
        mc("drinks", "Drinks", order=2),
        mc("food", "Food", order=1),
        mc("soups", "Soups", parent="food", order=2),
        mc("kebabs", "Kebabs", parent="food", order=1),
        mc("adana", "Adana", parent="kebabs"),
        mc("cold", "Cold Drinks", parent="drinks"),
    ])

    assert [n.id for n in nodes] == ["food", "kebabs", "adana", "soups", "drinks", "cold"]
    assert [n.depth for n in nodes] == [0, 1, 2, 1, 0, 1]
    assert_well_formed(nodes)


def test_admin_view_breaks_order_ties_by_name():
    nodes = build_category_tree([
        mc("b", "Pide", order=1),
        mc("a", "Corba", order=1),
        mc("c", "Ana", order=0),
    ])
    assert [n.name for n in nodes] == ["Ana", "Corba", "Pide"]


def test_customer_view_ignores_order_and_sorts_turkish_names():
    nodes = build_category_tree([
        mc("z", "Zeytinyağlılar", order=0),
        mc("c", "Çorbalar", order=5),
        mc("a", "Ana Yemekler", order=9),
        mc("i", "İçecekler", order=1),
        mc("s", "Izgaralar", order=2),
    ], view=VIEW_CUSTOMER, locale="tr")

    assert [n.name for n in nodes] == ["Ana Yemekler", "Çorbalar", "Izgaralar", "İçecekler", "Zeytinyağlılar"]


def test_indent_follows_depth():
    nodes = build_category_tree([
        mc("root", "Root"),
        mc("child", "Child", parent="root"),
        mc("grandchild", "Grandchild", parent="child"),
    ], indent_unit=1.5)
    assert [n.indent for n in nodes] == [0, 1.5, 3.0]


def test_missing_parent_makes_node_a_root():
    nodes = build_category_tree([
        mc("a", "A"),
        mc("orphan", "Orphan", parent="deleted-assignment"),
    ])
    orphan = next(n for n in nodes if n.id == "orphan")
    assert orphan.depth == 0
    assert orphan.parent_id is None


def test_two_node_cycle_terminates_with_both_at_depth_zero():
    nodes = build_category_tree([
        mc("a", "A", parent="b"),
        mc("b", "B", parent="a"),
    ])
    assert sorted(n.id for n in nodes) == ["a", "b"]
    assert all(n.depth == 0 for n in nodes)
    assert_well_formed(nodes)


def test_self_parent_is_a_root():
    nodes = build_category_tree([mc("a", "A", parent="a")])
    assert len(nodes) == 1
    assert nodes[0].depth == 0


def test_node_hanging_off_a_cycle_stays_under_its_parent():
    nodes = build_category_tree([
        mc("x", "X", parent="y"),
        mc("y", "Y", parent="x"),
        mc("z", "Z", parent="x"),
        mc("w", "W"),
    ])
    assert [(n.id, n.depth) for n in nodes] == [("w", 0), ("x", 0), ("z", 1), ("y", 0)]
    assert_well_formed(nodes)


def test_effective_parents_never_contain_a_cycle():
    parents = effective_parents([
        mc("a", "A", parent="c"),
        mc("b", "B", parent="a"),
        mc("c", "C", parent="b"),
        mc("d", "D", parent="b"),
    ])
    assert parents == {"a": None, "b": None, "c": None, "d": "b"}


def test_repeated_ids_are_emitted_once():
    nodes = build_category_tree([mc("a", "A"), mc("a", "A copy"), mc("b", "B", parent="a")])
    assert [n.id for n in nodes] == ["a", "b"]
    assert nodes[0].name == "A"


def test_populated_parent_object_is_resolved():
    child = MenuCategory.model_validate({
        "_id": "child",
        "category": {"_id": "cat-child", "name": "Child"},
        "parent": {"_id": "root", "category": "cat-root"},
    })
    nodes = build_category_tree([mc("root", "Root"), child])
    assert [(n.id, n.depth) for n in nodes] == [("root", 0), ("child", 1)]


def test_deep_chain_does_not_recurse():
    depth = 1500
    assignments = [mc("n0", "N0")] + [mc(f"n{i}", f"N{i}", parent=f"n{i - 1}") for i in range(1, depth)]
    nodes = build_category_tree(reversed(assignments))
    assert len(nodes) == depth
    assert nodes[-1].depth == depth - 1


def test_active_nodes_hides_inactive_subtrees():
    nodes = build_category_tree([
        mc("food", "Food", order=1),
        mc("kebabs", "Kebabs", parent="food", active=False),
        mc("adana", "Adana", parent="kebabs"),
        mc("soups", "Soups", parent="food", order=1),
        mc("drinks", "Drinks", order=2),
    ])
    assert [n.id for n in active_nodes(nodes)] == ["food", "soups", "drinks"]


def test_descendant_ids_follow_stored_parents_and_survive_cycles():
    assignments = [
        mc("a", "A"),
        mc("b", "B", parent="a"),
        mc("c", "C", parent="b"),
        mc("x", "X", parent="y"),
        mc("y", "Y", parent="x"),
    ]
    assert descendant_ids(assignments, "a") == {"b", "c"}
    assert descendant_ids(assignments, "c") == set()
    assert descendant_ids(assignments, "x") == {"y"}


def test_parent_options_exclude_node_and_its_subtree():
    assignments = [
        mc("food", "Food", order=1),
        mc("kebabs", "Kebabs", parent="food"),
        mc("adana", "Adana", parent="kebabs"),
        mc("drinks", "Drinks", order=2),
    ]
    options = parent_options(assignments, node_id="kebabs")
    assert [o.id for o in options] == ["food", "drinks"]

    labels = [o.label for o in parent_options(assignments)]
    assert labels == ["Food", "└─ Kebabs", "  └─ Adana", "Drinks"]


def test_validate_parent_rejects_cycles_and_unknown_parents():
    assignments = [
        mc("food", "Food"),
        mc("kebabs", "Kebabs", parent="food"),
        mc("adana", "Adana", parent="kebabs"),
    ]
    with pytest.raises(InvalidParentError):
        validate_parent(assignments, "food", "food")
    with pytest.raises(InvalidParentError) as exc:
        validate_parent(assignments, "food", "adana")
    assert exc.value.parent_id == "adana"
    with pytest.raises(InvalidParentError):
        validate_parent(assignments, None, "not-in-menu")

    validate_parent(assignments, "adana", "food")
    validate_parent(assignments, "kebabs", None)
    validate_parent(assignments, None, "food")


def test_products_in_category_include_subcategories():
    assignments = [
        mc("food", "Food"),
        mc("kebabs", "Kebabs", parent="food"),
        mc("drinks", "Drinks"),
    ]
    products = [
        MenuProduct.model_validate({"_id": "mp1", "category": "cat-food", "product": {"_id": "p1", "name": "Pide"}}),
        MenuProduct.model_validate({"_id": "mp2", "category": "cat-kebabs", "product": {"_id": "p2", "name": "Adana"}}),
        MenuProduct.model_validate({"_id": "mp3", "category": "cat-drinks", "product": {"_id": "p3", "name": "Ayran"}}),
        MenuProduct.model_validate({"_id": "mp4", "category": "cat-kebabs", "product": {"_id": "p4", "name": "Old", "isActive": False}}),
        MenuProduct.model_validate({"_id": "mp5", "category": "cat-kebabs", "product": "p5"}),
    ]
    assert [p.id for p in products_in_category(assignments, products, "cat-food")] == ["mp1", "mp2"]
    assert [p.id for p in products_in_category(assignments, products, "cat-kebabs")] == ["mp2"]
