"""
Menu category tree builder.

Turns the flat list of category assignments of one menu (each pointing to an
optional parent assignment) into a depth-ordered sequence: every node comes
after its parent, siblings are sorted, and each node carries its depth.

The back office does not guarantee the parent pointers are acyclic, so the
builder never trusts them blindly:
- a parent id that is missing from the menu makes the node a root;
- every member of a parent cycle becomes a root (depth 0); nodes hanging off
  a cycle stay under the member they point to.
Malformed input never raises; the admin screen must stay usable.
"""
import logging
from typing import Dict, Iterable, List, Optional, Set

from menusight.config import settings
from menusight.exceptions import InvalidParentError
from menusight.schemas.catalog import MenuCategory, MenuProduct
from menusight.schemas.menu_tree import VIEW_ADMIN, VIEW_CUSTOMER, CategoryTreeNode, ParentOption
from menusight.utils.collation import name_sort_key

logger = logging.getLogger(__name__)


def _index(assignments: Iterable[MenuCategory]) -> Dict[str, MenuCategory]:
    """Index by id; the first record wins when an id repeats."""
    by_id: Dict[str, MenuCategory] = {}
    for assignment in assignments:
        by_id.setdefault(assignment.id, assignment)
    return by_id


def _on_cycle(node_id: str, by_id: Dict[str, MenuCategory]) -> bool:
    """True if following parent pointers from node_id leads back to node_id."""
    visited: Set[str] = set()
    current = by_id[node_id].parent_id
    while current is not None and current in by_id and current not in visited:
        if current == node_id:
            return True
        visited.add(current)
        current = by_id[current].parent_id
    return current == node_id


def effective_parents(assignments: Iterable[MenuCategory]) -> Dict[str, Optional[str]]:
    """
    Parent used for display, per assignment id. None for roots, dangling
    parents and cycle members. The result is guaranteed acyclic.
    """
    by_id = _index(assignments)
    parents: Dict[str, Optional[str]] = {}
    for node_id, node in by_id.items():
        parent_id = node.parent_id
        if parent_id is None:
            parents[node_id] = None
        elif parent_id not in by_id:
            logger.debug("Menu category %s points to missing parent %s; treating as root", node_id, parent_id)
            parents[node_id] = None
        elif _on_cycle(node_id, by_id):
            logger.debug("Menu category %s is part of a parent cycle; treating as root", node_id)
            parents[node_id] = None
        else:
            parents[node_id] = parent_id
    return parents


def _sibling_key(view: str, locale: str):
    if view == VIEW_CUSTOMER:
        return lambda mc: (name_sort_key(mc.name, locale), mc.id)
    return lambda mc: (mc.order, name_sort_key(mc.name, locale), mc.id)


def build_category_tree(
    assignments: Iterable[MenuCategory],
    view: str = VIEW_ADMIN,
    locale: Optional[str] = None,
    indent_unit: Optional[float] = None,
) -> List[CategoryTreeNode]:
    """
    Depth-first ordered tree of a menu's category assignments.

    view="admin": siblings by `order`, ties by name.
    view="customer": siblings by name only.
    """
    locale = locale or settings.CATEGORY_SORT_LOCALE
    indent_unit = settings.CATEGORY_INDENT_UNIT if indent_unit is None else indent_unit
    by_id = _index(assignments)
    if not by_id:
        return []

    parents = effective_parents(by_id.values())
    children: Dict[Optional[str], List[MenuCategory]] = {}
    for node_id, parent_id in parents.items():
        children.setdefault(parent_id, []).append(by_id[node_id])
    key = _sibling_key(view, locale)
    for siblings in children.values():
        siblings.sort(key=key)

    result: List[CategoryTreeNode] = []
    # Explicit stack of (assignment, depth); reversed so the first sibling pops first.
    stack = [(root, 0) for root in reversed(children.get(None, []))]
    while stack:
        node, depth = stack.pop()
        result.append(CategoryTreeNode(
            id=node.id,
            category_id=node.category_id,
            name=node.name,
            parent_id=parents[node.id],
            order=node.order,
            depth=depth,
            indent=depth * indent_unit,
            is_active=node.active,
        ))
        for child in reversed(children.get(node.id, [])):
            stack.append((child, depth + 1))
    return result


def active_nodes(nodes: List[CategoryTreeNode]) -> List[CategoryTreeNode]:
    """Drop inactive nodes together with everything below them (customer view)."""
    kept: List[CategoryTreeNode] = []
    hidden_below: Optional[int] = None
    for node in nodes:
        if hidden_below is not None:
            if node.depth > hidden_below:
                continue
            hidden_below = None
        if not node.is_active:
            hidden_below = node.depth
            continue
        kept.append(node)
    return kept


def descendant_ids(assignments: Iterable[MenuCategory], node_id: str) -> Set[str]:
    """All assignments below node_id following the stored parent pointers (cycle-safe)."""
    by_id = _index(assignments)
    children: Dict[str, List[str]] = {}
    for mc in by_id.values():
        if mc.parent_id is not None:
            children.setdefault(mc.parent_id, []).append(mc.id)

    found: Set[str] = set()
    stack = list(children.get(node_id, []))
    while stack:
        current = stack.pop()
        if current in found or current == node_id:
            continue
        found.add(current)
        stack.extend(children.get(current, []))
    return found


def parent_options(
    assignments: Iterable[MenuCategory],
    node_id: Optional[str] = None,
    view: str = VIEW_ADMIN,
    locale: Optional[str] = None,
) -> List[ParentOption]:
    """
    Candidates for "choose a parent", in tree order. When node_id is given the
    node itself and its descendants are excluded.
    """
    assignments = list(assignments)
    excluded: Set[str] = set()
    if node_id:
        excluded = descendant_ids(assignments, node_id)
        excluded.add(node_id)
    options = []
    for node in build_category_tree(assignments, view=view, locale=locale):
        if node.id in excluded:
            continue
        prefix = ("  " * (node.depth - 1) + "└─ ") if node.depth > 0 else ""
        options.append(ParentOption(id=node.id, label=f"{prefix}{node.name}", depth=node.depth))
    return options


def validate_parent(
    assignments: Iterable[MenuCategory],
    node_id: Optional[str],
    parent_id: Optional[str],
) -> None:
    """
    Raise InvalidParentError unless parent_id is an acceptable parent for node_id.
    node_id None means a new assignment is being added. parent_id None (root) is always fine.
    """
    if not parent_id:
        return
    by_id = _index(assignments)
    if parent_id not in by_id:
        raise InvalidParentError("Parent category is not part of this menu", node_id=node_id, parent_id=parent_id)
    if node_id is None:
        return
    if parent_id == node_id:
        raise InvalidParentError("A category cannot be its own parent", node_id=node_id, parent_id=parent_id)
    if parent_id in descendant_ids(by_id.values(), node_id):
        raise InvalidParentError(
            f"'{by_id[parent_id].name}' is below this category; moving under it would create a cycle",
            node_id=node_id,
            parent_id=parent_id,
        )


def products_in_category(
    assignments: Iterable[MenuCategory],
    menu_products: Iterable[MenuProduct],
    category_id: str,
) -> List[MenuProduct]:
    """
    Active menu products placed in category_id or in any category below it in
    this menu's tree. Products that are not populated are skipped.
    """
    assignments = list(assignments)
    category_ids: Set[str] = {category_id}
    by_id = _index(assignments)
    for mc in by_id.values():
        if mc.category_id == category_id:
            for below in descendant_ids(assignments, mc.id):
                below_category = by_id[below].category_id
                if below_category:
                    category_ids.add(below_category)
    return [
        mp for mp in menu_products
        if mp.product_active and mp.category_id in category_ids
    ]
