import random

import pytest

from streamclust.coreset_tree import CoresetTree, TreeNode, closest_centre
from streamclust.point import Point


def make_point(index, coords, weight=1.0):
    return Point(index=index, weight=weight, features=list(coords))


def cluster_points(start, origin, count):
    return [
        make_point(start + i, [origin[0] + 0.1 * i, origin[1] + 0.05 * i])
        for i in range(count)
    ]


def test_closest_centre_picks_nearer():
    p = make_point(0, [1.0, 1.0])
    a = make_point(1, [0.0, 0.0])
    b = make_point(2, [10.0, 10.0])
    assert closest_centre(p, a, b) is a
    assert closest_centre(p, b, a) is a


def test_closest_centre_tie_goes_to_second():
    p = make_point(0, [0.0, 0.0])
    a = make_point(1, [1.0, 0.0])
    b = make_point(2, [-1.0, 0.0])
    assert closest_centre(p, a, b) is b


def test_tree_node_is_leaf():
    node = TreeNode()
    assert node.is_leaf()
    node.lc = TreeNode(parent=node)
    assert not node.is_leaf()


def test_target_function_value_zero_at_centre():
    tree = CoresetTree(random.Random(1))
    centre = make_point(0, [3.0, 4.0])
    node = TreeNode(points=[make_point(0, [3.0, 4.0])], centre=centre)
    assert tree.target_function_value(node) == 0.0
    assert node.cost == 0.0


def test_target_function_value_weighted():
    tree = CoresetTree(random.Random(1))
    centre = make_point(0, [0.0, 0.0])
    points = [make_point(1, [1.0, 0.0]), make_point(2, [0.0, 2.0])]
    node = TreeNode(points=points, centre=centre)
    assert tree.target_function_value(node) == pytest.approx(5.0)


def test_target_function_uses_centroid_of_weighted_point():
    tree = CoresetTree(random.Random(1))
    centre = make_point(0, [1.0, 1.0])
    heavy = make_point(1, [2.0, 2.0], weight=2.0)
    node = TreeNode(points=[heavy], centre=centre)
    assert tree.target_function_value(node) == 0.0


def test_cost_of_point_zero_weight():
    tree = CoresetTree(random.Random(1))
    node = TreeNode(centre=make_point(0, [0.0, 0.0]))
    assert tree.cost_of_point(node, make_point(1, [5.0, 5.0], weight=0.0)) == 0.0


def test_cost_of_points_sum_to_node_cost():
    tree = CoresetTree(random.Random(1))
    points = cluster_points(0, (0.0, 0.0), 5) + cluster_points(5, (20.0, 20.0), 5)
    node = TreeNode(points=points, centre=points[0])
    tree.target_function_value(node)
    total = sum(tree.cost_of_point(node, p) for p in points)
    assert total == pytest.approx(node.cost)


def test_split_cost_never_exceeds_node_cost():
    tree = CoresetTree(random.Random(1))
    points = cluster_points(0, (0.0, 0.0), 4) + cluster_points(4, (50.0, 0.0), 4)
    node = TreeNode(points=points, centre=points[0])
    tree.target_function_value(node)
    for candidate in points:
        assert tree.split_cost(node, node.centre, candidate) <= node.cost + 1e-9
    assert tree.split_cost(node, node.centre, node.centre) == pytest.approx(node.cost)


def test_split_partitions_points_and_propagates_cost():
    tree = CoresetTree(random.Random(1))
    left_group = cluster_points(0, (0.0, 0.0), 3)
    right_group = cluster_points(3, (100.0, 100.0), 3)
    points = left_group + right_group
    root = TreeNode(points=points, centre=points[0])
    tree.target_function_value(root)
    tree.split(root, right_group[0], 1)

    assert root.lc.centre is points[0]
    assert root.rc.centre is right_group[0]
    assert set(map(id, root.lc.points)) == set(map(id, left_group))
    assert set(map(id, root.rc.points)) == set(map(id, right_group))
    assert all(p.clustering_center == 1 for p in right_group)
    assert root.cost == pytest.approx(root.lc.cost + root.rc.cost)
    assert root.lc.parent is root and root.rc.parent is root


def test_select_node_returns_leaf():
    tree = CoresetTree(random.Random(3))
    points = cluster_points(0, (0.0, 0.0), 3) + cluster_points(3, (40.0, 0.0), 3)
    root = TreeNode(points=points, centre=points[0])
    tree.target_function_value(root)
    tree.split(root, points[3], 1)
    leaf = tree.select_node(root)
    assert leaf.is_leaf()
    assert leaf in (root.lc, root.rc)


def test_select_node_skips_empty_zero_cost_child():
    tree = CoresetTree(random.Random(3))
    centre = make_point(0, [0.0, 0.0])
    root = TreeNode(points=[centre], centre=centre)
    root.lc = TreeNode(points=[], centre=centre, parent=root)
    root.rc = TreeNode(points=[centre], centre=centre, parent=root)
    assert tree.select_node(root) is root.rc


def test_choose_centre_returns_member_of_node():
    tree = CoresetTree(random.Random(5))
    points = cluster_points(0, (0.0, 0.0), 4) + cluster_points(4, (30.0, 30.0), 4)
    node = TreeNode(points=points, centre=points[0])
    tree.target_function_value(node)
    centre = tree.choose_centre(node)
    assert any(centre is p for p in points)
    assert tree.split_cost(node, node.centre, centre) <= node.cost


def test_union_tree_coreset_separates_clusters():
    tree = CoresetTree(random.Random(7))
    set_a = cluster_points(0, (0.0, 0.0), 3)
    set_b = cluster_points(3, (1000.0, 1000.0), 3)
    centres = tree.union_tree_coreset(2, set_a, set_b)
    assert len(centres) == 2
    assert sorted(c.weight for c in centres) == [3.0, 3.0]
    labels_a = {p.clustering_center for p in set_a}
    labels_b = {p.clustering_center for p in set_b}
    assert len(labels_a) == 1 and len(labels_b) == 1
    assert labels_a != labels_b


def test_union_tree_coreset_preserves_weight_and_sums():
    tree = CoresetTree(random.Random(11))
    set_a = cluster_points(0, (0.0, 0.0), 5)
    set_b = cluster_points(5, (10.0, -4.0), 6)
    all_points = set_a + set_b
    centres = tree.union_tree_coreset(4, set_a, set_b)
    assert len(centres) == 4
    assert sum(c.weight for c in centres) == pytest.approx(len(all_points))
    for dim in range(2):
        assert sum(c.features[dim] for c in centres) == pytest.approx(
            sum(p.features[dim] for p in all_points)
        )
    assert all(0 <= p.clustering_center < 4 for p in all_points)


def test_union_tree_coreset_does_not_alias_inputs():
    tree = CoresetTree(random.Random(2))
    set_a = cluster_points(0, (0.0, 0.0), 3)
    originals = [list(p.features) for p in set_a]
    centres = tree.union_tree_coreset(2, set_a, [])
    assert [p.features for p in set_a] == originals
    assert all(c is not p for c in centres for p in set_a)


def test_union_tree_coreset_pads_with_dummies():
    tree = CoresetTree(random.Random(4))
    set_a = [make_point(0, [1.0, 2.0])]
    set_b = [make_point(1, [5.0, 7.0])]
    centres = tree.union_tree_coreset(4, set_a, set_b)
    dummies = [c for c in centres if c.index == -1]
    assert len(dummies) == 2
    for dummy in dummies:
        assert dummy.weight == 0.0
        assert dummy.features == [-1000000.0, -1000000.0]
    assert sorted(c.index for c in centres if c.index != -1) == [0, 1]


@pytest.mark.parametrize("k", [0, -2])
def test_union_tree_coreset_rejects_bad_k(k):
    tree = CoresetTree(random.Random(0))
    with pytest.raises(ValueError):
        tree.union_tree_coreset(k, [make_point(0, [0.0])], [])


def test_union_tree_coreset_rejects_empty_input():
    tree = CoresetTree(random.Random(0))
    with pytest.raises(ValueError):
        tree.union_tree_coreset(2, [], [])