import math

import pytest

from streamclust.micro_cluster import (
    MIN_VARIANCE,
    MicroCluster,
    inverse_error,
    quantile,
)
from streamclust.point import Point


def make_cluster(features, cluster_id=0, index=0, timestamp=0):
    cluster = MicroCluster(len(features), cluster_id)
    cluster.initialize(Point(index=index, features=features), timestamp)
    return cluster


def test_inverse_error_zero_and_odd():
    assert inverse_error(0.0) == 0.0
    assert inverse_error(-0.4) == pytest.approx(-inverse_error(0.4))


def test_inverse_error_inverts_erf():
    for value in (0.1, 0.3, 0.5):
        assert math.erf(inverse_error(value)) == pytest.approx(value, abs=1e-3)


def test_quantile_median_is_zero():
    assert quantile(0.5) == 0.0


def test_quantile_out_of_range():
    with pytest.raises(ValueError):
        quantile(1.5)
    with pytest.raises(ValueError):
        quantile(-0.1)


def test_initialize_seeds_cluster():
    cluster = make_cluster([1.0, 2.0], cluster_id=3, index=11, timestamp=4)
    assert cluster.weight == 1
    assert cluster.centroid == [1.0, 2.0]
    assert cluster.ls == [1.0, 2.0]
    assert cluster.ss == [1.0, 4.0]
    assert cluster.create_time == 11
    assert cluster.lst == 4 and cluster.sst == 16
    assert cluster.ids == [3]


def test_insert_centroid_equidistant():
    a = Point(features=[0.0, 0.0])
    b = Point(features=[2.0, 4.0])
    cluster = MicroCluster(2, 0)
    cluster.initialize(a, 0)
    cluster.insert(b, 1)
    assert cluster.weight == 2
    assert cluster.centroid_distance(a) == pytest.approx(cluster.centroid_distance(b))


def test_with_point():
    point = Point(features=[5.0, 6.0])
    cluster = MicroCluster.with_point(2, 7, point, 3.0)
    assert cluster.weight == 1
    assert cluster.radius == 3.0
    assert cluster.ls == [5.0, 6.0]
    assert cluster.centroid == [5.0, 6.0]
    assert cluster.ss == []


def test_insert_fixed_radius_moves_towards_point():
    cluster = MicroCluster.with_point(2, 0, Point(features=[0.0, 0.0]), 10.0)
    target = Point(index=9, features=[1.0, 1.0])
    distance = cluster.distance_to_point(target)
    assert cluster.distance == distance
    cluster.insert_fixed_radius(target)
    assert cluster.weight == 2
    assert cluster.last_update_time == 9
    for value in cluster.ls:
        assert 0.0 < value < 1.0


def test_merge_and_subtract_round_trip():
    first = make_cluster([1.0, 2.0], cluster_id=1, timestamp=1)
    second = make_cluster([3.0, 5.0], cluster_id=2, timestamp=2)
    snapshot_of_second = second.copy()
    original = first.copy()
    first.merge(second)
    assert first.weight == original.weight + snapshot_of_second.weight
    assert first.ids == [1, 2]
    assert second.ids == []
    assert first.contains_ids(snapshot_of_second)
    first.subtract(snapshot_of_second)
    assert first.ls == pytest.approx(original.ls)
    assert first.ss == pytest.approx(original.ss)
    assert first.weight == original.weight


def test_contains_ids_false_for_foreign_id():
    a = make_cluster([1.0], cluster_id=1)
    b = make_cluster([1.0], cluster_id=2)
    assert not a.contains_ids(b)


def test_reset_id_replaces_last():
    cluster = make_cluster([1.0], cluster_id=1)
    cluster.ids.append(5)
    cluster.reset_id(8)
    assert cluster.ids == [1, 8]


def test_relevance_stamp_small_weight_is_mean_time():
    cluster = make_cluster([1.0], timestamp=4)
    cluster.insert(Point(features=[2.0]), 6)
    assert cluster.relevance_stamp(8) == cluster.mu_time()
    assert cluster.mu_time() == pytest.approx((4 + 6) / 2)


def test_sigma_time_zero_for_equal_timestamps():
    cluster = make_cluster([1.0], timestamp=3)
    cluster.insert(Point(features=[1.0]), 3)
    assert cluster.sigma_time() == pytest.approx(0.0)


def test_relevance_stamp_large_weight_uses_quantile():
    cluster = make_cluster([1.0], timestamp=2)
    for ts in (4, 6, 8):
        cluster.insert(Point(features=[1.0]), ts)
    expected = cluster.mu_time() + cluster.sigma_time() * quantile(1 / (2 * cluster.weight))
    assert cluster.relevance_stamp(1) == pytest.approx(expected)


def test_radius_estimate_unit_weight_is_zero():
    cluster = make_cluster([1.0, 2.0])
    assert cluster.radius_estimate(2.0) == 0.0


def test_radius_estimate_default_factor():
    cluster = make_cluster([1.0, 2.0])
    cluster.insert(Point(features=[3.0, 7.0]), 0)
    assert cluster.radius_estimate(0) == pytest.approx(cluster.radius_estimate(1.8))
    assert cluster.radius_estimate(2.0) == pytest.approx(2.0 * cluster.deviation())


def test_variance_of_identical_points_is_floor():
    cluster = make_cluster([2.0, 2.0])
    cluster.insert(Point(features=[2.0, 2.0]), 0)
    assert cluster.variance_vector() == [MIN_VARIANCE, MIN_VARIANCE]


def test_inclusion_probability_unit_weight():
    cluster = make_cluster([1.0, 1.0])
    assert cluster.inclusion_probability(Point(features=[1.0, 1.0]), 1.8) == 1.0
    assert cluster.inclusion_probability(Point(features=[9.0, 9.0]), 1.8) == 0.0


def test_insert_decayed_accepted():
    cluster = make_cluster([1.0, 2.0])
    previous_weight = cluster.weight
    accepted = cluster.insert_decayed(Point(index=5, features=[3.0, 4.0]), 0.5, 1e9)
    assert accepted is True
    assert cluster.weight == pytest.approx(previous_weight * 0.5 + 1)
    assert cluster.centroid == pytest.approx([v / cluster.weight for v in cluster.ls])
    assert cluster.last_update_time == 5


def test_insert_decayed_rejected_leaves_cluster():
    cluster = make_cluster([1.0, 2.0])
    before = cluster.copy()
    assert cluster.insert_decayed(Point(features=[3.0, 4.0]), 0.5, 0.0) is False
    assert cluster.ls == before.ls
    assert cluster.weight == before.weight


def test_move_and_decay_weight():
    cluster = make_cluster([1.0, 2.0])
    cluster.insert(Point(features=[3.0, 4.0]), 0)
    cluster.move()
    assert cluster.centroid == cluster.ls
    cluster.decay_weight(0.5)
    assert cluster.weight == pytest.approx(1.0)


def test_distance_between_clusters_symmetric():
    a = make_cluster([0.0, 0.0])
    b = make_cluster([1.0, 3.0])
    assert a.distance_to_cluster(b) == pytest.approx(b.distance_to_cluster(a))
    assert a.distance_to_cluster(a) == 0.0


def test_copy_is_independent():
    cluster = make_cluster([1.0, 2.0], cluster_id=4)
    clone = cluster.copy()
    clone.ls[0] = 42.0
    clone.ids.append(9)
    assert cluster.ls == [1.0, 2.0]
    assert cluster.ids == [4]