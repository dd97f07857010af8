import numpy as np

from ZULIMrpePy.spatial import count_within, nearest_sample


def test_count_within_excludes_the_radius_itself():
    s_lat = np.array([0.0, 0.0, 3.0])
    s_lng = np.array([0.0, 0.05, 3.0])
    q = np.array([0.0])
    assert count_within(q, q, s_lat, s_lng, 0.05).tolist() == [1]
    assert count_within(q, q, s_lat, s_lng, 0.0500001).tolist() == [2]


def test_count_within_zero_radius_and_no_samples():
    q = np.array([0.0, 1.0])
    assert count_within(q, q, q, q, 0.0).tolist() == [0, 0]
    assert count_within(q, q, np.array([]), np.array([]), 1.0).tolist() == [0, 0]


def test_nearest_sample_first_wins_on_ties():
    idx, dist = nearest_sample(
        np.array([0.0]), np.array([0.0]),
        np.array([0.0, 0.0]), np.array([1.0, -1.0]),
    )
    assert idx.tolist() == [0]
    assert dist.tolist() == [1.0]
