import numpy as np
import pytest

from ZULIMrpePy.config import AnalysisConfig
from ZULIMrpePy.exceptions import InvalidConfig
from ZULIMrpePy.rpe import CombinedRule, DistanceRule


def test_defaults_validate():
    cfg = AnalysisConfig().validate()
    assert cfg.grid_resolution == 0.005
    assert cfg.num_classes == 5
    assert cfg.classification_method == "quantile"
    assert cfg.cv_folds == 5
    assert cfg.rpe_method == "combined"


def test_jenks_alias_is_normalised():
    assert AnalysisConfig(classification_method="jenks").classification_method == "natural-breaks"


@pytest.mark.parametrize(
    "changes",
    [
        {"grid_resolution": 0.0},
        {"grid_resolution": float("nan")},
        {"num_classes": 0},
        {"num_classes": 2.5},
        {"classification_method": "kmeans"},
        {"cv_folds": 1},
        {"idw_power": -1.0},
        {"rpe_method": "voronoi"},
        {"rpe_buffer": -0.1},
        {"uncertainty_threshold": float("inf")},
        {"algorithm": "xgboost"},
    ],
)
def test_validate_rejects(changes):
    with pytest.raises(InvalidConfig):
        AnalysisConfig().replace(**changes).validate()


def test_invalid_config_is_a_value_error():
    with pytest.raises(ValueError):
        AnalysisConfig(cv_folds=0).validate()


def test_from_dict_accepts_camel_case():
    cfg = AnalysisConfig.from_dict(
        {"gridResolution": 0.01, "numClasses": 4, "classificationMethod": "jenks", "cv_folds": 3}
    )
    assert cfg.grid_resolution == 0.01
    assert cfg.num_classes == 4
    assert cfg.classification_method == "natural-breaks"
    assert cfg.cv_folds == 3


def test_dict_round_trip():
    cfg = AnalysisConfig(rpe_method="distance", rpe_buffer=0.02)
    assert AnalysisConfig.from_dict(cfg.to_dict()) == cfg


def test_from_dict_rejects_unknown_key():
    with pytest.raises(InvalidConfig):
        AnalysisConfig.from_dict({"basemap": "osm"})


def test_rpe_rule_carries_parameters():
    rule = AnalysisConfig(rpe_method="combined", rpe_buffer=0.02, uncertainty_threshold=0.4).rpe_rule()
    assert rule == CombinedRule(buffer=0.02, threshold=0.4)
    assert isinstance(AnalysisConfig(rpe_method="distance").rpe_rule(), DistanceRule)


def test_numpy_integers_are_accepted():
    cfg = AnalysisConfig(num_classes=np.int64(4), cv_folds=np.int32(3), rf_trees=np.int64(50)).validate()
    assert cfg.num_classes == 4


@pytest.mark.parametrize("field", ["num_classes", "cv_folds", "rf_trees"])
def test_booleans_are_not_integers(field):
    with pytest.raises(InvalidConfig):
        AnalysisConfig().replace(**{field: True}).validate()
