"""
Tests for module arbiter.data
"""
import numpy as np
import pandas as pd
import pytest
from pandas.testing import assert_frame_equal, assert_series_equal

from arbiter.data import Dataset, Labeled


def test_dataset_init(iris_df: pd.DataFrame, iris_target_name: str) -> None:
    # check handling of various invalid inputs

    # 1. observations parameter
    # 1.1 None
    with pytest.raises(ValueError):
        # noinspection PyTypeChecker
        Labeled(observations=None, target_name=iris_target_name)

    # 1.2 not a DF
    with pytest.raises(ValueError):
        # noinspection PyTypeChecker
        Dataset(observations=[])

    # 2. no valid target specified
    with pytest.raises(TypeError):
        # noinspection PyTypeChecker
        Labeled(observations=iris_df, target_name=None)  # type: ignore

    f_columns = list(iris_df.columns)
    f_columns.remove(iris_target_name)

    # 2.1 invalid feature column specified
    with pytest.raises(KeyError):
        Labeled(
            observations=iris_df,
            feature_names=[*f_columns, "doesnt_exist"],
            target_name=iris_target_name,
        )

    # 2.2 invalid target column specified
    with pytest.raises(KeyError):
        Labeled(observations=iris_df, target_name="doesnt_exist")

    # 3. column is target and also feature
    with pytest.raises(KeyError):
        Labeled(
            observations=iris_df,
            feature_names=[*f_columns, iris_target_name],
            target_name=iris_target_name,
        )


def test_labeled(iris_dataset: Labeled, iris_target_name: str) -> None:
    assert len(iris_dataset) == 150
    assert iris_dataset.target_name == iris_target_name
    assert iris_target_name not in iris_dataset.feature_names
    assert len(iris_dataset.feature_names) == 4

    assert isinstance(iris_dataset.target, pd.Series)
    assert isinstance(iris_dataset.features, pd.DataFrame)
    assert iris_dataset.features.shape == (150, 4)
    assert iris_dataset.index.name == Dataset.IDX_OBSERVATION

    # outcomes are listed in order of their first appearance
    assert iris_dataset.possible_outcomes() == ["setosa", "versicolor", "virginica"]

    labeled = Labeled(
        pd.DataFrame({"x": [1, 2, 3, 4], "y": ["b", "a", "b", "c"]}), target_name="y"
    )
    assert labeled.possible_outcomes() == ["b", "a", "c"]


def test_dataset(iris_unlabeled: Dataset) -> None:
    assert len(iris_unlabeled) == 150
    assert len(iris_unlabeled.feature_names) == 4
    assert not isinstance(iris_unlabeled, Labeled)
    assert "Dataset(n_observations=150" in repr(iris_unlabeled)


def test_subsample(iris_dataset: Labeled) -> None:
    subsample = iris_dataset.subsample(iloc=[0, 1, 50])
    assert isinstance(subsample, Labeled)
    assert len(subsample) == 3
    assert subsample.target.tolist() == ["setosa", "setosa", "versicolor"]

    setosa = iris_dataset.subsample(loc=iris_dataset.target == "setosa")
    assert len(setosa) == 50
    assert setosa.possible_outcomes() == ["setosa"]

    # the original dataset is unchanged
    assert len(iris_dataset) == 150

    with pytest.raises(ValueError):
        iris_dataset.subsample()

    with pytest.raises(ValueError):
        iris_dataset.subsample(loc=[0], iloc=[0])


def test_keep_drop(iris_dataset: Labeled) -> None:
    feature = iris_dataset.feature_names[0]

    kept = iris_dataset.keep(feature)
    assert kept.feature_names == [feature]
    assert_series_equal(kept.target, iris_dataset.target)

    dropped = iris_dataset.drop(feature)
    assert dropped.feature_names == iris_dataset.feature_names[1:]

    with pytest.raises(ValueError):
        iris_dataset.keep("doesnt_exist")

    with pytest.raises(ValueError):
        iris_dataset.drop("doesnt_exist")


def test_copy(iris_dataset: Labeled) -> None:
    copied = iris_dataset.copy()

    assert isinstance(copied, Labeled)
    assert copied is not iris_dataset
    assert_frame_equal(copied.features, iris_dataset.features)
    assert_series_equal(copied.target, iris_dataset.target)

    # changes to the copy do not affect the original
    original_value = iris_dataset.features.iloc[0, 0]
    copied._observations.iloc[0, 0] = -1.0
    assert copied.features.iloc[0, 0] == -1.0
    assert iris_dataset.features.iloc[0, 0] == original_value
    assert not np.shares_memory(
        copied.features.to_numpy(), iris_dataset.features.to_numpy()
    )
