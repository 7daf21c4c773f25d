import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
import pytest
from sklearn import datasets
from sklearn.utils import Bunch

from arbiter.base import (
    Classifier,
    EstimatorRegistry,
    Persistable,
    Probabilistic,
    Regressor,
)
from arbiter.data import Dataset, Labeled
from arbiter.errors import NotTrainedError
from arbiter.validation import Validator

logging.basicConfig(level=logging.DEBUG)
log = logging.getLogger(__name__)

# configure pandas text output

# get display width from terminal
pd.set_option("display.width", None)
# 3 digits precision for easier readability
pd.set_option("display.precision", 3)

K_FOLDS = 3

STUB_SCORES = {(1, 0.1): 0.5, (1, 0.5): 0.7, (2, 0.1): 0.7, (2, 0.5): 0.3}


@pytest.fixture  # type: ignore
def iris_target_name() -> str:
    return "species"


@pytest.fixture  # type: ignore
def n_jobs() -> int:
    return 2


@pytest.fixture  # type: ignore
def iris_df(iris_target_name: str) -> pd.DataFrame:
    #  load sklearn test-data and convert to pd
    iris: Bunch = datasets.load_iris()

    iris_df = pd.DataFrame(data=iris.data, columns=iris.feature_names)

    # replace target numericals with actual class labels
    iris_df[iris_target_name] = pd.Series(iris.target).map(
        dict(enumerate(iris.target_names))
    )

    return iris_df


@pytest.fixture  # type: ignore
def iris_dataset(iris_df: pd.DataFrame, iris_target_name: str) -> Labeled:
    return Labeled(iris_df, target_name=iris_target_name)


@pytest.fixture  # type: ignore
def iris_unlabeled(iris_df: pd.DataFrame, iris_target_name: str) -> Dataset:
    return Dataset(iris_df.drop(columns=iris_target_name))


@pytest.fixture  # type: ignore
def ab_dataset() -> Labeled:
    # a small labeled dataset with class labels "A" and "B", in this order
    return Labeled(
        pd.DataFrame(
            {
                "x1": [0.0, 1.0, 2.0, 3.0, 4.0, 5.0],
                "x2": [1.0, 0.0, 1.0, 0.0, 1.0, 0.0],
                "label": ["A", "B", "A", "B", "B", "A"],
            },
            index=pd.Index([10, 11, 12, 13, 14, 15], name="id"),
        ),
        target_name="label",
    )


@pytest.fixture  # type: ignore
def stub_registry() -> EstimatorRegistry:
    registry = EstimatorRegistry()
    registry.register(StubEstimator, ("depth", "rate", "seed"), name="stub")
    registry.register(ConstantRegressor, ("value",), name="constant")
    return registry


class StubEstimator(Classifier, Probabilistic, Persistable):
    """
    Predicts its depth for every observation, and remembers what it was trained on.
    """

    def __init__(self, depth: int = 1, rate: float = 0.1, seed: int = 0) -> None:
        self.depth = depth
        self.rate = rate
        self.seed = seed
        self.n_observations_trained: Optional[int] = None
        self.n_trainings = 0

    @property
    def is_trained(self) -> bool:
        return self.n_observations_trained is not None

    def train(self, dataset: Dataset) -> "StubEstimator":
        self.n_observations_trained = len(dataset)
        self.n_trainings += 1
        return self

    def predict(self, dataset: Dataset) -> pd.Series:
        if not self.is_trained:
            raise NotTrainedError("stub has not been trained")
        return pd.Series(self.depth, index=dataset.index)

    def proba(self, dataset: Dataset) -> pd.DataFrame:
        if not self.is_trained:
            raise NotTrainedError("stub has not been trained")
        return pd.DataFrame({"A": self.rate, "B": 1.0 - self.rate}, index=dataset.index)


class ConstantRegressor(Regressor, Persistable):
    """
    A regressor always predicting the same value; not probabilistic.
    """

    def __init__(self, value: float = 0.0) -> None:
        self.value = value
        self._trained = False

    @property
    def is_trained(self) -> bool:
        return self._trained

    def train(self, dataset: Dataset) -> "ConstantRegressor":
        self._trained = True
        return self

    def predict(self, dataset: Dataset) -> pd.Series:
        return pd.Series(self.value, index=dataset.index)


class ScriptedValidator(Validator):
    """
    Looks up the score of a stub estimator by its depth and rate, without training.
    """

    def __init__(
        self, scores: Mapping[Tuple[Any, Any], float] = STUB_SCORES, fail: bool = False
    ) -> None:
        super().__init__()
        self.scores = dict(scores)
        self.fail = fail
        self.calls: List[Tuple[Any, Any]] = []

    def score(self, estimator: StubEstimator, dataset: Dataset) -> float:
        key = (estimator.depth, estimator.rate)
        self.calls.append(key)
        if self.fail:
            raise RuntimeError(f"scoring failed for {key}")
        return self.scores[key]

    def _splits(self, dataset: Labeled) -> Any:
        raise NotImplementedError("scripted validators do not split datasets")


class FixedExpert(Classifier, Probabilistic, Persistable):
    """
    Estimates the same class distribution for every observation.
    """

    def __init__(self, distribution: Dict[Any, float], fail: bool = False) -> None:
        self.distribution = distribution
        self.fail = fail
        self.trained_on: Optional[Dataset] = None

    @property
    def is_trained(self) -> bool:
        return self.trained_on is not None

    def train(self, dataset: Dataset) -> "FixedExpert":
        if self.fail:
            raise RuntimeError("training failed")
        self.trained_on = dataset
        return self

    def predict(self, dataset: Dataset) -> pd.Series:
        return self.proba(dataset).idxmax(axis=1)

    def proba(self, dataset: Dataset) -> pd.DataFrame:
        return pd.DataFrame(
            np.tile(list(self.distribution.values()), (len(dataset), 1)),
            index=dataset.index,
            columns=list(self.distribution.keys()),
        )

    def __repr__(self) -> str:
        return f"FixedExpert({self.distribution!r})"


def check_trial_results(
    actual: Sequence[Any], expected: Sequence[Tuple[Mapping[str, Any], float]]
) -> None:
    """
    Test helper to check the results of a grid search

    :param actual: the trial results, in enumeration order
    :param expected: the expected parameters and scores, in enumeration order
    :return: None
    """
    assert len(actual) == len(expected)

    for i, (result, (params_expected, score_expected)) in enumerate(
        zip(actual, expected)
    ):
        assert dict(result.params) == dict(params_expected), (
            f"unexpected parameters for trial #{i}: "
            f"got {dict(result.params)} but expected {params_expected}"
        )
        assert result.score == pytest.approx(score_expected), (
            f"unexpected score for trial #{i}: "
            f"got {result.score} but expected {score_expected}"
        )
