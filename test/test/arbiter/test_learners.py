"""
Tests for module arbiter.learners
"""
from typing import List

import pytest

from arbiter.base import Estimator, EstimatorType, Probabilistic
from arbiter.data import Dataset, Labeled
from arbiter.errors import InvalidInputError, NotTrainedError
from arbiter.learners import (
    REGISTRY,
    ClassifierAdapter,
    DecisionTreeClassifier,
    GaussianNB,
    KMeans,
    KNearestNeighbors,
    LogisticRegression,
    RandomForestClassifier,
    Ridge,
)


@pytest.fixture  # type: ignore
def classifiers() -> List[ClassifierAdapter]:
    return [
        DecisionTreeClassifier(max_depth=3, random_state=42),
        RandomForestClassifier(n_estimators=10, random_state=42),
        GaussianNB(),
        KNearestNeighbors(k=3, weights="distance"),
        LogisticRegression(max_iter=1000),
    ]


def test_classifiers(
    classifiers: List[ClassifierAdapter], iris_dataset: Labeled
) -> None:
    for classifier in classifiers:
        assert isinstance(classifier, Probabilistic)
        assert classifier.estimator_type == EstimatorType.CLASSIFIER
        assert type(classifier).__name__ in REGISTRY
        assert not classifier.is_trained

        with pytest.raises(NotTrainedError):
            classifier.predict(iris_dataset)

        with pytest.raises(NotTrainedError):
            classifier.proba(iris_dataset)

        assert classifier.train(iris_dataset) is classifier
        assert classifier.is_trained

        predictions = classifier.predict(iris_dataset)
        assert predictions.index.equals(iris_dataset.index)
        assert (predictions == iris_dataset.target).mean() > 0.9, repr(classifier)

        proba = classifier.proba(iris_dataset)
        assert proba.index.equals(iris_dataset.index)
        assert set(proba.columns) == set(iris_dataset.possible_outcomes())
        assert proba.sum(axis=1).tolist() == pytest.approx([1.0] * 150)


def test_supervised_requires_labels(
    classifiers: List[ClassifierAdapter], iris_unlabeled: Dataset
) -> None:
    for estimator in [*classifiers, Ridge()]:
        with pytest.raises(InvalidInputError):
            estimator.train(iris_unlabeled)


def test_learner_params() -> None:
    tree = DecisionTreeClassifier(max_depth=4)
    assert tree.get_params() == {
        "max_depth": 4,
        "min_samples_leaf": 1,
        "random_state": None,
    }
    assert repr(tree) == (
        "DecisionTreeClassifier(max_depth=4, min_samples_leaf=1, random_state=None)"
    )
    assert LogisticRegression(c=0.5).get_params() == {"c": 0.5, "max_iter": 100}


def test_ridge(iris_df, iris_target_name: str) -> None:
    dataset = Labeled(
        iris_df.drop(columns=iris_target_name), target_name="petal width (cm)"
    )
    ridge = Ridge(alpha=0.1)
    assert ridge.estimator_type == EstimatorType.REGRESSOR
    assert not isinstance(ridge, Probabilistic)

    predictions = ridge.train(dataset).predict(dataset)
    assert predictions.index.equals(dataset.index)
    assert ((predictions - dataset.target) ** 2).mean() < 0.1


def test_k_means(iris_unlabeled: Dataset, iris_dataset: Labeled) -> None:
    k_means = KMeans(k=3, random_state=42)
    assert isinstance(k_means, Estimator)
    assert k_means.estimator_type == EstimatorType.CLUSTERER

    with pytest.raises(NotTrainedError):
        k_means.predict(iris_unlabeled)

    clusters = k_means.train(iris_unlabeled).predict(iris_unlabeled)
    assert clusters.name == "cluster"
    assert clusters.index.equals(iris_unlabeled.index)
    assert set(clusters) == {0, 1, 2}

    # labels are ignored
    labeled_clusters = KMeans(k=3, random_state=42).train(iris_dataset).predict(
        iris_dataset
    )
    assert labeled_clusters.tolist() == clusters.tolist()
