"""
Core implementation of :mod:`arbiter.learners`
"""

import logging
from abc import ABCMeta, abstractmethod
from typing import Any, Dict, Generic, Optional, TypeVar, Union

import pandas as pd
from numpy.random.mtrand import RandomState
from sklearn import cluster

from pytools.api import AllTracker, inheritdoc
from sklearndf import ClassifierDF, RegressorDF, SupervisedLearnerDF
from sklearndf.classification import (
    DecisionTreeClassifierDF,
    GaussianNBDF,
    KNeighborsClassifierDF,
    LogisticRegressionDF,
    RandomForestClassifierDF,
)
from sklearndf.regression import DecisionTreeRegressorDF, RidgeDF

from ..base import (
    Classifier,
    Clusterer,
    Estimator,
    EstimatorRegistry,
    Persistable,
    Probabilistic,
    Regressor,
)
from ..data import Dataset, Labeled
from ..errors import InvalidInputError, NotTrainedError

log = logging.getLogger(__name__)

__all__ = [
    "ClassifierAdapter",
    "DecisionTreeClassifier",
    "DecisionTreeRegressor",
    "GaussianNB",
    "KMeans",
    "KNearestNeighbors",
    "LearnerAdapter",
    "LogisticRegression",
    "RandomForestClassifier",
    "RegressorAdapter",
    "Ridge",
]


#
# Type variables
#

T_LearnerAdapter = TypeVar("T_LearnerAdapter", bound="LearnerAdapter[Any]")
T_SupervisedLearnerDF = TypeVar("T_SupervisedLearnerDF", bound=SupervisedLearnerDF)


#
# Constants
#

#: the registry of all estimators defined in this package, declaring their
#: constructor parameters in declaration order
REGISTRY = EstimatorRegistry()


#
# Ensure all symbols introduced below are included in __all__
#

__tracker = AllTracker(globals())


#
# Class definitions
#


@inheritdoc(match="""[see superclass]""")
class LearnerAdapter(
    Estimator, Persistable, Generic[T_SupervisedLearnerDF], metaclass=ABCMeta
):
    """
    Base class of estimators delegating to a supervised `sklearndf` learner.

    A new learner is created from the hyperparameters of this estimator every time
    it is trained.
    """

    #: the learner fitted by the latest call to :meth:`.train`;
    #: ``None`` if not trained
    learner_: Optional[T_SupervisedLearnerDF]

    def __init__(self) -> None:
        self.learner_ = None

    @property
    def is_trained(self) -> bool:
        """[see superclass]"""
        return self.learner_ is not None

    def train(self: T_LearnerAdapter, dataset: Dataset) -> T_LearnerAdapter:
        """[see superclass]"""
        if not isinstance(dataset, Labeled):
            raise InvalidInputError(
                f"{type(self).__name__} requires a Labeled training set"
            )

        learner = self._make_learner()
        learner.fit(X=dataset.features, y=dataset.target)
        self.learner_ = learner

        return self

    def predict(self, dataset: Dataset) -> pd.Series:
        """[see superclass]"""
        return self._get_learner().predict(X=dataset.features)

    def get_params(self) -> Dict[str, Any]:
        """
        Get the hyperparameters of this estimator.

        :return: a mapping of hyperparameter names to values
        """
        return {
            name: value
            for name, value in vars(self).items()
            if not name.endswith("_") and not name.startswith("_")
        }

    @abstractmethod
    def _make_learner(self) -> T_SupervisedLearnerDF:
        # create a new, unfitted learner with the hyperparameters of this estimator
        pass

    def _get_learner(self) -> T_SupervisedLearnerDF:
        learner = self.learner_
        if learner is None:
            raise NotTrainedError(f"{type(self).__name__} has not been trained")
        return learner

    def __repr__(self) -> str:
        params = ", ".join(
            f"{name}={value!r}" for name, value in self.get_params().items()
        )
        return f"{type(self).__name__}({params})"


@inheritdoc(match="""[see superclass]""")
class ClassifierAdapter(
    LearnerAdapter[ClassifierDF], Classifier, Probabilistic, metaclass=ABCMeta
):
    """
    Base class of probabilistic classifiers delegating to a `sklearndf` classifier.
    """

    def proba(self, dataset: Dataset) -> pd.DataFrame:
        """[see superclass]"""
        return self._get_learner().predict_proba(X=dataset.features)


class RegressorAdapter(LearnerAdapter[RegressorDF], Regressor, metaclass=ABCMeta):
    """
    Base class of regressors delegating to a `sklearndf` regressor.
    """


class DecisionTreeClassifier(ClassifierAdapter):
    """
    A decision tree classifier.
    """

    def __init__(
        self,
        max_depth: Optional[int] = None,
        min_samples_leaf: int = 1,
        random_state: Union[int, RandomState, None] = None,
    ) -> None:
        """
        :param max_depth: the maximum depth of the tree; unlimited if ``None``
        :param min_samples_leaf: the minimum number of observations in a leaf
        :param random_state: optional random seed or random state
        """
        super().__init__()
        self.max_depth = max_depth
        self.min_samples_leaf = min_samples_leaf
        self.random_state = random_state

    def _make_learner(self) -> ClassifierDF:
        return DecisionTreeClassifierDF(
            max_depth=self.max_depth,
            min_samples_leaf=self.min_samples_leaf,
            random_state=self.random_state,
        )


class RandomForestClassifier(ClassifierAdapter):
    """
    A random forest of decision tree classifiers.
    """

    def __init__(
        self,
        n_estimators: int = 100,
        max_depth: Optional[int] = None,
        random_state: Union[int, RandomState, None] = None,
    ) -> None:
        """
        :param n_estimators: the number of trees in the forest
        :param max_depth: the maximum depth of each tree; unlimited if ``None``
        :param random_state: optional random seed or random state
        """
        super().__init__()
        self.n_estimators = n_estimators
        self.max_depth = max_depth
        self.random_state = random_state

    def _make_learner(self) -> ClassifierDF:
        return RandomForestClassifierDF(
            n_estimators=self.n_estimators,
            max_depth=self.max_depth,
            random_state=self.random_state,
        )


class GaussianNB(ClassifierAdapter):
    """
    A Gaussian naive Bayes classifier.
    """

    def __init__(self, var_smoothing: float = 1e-9) -> None:
        """
        :param var_smoothing: portion of the largest feature variance added to all \
            variances for numerical stability
        """
        super().__init__()
        self.var_smoothing = var_smoothing

    def _make_learner(self) -> ClassifierDF:
        return GaussianNBDF(var_smoothing=self.var_smoothing)


class KNearestNeighbors(ClassifierAdapter):
    """
    A k-nearest neighbors classifier.
    """

    def __init__(self, k: int = 5, weights: str = "uniform") -> None:
        """
        :param k: the number of neighbors to consider
        :param weights: ``"uniform"`` to weigh all neighbors equally, or \
            ``"distance"`` to weigh them by the inverse of their distance
        """
        super().__init__()
        self.k = k
        self.weights = weights

    def _make_learner(self) -> ClassifierDF:
        return KNeighborsClassifierDF(n_neighbors=self.k, weights=self.weights)


class LogisticRegression(ClassifierAdapter):
    """
    A logistic regression classifier.
    """

    def __init__(self, c: float = 1.0, max_iter: int = 100) -> None:
        """
        :param c: the inverse of the regularization strength
        :param max_iter: the maximum number of solver iterations
        """
        super().__init__()
        self.c = c
        self.max_iter = max_iter

    def _make_learner(self) -> ClassifierDF:
        return LogisticRegressionDF(C=self.c, max_iter=self.max_iter)


class DecisionTreeRegressor(RegressorAdapter):
    """
    A decision tree regressor.
    """

    def __init__(
        self,
        max_depth: Optional[int] = None,
        min_samples_leaf: int = 1,
        random_state: Union[int, RandomState, None] = None,
    ) -> None:
        """
        :param max_depth: the maximum depth of the tree; unlimited if ``None``
        :param min_samples_leaf: the minimum number of observations in a leaf
        :param random_state: optional random seed or random state
        """
        super().__init__()
        self.max_depth = max_depth
        self.min_samples_leaf = min_samples_leaf
        self.random_state = random_state

    def _make_learner(self) -> RegressorDF:
        return DecisionTreeRegressorDF(
            max_depth=self.max_depth,
            min_samples_leaf=self.min_samples_leaf,
            random_state=self.random_state,
        )


class Ridge(RegressorAdapter):
    """
    A linear least squares regressor with L2 regularization.
    """

    def __init__(self, alpha: float = 1.0) -> None:
        """
        :param alpha: the regularization strength
        """
        super().__init__()
        self.alpha = alpha

    def _make_learner(self) -> RegressorDF:
        return RidgeDF(alpha=self.alpha)


@inheritdoc(match="""[see superclass]""")
class KMeans(Clusterer, Persistable):
    """
    A k-means clusterer.

    Can be trained on unlabeled as well as on labeled datasets; labels are ignored.
    """

    #: the clustering model fitted by the latest call to :meth:`.train`;
    #: ``None`` if not trained
    model_: Optional[cluster.KMeans]

    def __init__(
        self, k: int = 8, random_state: Union[int, RandomState, None] = None
    ) -> None:
        """
        :param k: the number of clusters
        :param random_state: optional random seed or random state
        """
        self.k = k
        self.random_state = random_state
        self.model_ = None

    @property
    def is_trained(self) -> bool:
        """[see superclass]"""
        return self.model_ is not None

    def train(self, dataset: Dataset) -> "KMeans":
        """[see superclass]"""
        model = cluster.KMeans(
            n_clusters=self.k, n_init=10, random_state=self.random_state
        )
        model.fit(dataset.features.to_numpy())
        self.model_ = model
        return self

    def predict(self, dataset: Dataset) -> pd.Series:
        """[see superclass]"""
        if self.model_ is None:
            raise NotTrainedError(f"{type(self).__name__} has not been trained")

        return pd.Series(
            self.model_.predict(dataset.features.to_numpy()),
            index=dataset.index,
            name="cluster",
        )

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(k={self.k!r}, random_state={self.random_state!r})"
        )


__tracker.validate()


#
# Registry of built-in estimators
#

REGISTRY.register(
    DecisionTreeClassifier, ("max_depth", "min_samples_leaf", "random_state")
)
REGISTRY.register(RandomForestClassifier, ("n_estimators", "max_depth", "random_state"))
REGISTRY.register(GaussianNB, ("var_smoothing",))
REGISTRY.register(KNearestNeighbors, ("k", "weights"))
REGISTRY.register(LogisticRegression, ("c", "max_iter"))
REGISTRY.register(
    DecisionTreeRegressor, ("max_depth", "min_samples_leaf", "random_state")
)
REGISTRY.register(Ridge, ("alpha",))
REGISTRY.register(KMeans, ("k", "random_state"))
