"""
Core implementation of :mod:`arbiter.validation`
"""

import logging
from abc import ABCMeta, abstractmethod
from typing import Callable, Dict, Iterator, Tuple, Union

import numpy as np
import numpy.typing as npt
import pandas as pd
from numpy.random.mtrand import RandomState
from sklearn import metrics, model_selection

from pytools.api import AllTracker

from ..base import Estimator
from ..data import Dataset, Labeled
from ..errors import ConfigurationError, InvalidInputError

log = logging.getLogger(__name__)

__all__ = ["HoldOut", "KFold", "Validator"]


#
# Type aliases
#

Scorer = Callable[[pd.Series, pd.Series], float]


#
# Constants
#


def _f1_macro(y_true: pd.Series, y_pred: pd.Series) -> float:
    return metrics.f1_score(y_true, y_pred, average="macro")


def _neg_mean_squared_error(y_true: pd.Series, y_pred: pd.Series) -> float:
    return -metrics.mean_squared_error(y_true, y_pred)


def _neg_mean_absolute_error(y_true: pd.Series, y_pred: pd.Series) -> float:
    return -metrics.mean_absolute_error(y_true, y_pred)


#: named scoring functions, mapping true and predicted values to a score;
#: higher scores are better
SCORERS: Dict[str, Scorer] = {
    "accuracy": metrics.accuracy_score,
    "balanced_accuracy": metrics.balanced_accuracy_score,
    "f1": _f1_macro,
    "r2": metrics.r2_score,
    "neg_mean_squared_error": _neg_mean_squared_error,
    "neg_mean_absolute_error": _neg_mean_absolute_error,
    "adjusted_rand": metrics.adjusted_rand_score,
    "homogeneity": metrics.homogeneity_score,
}


#
# Ensure all symbols introduced below are included in __all__
#

__tracker = AllTracker(globals())


#
# Class definitions
#


class Validator(metaclass=ABCMeta):
    """
    Scores an estimator on a labeled dataset, using a validation protocol such as
    hold-out or k-fold cross-validation.

    The estimator is trained by the validator as part of the protocol.
    """

    #: the scoring function used to compare predictions with the true labels
    scoring: Union[str, Scorer]

    #: optional random seed or random state for splitting the dataset
    random_state: Union[int, RandomState, None]

    def __init__(
        self,
        *,
        scoring: Union[str, Scorer] = "accuracy",
        random_state: Union[int, RandomState, None] = None,
    ) -> None:
        """
        :param scoring: the name of a scoring function in :data:`.SCORERS`, or a \
            callable taking the true and the predicted values and returning a score \
            where higher is better
        :param random_state: optional random seed or random state for splitting \
            the dataset
        """
        if isinstance(scoring, str):
            if scoring not in SCORERS:
                raise ConfigurationError(
                    f"unknown scoring {scoring!r}; "
                    f"expected one of {', '.join(SCORERS)} or a callable"
                )
        elif not callable(scoring):
            raise ConfigurationError(
                "arg scoring must be a string or a callable, "
                f"but is a {type(scoring).__name__}"
            )

        self.scoring = scoring
        self.random_state = random_state

    def score(self, estimator: Estimator, dataset: Dataset) -> float:
        """
        Train and score the given estimator on the given dataset.

        :param estimator: the estimator to validate
        :param dataset: a labeled dataset to split into training and testing \
            observations
        :return: the validation score; higher is better
        :raise InvalidInputError: the dataset is not labeled
        """
        if not isinstance(dataset, Labeled):
            raise InvalidInputError(
                f"{type(self).__name__} requires a Labeled dataset, "
                f"but got a {type(dataset).__name__}"
            )

        scorer = self._get_scorer()
        scores = []

        for train_iloc, test_iloc in self._splits(dataset):
            testing: Labeled = dataset.subsample(iloc=test_iloc)
            estimator.train(dataset.subsample(iloc=train_iloc))
            scores.append(
                float(scorer(testing.target, estimator.predict(testing)))
            )

        score = float(np.mean(scores))

        log.debug(
            f"{type(self).__name__} scored {type(estimator).__name__}: {score:.4g}"
        )

        return score

    @abstractmethod
    def _splits(
        self, dataset: Labeled
    ) -> Iterator[Tuple[npt.NDArray[np.int_], npt.NDArray[np.int_]]]:
        # generate pairs of integer indices for training and testing observations
        pass

    def _get_scorer(self) -> Scorer:
        scoring = self.scoring

        if isinstance(scoring, str):
            scorer = SCORERS[scoring]

            def _scorer_fn(y_true: pd.Series, y_pred: pd.Series) -> float:
                # align predictions by position, not by index
                return scorer(y_true.to_numpy(), np.asarray(y_pred))

            return _scorer_fn
        else:
            return scoring

    def __repr__(self) -> str:
        return f"{type(self).__name__}(scoring={self.scoring!r})"


class HoldOut(Validator):
    """
    Validates an estimator on a single random split of the dataset into training
    and testing observations.
    """

    #: the proportion of observations held out for testing
    ratio: float

    #: if ``True``, preserve the proportion of labels in both splits
    stratify: bool

    def __init__(
        self,
        ratio: float = 0.2,
        *,
        scoring: Union[str, Scorer] = "accuracy",
        stratify: bool = False,
        random_state: Union[int, RandomState, None] = None,
    ) -> None:
        """
        :param ratio: the proportion of observations to hold out for testing, \
            between 0 and 1 (exclusive)
        :param scoring: the name of a scoring function in :data:`.SCORERS`, or a \
            callable taking the true and the predicted values and returning a score \
            where higher is better
        :param stratify: if ``True``, preserve the proportion of labels in both \
            splits
        :param random_state: optional random seed or random state for splitting \
            the dataset
        """
        super().__init__(scoring=scoring, random_state=random_state)

        if not 0.0 < ratio < 1.0:
            raise ConfigurationError(f"arg ratio={ratio} must be between 0 and 1")

        self.ratio = ratio
        self.stratify = stratify

    def _splits(
        self, dataset: Labeled
    ) -> Iterator[Tuple[npt.NDArray[np.int_], npt.NDArray[np.int_]]]:
        train_iloc, test_iloc = model_selection.train_test_split(
            np.arange(len(dataset)),
            test_size=self.ratio,
            stratify=dataset.target.to_numpy() if self.stratify else None,
            random_state=self.random_state,
        )
        yield train_iloc, test_iloc


class KFold(Validator):
    """
    Validates an estimator using k-fold cross-validation: each of the ``k`` folds is
    used once for testing an estimator trained on the remaining folds, and the
    resulting scores are averaged.
    """

    #: the number of folds
    k: int

    #: if ``True``, preserve the proportion of labels in every fold
    stratify: bool

    #: if ``True``, shuffle the observations before splitting them into folds
    shuffle: bool

    def __init__(
        self,
        k: int = 5,
        *,
        scoring: Union[str, Scorer] = "accuracy",
        stratify: bool = False,
        shuffle: bool = True,
        random_state: Union[int, RandomState, None] = None,
    ) -> None:
        """
        :param k: the number of folds; at least 2
        :param scoring: the name of a scoring function in :data:`.SCORERS`, or a \
            callable taking the true and the predicted values and returning a score \
            where higher is better
        :param stratify: if ``True``, preserve the proportion of labels in every fold
        :param shuffle: if ``True``, shuffle the observations before splitting them \
            into folds
        :param random_state: optional random seed or random state for shuffling
        """
        super().__init__(scoring=scoring, random_state=random_state)

        if not isinstance(k, int) or k < 2:
            raise ConfigurationError(f"arg k={k!r} must be an integer of at least 2")

        self.k = k
        self.stratify = stratify
        self.shuffle = shuffle

    def _splits(
        self, dataset: Labeled
    ) -> Iterator[Tuple[npt.NDArray[np.int_], npt.NDArray[np.int_]]]:
        if len(dataset) < self.k:
            raise InvalidInputError(
                f"cannot split {len(dataset)} observations into {self.k} folds"
            )

        splitter_type = (
            model_selection.StratifiedKFold
            if self.stratify
            else model_selection.KFold
        )
        splitter = splitter_type(
            n_splits=self.k,
            shuffle=self.shuffle,
            random_state=self.random_state if self.shuffle else None,
        )

        yield from splitter.split(
            X=np.zeros((len(dataset), 1)), y=dataset.target.to_numpy()
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(k={self.k}, scoring={self.scoring!r})"


__tracker.validate()
