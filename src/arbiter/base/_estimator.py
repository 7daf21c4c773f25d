"""
Core implementation of :mod:`arbiter.base`
"""

from abc import ABCMeta, abstractmethod
from enum import Enum
from typing import TypeVar

import pandas as pd

from pytools.api import AllTracker

from ..data import Dataset

__all__ = [
    "Classifier",
    "Clusterer",
    "Estimator",
    "EstimatorType",
    "Persistable",
    "Probabilistic",
    "Regressor",
]


#
# Type variables
#

T_Estimator = TypeVar("T_Estimator", bound="Estimator")


#
# Ensure all symbols introduced below are included in __all__
#

__tracker = AllTracker(globals())


#
# Class definitions
#


class EstimatorType(Enum):
    """
    The kind of prediction an estimator makes.
    """

    #: predicts a class label
    CLASSIFIER = "classifier"

    #: predicts a continuous value
    REGRESSOR = "regressor"

    #: predicts a cluster id
    CLUSTERER = "clusterer"


class Estimator(metaclass=ABCMeta):
    """
    A trainable model making one prediction per observation of a dataset.
    """

    @property
    @abstractmethod
    def estimator_type(self) -> EstimatorType:
        """
        The kind of prediction this estimator makes.
        """
        pass

    @property
    @abstractmethod
    def is_trained(self) -> bool:
        """
        ``True`` if this estimator has been trained, ``False`` otherwise.
        """
        pass

    @abstractmethod
    def train(self: T_Estimator, dataset: Dataset) -> T_Estimator:
        """
        Train this estimator.

        :param dataset: the dataset to train on
        :return: ``self``
        :raise InvalidInputError: this estimator cannot be trained on the given \
            kind of dataset
        """
        pass

    @abstractmethod
    def predict(self, dataset: Dataset) -> pd.Series:
        """
        Make one prediction per observation in the given dataset.

        :param dataset: the observations to predict
        :return: a series of predictions, indexed like the observations
        :raise NotTrainedError: this estimator has not been trained
        """
        pass


class Probabilistic(Estimator, metaclass=ABCMeta):
    """
    An estimator that can output the probability of each possible class for an
    observation.
    """

    @abstractmethod
    def proba(self, dataset: Dataset) -> pd.DataFrame:
        """
        Estimate the probability of each class, for every observation in the given
        dataset.

        :param dataset: the observations to estimate probabilities for
        :return: a data frame with one row per observation, indexed like the \
            observations, and one column per class label
        :raise NotTrainedError: this estimator has not been trained
        """
        pass


class Classifier(Estimator, metaclass=ABCMeta):
    """
    An estimator predicting class labels.
    """

    @property
    def estimator_type(self) -> EstimatorType:
        """[see superclass]"""
        return EstimatorType.CLASSIFIER


class Regressor(Estimator, metaclass=ABCMeta):
    """
    An estimator predicting continuous values.
    """

    @property
    def estimator_type(self) -> EstimatorType:
        """[see superclass]"""
        return EstimatorType.REGRESSOR


class Clusterer(Estimator, metaclass=ABCMeta):
    """
    An estimator assigning observations to clusters.
    """

    @property
    def estimator_type(self) -> EstimatorType:
        """[see superclass]"""
        return EstimatorType.CLUSTERER


class Persistable(metaclass=ABCMeta):
    """
    Marker for objects whose complete state can be saved and restored by a
    :class:`~arbiter.persistence.Persister`.
    """


__tracker.validate()
