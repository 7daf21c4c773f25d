"""
Core implementation of :mod:`arbiter.ensemble`
"""

import logging
from copy import deepcopy
from typing import Any, Iterable, List, Optional, Tuple, Union, cast

import numpy as np
import pandas as pd

from pytools.api import AllTracker, inheritdoc
from pytools.parallelization import Job, JobRunner, ParallelizableMixin

from ..base import Classifier, Persistable, Probabilistic
from ..data import Dataset, Labeled
from ..errors import ConfigurationError, InvalidInputError, NotTrainedError

log = logging.getLogger(__name__)

__all__ = ["CommitteeMachine"]


#
# Ensure all symbols introduced below are included in __all__
#

__tracker = AllTracker(globals())


#
# Class definitions
#


@inheritdoc(match="""[see superclass]""")
class CommitteeMachine(ParallelizableMixin, Classifier, Probabilistic, Persistable):
    """
    A committee of probabilistic classifiers ("experts") whose class probabilities
    are averaged into a consensus.

    All experts are trained independently, each on its own copy of the training
    set; the committee trains copies of its experts, leaving the estimators passed
    to the constructor unchanged.
    The probability of a class is the sum of the probabilities the experts assign
    to it, divided by the number of experts plus a small constant ``epsilon``; the
    consensus distribution therefore sums to slightly less than 1.
    Classes not observed in the training set are ignored, and classes an expert
    does not estimate count as probability 0 for that expert.

    The committee predicts the class with the highest consensus probability; if
    multiple classes tie, the class observed first in the training set wins.
    """

    # defined in superclass, repeated here for Sphinx
    n_jobs: Optional[int]

    # defined in superclass, repeated here for Sphinx
    shared_memory: Optional[bool]

    # defined in superclass, repeated here for Sphinx
    pre_dispatch: Optional[Union[str, int]]

    # defined in superclass, repeated here for Sphinx
    verbose: Optional[int]

    #: the constant added to the number of experts when averaging probabilities
    epsilon: float

    def __init__(
        self,
        experts: Iterable[Probabilistic],
        *,
        epsilon: float = 1e-8,
        n_jobs: Optional[int] = None,
        shared_memory: Optional[bool] = None,
        pre_dispatch: Optional[Union[str, int]] = None,
        verbose: Optional[int] = None,
    ) -> None:
        """
        :param experts: the probabilistic classifiers forming the committee
        :param epsilon: a small positive constant added to the number of experts \
            when averaging probabilities (default: ``1e-8``)
        %%PARALLELIZABLE_PARAMS%%
        :raise ConfigurationError: no experts are given, one of the experts is not \
            probabilistic, or epsilon is not positive
        """
        super().__init__(
            n_jobs=n_jobs,
            shared_memory=shared_memory,
            pre_dispatch=pre_dispatch,
            verbose=verbose,
        )

        experts = tuple(experts)

        if not experts:
            raise ConfigurationError("a committee needs at least one expert")

        for expert in experts:
            if not isinstance(expert, Probabilistic):
                raise ConfigurationError(
                    f"expert {expert!r} must implement the "
                    f"{Probabilistic.__name__} interface"
                )

        if not epsilon > 0.0:
            raise ConfigurationError(f"arg epsilon={epsilon} must be positive")

        self._experts: Tuple[Probabilistic, ...] = experts
        self._classes: Optional[List[Any]] = None
        self.epsilon = epsilon

    __init__.__doc__ = cast(str, __init__.__doc__).replace(
        "%%PARALLELIZABLE_PARAMS%%",
        cast(str, ParallelizableMixin.__init__.__doc__).strip(),
    )

    @property
    def experts(self) -> Tuple[Probabilistic, ...]:
        """
        The experts of this committee, in the order they were given; trained copies
        of the given experts once the committee has been trained.
        """
        return self._experts

    @property
    def classes(self) -> List[Any]:
        """
        The class labels observed in the training set, in order of their first
        appearance.
        """
        if self._classes is None:
            raise NotTrainedError(f"{type(self).__name__} has not been trained")
        return list(self._classes)

    @property
    def is_trained(self) -> bool:
        """[see superclass]"""
        return self._classes is not None

    def train(self, dataset: Dataset) -> "CommitteeMachine":
        """
        Train a copy of every expert on its own copy of the given dataset.

        The trained copies replace the experts of this committee once all of them
        have been trained; if training any expert fails, the committee keeps its
        previous experts and classes.

        :param dataset: the labeled training set
        :return: ``self``
        :raise InvalidInputError: the dataset is not labeled
        """
        if not isinstance(dataset, Labeled):
            raise InvalidInputError(
                f"{type(self).__name__} requires a Labeled training set"
            )

        classes = dataset.possible_outcomes()

        log.debug(
            f"training {len(self._experts)} experts on {len(dataset)} observations "
            f"with classes {classes}"
        )

        experts: List[Probabilistic] = JobRunner.from_parallelizable(self).run_jobs(
            Job.delayed(_train_expert)(expert, dataset.copy())
            for expert in self._experts
        )

        self._experts = tuple(experts)
        self._classes = classes

        return self

    def proba(self, dataset: Dataset) -> pd.DataFrame:
        """[see superclass]"""
        classes = self.classes
        n_observations = len(dataset)
        denominator = len(self._experts) + self.epsilon

        probabilities = np.zeros((n_observations, len(classes)))

        for i, expert in enumerate(self._experts):
            expert_proba: pd.DataFrame = expert.proba(dataset)

            if len(expert_proba) != n_observations:
                raise InvalidInputError(
                    f"expert {i} estimated probabilities for {len(expert_proba)} "
                    f"observations, expected {n_observations}"
                )

            # match classes by label, observations by position
            probabilities += (
                expert_proba.reindex(columns=classes, fill_value=0.0).to_numpy(
                    dtype=float
                )
                / denominator
            )

        return pd.DataFrame(
            probabilities, index=dataset.index, columns=pd.Index(classes)
        )

    def predict(self, dataset: Dataset) -> pd.Series:
        """[see superclass]"""
        return self.proba(dataset).idxmax(axis=1)

    def __repr__(self) -> str:
        experts = ", ".join(repr(expert) for expert in self._experts)
        return f"{type(self).__name__}([{experts}], epsilon={self.epsilon!r})"


__tracker.validate()


#
# auxiliary functions
#


def _train_expert(expert: Probabilistic, dataset: Labeled) -> Probabilistic:
    log.debug(f"training expert {expert!r}")
    trained = deepcopy(expert)
    trained.train(dataset)
    return trained
