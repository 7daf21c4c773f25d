"""
Core implementation of :mod:`arbiter.selection`
"""

import logging
import math
from types import MappingProxyType
from typing import (
    Any,
    Dict,
    List,
    Mapping,
    Optional,
    Tuple,
    Type,
    TypeVar,
    Union,
    cast,
)

import pandas as pd

from pytools.api import AllTracker, inheritdoc
from pytools.parallelization import Job, JobRunner, ParallelizableMixin

from ..base import (
    Estimator,
    EstimatorRegistry,
    EstimatorSpec,
    EstimatorType,
    Persistable,
    Probabilistic,
)
from ..data import Dataset, Labeled
from ..errors import ConfigurationError, InvalidInputError, NotTrainedError
from ..learners import REGISTRY
from ..validation import Validator
from ._parameters import ParameterGrid, ParameterSpec

log = logging.getLogger(__name__)

__all__ = [
    "GridSearch",
    "ProbabilisticGridSearch",
    "TrialResult",
    "create_grid_search",
]


#
# Type aliases
#

BaseEstimator = Union[EstimatorSpec, str, Type[Estimator]]


#
# Type variables
#

T_GridSearch = TypeVar("T_GridSearch", bound="GridSearch")


#
# Ensure all symbols introduced below are included in __all__
#

__tracker = AllTracker(globals())


#
# Class definitions
#


class TrialResult:
    """
    The validation score of one parameter combination evaluated by a grid search.

    Trial results are immutable.
    """

    __slots__ = ["_score", "_params"]

    _score: float
    _params: Dict[str, Any]

    def __init__(self, score: float, params: Mapping[str, Any]) -> None:
        """
        :param score: the validation score obtained by the estimator
        :param params: the constructor parameters of the estimator
        """
        self._score = float(score)
        self._params = dict(params)

    @property
    def score(self) -> float:
        """
        The validation score obtained by the estimator.
        """
        return self._score

    @property
    def params(self) -> Mapping[str, Any]:
        """
        The constructor parameters of the estimator, as a read-only mapping.
        """
        return MappingProxyType(self._params)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TrialResult):
            return NotImplemented
        return self._score == other._score and self._params == other._params

    def __repr__(self) -> str:
        return f"{type(self).__name__}(score={self._score!r}, params={self._params!r})"


@inheritdoc(match="""[see superclass]""")
class GridSearch(ParallelizableMixin, Estimator, Persistable):
    """
    Select the hyperparameters of an estimator by exhaustive search over a grid of
    candidate values.

    For every combination in the parameter grid, a new instance of the base
    estimator is constructed and scored by a :class:`.Validator`.
    The best-scoring estimator is then used to make predictions; if multiple
    combinations tie for the best score, the combination enumerated first is
    selected.

    Grid searches expose the prediction capabilities common to all estimators.
    Use :class:`.ProbabilisticGridSearch`, or :func:`.create_grid_search`, to also
    obtain class probabilities from a probabilistic base estimator.
    """

    # defined in superclass, repeated here for Sphinx
    n_jobs: Optional[int]

    # defined in superclass, repeated here for Sphinx
    shared_memory: Optional[bool]

    # defined in superclass, repeated here for Sphinx
    pre_dispatch: Optional[Union[str, int]]

    # defined in superclass, repeated here for Sphinx
    verbose: Optional[int]

    #: if ``True``, retrain the selected estimator on the full training set
    refit: bool

    def __init__(
        self,
        base: BaseEstimator,
        params: ParameterSpec,
        validator: Validator,
        *,
        registry: Optional[EstimatorRegistry] = None,
        refit: bool = True,
        n_jobs: Optional[int] = None,
        shared_memory: Optional[bool] = None,
        pre_dispatch: Optional[Union[str, int]] = None,
        verbose: Optional[int] = None,
    ) -> None:
        """
        :param base: the estimator type to search hyperparameters for; either an \
            estimator spec, or the name or type of an estimator in the registry
        :param params: candidate values for the leading constructor parameters of \
            the base estimator, either as a sequence of candidate lists, or as a \
            mapping of the parameter names to candidate lists
        :param validator: the validator used to score each candidate estimator
        :param registry: the registry in which to look up the base estimator \
            (default: :data:`arbiter.learners.REGISTRY`)
        :param refit: if ``True``, retrain the selected estimator on the full \
            training set after the search (default: ``True``)
        %%PARALLELIZABLE_PARAMS%%
        :raise ConfigurationError: the base estimator is unknown or not an \
            estimator, the parameters do not match its constructor, or the validator \
            is not a :class:`.Validator`
        """
        super().__init__(
            n_jobs=n_jobs,
            shared_memory=shared_memory,
            pre_dispatch=pre_dispatch,
            verbose=verbose,
        )

        spec = _resolve_base(base, registry)

        if not spec.is_estimator:
            raise ConfigurationError(
                f"base {spec.name} must implement the {Estimator.__name__} interface"
            )

        if not isinstance(validator, Validator):
            raise ConfigurationError(
                f"arg validator must be a {Validator.__name__}, "
                f"but is a {type(validator).__name__}"
            )

        self._base = spec
        self._grid = ParameterGrid.for_estimator(spec, params)
        self._validator = validator
        self.refit = refit

        self._results: Optional[List[TrialResult]] = None
        self._best: Optional[Tuple[TrialResult, Estimator]] = None

    __init__.__doc__ = cast(str, __init__.__doc__).replace(
        "%%PARALLELIZABLE_PARAMS%%",
        cast(str, ParallelizableMixin.__init__.__doc__).strip(),
    )

    @property
    def base(self) -> EstimatorSpec:
        """
        The spec of the base estimator.
        """
        return self._base

    @property
    def grid(self) -> ParameterGrid:
        """
        The grid of parameter combinations searched by this grid search.
        """
        return self._grid

    @property
    def validator(self) -> Validator:
        """
        The validator used to score each candidate estimator.
        """
        return self._validator

    @property
    def estimator_type(self) -> EstimatorType:
        """
        The kind of prediction made by the base estimator.
        """
        kind = self._base.kind
        if kind is None:
            return self.best_estimator.estimator_type
        return kind

    @property
    def is_trained(self) -> bool:
        """[see superclass]"""
        return self._best is not None

    @property
    def best_result(self) -> TrialResult:
        """
        The trial result of the selected parameter combination.
        """
        return self._get_best()[0]

    @property
    def best_estimator(self) -> Estimator:
        """
        The estimator selected by the latest search, used to make predictions.
        """
        return self._get_best()[1]

    def results(self) -> List[TrialResult]:
        """
        Get the results of the latest search.

        :return: one trial result per parameter combination, in enumeration order
        :raise NotTrainedError: this grid search has not been trained
        """
        self._get_best()
        return list(cast(List[TrialResult], self._results))

    def train(self: T_GridSearch, dataset: Dataset) -> T_GridSearch:
        """
        Score one estimator per parameter combination, and select the estimator with
        the best score.

        Replaces the results of any previous search.
        An error raised while constructing or scoring any of the candidate estimators
        aborts the search.

        :param dataset: the labeled dataset used to score the candidate estimators
        :return: ``self``
        :raise InvalidInputError: the dataset is not labeled, or no parameter \
            combination obtained a score that is not NaN
        """
        if not isinstance(dataset, Labeled):
            raise InvalidInputError(
                f"{type(self).__name__} requires a Labeled training set"
            )

        spec = self._base
        names = self._grid.names
        validator = self._validator

        log.debug(
            f"searching {len(self._grid)} parameter combinations for {spec.name}"
        )

        trials: List[Tuple[float, Estimator]] = JobRunner.from_parallelizable(
            self
        ).run_jobs(
            Job.delayed(_run_trial)(spec, values, validator, dataset)
            for values in self._grid.iter_values()
        )

        results: List[TrialResult] = []
        best_score = -math.inf
        best: Optional[Tuple[TrialResult, Estimator]] = None

        for values, (score, estimator) in zip(self._grid.iter_values(), trials):
            result = TrialResult(score=score, params=dict(zip(names, values)))
            results.append(result)

            log.debug(
                f"trial {len(results)}: {dict(result.params)} scored {score:.4g}"
            )

            if score > best_score:
                best_score = score
                best = (result, estimator)

        if best is None:
            raise InvalidInputError(
                f"no parameter combination of {spec.name} obtained a comparable score"
            )

        best_result, best_estimator = best

        log.info(
            f"selected {spec.name} with parameters {dict(best_result.params)}, "
            f"score {best_result.score:.4g}"
        )

        if self.refit:
            best_estimator.train(dataset)

        self._results = results
        self._best = best

        return self

    def predict(self, dataset: Dataset) -> pd.Series:
        """
        Make predictions using the selected estimator.

        :param dataset: the observations to predict
        :return: a series of predictions, indexed like the observations
        :raise NotTrainedError: this grid search has not been trained
        """
        return self.best_estimator.predict(dataset)

    def summary_report(self) -> pd.DataFrame:
        """
        Create a summary table of the scores achieved by all parameter combinations
        of the latest search, sorted by score in descending order.

        Combinations with equal scores are listed in enumeration order.

        :return: the summary report as a data frame, with one column per parameter, \
            a ``score`` column, and a ``rank`` column starting at 1
        :raise NotTrainedError: this grid search has not been trained
        """
        results = self.results()

        report = pd.DataFrame(
            [{**result.params, "score": result.score} for result in results],
            columns=[*self._grid.names, "score"],
        ).rename_axis(index="trial")

        report = report.sort_values(by="score", ascending=False, kind="mergesort")
        report.insert(0, "rank", range(1, len(report) + 1))

        return report

    def _get_best(self) -> Tuple[TrialResult, Estimator]:
        best = self._best
        if best is None:
            raise NotTrainedError(f"{type(self).__name__} has not been trained")
        return best

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({self._base.name}, {self._grid!r}, "
            f"{self._validator!r})"
        )


@inheritdoc(match="""[see superclass]""")
class ProbabilisticGridSearch(GridSearch, Probabilistic):
    """
    A grid search over a probabilistic base estimator.

    In addition to predictions, obtains class probabilities from the selected
    estimator.
    """

    def __init__(
        self,
        base: BaseEstimator,
        params: ParameterSpec,
        validator: Validator,
        *,
        registry: Optional[EstimatorRegistry] = None,
        refit: bool = True,
        n_jobs: Optional[int] = None,
        shared_memory: Optional[bool] = None,
        pre_dispatch: Optional[Union[str, int]] = None,
        verbose: Optional[int] = None,
    ) -> None:
        """[see superclass]"""
        super().__init__(
            base,
            params,
            validator,
            registry=registry,
            refit=refit,
            n_jobs=n_jobs,
            shared_memory=shared_memory,
            pre_dispatch=pre_dispatch,
            verbose=verbose,
        )

        if not self.base.is_probabilistic:
            raise ConfigurationError(
                f"base {self.base.name} must implement the "
                f"{Probabilistic.__name__} interface"
            )

    def proba(self, dataset: Dataset) -> pd.DataFrame:
        """
        Estimate class probabilities using the selected estimator.

        :param dataset: the observations to estimate probabilities for
        :return: a data frame with one row per observation, indexed like the \
            observations, and one column per class label
        :raise NotTrainedError: this grid search has not been trained
        """
        return cast(Probabilistic, self.best_estimator).proba(dataset)


def create_grid_search(
    base: BaseEstimator,
    params: ParameterSpec,
    validator: Validator,
    *,
    registry: Optional[EstimatorRegistry] = None,
    refit: bool = True,
    n_jobs: Optional[int] = None,
    shared_memory: Optional[bool] = None,
    pre_dispatch: Optional[Union[str, int]] = None,
    verbose: Optional[int] = None,
) -> GridSearch:
    """
    Create a grid search matching the capabilities of the base estimator.

    Returns a :class:`.ProbabilisticGridSearch` if the base estimator is
    probabilistic, and a :class:`.GridSearch` otherwise.
    See :class:`.GridSearch` for a description of the arguments.

    :return: the new grid search
    """
    spec = _resolve_base(base, registry)
    search_type = ProbabilisticGridSearch if spec.is_probabilistic else GridSearch
    return search_type(
        spec,
        params,
        validator,
        refit=refit,
        n_jobs=n_jobs,
        shared_memory=shared_memory,
        pre_dispatch=pre_dispatch,
        verbose=verbose,
    )


__tracker.validate()


#
# auxiliary functions
#


def _resolve_base(
    base: BaseEstimator, registry: Optional[EstimatorRegistry]
) -> EstimatorSpec:
    if isinstance(base, EstimatorSpec):
        return base

    if registry is None:
        registry = REGISTRY

    return registry.get(base)


def _run_trial(
    spec: EstimatorSpec, values: Tuple[Any, ...], validator: Validator, dataset: Labeled
) -> Tuple[float, Estimator]:
    # construct and score the estimator for one parameter combination
    estimator = spec.create(*values)
    return float(validator.score(estimator, dataset)), estimator
