"""
Parameter grids for the exhaustive search of hyperparameter combinations.
"""

import itertools
import logging
import operator
from functools import reduce
from types import MappingProxyType
from typing import (
    Any,
    Dict,
    Iterator,
    List,
    Mapping,
    Sequence,
    Tuple,
    Union,
    overload,
)

from pytools.api import AllTracker, is_list_like

from ..base import EstimatorSpec
from ..errors import ConfigurationError

log = logging.getLogger(__name__)

__all__ = ["ParameterGrid"]


#
# Type aliases
#

ParameterSpec = Union[Mapping[str, Any], Sequence[Any]]


#
# Ensure all symbols introduced below are included in __all__
#

__tracker = AllTracker(globals())


#
# Class definitions
#


class ParameterGrid(Sequence[Dict[str, Any]]):
    """
    The Cartesian product of candidate values for one or more named parameters.

    A parameter grid is a read-only sequence of parameter combinations, each
    represented as a dictionary mapping parameter names to values.
    Combinations are enumerated like an odometer: the first parameter varies
    slowest, the last parameter fastest, and the candidate values of each parameter
    are enumerated in the order they were given.

    For example, the grid for ``depth=[1, 2]`` and ``rate=[0.1, 0.5]`` enumerates
    ``(1, 0.1)``, ``(1, 0.5)``, ``(2, 0.1)``, and ``(2, 0.5)``.
    """

    def __init__(
        self, names: Sequence[str], candidates: Sequence[Sequence[Any]]
    ) -> None:
        """
        :param names: the names of the parameters, in enumeration order
        :param candidates: one non-empty sequence of candidate values per parameter
        """
        names = tuple(names)
        candidates = tuple(tuple(values) for values in candidates)

        if len(names) != len(candidates):
            raise ConfigurationError(
                f"got {len(names)} parameter names "
                f"but {len(candidates)} lists of candidate values"
            )

        if len(set(names)) < len(names):
            raise ConfigurationError(f"duplicate parameter names: {names}")

        empty = [name for name, values in zip(names, candidates) if not values]
        if empty:
            raise ConfigurationError(
                f"no candidate values given for parameters: {', '.join(empty)}"
            )

        self._names: Tuple[str, ...] = names
        self._candidates: Tuple[Tuple[Any, ...], ...] = candidates

    @classmethod
    def for_estimator(
        cls, estimator: EstimatorSpec, params: ParameterSpec
    ) -> "ParameterGrid":
        """
        Create a grid binding candidate values to the leading constructor parameters
        of an estimator.

        The parameters are either given as a sequence of candidate lists, assigned
        positionally to the first parameters of the estimator's constructor,
        or as a mapping whose keys must match the names of the first parameters of
        the estimator's constructor, in the same order.
        A single value that is not list-like is treated as a list with one element.

        :param estimator: the spec of the estimator type to construct
        :param params: the candidate values for the leading constructor parameters
        :return: the parameter grid
        :raise ConfigurationError: more parameters are given than the estimator's \
            constructor accepts, the keys of a mapping differ from the names of the \
            leading constructor parameters or are given in a different order, \
            or a parameter has no candidate values
        """
        if isinstance(params, Mapping):
            given_names = list(params.keys())
            candidate_lists = list(params.values())
        elif _is_candidate_list(params):
            given_names = None
            candidate_lists = list(params)
        else:
            raise ConfigurationError(
                "arg params must be a mapping or a sequence of candidate lists, "
                f"but is a {type(params).__name__}"
            )

        if len(candidate_lists) > estimator.arity:
            raise ConfigurationError(
                f"too many parameters for {estimator.name}: "
                f"{len(candidate_lists)} given, only {estimator.arity} accepted"
            )

        names = estimator.parameters[: len(candidate_lists)]

        if given_names is not None and tuple(given_names) != names:
            raise ConfigurationError(
                f"parameters {given_names} do not match the leading parameters "
                f"{list(names)} of {estimator.name}"
            )

        return cls(
            names=names,
            candidates=[
                values if _is_candidate_list(values) else [values]
                for values in candidate_lists
            ],
        )

    @property
    def names(self) -> Tuple[str, ...]:
        """
        The names of the parameters in this grid, in enumeration order.
        """
        return self._names

    @property
    def parameters(self) -> Mapping[str, Tuple[Any, ...]]:
        """
        The candidate values for each parameter in this grid.
        """
        return MappingProxyType(dict(zip(self._names, self._candidates)))

    def iter_values(self) -> Iterator[Tuple[Any, ...]]:
        """
        Iterate the parameter combinations of this grid as tuples of values,
        in the order of the parameter names.

        :return: an iterator of value tuples, in enumeration order
        """
        return itertools.product(*self._candidates)

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        names = self._names
        return (dict(zip(names, values)) for values in self.iter_values())

    @overload
    def __getitem__(self, pos: int) -> Dict[str, Any]:
        pass

    @overload
    def __getitem__(self, pos: slice) -> List[Dict[str, Any]]:
        pass

    def __getitem__(
        self, pos: Union[int, slice]
    ) -> Union[Dict[str, Any], List[Dict[str, Any]]]:
        _len = len(self)

        if isinstance(pos, slice):
            return [self._get(i) for i in range(*pos.indices(_len))]

        if pos < -_len or pos >= _len:
            raise IndexError(f"index out of bounds: {pos}")

        return self._get(_len + pos if pos < 0 else pos)

    def __len__(self) -> int:
        return reduce(operator.mul, (len(values) for values in self._candidates), 1)

    def __repr__(self) -> str:
        params = ", ".join(
            f"{name}={list(values)!r}"
            for name, values in zip(self._names, self._candidates)
        )
        return f"{type(self).__name__}({params})"

    def _get(self, i: int) -> Dict[str, Any]:
        # decode the position of a combination, starting with the fastest parameter
        result: Dict[str, Any] = {}

        for name, values in zip(reversed(self._names), reversed(self._candidates)):
            n_values = len(values)
            result[name] = values[i % n_values]
            i //= n_values

        assert i == 0, "position is within bounds"

        return {name: result[name] for name in self._names}


__tracker.validate()


#
# auxiliary functions
#


def _is_candidate_list(values: Any) -> bool:
    # strings are single candidate values, not lists of characters
    return is_list_like(values) and not isinstance(values, (str, bytes))
