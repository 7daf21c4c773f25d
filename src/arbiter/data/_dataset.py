"""
Core implementation of :mod:`arbiter.data`
"""

from copy import copy
from typing import Any, Collection, Iterable, List, Optional, Sequence, Set, Union

import pandas as pd

from pytools.api import AllTracker, to_list, to_set

__all__ = ["Dataset", "Labeled"]

#
# Ensure all symbols introduced below are included in __all__
#

__tracker = AllTracker(globals())


#
# Class definitions
#


class Dataset:
    """
    A collection of unlabeled observations, each described by one or more features.

    The underlying data structure is a pandas :class:`.DataFrame`; each row represents
    one observation.
    Datasets are not modified by any of the estimators in this package: methods
    selecting subsets of observations or features return new datasets.

    Supports :func:`.len`, returning the number of observations in this dataset.
    """

    __slots__ = ["_observations", "_features"]

    _observations: pd.DataFrame
    _features: List[str]

    #: default name for the observations index (= row index)
    #: of the underlying data frame
    IDX_OBSERVATION = "observation"

    #: default name for the feature index (= column index)
    #: used when returning a features table
    IDX_FEATURE = "feature"

    def __init__(
        self,
        observations: pd.DataFrame,
        *,
        feature_names: Optional[Sequence[str]] = None,
    ) -> None:
        """
        :param observations: a table of observational data; \
            each row represents one observation
        :param feature_names: optional sequence of strings naming the columns that \
            represent features; if omitted, all columns are considered features
        """

        observations = self._validate_observations(observations)

        if feature_names is None:
            feature_list = [
                column
                for column in observations.columns
                if column not in self._reserved_columns()
            ]
        else:
            _ensure_columns_exist(observations, "feature", feature_names)
            feature_list = list(feature_names)

            reserved = set(self._reserved_columns()).intersection(feature_list)
            if reserved:
                raise KeyError(
                    f"columns {', '.join(map(str, reserved))} cannot be used as "
                    "features"
                )

        self._features = feature_list

        # keep only the columns we need
        self._observations = observations.loc[
            :, [*feature_list, *self._reserved_columns()]
        ]

    @property
    def index(self) -> pd.Index:
        """
        Row index of all observations in this dataset.
        """
        return self._observations.index

    @property
    def feature_names(self) -> List[str]:
        """
        The column names of all features in this dataset.
        """
        return self._features

    @property
    def features(self) -> pd.DataFrame:
        """
        The features for all observations.
        """
        features: pd.DataFrame = self._observations.loc[:, self._features]

        if features.columns.name is None:
            features = features.rename_axis(columns=Dataset.IDX_FEATURE)

        return features

    def subsample(
        self,
        *,
        loc: Optional[Union[slice, Sequence[Any]]] = None,
        iloc: Optional[Union[slice, Sequence[int]]] = None,
    ) -> "Dataset":
        """
        Return a new dataset with a subset of this dataset's observations.

        Select observations either by indices (``loc``), or integer indices
        (``iloc``). Exactly one of both arguments must be provided when
        calling this method, not both or none.

        :param loc: indices of observations to select
        :param iloc: integer indices of observations to select
        :return: copy of this dataset, comprising only the observations in the given \
            rows
        """
        subsample = copy(self)
        if iloc is None:
            if loc is None:
                raise ValueError("either arg loc or arg iloc must be specified")
            else:
                subsample._observations = self._observations.loc[loc, :]
        elif loc is None:
            subsample._observations = self._observations.iloc[iloc, :]
        else:
            raise ValueError(
                "arg loc and arg iloc must not both be specified at the same time"
            )
        return subsample

    def keep(self, features: Union[str, Collection[str]]) -> "Dataset":
        """
        Return a new dataset which only includes the features with the given names.

        :param features: name(s) of the features to be selected
        :return: copy of this dataset, containing only the features with the given \
            names
        """

        features: List[str] = to_list(features, element_type=str)

        if not set(features).issubset(self._features):
            raise ValueError(
                "arg features is not a subset of the features in this dataset"
            )

        subsample = copy(self)
        subsample._features = features
        subsample._observations = self._observations.loc[
            :, [*features, *self._reserved_columns()]
        ]

        return subsample

    def drop(self, features: Union[str, Collection[str]]) -> "Dataset":
        """
        Return a copy of this dataset, dropping the features with the given names.

        :param features: name(s) of the features to be dropped
        :return: copy of this dataset, excluding the features with the given names
        """
        features: Set[str] = to_set(features, element_type=str)

        unknown = features.difference(self._features)
        if unknown:
            raise ValueError(f"unknown features in arg features: {unknown}")

        return self.keep(
            features=[feature for feature in self._features if feature not in features]
        )

    def copy(self) -> "Dataset":
        """
        Create a deep copy of this dataset.

        Changes applied to the observations of the copy do not affect this dataset,
        and vice versa.

        :return: the deep copy
        """
        dataset = copy(self)
        dataset._features = list(self._features)
        dataset._observations = self._observations.copy(deep=True)
        return dataset

    def _reserved_columns(self) -> List[str]:
        # columns that are part of the observations table but are not features
        return []

    @staticmethod
    def _validate_observations(observations: pd.DataFrame) -> pd.DataFrame:
        if observations is None or not isinstance(observations, pd.DataFrame):
            raise ValueError("arg observations is not a DataFrame")

        observations_index = observations.index

        if observations_index.nlevels != 1:
            raise ValueError(
                f"index of arg observations has {observations_index.nlevels} levels, "
                "but is required to have 1 level"
            )

        # make sure the index has a name
        if observations_index.name is None:
            observations = observations.rename_axis(index=Dataset.IDX_OBSERVATION)

        return observations

    def __len__(self) -> int:
        return len(self._observations)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(n_observations={len(self)}, "
            f"features={self._features!r})"
        )


class Labeled(Dataset):
    """
    A collection of observations, comprising features as well as a target variable
    holding the label (or outcome) of each observation.

    Keeps features and labels aligned, and provides the set of possible outcomes
    that estimators need to derive the class labels of a classification problem.
    """

    __slots__ = ["_target"]

    _target: str

    def __init__(
        self,
        observations: pd.DataFrame,
        *,
        target_name: str,
        feature_names: Optional[Sequence[str]] = None,
    ) -> None:
        """
        :param observations: a table of observational data; \
            each row represents one observation
        :param target_name: the name of the column representing the target variable
        :param feature_names: optional sequence of strings naming the columns that \
            represent features; if omitted, all non-target columns are considered \
            features
        """
        if not isinstance(target_name, str):
            raise TypeError(
                "arg target_name must be a string, "
                f"but is a {type(target_name).__name__}"
            )

        if isinstance(observations, pd.DataFrame) and (
            target_name not in observations.columns
        ):
            raise KeyError(
                f'arg target_name="{target_name}" is not a column in the '
                "observations table"
            )

        self._target = target_name

        super().__init__(observations, feature_names=feature_names)

    @property
    def target_name(self) -> str:
        """
        The column name of the target in this dataset.
        """
        return self._target

    @property
    def target(self) -> pd.Series:
        """
        The target values for all observations.
        """
        return self._observations.loc[:, self._target]

    def possible_outcomes(self) -> List[Any]:
        """
        Get the distinct target values of this dataset.

        :return: the distinct target values, in order of their first appearance
        """
        return self.target.unique().tolist()

    def _reserved_columns(self) -> List[str]:
        return [self._target]

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(n_observations={len(self)}, "
            f"features={self._features!r}, target={self._target!r})"
        )


__tracker.validate()


#
# auxiliary functions
#


def _ensure_columns_exist(
    observations: pd.DataFrame, column_type: str, columns: Iterable[str]
) -> None:
    # check if all provided column names actually exist in the observations df
    available_columns: pd.Index = observations.columns
    missing_columns = [name for name in columns if name not in available_columns]
    if missing_columns:
        raise KeyError(
            f"observations table is missing {column_type} columns "
            f"{', '.join(map(str, missing_columns))}"
        )
