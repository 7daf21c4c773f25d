"""
Estimators backed by `scikit-learn` learners.

Classifiers and regressors delegate to the data frame enabled learners of
`sklearndf`; all classifiers are probabilistic.
All estimators in this package are listed in :data:`.REGISTRY`, declaring the
constructor parameters available for hyperparameter search.
"""
from ._learners import *
from ._learners import REGISTRY
