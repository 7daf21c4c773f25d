"""
Hyperparameter selection by exhaustive grid search.

:class:`.GridSearch` scores one estimator per combination in a
:class:`.ParameterGrid` and makes predictions using the best-scoring estimator.
:class:`.ProbabilisticGridSearch` also provides the class probabilities of the
selected estimator; :func:`.create_grid_search` picks the right variant for a given
base estimator.
"""
from ._parameters import *
from ._selection import *
