"""
Validators scoring an estimator on a labeled dataset.

:class:`.HoldOut` trains on a random subset of the observations and tests on the
remaining ones; :class:`.KFold` averages the scores of a k-fold cross-validation.
Scoring functions are looked up by name in :data:`.SCORERS`.
"""
from ._validation import *
from ._validation import SCORERS
