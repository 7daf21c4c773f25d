"""
Ensembles combining the predictions of multiple estimators.

:class:`.CommitteeMachine` averages the class probabilities estimated by a
committee of probabilistic classifiers, each trained independently on the same
data.
"""
from ._committee import *
