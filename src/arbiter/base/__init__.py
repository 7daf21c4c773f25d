"""
Estimator capabilities, and the registry used to construct estimators from
hyperparameter values.

:class:`.Estimator` is the contract shared by all trainable models;
:class:`.Probabilistic` extends it with class probabilities.
:class:`.EstimatorRegistry` maps estimator names and types to an
:class:`.EstimatorSpec`, declaring the constructor parameters of each type.
"""
from ._estimator import *
from ._registry import *
