"""
Datasets of observations, with or without labels.

:class:`.Dataset` holds the features of unlabeled observations; :class:`.Labeled`
adds a target variable holding the outcome of each observation.
"""
from ._dataset import *
