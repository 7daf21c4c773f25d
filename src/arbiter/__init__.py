"""
Estimator selection and combination.

This is the class and function reference of arbiter for selecting hyperparameters
by exhaustive grid search, and for combining probabilistic classifiers into a
committee of experts.

- :mod:`arbiter.data`: datasets wrapping a pandas data frame
- :mod:`arbiter.base`: estimator capabilities and the estimator registry
- :mod:`arbiter.validation`: validators scoring an estimator on a dataset
- :mod:`arbiter.learners`: estimators backed by `scikit-learn` learners
- :mod:`arbiter.selection`: hyperparameter grid search
- :mod:`arbiter.ensemble`: the committee machine
- :mod:`arbiter.persistence`: saving and loading trained estimators
"""


__version__ = "1.0.0"
