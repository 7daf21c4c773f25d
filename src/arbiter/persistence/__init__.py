"""
Saving and loading trained estimators.

A :class:`.Persister` stores a single :class:`~arbiter.base.Persistable` object;
:class:`.FilesystemPersister` serializes it to a file using `joblib`.
"""
from ._persistence import *
