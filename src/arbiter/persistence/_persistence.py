"""
Core implementation of :mod:`arbiter.persistence`
"""

import logging
import os
import time
from abc import ABCMeta, abstractmethod
from typing import Union

import joblib

from pytools.api import AllTracker, inheritdoc

from ..base import Persistable
from ..errors import ConfigurationError

log = logging.getLogger(__name__)

__all__ = ["FilesystemPersister", "Persister"]


#
# Ensure all symbols introduced below are included in __all__
#

__tracker = AllTracker(globals())


#
# Class definitions
#


class Persister(metaclass=ABCMeta):
    """
    Saves and restores a persistable object, such as a trained estimator.
    """

    @abstractmethod
    def save(self, persistable: Persistable) -> None:
        """
        Save the given object, replacing any object saved previously.

        :param persistable: the object to save
        :raise TypeError: the object is not :class:`.Persistable`
        """
        pass

    @abstractmethod
    def load(self) -> Persistable:
        """
        Load the object saved most recently.

        :return: the restored object
        """
        pass


@inheritdoc(match="""[see superclass]""")
class FilesystemPersister(Persister):
    """
    Saves a persistable object to a file in the local filesystem.

    If history is enabled, saving to a path that already holds a file first moves
    the existing file to ``<path>-<timestamp>.old``, where the timestamp is given in
    seconds since the epoch; further saves within the same second are numbered as
    ``<path>-<timestamp>-<n>.old``.
    """

    #: the extension of history files
    HISTORY_EXT = "old"

    #: the path of the file holding the saved object
    path: str

    #: if ``True``, keep previously saved files as history files
    history: bool

    def __init__(
        self, path: Union[str, "os.PathLike[str]"], *, history: bool = False
    ) -> None:
        """
        :param path: the path of the file holding the saved object
        :param history: if ``True``, keep previously saved files as history files \
            (default: ``False``)
        :raise ConfigurationError: the parent directory of the path does not exist
        """
        path = os.fspath(path)
        directory = os.path.dirname(os.path.abspath(path))

        if not os.path.isdir(directory):
            raise ConfigurationError(f"directory {directory} does not exist")

        self.path = path
        self.history = history

    def save(self, persistable: Persistable) -> None:
        """[see superclass]"""
        if not isinstance(persistable, Persistable):
            raise TypeError(
                f"arg persistable must be {Persistable.__name__}, "
                f"but is a {type(persistable).__name__}"
            )

        if self.history and os.path.isfile(self.path):
            history_path = self._history_path()
            log.debug(f"moving {self.path} to {history_path}")
            os.rename(self.path, history_path)

        joblib.dump(persistable, self.path)

        log.debug(f"saved {type(persistable).__name__} to {self.path}")

    def load(self) -> Persistable:
        """
        Load the object saved most recently.

        :return: the restored object
        :raise FileNotFoundError: no file exists at the path of this persister
        :raise ValueError: the file is empty, or does not hold a persistable object
        """
        if not os.path.isfile(self.path):
            raise FileNotFoundError(f"file {self.path} does not exist")

        if os.path.getsize(self.path) == 0:
            raise ValueError(f"file {self.path} does not contain any data")

        persistable = joblib.load(self.path)

        if not isinstance(persistable, Persistable):
            raise ValueError(
                f"file {self.path} holds a {type(persistable).__name__}, "
                f"not a {Persistable.__name__} object"
            )

        return persistable

    def _history_path(self) -> str:
        prefix = f"{self.path}-{int(time.time())}"
        history_path = f"{prefix}.{self.HISTORY_EXT}"

        n = 0
        while os.path.exists(history_path):
            n += 1
            history_path = f"{prefix}-{n}.{self.HISTORY_EXT}"

        return history_path

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.path!r}, history={self.history!r})"


__tracker.validate()
