"""
Registry of estimator factories, used to instantiate estimators from positional
hyperparameter values.
"""

import logging
from typing import Any, Callable, Dict, Iterator, Optional, Sequence, Tuple, Type, Union

from pytools.api import AllTracker

from ..errors import ConfigurationError
from ._estimator import (
    Classifier,
    Clusterer,
    Estimator,
    EstimatorType,
    Probabilistic,
    Regressor,
)

log = logging.getLogger(__name__)

__all__ = ["EstimatorRegistry", "EstimatorSpec"]


#
# Ensure all symbols introduced below are included in __all__
#

__tracker = AllTracker(globals())


#
# Class definitions
#


class EstimatorSpec:
    """
    Describes how to construct an estimator type from positional arguments.

    The parameter schema lists the names of the constructor arguments in declaration
    order, so that the ``i``-th positional value passed to :meth:`.create` is bound
    to the ``i``-th parameter name.
    """

    #: the name under which the estimator type is registered
    name: str

    #: the type of the estimators created by this spec
    estimator_type: type

    #: names of the constructor arguments, in declaration order
    parameters: Tuple[str, ...]

    #: the callable used to instantiate estimators
    factory: Callable[..., Any]

    def __init__(
        self,
        estimator_type: type,
        parameters: Sequence[str],
        *,
        name: Optional[str] = None,
        factory: Optional[Callable[..., Any]] = None,
    ) -> None:
        """
        :param estimator_type: the type of the estimators to create
        :param parameters: names of the constructor arguments, in declaration order
        :param name: the name of the estimator type (defaults to the class name)
        :param factory: a callable accepting the constructor arguments positionally \
            and returning a new estimator (defaults to the estimator type itself)
        """
        if not isinstance(estimator_type, type):
            raise ConfigurationError(
                "arg estimator_type must be a class, "
                f"but is a {type(estimator_type).__name__}"
            )

        if isinstance(parameters, str):
            raise ConfigurationError(
                "arg parameters must be a sequence of parameter names, not a string"
            )

        parameters = tuple(parameters)

        invalid = [p for p in parameters if not isinstance(p, str)]
        if invalid:
            raise ConfigurationError(f"parameter names must be strings: {invalid}")

        if len(set(parameters)) < len(parameters):
            raise ConfigurationError(
                f"arg parameters contains duplicate names: {parameters}"
            )

        self.name = estimator_type.__name__ if name is None else name
        self.estimator_type = estimator_type
        self.parameters = parameters
        self.factory = estimator_type if factory is None else factory

    @property
    def arity(self) -> int:
        """
        The number of constructor arguments declared for the estimator type.
        """
        return len(self.parameters)

    @property
    def is_estimator(self) -> bool:
        """
        ``True`` if the estimator type implements :class:`.Estimator`.
        """
        return issubclass(self.estimator_type, Estimator)

    @property
    def is_probabilistic(self) -> bool:
        """
        ``True`` if the estimator type implements :class:`.Probabilistic`.
        """
        return issubclass(self.estimator_type, Probabilistic)

    @property
    def kind(self) -> Optional[EstimatorType]:
        """
        The kind of prediction made by the estimator type; ``None`` if the type does
        not implement any of :class:`.Classifier`, :class:`.Regressor`, or
        :class:`.Clusterer`.
        """
        for capability, kind in (
            (Classifier, EstimatorType.CLASSIFIER),
            (Regressor, EstimatorType.REGRESSOR),
            (Clusterer, EstimatorType.CLUSTERER),
        ):
            if issubclass(self.estimator_type, capability):
                return kind
        return None

    def create(self, *args: Any) -> Any:
        """
        Create a new estimator, binding the given values to the first parameters
        of the schema.

        :param args: the constructor arguments
        :return: the new estimator
        """
        if len(args) > self.arity:
            raise ConfigurationError(
                f"too many arguments for {self.name}: "
                f"{len(args)} given, at most {self.arity} accepted"
            )
        return self.factory(*args)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({self.estimator_type.__name__}, "
            f"parameters={self.parameters!r}, name={self.name!r})"
        )


class EstimatorRegistry:
    """
    A mapping from estimator names, and estimator types, to the
    :class:`.EstimatorSpec` describing how to construct them.

    Supports :func:`.len`, iteration over the registered names, and the ``in``
    operator for names and types.
    """

    def __init__(self) -> None:
        self._specs: Dict[str, EstimatorSpec] = {}
        self._specs_by_type: Dict[type, EstimatorSpec] = {}

    def register(
        self,
        estimator_type: type,
        parameters: Sequence[str],
        *,
        name: Optional[str] = None,
        factory: Optional[Callable[..., Any]] = None,
    ) -> EstimatorSpec:
        """
        Register an estimator type.

        :param estimator_type: the type of the estimators to create
        :param parameters: names of the constructor arguments, in declaration order
        :param name: the name of the estimator type (defaults to the class name)
        :param factory: a callable accepting the constructor arguments positionally \
            and returning a new estimator (defaults to the estimator type itself)
        :return: the spec for the registered estimator type
        :raise ConfigurationError: an estimator with the same name, or the same \
            type, is already registered
        """
        spec = EstimatorSpec(
            estimator_type=estimator_type,
            parameters=parameters,
            name=name,
            factory=factory,
        )

        if spec.name in self._specs:
            raise ConfigurationError(
                f"an estimator named {spec.name!r} is already registered"
            )
        if estimator_type in self._specs_by_type:
            raise ConfigurationError(
                f"estimator type {estimator_type.__name__} is already registered"
            )

        log.debug(f"registering {spec}")

        self._specs[spec.name] = spec
        self._specs_by_type[estimator_type] = spec
        return spec

    def get(self, key: Union[str, Type[Any]]) -> EstimatorSpec:
        """
        Look up the spec of a registered estimator type.

        :param key: the name or the type of the estimator
        :return: the matching spec
        :raise ConfigurationError: no estimator is registered for the given key
        """
        if isinstance(key, str):
            spec = self._specs.get(key, None)
        elif isinstance(key, type):
            spec = self._specs_by_type.get(key, None)
        else:
            raise ConfigurationError(
                "expected an estimator name or type, "
                f"but got a {type(key).__name__}"
            )

        if spec is None:
            name = key if isinstance(key, str) else key.__name__
            raise ConfigurationError(f"no estimator registered for {name!r}")

        return spec

    def __contains__(self, key: Any) -> bool:
        return key in self._specs or key in self._specs_by_type

    def __iter__(self) -> Iterator[str]:
        return iter(self._specs)

    def __len__(self) -> int:
        return len(self._specs)


__tracker.validate()
