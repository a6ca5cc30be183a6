"""
Base classes for population models in ipm-jax.

Defines the interface a model exposes to an external sampling engine and a
registry for looking models up by type.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, List, Tuple, Type, Union

import jax.numpy as jnp

from .parameters import ParameterSpec
from ..data.bundle import ObservationBundle
from ..utils.logging import get_logger


logger = get_logger(__name__)


class ModelType(str, Enum):
    """Types of population models."""

    IPM = "ipm"


class PopulationModel(ABC):
    """
    Abstract base class for models scored against an observation bundle.

    A model is a pure function of its parameters once built; implementations
    must not keep state that changes between evaluations.
    """

    model_type: ModelType

    def __init__(self, bundle: ObservationBundle):
        self.bundle = bundle
        self.logger = get_logger(self.__class__.__name__)

    @abstractmethod
    def parameter_specs(self) -> List[ParameterSpec]:
        """Declared parameters in canonical order."""

    @abstractmethod
    def log_density(self, params: Dict[str, jnp.ndarray]) -> jnp.ndarray:
        """
        Log posterior density (up to a constant) at ``params``.

        Args:
            params: Parameter values keyed by name

        Returns:
            Scalar log-density, ``-inf`` for rejected parameter values
        """

    @abstractmethod
    def get_initial_parameters(self) -> Dict[str, jnp.ndarray]:
        """Starting values inside the support of every parameter."""

    def get_parameter_bounds(self) -> Dict[str, Tuple[float, float]]:
        """Support bounds per parameter, for sampler reparameterization."""
        return {spec.name: spec.bounds for spec in self.parameter_specs()}

    def get_parameter_names(self) -> List[str]:
        """Flat parameter names, e.g. ``N1[1]``, in canonical order."""
        names = []
        for spec in self.parameter_specs():
            if spec.size is None:
                names.append(spec.name)
            else:
                names.extend(f"{spec.name}[{i}]" for i in range(1, spec.size + 1))
        return names


class ModelRegistry:
    """
    Registry for managing available model implementations.

    Provides a plugin-style system for registering and creating model instances.
    """

    def __init__(self):
        self._models: Dict[ModelType, Type[PopulationModel]] = {}
        self.logger = get_logger(self.__class__.__name__)

    def register(self, model_type: ModelType, model_class: Type[PopulationModel]) -> None:
        """
        Register a model implementation.

        Args:
            model_type: Type of model
            model_class: Model implementation class
        """
        if not issubclass(model_class, PopulationModel):
            raise TypeError("Model class must inherit from PopulationModel")

        self._models[model_type] = model_class
        self.logger.debug(f"Registered model: {model_type.value} -> {model_class.__name__}")

    def get_model(self, model_type: Union[ModelType, str], bundle: ObservationBundle, **kwargs) -> PopulationModel:
        """
        Build a model instance by type.

        Args:
            model_type: Type of model to create
            bundle: Observation data the model is scored against
            **kwargs: Passed to the model constructor

        Raises:
            ValueError: If model type not registered
        """
        if isinstance(model_type, str):
            try:
                model_type = ModelType(model_type)
            except ValueError:
                raise ValueError(f"Unknown model type: {model_type}")

        if model_type not in self._models:
            raise ValueError(
                f"Model type '{model_type.value}' not registered. "
                f"Available: {[m.value for m in self._models]}"
            )

        return self._models[model_type](bundle, **kwargs)

    def list_models(self) -> List[ModelType]:
        """Get list of available model types."""
        return list(self._models.keys())


# Global model registry instance
_registry = ModelRegistry()


def register_model(model_type: ModelType, model_class: Type[PopulationModel]) -> None:
    """Register a model with the global registry."""
    _registry.register(model_type, model_class)


def get_model(model_type: Union[ModelType, str], bundle: ObservationBundle, **kwargs) -> PopulationModel:
    """Build a model instance from the global registry."""
    return _registry.get_model(model_type, bundle, **kwargs)


def list_available_models() -> List[ModelType]:
    """List available model types in the global registry."""
    return _registry.list_models()
