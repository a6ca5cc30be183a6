"""
Observation bundle for the integrated population model.

Holds the three data streams (population counts, capture-recapture m-array
and productivity counts) and checks their shapes once, at construction.
"""

import numpy as np
import jax.numpy as jnp
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..core.exceptions import DataFormatError, ValidationError
from ..utils.logging import get_logger
from ..utils.validation import (
    validate_array_dimensions,
    validate_finite,
    validate_integer_valued,
    validate_positive,
)


logger = get_logger(__name__)


@dataclass(frozen=True, eq=False)
class ObservationBundle:
    """
    Data supplied to the model.

    Attributes:
        nyears: Number of study years (>= 2)
        y: Population counts, one per year
        J: Nestlings counted per year, nyears-1 entries
        R: Broods surveyed per year, nyears-1 entries
        m: Capture-recapture m-array, 2*(nyears-1) rows by nyears columns.
            Rows 0..nyears-2 are juvenile release cohorts, the remaining rows
            adult cohorts; the last column counts animals never recaptured.
        metadata: Free-form information about the study
    """
    nyears: int
    y: jnp.ndarray
    J: jnp.ndarray
    R: jnp.ndarray
    m: jnp.ndarray
    metadata: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        try:
            whole = float(self.nyears).is_integer()
        except (TypeError, ValueError):
            whole = False
        if isinstance(self.nyears, bool) or not whole:
            raise DataFormatError(
                field="nyears", expected="an integer", actual=repr(self.nyears)
            )
        nyears = int(self.nyears)
        if nyears < 2:
            raise DataFormatError(
                field="nyears", expected="at least 2 years", actual=f"{nyears}"
            )

        n_intervals = nyears - 1
        expected_shapes = {
            "y": (nyears,),
            "J": (n_intervals,),
            "R": (n_intervals,),
            "m": (2 * n_intervals, nyears),
        }

        converted = {}
        for name, shape in expected_shapes.items():
            values = np.asarray(getattr(self, name), dtype=float)
            try:
                validate_array_dimensions(values, expected_shape=shape, name=name)
            except ValidationError as e:
                raise DataFormatError(
                    field=name, expected=f"shape {shape}", actual=f"shape {values.shape}"
                ) from e

            try:
                validate_finite(values, name)
                validate_positive(values, name, strict=False)
                if name != "y":
                    validate_integer_valued(values, name)
            except ValidationError as e:
                raise DataFormatError(specific_issue=str(e.args[0])) from e

            converted[name] = jnp.asarray(values)

        object.__setattr__(self, "nyears", nyears)
        for name, values in converted.items():
            object.__setattr__(self, name, values)

        logger.debug(
            "Observation bundle validated",
            nyears=nyears,
            n_released=int(np.sum(np.asarray(converted["m"]))),
        )

    @property
    def n_intervals(self) -> int:
        """Number of year-to-year intervals."""
        return self.nyears - 1

    @property
    def n_released(self) -> jnp.ndarray:
        """Number of marked animals released per cohort (m-array row totals)."""
        return jnp.sum(self.m, axis=1)

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize the bundle to a pickle-safe dictionary.

        Converts JAX arrays to numpy arrays for cross-process serialization.
        """
        return {
            'nyears': self.nyears,
            'y': np.asarray(self.y),
            'J': np.asarray(self.J),
            'R': np.asarray(self.R),
            'm': np.asarray(self.m),
            'metadata': self.metadata,
        }

    @classmethod
    def from_dict(cls, data_dict: Dict[str, Any]) -> 'ObservationBundle':
        """Rebuild a bundle from :meth:`to_dict` output or any equivalent mapping."""
        missing = [key for key in ('nyears', 'y', 'J', 'R', 'm') if key not in data_dict]
        if missing:
            raise DataFormatError(specific_issue=f"missing fields {missing}")

        return cls(
            nyears=data_dict['nyears'],
            y=data_dict['y'],
            J=data_dict['J'],
            R=data_dict['R'],
            m=data_dict['m'],
            metadata=data_dict.get('metadata'),
        )
