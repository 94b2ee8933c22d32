"""
Atmospheric state representations.

An :class:`AtmosphericState` is one air parcel (temperature, pressure and
composition); a :class:`Column` is the ordered stack of layers handed to the
radiation engine together with the layer path lengths. Both are immutable
snapshots owned by the caller and only read by the engine.

Layer ordering convention: index 0 is the top-of-atmosphere layer, the last
index is the layer adjacent to the surface. Levels (interfaces) follow the same
convention, so level ``i`` is the top of layer ``i`` and level ``nlayer`` is the
surface.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence

import numpy as np

from specrad.core.constants import KB, MU_DRY_AIR, R_GAS, FRACTION_SUM_TOL
from specrad.core.logging_config import get_logger

logger = get_logger("atmosphere.state")


@dataclass(frozen=True)
class AtmosphericState:
    """
    Thermodynamic state of one air parcel.

    Attributes
    ----------
    temperature : float
        Temperature in K
    pressure : float
        Pressure in Pa
    composition : Dict[str, float]
        Mole fractions keyed by species name. The remainder up to one is the
        unnamed background gas.
    molecular_weight : float
        Mean molecular weight in kg/mol (defaults to dry air)
    """

    temperature: float  # K
    pressure: float  # Pa
    composition: Dict[str, float] = field(default_factory=dict)
    molecular_weight: float = MU_DRY_AIR

    @classmethod
    def from_mixing_ratios(
        cls,
        temperature: float,
        pressure: float,
        mixing_ratios: Dict[str, float],
        molecular_weight: float = MU_DRY_AIR,
    ) -> "AtmosphericState":
        """
        Build a state from mixing ratios relative to the background gas.

        x_i = r_i / (1 + sum_j r_j)

        Parameters
        ----------
        temperature : float
            Temperature in K
        pressure : float
            Pressure in Pa
        mixing_ratios : Dict[str, float]
            Moles of species per mole of background gas
        molecular_weight : float
            Mean molecular weight in kg/mol
        """
        total = 1.0 + sum(mixing_ratios.values())
        composition = {name: r / total for name, r in mixing_ratios.items()}
        return cls(temperature, pressure, composition, molecular_weight)

    def mixing_ratios(self) -> Dict[str, float]:
        """
        Convert mole fractions to mixing ratios relative to the background gas.

        r_i = x_i / (1 - sum_j x_j)

        Raises
        ------
        ValueError
            If the named species make up the whole parcel (no background)
        """
        background = 1.0 - sum(self.composition.values())
        if background <= 0.0:
            raise ValueError("Mixing ratios are undefined without a background gas")
        return {name: x / background for name, x in self.composition.items()}

    def mole_fraction(self, species: str) -> float:
        """Mole fraction of a species (0 if absent)."""
        return float(self.composition.get(species, 0.0))

    @property
    def number_density(self) -> float:
        """Total number density in m^-3 (ideal gas)."""
        return self.pressure / (KB * self.temperature)

    def species_number_density(self, species: str) -> float:
        """Number density of one species in m^-3."""
        return self.mole_fraction(species) * self.number_density

    @property
    def mass_density(self) -> float:
        """Mass density in kg/m^3."""
        return self.pressure * self.molecular_weight / (R_GAS * self.temperature)

    def validate(self) -> bool:
        """
        Validate the state.

        Returns
        -------
        bool
            True if valid

        Raises
        ------
        ValueError
            If the state is not physical
        """
        if not self.temperature > 0:
            raise ValueError(f"Temperature must be positive, got {self.temperature}")
        if not self.pressure > 0:
            raise ValueError(f"Pressure must be positive, got {self.pressure}")
        if not self.molecular_weight > 0:
            raise ValueError("Molecular weight must be positive")

        for species, x in self.composition.items():
            if not 0.0 <= x <= 1.0:
                raise ValueError(f"Mole fraction of {species} must be in [0, 1], got {x}")

        total = sum(self.composition.values())
        if total > 1.0 + FRACTION_SUM_TOL:
            raise ValueError(f"Mole fractions sum to {total:.6g} > 1")

        return True


class Column:
    """
    Vertical column of atmospheric layers.

    Parameters
    ----------
    layers : sequence of AtmosphericState
        Layer states, top of atmosphere first
    thickness : array
        Geometric path length of each layer in m
    """

    def __init__(self, layers: Sequence[AtmosphericState], thickness: Sequence[float]):
        self._layers: List[AtmosphericState] = list(layers)
        self._thickness = np.array(thickness, dtype=float)
        self._thickness.setflags(write=False)

        if len(self._layers) == 0:
            raise ValueError("A column needs at least one layer")
        if self._thickness.shape != (len(self._layers),):
            raise ValueError(
                f"Expected {len(self._layers)} layer thicknesses, "
                f"got shape {self._thickness.shape}"
            )

    @classmethod
    def uniform(
        cls,
        state: AtmosphericState,
        nlayer: int,
        thickness: float,
    ) -> "Column":
        """Column of ``nlayer`` identical layers of equal thickness."""
        return cls([state] * nlayer, np.full(nlayer, thickness))

    @property
    def layers(self) -> List[AtmosphericState]:
        return list(self._layers)

    @property
    def thickness(self) -> np.ndarray:
        """Layer path lengths in m (read-only)."""
        return self._thickness

    @property
    def nlayer(self) -> int:
        return len(self._layers)

    @property
    def nlevel(self) -> int:
        return len(self._layers) + 1

    def __len__(self) -> int:
        return len(self._layers)

    def __iter__(self) -> Iterator[AtmosphericState]:
        return iter(self._layers)

    def __getitem__(self, index: int) -> AtmosphericState:
        return self._layers[index]

    @property
    def temperatures(self) -> np.ndarray:
        """Layer temperatures in K."""
        return np.array([s.temperature for s in self._layers])

    @property
    def pressures(self) -> np.ndarray:
        """Layer pressures in Pa."""
        return np.array([s.pressure for s in self._layers])

    def mole_fractions(self, species: str) -> np.ndarray:
        """Per-layer mole fraction of a species."""
        return np.array([s.mole_fraction(species) for s in self._layers])

    def number_densities(self, species: Optional[str] = None) -> np.ndarray:
        """Per-layer number density in m^-3, total or of one species."""
        if species is None:
            return np.array([s.number_density for s in self._layers])
        return np.array([s.species_number_density(species) for s in self._layers])

    def level_temperatures(self) -> np.ndarray:
        """
        Interface temperatures in K.

        Interior levels average the adjacent layers; the top and bottom levels
        are linearly extrapolated from the two nearest layers.
        """
        t = self.temperatures
        if t.size == 1:
            return np.array([t[0], t[0]])
        levels = np.empty(t.size + 1)
        levels[1:-1] = 0.5 * (t[:-1] + t[1:])
        levels[0] = max(1.5 * t[0] - 0.5 * t[1], 0.0)
        levels[-1] = max(1.5 * t[-1] - 0.5 * t[-2], 0.0)
        return levels

    def validate(self) -> bool:
        """
        Validate every layer and the path lengths.

        Raises
        ------
        ValueError
            If any layer is not physical or a thickness is negative
        """
        if np.any(self._thickness < 0) or not np.all(np.isfinite(self._thickness)):
            raise ValueError("Layer thickness must be finite and non-negative")
        for i, state in enumerate(self._layers):
            try:
                state.validate()
            except ValueError as exc:
                raise ValueError(f"Layer {i}: {exc}") from exc
        return True

    def __repr__(self) -> str:
        return (
            f"Column(nlayer={self.nlayer}, "
            f"p=[{self._layers[0].pressure:.3g}..{self._layers[-1].pressure:.3g}] Pa)"
        )
