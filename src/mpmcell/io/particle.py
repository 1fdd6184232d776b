"""Fixed layout particle record used for persistence interchange.

Each record is 161 bytes, packed without padding, little-endian, with the fields
in the following order:

===============================  =======  ================================
Field                            Type     Description
===============================  =======  ================================
``id``                           uint64   Particle index
``mass``                         float64  Particle mass
``coord_x/y/z``                  float64  Particle coordinates
``velocity_x/y/z``               float64  Particle velocity
``stress_xx/yy/zz``              float64  Normal stresses
``tau_xy/yz/xz``                 float64  Shear stresses
``strain_xx/yy/zz``              float64  Normal strains
``gamma_xy/yz/xz``               float64  Shear strains
``status``                       bool     Particle status (1 byte)
===============================  =======  ================================
"""

from __future__ import annotations

from dataclasses import astuple, dataclass, fields

import numpy as np
import numpy.typing as npt


PARTICLE_FIELDS: list[tuple[str, str]] = [
    ("id", "<u8"),
    ("mass", "<f8"),
    ("coord_x", "<f8"),
    ("coord_y", "<f8"),
    ("coord_z", "<f8"),
    ("velocity_x", "<f8"),
    ("velocity_y", "<f8"),
    ("velocity_z", "<f8"),
    ("stress_xx", "<f8"),
    ("stress_yy", "<f8"),
    ("stress_zz", "<f8"),
    ("tau_xy", "<f8"),
    ("tau_yz", "<f8"),
    ("tau_xz", "<f8"),
    ("strain_xx", "<f8"),
    ("strain_yy", "<f8"),
    ("strain_zz", "<f8"),
    ("gamma_xy", "<f8"),
    ("gamma_yz", "<f8"),
    ("gamma_xz", "<f8"),
    ("status", "?"),
]

# packed, i.e. no alignment padding between or after the fields
PARTICLE_DTYPE = np.dtype(PARTICLE_FIELDS, align=False)


@dataclass(eq=True, frozen=True)
class ParticleRecord:
    """Class describing the persisted state of a particle.

    Args:
        id: Particle index.
        mass: Particle mass. Defaults to ``0.0``.
        coord_x: ``x`` coordinate. Defaults to ``0.0``.
        coord_y: ``y`` coordinate. Defaults to ``0.0``.
        coord_z: ``z`` coordinate. Defaults to ``0.0``.
        velocity_x: ``x`` velocity. Defaults to ``0.0``.
        velocity_y: ``y`` velocity. Defaults to ``0.0``.
        velocity_z: ``z`` velocity. Defaults to ``0.0``.
        stress_xx: Normal stress ``xx``. Defaults to ``0.0``.
        stress_yy: Normal stress ``yy``. Defaults to ``0.0``.
        stress_zz: Normal stress ``zz``. Defaults to ``0.0``.
        tau_xy: Shear stress ``xy``. Defaults to ``0.0``.
        tau_yz: Shear stress ``yz``. Defaults to ``0.0``.
        tau_xz: Shear stress ``xz``. Defaults to ``0.0``.
        strain_xx: Normal strain ``xx``. Defaults to ``0.0``.
        strain_yy: Normal strain ``yy``. Defaults to ``0.0``.
        strain_zz: Normal strain ``zz``. Defaults to ``0.0``.
        gamma_xy: Shear strain ``xy``. Defaults to ``0.0``.
        gamma_yz: Shear strain ``yz``. Defaults to ``0.0``.
        gamma_xz: Shear strain ``xz``. Defaults to ``0.0``.
        status: Particle status. Defaults to ``True``.
    """

    id: int
    mass: float = 0.0
    coord_x: float = 0.0
    coord_y: float = 0.0
    coord_z: float = 0.0
    velocity_x: float = 0.0
    velocity_y: float = 0.0
    velocity_z: float = 0.0
    stress_xx: float = 0.0
    stress_yy: float = 0.0
    stress_zz: float = 0.0
    tau_xy: float = 0.0
    tau_yz: float = 0.0
    tau_xz: float = 0.0
    strain_xx: float = 0.0
    strain_yy: float = 0.0
    strain_zz: float = 0.0
    gamma_xy: float = 0.0
    gamma_yz: float = 0.0
    gamma_xz: float = 0.0
    status: bool = True

    def to_bytes(self) -> bytes:
        """Returns the packed binary record.

        Returns:
            ``PARTICLE_DTYPE.itemsize`` bytes.
        """
        return records_to_array([self]).tobytes()

    @classmethod
    def from_bytes(cls, data: bytes) -> ParticleRecord:
        """Creates a record from its packed binary form.

        Args:
            data: ``PARTICLE_DTYPE.itemsize`` bytes.

        Raises:
            ValueError: If ``data`` is not exactly one record long.

        Returns:
            Particle record.
        """
        if len(data) != PARTICLE_DTYPE.itemsize:
            raise ValueError(
                f"A particle record is {PARTICLE_DTYPE.itemsize} bytes, not "
                f"{len(data)}."
            )

        return array_to_records(np.frombuffer(data, dtype=PARTICLE_DTYPE))[0]


def records_to_array(records: list[ParticleRecord]) -> npt.NDArray[np.void]:
    """Converts particle records to a structured array.

    Args:
        records: List of particle records.

    Returns:
        Structured :class:`numpy.ndarray` with dtype ``PARTICLE_DTYPE``.
    """
    return np.array([astuple(record) for record in records], dtype=PARTICLE_DTYPE)


def array_to_records(array: npt.NDArray[np.void]) -> list[ParticleRecord]:
    """Converts a structured array to particle records.

    Args:
        array: Structured :class:`numpy.ndarray` with dtype ``PARTICLE_DTYPE``.

    Raises:
        ValueError: If the array fields do not match ``PARTICLE_DTYPE``.

    Returns:
        List of particle records.
    """
    if array.dtype.names != PARTICLE_DTYPE.names:
        raise ValueError(
            f"Array fields {array.dtype.names} do not match the particle record."
        )

    names = [f.name for f in fields(ParticleRecord)]
    records = []

    for row in array:
        values = {name: row[name].item() for name in names}
        records.append(ParticleRecord(**values))

    return records
