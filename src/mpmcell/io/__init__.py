"""mpmcell particle record format."""

from mpmcell.io.particle import (
    PARTICLE_DTYPE,
    ParticleRecord,
    array_to_records,
    records_to_array,
)
