"""mpmcell post-processor."""
