# Tests for niftigeom
