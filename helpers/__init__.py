"""Pure tabulation math - no I/O, easily testable."""
