"""Value types and pure rules of the quarterly simulation.

Nothing in this sub-package performs I/O; every transformer returns a new value
and every random draw goes through the ``SeededRng`` handed in by the caller.
"""
