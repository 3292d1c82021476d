"""Public interface for the helix_tracks package.

The package models the helical path of a charged particle in a uniform field
and answers the geometric questions track reconstruction asks of it: where is
the particle after a given path length, and at which path length does it
cross a cylinder or plane, or pass closest to a point or another track.
"""

# Importing * is a bad practice and you should be punished for using it
__all__: list[str] = []
