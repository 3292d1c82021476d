"""Helix trajectory model: state and evaluation, path-length queries, validity checks.

:mod:`helix_tracks.helix.trajectory` holds the :class:`Helix` value type,
:mod:`helix_tracks.helix.path_length` the inverse queries it delegates to, and
:mod:`helix_tracks.helix.validity` the coded sanity check callers run on
fitted parameters.
"""

# Importing * is a bad practice and you should be punished for using it
__all__: list[str] = []
