"""Video assembly module."""

from .compositor import (
    FFmpegConcatenator,
    MoviePyConcatenator,
    add_transitions,
    export,
    stitch_clips,
    write_concat_list,
)

__all__ = [
    "FFmpegConcatenator",
    "MoviePyConcatenator",
    "add_transitions",
    "export",
    "stitch_clips",
    "write_concat_list",
]
