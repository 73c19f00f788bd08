"""reptrack: repetition counting from streamed pose keypoints.

This package turns BlazePose keypoint frames into joint angles, runs them
through a per-exercise repetition detector, and produces the overlay data a
renderer needs to draw the skeleton next to the running count.
"""

__all__ = [
    "cli",
    "config",
    "overlay",
    "runtime",
    "session",
]

__version__ = "0.1.0"
