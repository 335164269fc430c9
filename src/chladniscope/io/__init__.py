"""Video encoding and recording."""

from chladniscope.io.recorder import Recorder

__all__ = ["Recorder"]
