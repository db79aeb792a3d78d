"""reelforge - turn a zipped code project into a short promotional video.

Stages: script -> voiceover -> visual plan -> per-scene assets.
"""

__version__ = "0.1.0"
