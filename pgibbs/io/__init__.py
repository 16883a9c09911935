"""
IO module: binary checkpoints and text reports.
"""

from pgibbs.io.archive import CheckpointFormatError, OArchive, IArchive
from pgibbs.io.checkpoint import save_checkpoint, load_checkpoint
from pgibbs.io.reports import save_beliefs, save_assignments, save_colors, save_tree_state

__all__ = [
    "CheckpointFormatError",
    "OArchive",
    "IArchive",
    "save_checkpoint",
    "load_checkpoint",
    "save_beliefs",
    "save_assignments",
    "save_colors",
    "save_tree_state",
]
