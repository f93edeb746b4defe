"""
git-cleanup - Find and delete local git branches whose work is already captured elsewhere
"""

from .__version__ import __version__
from .core import BranchCleanup
from .cli.main import main

__all__ = ["BranchCleanup", "main", "__version__"]
