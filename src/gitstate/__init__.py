"""gitstate — parsed diffs and consolidated working-tree status for git."""

__version__ = "0.1.0"
