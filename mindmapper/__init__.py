"""MindMapper: tree-shaped mind map documents with undo and multi-map storage."""

__version__ = "1.0.0"
