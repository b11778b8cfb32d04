"""
Renderer Interface

Pattern: recast-style reprinting (original text for untouched nodes)
"""

from abc import ABC, abstractmethod

from ..shared.arena import SyntaxTree


class Renderer(ABC):
    """
    Renderer interface.

    - All renderers turn a SyntaxTree back into source text
    - A tree nothing modified renders to its original text, byte for byte
    - Parsed nodes are reprinted from the original text; only synthesized
      nodes are printed structurally
    """

    @abstractmethod
    def render(self, tree: SyntaxTree) -> str:
        raise NotImplementedError

    def __call__(self, tree: SyntaxTree) -> str:
        return self.render(tree)
