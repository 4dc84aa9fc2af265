from .window import PromptWindow

__all__ = ["PromptWindow"]
