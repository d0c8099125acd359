"""Rich UI components for sidekick."""
from .renderer import RichRenderer
from .prompt_input import PromptInput, SlashCompleter

__all__ = ['RichRenderer', 'PromptInput', 'SlashCompleter']
