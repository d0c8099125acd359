"""I/O handlers for sidekick."""
from .bash_runner import BashRunner, CommandRunner

__all__ = ['BashRunner', 'CommandRunner']
