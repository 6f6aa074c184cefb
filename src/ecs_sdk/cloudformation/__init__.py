"""
CloudFormation stack convergence.
"""

from .progress import StackProgress
from .stack_manager import StackManager

__all__ = ["StackManager", "StackProgress"]
