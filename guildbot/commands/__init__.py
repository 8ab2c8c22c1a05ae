"""
Command system for guildbot.
"""

from .policy import CommandPolicy, InteractionPolicy, PolicyError, SubCommand
from .gate import CommandGate, Decision, InvocationContext, Proceed, Reject, RejectReason
from .command import Command, CommandNotImplementedError
from .command_registry import CommandRegistry
from .command_handler import CommandHandler

__all__ = [
    "CommandPolicy",
    "InteractionPolicy",
    "PolicyError",
    "SubCommand",
    "CommandGate",
    "Decision",
    "InvocationContext",
    "Proceed",
    "Reject",
    "RejectReason",
    "Command",
    "CommandNotImplementedError",
    "CommandRegistry",
    "CommandHandler",
]
