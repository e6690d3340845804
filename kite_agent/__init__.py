from .catalog import Target, TargetCatalog
from .proxy import EgressDescriptor, ProxyPool
from .session import Outcome, Statistics, WalletAutomation, WalletSession
from .supervisor import SessionSupervisor

__all__ = [
    "EgressDescriptor",
    "Outcome",
    "ProxyPool",
    "SessionSupervisor",
    "Statistics",
    "Target",
    "TargetCatalog",
    "WalletAutomation",
    "WalletSession",
]

__version__ = "0.1.0"
