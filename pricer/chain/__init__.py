"""Chain state readers."""

from pricer.chain.memory import InMemoryChainReader
from pricer.chain.reader import ChainReader, Position, Slot0
from pricer.chain.web3_reader import Web3ChainReader

__all__ = [
    "ChainReader",
    "InMemoryChainReader",
    "Position",
    "Slot0",
    "Web3ChainReader",
]
