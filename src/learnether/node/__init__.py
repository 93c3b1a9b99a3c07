"""
Node - On-chain interaction layer for learnether.

Provides the JSON-RPC provider, ABI handling, contract calls, transaction
submission and event-log queries.

Uses httpx + eth-account + eth-abi instead of the heavyweight web3.py.
"""
