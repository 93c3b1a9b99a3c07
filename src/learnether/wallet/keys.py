"""
Signing key acquisition.

The private key is read from the terminal (hidden input) or, for
non-interactive runs, from the ``PRIVATE_KEY`` environment variable.
It is only held inside a ``signing_key()`` block and is never written
to disk.

eth-account keeps its own immutable copy inside the ``LocalAccount``;
that copy is released with the account when the block exits.
"""

from __future__ import annotations

import string
from contextlib import contextmanager
from typing import Callable, Iterator

import click
from eth_account import Account
from eth_account.signers.local import LocalAccount

from ..config import get_env
from ..errors import InvalidKeyError

KEY_ENV_VAR = "PRIVATE_KEY"


def prompt_for_key(text: str = "Enter Private Key") -> str:
    """Ask for a private key on the terminal without echoing it."""
    return click.prompt(text, hide_input=True, prompt_suffix=": ")


def normalize_private_key(value: str) -> bytearray:
    """
    Parse a hex private key, with or without ``0x``.

    Returns:
        The 32 key bytes in a mutable buffer the caller can wipe

    Raises:
        InvalidKeyError: If the value is not 32 bytes of hex
    """
    text = value.strip()
    if text[:2].lower() == "0x":
        text = text[2:]
    if len(text) != 64 or any(c not in string.hexdigits for c in text):
        raise InvalidKeyError("Private key must be 32 bytes of hex (64 characters)")
    return bytearray.fromhex(text)


def wipe(buffer: bytearray) -> None:
    for index in range(len(buffer)):
        buffer[index] = 0


@contextmanager
def signing_key(
    env_var: str = KEY_ENV_VAR,
    prompt: Callable[[], str] = prompt_for_key,
) -> Iterator[LocalAccount]:
    """
    Acquire a signing account for the duration of a ``with`` block.

    The key buffer is zeroed on every exit path, including errors and
    KeyboardInterrupt.
    """
    raw = get_env(env_var) or prompt()
    key = normalize_private_key(raw)
    del raw
    account = None
    try:
        account = Account.from_key(bytes(key))
        yield account
    finally:
        wipe(key)
        del account
