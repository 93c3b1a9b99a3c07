"""
ABI handling - human-readable signatures, call encoding, result and log decoding.

Contracts are described either by JSON ABI entries or by the short
human-readable form::

    "function balanceOf(address) view returns (uint)"
    "event Transfer(address indexed from, address indexed to, uint amount)"

Both are normalised to JSON ABI dicts; eth-abi does the wire encoding.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Iterable, Sequence, Union

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError, EncodingError
from eth_utils import decode_hex, keccak, to_checksum_address

from ..errors import AbiError

AbiEntry = dict[str, Any]
AbiSource = Union[str, Path, Sequence[Union[str, AbiEntry]], dict[str, Any]]

_FRAGMENT_RE = re.compile(r"^(function|event)\s+([A-Za-z_$][A-Za-z0-9_$]*)\s*\(")
_TYPE_RE = re.compile(r"^(address|bool|string|bytes|uint|int)(\d*)((?:\[\d*\])*)$")
_MUTABILITY = ("view", "pure", "payable", "nonpayable")
_VISIBILITY = ("external", "public")
_DATA_LOCATIONS = ("memory", "calldata", "storage")


# ---------------------------------------------------------------------------
# Human-readable parsing
# ---------------------------------------------------------------------------

def _take_group(text: str, start: int) -> tuple[str, int]:
    """Return the contents of the parenthesised group opening at ``start``."""
    depth = 0
    for index in range(start, len(text)):
        char = text[index]
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return text[start + 1 : index], index + 1
    raise AbiError(f"Unbalanced parentheses in {text!r}")


def _split_params(text: str) -> list[str]:
    if not text.strip():
        return []
    parts: list[str] = []
    depth = 0
    current = ""
    for char in text:
        if char == "," and depth == 0:
            parts.append(current.strip())
            current = ""
            continue
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        current += char
    parts.append(current.strip())
    return parts


def normalize_type(type_str: str) -> str:
    """Canonicalise a Solidity type; ``uint``/``int`` become ``uint256``/``int256``."""
    if type_str.startswith("(") or type_str.startswith("tuple"):
        raise AbiError(f"Tuple parameters are not supported: {type_str!r}")
    match = _TYPE_RE.match(type_str)
    if match is None:
        raise AbiError(f"Unknown type: {type_str!r}")
    base, size, dims = match.groups()
    if base in ("uint", "int") and not size:
        size = "256"
    return f"{base}{size}{dims}"


def _parse_param(text: str, event: bool) -> AbiEntry:
    tokens = text.split()
    if not tokens:
        raise AbiError("Empty parameter")

    param: AbiEntry = {"name": "", "type": normalize_type(tokens[0])}
    indexed = False
    for token in tokens[1:]:
        if token == "indexed" and event:
            indexed = True
        elif token in _DATA_LOCATIONS:
            continue
        elif not param["name"]:
            param["name"] = token
        else:
            raise AbiError(f"Cannot parse parameter {text!r}")

    if event:
        param["indexed"] = indexed
    return param


def parse_signature(fragment: str) -> AbiEntry:
    """
    Parse one human-readable fragment into a JSON ABI entry.

    Raises:
        AbiError: If the fragment is not a function or event signature
    """
    text = " ".join(fragment.split())
    match = _FRAGMENT_RE.match(text)
    if match is None:
        raise AbiError(f"Cannot parse ABI fragment: {fragment!r}")

    kind, name = match.groups()
    inner, end = _take_group(text, match.end() - 1)
    rest = text[end:].strip()
    is_event = kind == "event"
    inputs = [_parse_param(p, is_event) for p in _split_params(inner)]

    if is_event:
        if rest not in ("", "anonymous"):
            raise AbiError(f"Unexpected trailing text in {fragment!r}: {rest!r}")
        return {"type": "event", "name": name, "inputs": inputs, "anonymous": rest == "anonymous"}

    mutability = "nonpayable"
    outputs: list[AbiEntry] = []
    while rest:
        if rest.startswith("returns"):
            rest = rest[len("returns"):].lstrip()
            if not rest.startswith("("):
                raise AbiError(f"Expected '(' after returns in {fragment!r}")
            returned, end = _take_group(rest, 0)
            outputs = [_parse_param(p, False) for p in _split_params(returned)]
            rest = rest[end:].strip()
            continue
        word, _, rest = rest.partition(" ")
        if word in _MUTABILITY:
            mutability = word
        elif word not in _VISIBILITY:
            raise AbiError(f"Unexpected modifier {word!r} in {fragment!r}")

    return {
        "type": "function",
        "name": name,
        "inputs": inputs,
        "outputs": outputs,
        "stateMutability": mutability,
    }


def load_abi(source: AbiSource) -> list[AbiEntry]:
    """
    Normalise an ABI description to a list of JSON ABI entries.

    Accepts human-readable strings, JSON ABI dicts, a JSON document, or a
    path to a JSON ABI / compiler artifact (``{"abi": [...]}``).
    """
    if isinstance(source, Path):
        if not source.exists():
            raise FileNotFoundError(f"ABI not found: {source}")
        with source.open("r", encoding="utf-8") as f:
            return load_abi(json.load(f))

    if isinstance(source, str):
        stripped = source.strip()
        if stripped.startswith(("[", "{")):
            return load_abi(json.loads(stripped))
        return load_abi(Path(stripped).expanduser())

    if isinstance(source, dict):
        if "abi" not in source:
            raise AbiError("ABI document has no 'abi' key")
        return load_abi(source["abi"])

    entries: list[AbiEntry] = []
    for item in source:
        if isinstance(item, str):
            entries.append(parse_signature(item))
        elif isinstance(item, dict):
            entries.append(dict(item))
        else:
            raise AbiError(f"Unsupported ABI item: {item!r}")
    return entries


# ---------------------------------------------------------------------------
# Lookup and hashing
# ---------------------------------------------------------------------------

def _find(abi: Iterable[AbiEntry], kind: str, name: str) -> AbiEntry:
    for entry in abi:
        if entry.get("type") != kind:
            continue
        if entry.get("name") == name or ("(" in name and signature_of(entry) == name):
            return entry
    raise AbiError(f"{kind.capitalize()} {name} not found in ABI")


def find_function(abi: Iterable[AbiEntry], name: str) -> AbiEntry:
    """Find a function by name or by full signature (``transfer(address,uint256)``)."""
    return _find(abi, "function", name)


def find_event(abi: Iterable[AbiEntry], name: str) -> AbiEntry:
    return _find(abi, "event", name)


def _types(params: Iterable[AbiEntry]) -> list[str]:
    return [normalize_type(p["type"]) for p in params]


def signature_of(entry: AbiEntry) -> str:
    return f"{entry['name']}({','.join(_types(entry.get('inputs', [])))})"


def function_selector(entry: AbiEntry) -> bytes:
    """First 4 bytes of the Keccak-256 of the canonical signature."""
    return keccak(text=signature_of(entry))[:4]


def event_topic(entry: AbiEntry) -> str:
    """topic0 of an event: the Keccak-256 of its canonical signature."""
    return "0x" + keccak(text=signature_of(entry)).hex()


# ---------------------------------------------------------------------------
# Encoding / decoding
# ---------------------------------------------------------------------------

def _to_bytes(data: Union[str, bytes]) -> bytes:
    if isinstance(data, bytes):
        return data
    return decode_hex(data) if data not in ("", "0x") else b""


def _normalize_value(type_str: str, value: Any) -> Any:
    """Checksum decoded addresses, including inside arrays."""
    if type_str.endswith("]"):
        inner = type_str[: type_str.rindex("[")]
        return tuple(_normalize_value(inner, v) for v in value)
    if type_str == "address":
        return to_checksum_address(value)
    return value


def _is_hashed_when_indexed(type_str: str) -> bool:
    return type_str in ("string", "bytes") or type_str.endswith("]")


def encode_call(abi: Iterable[AbiEntry], function_name: str, args: Sequence[Any]) -> str:
    """
    ABI-encode a function call.

    Returns:
        0x-prefixed hex encoded calldata
    """
    func = find_function(abi, function_name)
    input_types = _types(func.get("inputs", []))
    if len(args) != len(input_types):
        raise AbiError(
            f"{signature_of(func)} takes {len(input_types)} argument(s), got {len(args)}"
        )

    try:
        encoded_args = encode(input_types, list(args)) if input_types else b""
    except EncodingError as exc:
        raise AbiError(f"Cannot encode arguments for {signature_of(func)}: {exc}") from exc

    return "0x" + function_selector(func).hex() + encoded_args.hex()


def decode_result(abi: Iterable[AbiEntry], function_name: str, data: Union[str, bytes]) -> Any:
    """
    ABI-decode a function call result.

    Returns:
        Decoded result (single value, or tuple for several outputs)

    Raises:
        AbiError: If the return data does not match the declared outputs
    """
    func = find_function(abi, function_name)
    output_types = _types(func.get("outputs", []))
    if not output_types:
        return None

    raw = _to_bytes(data)
    if not raw:
        raise AbiError(
            f"{signature_of(func)} returned no data; "
            "the address may not be a contract implementing this interface"
        )

    try:
        decoded = decode(output_types, raw)
    except DecodingError as exc:
        raise AbiError(f"Cannot decode result of {signature_of(func)}: {exc}") from exc

    values = tuple(_normalize_value(t, v) for t, v in zip(output_types, decoded))
    if len(values) == 1:
        return values[0]
    return values


def decode_log(event: AbiEntry, topics: Sequence[str], data: Union[str, bytes]) -> dict[str, Any]:
    """
    Decode a raw log against an event ABI entry.

    Indexed values of static types are decoded from their topics; indexed
    strings, bytes and arrays are stored as Keccak hashes, so their topic
    is returned as-is.  Unnamed parameters are keyed by position.
    """
    remaining = list(topics)
    if not event.get("anonymous"):
        expected = event_topic(event)
        if not remaining or remaining[0].lower() != expected:
            raise AbiError(f"Log does not match event {signature_of(event)}")
        remaining = remaining[1:]

    inputs = event.get("inputs", [])
    indexed = [p for p in inputs if p.get("indexed")]
    if len(remaining) != len(indexed):
        raise AbiError(
            f"{signature_of(event)} expects {len(indexed)} indexed topic(s), got {len(remaining)}"
        )

    data_types = [normalize_type(p["type"]) for p in inputs if not p.get("indexed")]
    try:
        data_values = iter(decode(data_types, _to_bytes(data)))
    except DecodingError as exc:
        raise AbiError(f"Cannot decode data of {signature_of(event)}: {exc}") from exc

    topic_values = iter(remaining)
    args: dict[str, Any] = {}
    for position, param in enumerate(inputs):
        key = param.get("name") or str(position)
        type_str = normalize_type(param["type"])
        if not param.get("indexed"):
            args[key] = _normalize_value(type_str, next(data_values))
            continue

        topic = next(topic_values)
        if _is_hashed_when_indexed(type_str):
            args[key] = topic
            continue
        try:
            (value,) = decode([type_str], _to_bytes(topic))
        except DecodingError as exc:
            raise AbiError(f"Cannot decode topic for {key!r}: {exc}") from exc
        args[key] = _normalize_value(type_str, value)

    return args
