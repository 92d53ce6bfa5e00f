"""
Bytecode input sources: hex literals, stdin, files and on-chain code.

Every failure here is raised as a BytecodeInputError before any bytes reach
the disassembler.
"""

import string
import sys
from dataclasses import dataclass
from typing import Optional, TextIO, Union

import requests
import structlog
from web3 import Web3
from web3.exceptions import Web3Exception

from .config import DEFAULT_RPC_TIMEOUT

logger = structlog.get_logger()

_HEX_DIGITS = set(string.hexdigits)


class BytecodeInputError(ValueError):
    """Raised when bytecode cannot be obtained or decoded."""


class HexDecodeError(BytecodeInputError):
    pass


class InputReadError(BytecodeInputError):
    pass


class RpcFetchError(BytecodeInputError):
    pass


def decode_hex(text: str) -> bytes:
    """
    Decode a hex string, with or without a 0x prefix, into bytes.

    Args:
        text: Hex-encoded bytecode; surrounding whitespace is ignored

    Returns:
        The decoded bytes

    Raises:
        HexDecodeError: If the string is empty, has odd length or contains
            non-hex characters
    """
    cleaned = text.strip()
    if cleaned[:2] in ("0x", "0X"):
        cleaned = cleaned[2:]

    if not cleaned:
        raise HexDecodeError("Empty hex string provided")

    if len(cleaned) % 2 != 0:
        raise HexDecodeError(
            f"Invalid hex string length ({len(cleaned)}). "
            "Hex strings must have an even number of characters"
        )

    if not all(c in _HEX_DIGITS for c in cleaned):
        raise HexDecodeError("Invalid hex characters found. Only 0-9, a-f, and A-F are allowed")

    return bytes.fromhex(cleaned)


def read_stdin(stream: Optional[TextIO] = None) -> bytes:
    """Read hex-encoded bytecode from stdin (or the given text stream)."""
    stream = stream if stream is not None else sys.stdin
    try:
        content = stream.read()
    except OSError as e:
        raise InputReadError(f"Failed to read from stdin: {e}") from e

    if not content.strip():
        raise InputReadError("No input provided via stdin")
    return decode_hex(content)


def read_file(path: str) -> bytes:
    """Read hex-encoded bytecode from a text file."""
    try:
        with open(path, "r") as f:
            content = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise InputReadError(f"Failed to read file {path!r}: {e}") from e

    if not content.strip():
        raise InputReadError(f"File {path!r} is empty")
    logger.debug("Read bytecode file", path=path, chars=len(content))
    return decode_hex(content)


def fetch_onchain(
    address: str,
    rpc_url: str,
    web3: Optional[Web3] = None,
    timeout: int = DEFAULT_RPC_TIMEOUT,
) -> bytes:
    """
    Fetch deployed contract code with eth_getCode.

    Args:
        address: Contract address (checksummed or not)
        rpc_url: JSON-RPC endpoint
        web3: Pre-built Web3 instance; one is created for rpc_url if omitted
        timeout: HTTP timeout in seconds

    Returns:
        The runtime bytecode

    Raises:
        RpcFetchError: If the address is invalid, the request fails, the node
            returns an error, or the address holds no code
    """
    if not isinstance(address, str) or not Web3.is_address(address.lower()):
        raise RpcFetchError(f"Invalid address: {address!r}")
    checksum_address = Web3.to_checksum_address(address.lower())

    if web3 is None:
        web3 = Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": timeout}))

    logger.info("Fetching contract code", address=checksum_address, rpc_url=rpc_url)
    try:
        response = web3.provider.make_request("eth_getCode", [checksum_address, "latest"])
    except (requests.RequestException, Web3Exception) as e:
        raise RpcFetchError(f"Failed to send RPC request to {rpc_url}: {e}") from e

    if response.get("error"):
        logger.debug("Error received from eth_getCode", address=checksum_address, error=response["error"])
        raise RpcFetchError(f"RPC error: {response['error']}")

    code = response.get("result")
    if code is None:
        raise RpcFetchError("Missing result in RPC response")

    if code in ("0x", ""):
        raise RpcFetchError(
            f"Address {checksum_address} has no contract code (might be an EOA or empty contract)"
        )

    bytecode = decode_hex(code)
    logger.info("Fetched contract code", address=checksum_address, byte_length=len(bytecode))
    return bytecode


@dataclass
class HexSource:
    text: str

    def read(self) -> bytes:
        return decode_hex(self.text)


@dataclass
class StdinSource:
    stream: Optional[TextIO] = None

    def read(self) -> bytes:
        return read_stdin(self.stream)


@dataclass
class FileSource:
    path: str

    def read(self) -> bytes:
        return read_file(self.path)


@dataclass
class OnChainSource:
    address: str
    rpc_url: str
    timeout: int = DEFAULT_RPC_TIMEOUT

    def read(self) -> bytes:
        return fetch_onchain(self.address, self.rpc_url, timeout=self.timeout)


Source = Union[HexSource, StdinSource, FileSource, OnChainSource]


def fetch_bytes(source: Source) -> bytes:
    """Obtain raw bytecode from any of the source types above."""
    return source.read()
