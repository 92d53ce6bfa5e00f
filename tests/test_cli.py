import io
import json
from unittest.mock import patch

import pytest
import yaml

from evmlens.cli import main
from evmlens.sources import RpcFetchError

SAMPLE_BYTECODE = "60ff61abcd00"
SAMPLE_BYTECODE_WITH_PREFIX = "0x60ff61abcd00"
INVALID_HEX = "60gg"
USDC_ADDRESS = "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("EVMLENS_RPC_URL", raising=False)
    monkeypatch.delenv("EVMLENS_LOG_LEVEL", raising=False)


def test_hex_input_valid_bytecode(capsys):
    assert main([SAMPLE_BYTECODE]) == 0
    out = capsys.readouterr().out
    assert "EVM BYTECODE DISASSEMBLY" in out
    assert "0000 │ PUSH1 0xff" in out
    assert "0002 │ PUSH2 0xabcd" in out
    assert "0005 │ STOP" in out
    assert "3 opcodes total" in out


def test_hex_input_invalid_characters(capsys):
    assert main([INVALID_HEX]) == 1
    err = capsys.readouterr().err
    assert "Error:" in err
    assert "Invalid hex characters found" in err
    assert "Usage examples:" in err


def test_stdin_input_valid_bytecode(capsys, monkeypatch):
    monkeypatch.setattr("sys.stdin", io.StringIO(SAMPLE_BYTECODE_WITH_PREFIX))
    assert main(["--stdin"]) == 0
    out = capsys.readouterr().out
    assert "EVM BYTECODE DISASSEMBLY" in out
    assert "PUSH1" in out


def test_stdin_input_empty(capsys, monkeypatch):
    monkeypatch.setattr("sys.stdin", io.StringIO(""))
    assert main(["--stdin"]) == 1
    err = capsys.readouterr().err
    assert "Error:" in err
    assert "No input provided via stdin" in err


def test_no_arguments_reads_stdin(capsys, monkeypatch):
    monkeypatch.setattr("sys.stdin", io.StringIO(SAMPLE_BYTECODE))
    assert main([]) == 0
    assert "PUSH2" in capsys.readouterr().out


def test_file_input_valid_bytecode(capsys, tmp_path):
    path = tmp_path / "code.hex"
    path.write_text(SAMPLE_BYTECODE + "\n")
    assert main(["--file", str(path)]) == 0
    assert "PUSH1" in capsys.readouterr().out


def test_file_input_nonexistent_file(capsys):
    assert main(["--file", "/nonexistent/file.txt"]) == 1
    err = capsys.readouterr().err
    assert "Error:" in err
    assert "Failed to read file" in err


def test_address_input_valid_contract(capsys):
    with patch("evmlens.sources.fetch_onchain", return_value=bytes.fromhex(SAMPLE_BYTECODE)) as fetch:
        assert main(["--address", USDC_ADDRESS, "--rpc", "http://localhost:8545"]) == 0
    fetch.assert_called_once_with(USDC_ADDRESS, "http://localhost:8545", timeout=30)
    assert "PUSH1" in capsys.readouterr().out


def test_address_uses_network_default(capsys):
    with patch("evmlens.sources.fetch_onchain", return_value=b"\x00") as fetch:
        assert main(["--address", USDC_ADDRESS, "--network", "sepolia"]) == 0
    assert fetch.call_args[0][1] == "https://ethereum-sepolia.publicnode.com"


def test_address_uses_rpc_url_from_env(capsys, monkeypatch):
    monkeypatch.setenv("EVMLENS_RPC_URL", "http://node.internal:8545")
    with patch("evmlens.sources.fetch_onchain", return_value=b"\x00") as fetch:
        assert main(["--address", USDC_ADDRESS]) == 0
    assert fetch.call_args[0][1] == "http://node.internal:8545"


def test_address_input_no_contract_code(capsys):
    error = RpcFetchError(f"Address {USDC_ADDRESS} has no contract code (might be an EOA or empty contract)")
    with patch("evmlens.sources.fetch_onchain", side_effect=error):
        assert main(["--address", USDC_ADDRESS, "--rpc", "http://localhost:8545"]) == 1
    err = capsys.readouterr().err
    assert "Error:" in err
    assert "has no contract code" in err
    assert "Usage examples:" not in err


def test_address_input_invalid_address(capsys):
    assert main(["--address", "invalid_address", "--rpc", "http://localhost:8545"]) == 1
    err = capsys.readouterr().err
    assert "Error:" in err
    assert "Invalid address" in err


def test_conflicting_arguments(capsys):
    with pytest.raises(SystemExit) as exc_info:
        main(["--stdin", "--file", "test.txt"])
    assert exc_info.value.code == 2
    assert "not allowed with argument" in capsys.readouterr().err


def test_rpc_requires_address(capsys):
    with pytest.raises(SystemExit) as exc_info:
        main(["--rpc", "http://localhost:8545", SAMPLE_BYTECODE])
    assert exc_info.value.code == 2


def test_help_output(capsys):
    with pytest.raises(SystemExit) as exc_info:
        main(["--help"])
    assert exc_info.value.code == 0
    out = capsys.readouterr().out
    assert "A colorful EVM bytecode disassembler" in out
    for flag in ("--stdin", "--file", "--address", "--rpc", "--stats", "--format"):
        assert flag in out


def test_stats_text_output(capsys):
    assert main(["--stats", SAMPLE_BYTECODE]) == 0
    out = capsys.readouterr().out
    assert "STATISTICS" in out
    assert "Opcode count:      3" in out
    assert "Max stack depth:   2" in out


def test_json_output(capsys):
    assert main(["--format", "json", "--stats", SAMPLE_BYTECODE]) == 0
    document = json.loads(capsys.readouterr().out)
    assert [entry["mnemonic"] for entry in document["instructions"]] == ["PUSH1", "PUSH2", "STOP"]
    assert document["stats"]["byte_length"] == 6
    assert document["stats"]["max_stack_depth"] == 2


def test_yaml_output(capsys):
    assert main(["--format", "yaml", "6161"]) == 0
    document = yaml.safe_load(capsys.readouterr().out)
    assert document["instructions"] == [
        {"position": 0, "opcode": "0x61", "mnemonic": "PUSH2", "category": "Stack", "immediate": "0x61", "truncated": True}
    ]
    assert "stats" not in document


def test_output_is_uncolored_when_not_a_tty(capsys):
    assert main([SAMPLE_BYTECODE]) == 0
    assert "\033[" not in capsys.readouterr().out


def test_log_json_emits_json_log_lines(capsys):
    assert main(["--log-json", "--verbose", SAMPLE_BYTECODE]) == 0
    err = capsys.readouterr().err
    events = []
    for line in err.splitlines():
        try:
            events.append(json.loads(line))
        except ValueError:
            continue
    loaded = [event for event in events if event.get("event") == "Loaded bytecode"]
    assert loaded
    assert loaded[0]["byte_length"] == 6
    assert loaded[0]["level"] == "debug"
