# tests/conftest.py
import pytest
from solcx import install_solc
from solcx.exceptions import SolcNotInstalled
from solcx.install import get_executable

from reactforge.settings import DEFAULT_SOLC_VERSION

ORIGIN = "0x" + "11" * 20
DESTINATION = "0x" + "22" * 20
OWNER = "0x" + "33" * 20


@pytest.fixture
def transfer_config():
    """The single-pair ERC-20 Transfer automation used across the suite."""
    return {
        "pairs": [
            {
                "event": "Transfer(address,address,uint256)",
                "function": "onTransfer(address,uint256)",
            }
        ],
        "originChainId": 1,
        "destinationChainId": 1,
        "originContract": ORIGIN,
        "destinationContract": DESTINATION,
    }


@pytest.fixture
def two_pair_config(transfer_config):
    config = dict(transfer_config)
    config["pairs"] = [
        {
            "event": "Transfer(address,address,uint256)",
            "function": "onTransfer(address,address,address)",
        },
        {
            "event": "Approval(address,address,uint256)",
            "function": "onApproval(address,address,uint256)",
            "mapping": {"2": "data"},
        },
    ]
    return config


@pytest.fixture(scope="session")
def solc_binary():
    """Path of the pinned solc; installs it once, skips when that is impossible (e.g. offline)."""
    try:
        return get_executable(DEFAULT_SOLC_VERSION)
    except SolcNotInstalled:
        pass
    try:
        install_solc(DEFAULT_SOLC_VERSION)
        return get_executable(DEFAULT_SOLC_VERSION)
    except Exception as e:  # network or platform failure
        pytest.skip(f"solc {DEFAULT_SOLC_VERSION} unavailable: {e}")
