# -*- coding: utf-8 -*-
"""Unit tests for validation helpers."""

from __future__ import annotations

from crowdfund_sync.utils.validation import is_tx_id, is_wallet_address, mask_address


def test_wallet_address_accepts_stacks_flow_and_evm_forms() -> None:
    assert is_wallet_address("ST1PQHQKV0RJXZFY1DGX8MNSNYVE3VGZJSRTPGZGM")
    assert is_wallet_address("SP2J6ZY48GV1EZ5V2V5RB9MP66SW86PYKKNRV9EJ7.crowdfunding")
    assert is_wallet_address("0x01cf0e2f2f715450")
    assert is_wallet_address("0x2d27b6e21b3d4d7c9a43fdf58f12345678907706")


def test_wallet_address_rejects_garbage() -> None:
    assert not is_wallet_address("")
    assert not is_wallet_address("not-a-wallet")
    assert not is_wallet_address("0x123")
    assert not is_wallet_address(None)


def test_tx_id() -> None:
    assert is_tx_id("0x" + "a" * 64)
    assert is_tx_id("d2b1f0")
    assert not is_tx_id("")
    assert not is_tx_id("has space")
    assert not is_tx_id(12)


def test_mask_address() -> None:
    assert mask_address("ST1PQHQKV0RJXZFY1DGX8MNSNYVE3VGZJSRTPGZGM") == "ST1PQH...GZGM"
    assert mask_address("short") == "***"
    assert mask_address(None) == "***"
