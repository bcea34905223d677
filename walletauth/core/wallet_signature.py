"""
Ethereum Wallet Signature Utilities

This module handles the wallet-specific cryptographic operations for login.
It implements the EIP-191 personal_sign flow used by MetaMask and most EVM wallets.

Authentication Flow:
1. Backend generates a random nonce -> generate_nonce()
2. Backend wraps it in the canonical challenge -> challenge_message()
3. Frontend signs the challenge with personal_sign
4. Frontend sends: wallet address, signature
5. Backend verifies: verify_signature()
   - Rebuilds the "\\x19Ethereum Signed Message:\\n<len>" prefixed hash
   - Recovers the signer address from the signature
   - Compares it with the claimed wallet, ignoring checksum case

The signature recovery uses:
- secp256k1 ECDSA public key recovery
- eth_account library for message encoding and recovery
"""

import logging
import secrets
from typing import Optional, Tuple

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_utils import is_address

from walletauth.core.config import settings

logger = logging.getLogger(__name__)


def generate_nonce(num_bytes: Optional[int] = None) -> str:
    """
    Generate a cryptographically secure random nonce for wallet authentication.

    Args:
        num_bytes: Number of random bytes to generate (default: NONCE_NUM_BYTES setting)

    Returns:
        Hex-encoded random string (e.g., "a1b2c3d4...")
    """
    if num_bytes is None or num_bytes <= 0:
        num_bytes = settings.NONCE_NUM_BYTES
    return secrets.token_hex(num_bytes)


def normalize_address(address: str | None) -> str:
    """Lower-case form used as the store key. Empty string if nothing was given."""
    if not address:
        return ""
    return address.strip().lower()


def is_wallet_address(normalized_address: str) -> bool:
    """True for a 0x-prefixed 20-byte hex address (expects the lower-cased form)."""
    return normalized_address.startswith("0x") and is_address(normalized_address)


def challenge_message(nonce: str) -> str:
    """The exact text the wallet must sign to log in with this nonce."""
    return f"{settings.LOGIN_MESSAGE_PREFIX}{nonce}"


def link_challenge_message(nonce: str) -> str:
    """The text a new wallet signs to join an account. Never equal to a login challenge."""
    return f"{settings.LINK_MESSAGE_PREFIX}{nonce}"


def recover_address(message: str, signature: str) -> str:
    """
    Recover the signer of an EIP-191 personal message.

    Args:
        message: The challenge text that was signed
        signature: 65-byte r||s||v signature, hex encoded (0x prefix optional)

    Returns:
        Lower-cased signer address, or "" if the signature cannot be decoded
        or does not recover to a valid public key.
    """
    signature = signature.strip()
    if not signature.startswith(("0x", "0X")):
        signature = "0x" + signature
    try:
        signer = Account.recover_message(encode_defunct(text=message), signature=signature)
    except Exception as e:
        # eth_account raises a mix of ValueError / BadSignature / eth_keys errors
        logger.debug("Signature recovery failed: %s", e.__class__.__name__)
        return ""
    return signer.lower()


def verify_signature(address: str, message: str, signature: str) -> Tuple[bool, str]:
    """
    Verify a personal_sign signature against the claimed wallet address.

    Returns:
        Tuple of (is_valid: bool, normalized_address: str)
        - If valid: (True, normalized_address)
        - If invalid: (False, "")

    Example:
        is_valid, addr = verify_signature(
            address="0xAbC...",
            message=challenge_message(nonce),
            signature="0x5f1c...1b",
        )
        if is_valid:
            # Create JWT token for addr
    """
    normalized_address = normalize_address(address)
    if not normalized_address or not signature:
        return False, ""

    recovered = recover_address(message, signature)
    if not recovered or recovered != normalized_address:
        return False, ""

    return True, normalized_address
