"""
RSA key pair generation for session-token signing.

``generate_key_pair`` returns PEM strings in memory (the test suite uses
it); running the module writes a development pair to ``keys/``::

    python -m todo_api.keys
"""

from __future__ import annotations

from pathlib import Path

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

PRIVATE_KEY_NAME = "dev.private.pem"
PUBLIC_KEY_NAME = "dev.public.pem"


def generate_key_pair(key_size: int = 2048) -> tuple[str, str]:
    """Generate an RSA private/public key pair as PEM strings."""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=key_size)
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("utf-8")
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode("utf-8")
    return private_pem, public_pem


def default_keys_dir() -> Path:
    """Return ``keys/`` under the current working directory."""
    return Path.cwd() / "keys"


def write_key_pair(keys_dir: Path | None = None) -> tuple[Path, Path] | None:
    """
    Write a key pair into *keys_dir* unless both files already exist.

    *keys_dir* defaults to ``default_keys_dir()``, resolved at call time.

    Returns:
        The ``(private, public)`` paths that were written, or ``None`` when
        an existing pair was left untouched.

    Raises:
        SystemExit: If only one of the two files exists.
    """
    if keys_dir is None:
        keys_dir = default_keys_dir()
    private_path = keys_dir / PRIVATE_KEY_NAME
    public_path = keys_dir / PUBLIC_KEY_NAME
    private_exists = private_path.exists()
    public_exists = public_path.exists()

    if private_exists and public_exists:
        return None
    if private_exists != public_exists:
        raise SystemExit(
            "Only one key file exists. Remove both key files and run this script again."
        )

    keys_dir.mkdir(parents=True, exist_ok=True)
    private_pem, public_pem = generate_key_pair()
    private_path.write_text(private_pem, encoding="utf-8")
    public_path.write_text(public_pem, encoding="utf-8")
    return private_path, public_path


def main() -> int:
    keys_dir = default_keys_dir()
    written = write_key_pair(keys_dir)
    if written is None:
        print(f"Keys already exist in {keys_dir}, skipping")
    else:
        for path in written:
            print(f"Generated: {path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
