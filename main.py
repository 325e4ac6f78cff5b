#!/usr/bin/env python3
"""
ECDH Key Agreement - Main Entry Point

Runs a two-party ECDH agreement (Alice and Bob) and derives key material
on both sides through both call shapes:
- explicit per-call parameters (derive_key_from_hash / _hmac / _tls)
- stateful session fields followed by derive_key_material()

All four results must be identical; the exit status is 1 if they differ.

Usage:
    python main.py [options]

Examples:
    # SHA-256 hash KDF on P-256 (default)
    python main.py

    # HMAC-SHA384 with an explicit HMAC key and prepended bytes on P-384
    python main.py --curve P-384 --kdf hmac --hash SHA384 --hmac-key 000102 --prepend 0a0b

    # TLS 1.2 PRF producing a 48-byte master secret
    python main.py --kdf tls --label "master secret" --seed 00112233

    # Keys held in a key store directory (reused across runs)
    python main.py --keystore ./keys
"""

import argparse
import os
import sys

from ecdh import DerivationConfig, DerivationMode, KeyAgreementError
from ecdh.constants import DEFAULT_CURVE, TLS_MASTER_SECRET_LENGTH
from keystore import KeyStore
from session import KeyAgreementSession, KeyStoreBackend, SoftwareBackend


def parse_hex(value: str) -> bytes:
    """argparse type for hex-encoded byte strings."""
    try:
        return bytes.fromhex(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a hex string: {value!r}")


def build_config(args) -> DerivationConfig:
    """Map parsed command line options onto a DerivationConfig."""
    mode = DerivationMode.parse(args.kdf)

    if mode is DerivationMode.TLS_PRF:
        seed = args.seed if args.seed is not None else os.urandom(64)
        return DerivationConfig.for_tls_prf(
            args.label.encode("utf-8"), seed, length=args.length, hash_algorithm=args.hash
        )
    if mode is DerivationMode.HMAC:
        return DerivationConfig.for_hmac(
            args.hash, hmac_key=args.hmac_key, prepend=args.prepend, append=args.append
        )
    return DerivationConfig.for_hash(args.hash, prepend=args.prepend, append=args.append)


def derive_explicit(session: KeyAgreementSession, peer, config: DerivationConfig) -> bytes:
    """Derive through the explicit per-call API matching the config's mode."""
    if config.mode is DerivationMode.TLS_PRF:
        return session.derive_key_tls(
            peer, config.label, config.seed, config.length, config.hash_algorithm
        )
    if config.mode is DerivationMode.HMAC:
        return session.derive_key_from_hmac(
            peer, config.hash_algorithm, config.hmac_key, config.prepend, config.append
        )
    return session.derive_key_from_hash(peer, config.hash_algorithm, config.prepend, config.append)


def derive_stateful(session: KeyAgreementSession, peer, config: DerivationConfig) -> bytes:
    """Derive by setting the session fields one by one, then deriving."""
    session.key_derivation_function = config.mode
    session.hash_algorithm = config.hash_algorithm
    session.secret_prepend = config.prepend
    session.secret_append = config.append
    session.hmac_key = config.hmac_key
    session.label = config.label
    session.seed = config.seed
    session.tls_length = config.length
    return session.derive_key_material(peer)


def run_agreement(curve, config: DerivationConfig, keystore_dir: str = None,
                  new_keys: bool = False, debug: bool = False) -> dict:
    """
    Run the two-party agreement and derivation.

    Args:
        curve: Curve name
        config: Derivation parameters
        keystore_dir: Key store directory; None for ephemeral software keys
        new_keys: Replace keys already in the key store
        debug: Enable debug output

    Returns:
        dict: {curve, key_size, alice_explicit, alice_stateful,
               bob_explicit, bob_stateful, match}
    """
    if keystore_dir:
        store = KeyStore(keystore_dir, debug=debug)
        alice_backend = KeyStoreBackend(store, "alice", overwrite=new_keys)
        bob_backend = KeyStoreBackend(store, "bob", overwrite=new_keys)
    else:
        alice_backend = SoftwareBackend()
        bob_backend = SoftwareBackend()

    with KeyAgreementSession(curve, backend=alice_backend, debug=debug) as alice, \
            KeyAgreementSession(curve, backend=bob_backend, debug=debug) as bob:
        results = {
            "curve": alice.curve_name,
            "key_size": alice.key_size,
            "alice_explicit": derive_explicit(alice, bob.public_key, config),
            "alice_stateful": derive_stateful(alice, bob.public_key, config),
            "bob_explicit": derive_explicit(bob, alice.public_key, config),
            "bob_stateful": derive_stateful(bob, alice.public_key, config),
        }

    derived = [results[k] for k in ("alice_explicit", "alice_stateful", "bob_explicit", "bob_stateful")]
    results["match"] = all(d == derived[0] for d in derived)
    return results


def print_results(config: DerivationConfig, results: dict):
    """Print derivation results in a formatted way."""
    print(f"\n    === {config.mode.value} / {config.hash_algorithm.value} "
          f"on {results['curve']} ({results['key_size']}-bit) ===")
    for name in ("alice_explicit", "alice_stateful", "bob_explicit", "bob_stateful"):
        print(f"    {name:<15} {results[name].hex()}")

    if results["match"]:
        print(f"\n    ✅ All derivations agree ({len(results['alice_explicit'])} bytes)")
    else:
        print(f"\n    ❌ Derivations differ")


def main(argv=None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="ECDH key agreement with Hash / HMAC / TLS PRF key derivation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py
  python main.py --curve P-384 --kdf hmac --hash SHA384 --hmac-key 000102
  python main.py --kdf tls --label "master secret" --seed 00112233 --length 48
  python main.py --keystore ./keys --new-keys
"""
    )

    parser.add_argument(
        "--curve",
        default=DEFAULT_CURVE,
        help=f"Named curve: P-256, P-384, P-521 (default: {DEFAULT_CURVE})"
    )

    parser.add_argument(
        "--kdf",
        choices=["hash", "hmac", "tls"],
        default="hash",
        help="Key derivation function (default: hash)"
    )

    parser.add_argument(
        "--hash",
        default="SHA256",
        help="Hash algorithm: SHA1, SHA256, SHA384, SHA512 (default: SHA256)"
    )

    parser.add_argument("--prepend", type=parse_hex, default=None, help="Hex bytes before the secret")
    parser.add_argument("--append", type=parse_hex, default=None, help="Hex bytes after the secret")
    parser.add_argument(
        "--hmac-key",
        type=parse_hex,
        default=None,
        help="Hex HMAC key (default: the shared secret keys the HMAC)"
    )

    parser.add_argument("--label", default="master secret", help="TLS PRF label (default: master secret)")
    parser.add_argument(
        "--seed",
        type=parse_hex,
        default=None,
        help="Hex TLS PRF seed (default: 64 random bytes)"
    )
    parser.add_argument(
        "--length",
        type=int,
        default=TLS_MASTER_SECRET_LENGTH,
        help=f"TLS PRF output length in bytes (default: {TLS_MASTER_SECRET_LENGTH})"
    )

    parser.add_argument(
        "-k", "--keystore",
        default=None,
        help="Key store directory; keys 'alice' and 'bob' are created or reused"
    )
    parser.add_argument(
        "--new-keys",
        action="store_true",
        help="Overwrite existing key store keys"
    )

    parser.add_argument(
        "-d", "--debug",
        action="store_true",
        help="Enable debug output"
    )

    args = parser.parse_args(argv)

    try:
        config = build_config(args)
        results = run_agreement(
            args.curve, config, keystore_dir=args.keystore,
            new_keys=args.new_keys, debug=args.debug
        )
    except KeyAgreementError as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        return 2

    print_results(config, results)
    return 0 if results["match"] else 1


if __name__ == "__main__":
    sys.exit(main())
