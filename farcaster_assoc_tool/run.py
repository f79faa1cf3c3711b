#!/usr/bin/env python3
"""Main entry point for the Farcaster account association tool."""

import argparse
import json
import logging
import os
import sys
from typing import Dict, Any, Optional, List

from .association import AssociationService, verify_association
from .codec import bytes_to_hex
from .config import load_credentials, load_env_file, parse_private_key, resolve_manifest_path
from .constants import DEFAULT_ENV_FILE, ENV_PRIVATE_KEY, EXIT_FAILURE, EXIT_SUCCESS, HEX_PREFIX
from .errors import AssociationToolError, ConfigError
from .manifest import ManifestStore, read_association
from .schemas import ErrorOutput, GenerateOutput
from .signing import derive_public_key

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the application."""
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Farcaster Mini App account association tool")
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable verbose logging')
    parser.add_argument('--env-file', default=DEFAULT_ENV_FILE,
                        help='Environment file to load before reading FARCASTER_* variables')

    subparsers = parser.add_subparsers(dest='command', required=True, help='Command to execute')

    gen_parser = subparsers.add_parser('generate', help='Generate and save an account association')
    gen_parser.add_argument('--fid', help='Farcaster ID (defaults to FARCASTER_FID)')
    gen_parser.add_argument('--private-key',
                            help='Custody private key, hex or JWK (defaults to FARCASTER_PRIVATE_KEY)')
    gen_parser.add_argument('--domain', help='Hosting domain (defaults to FARCASTER_DOMAIN)')
    gen_parser.add_argument('--manifest', '-m', help='Manifest path (defaults to FARCASTER_MANIFEST_PATH)')
    gen_parser.add_argument('--dry-run', action='store_true',
                            help='Generate and verify without writing the manifest')

    verify_parser = subparsers.add_parser('verify', help='Verify the association in a manifest')
    verify_parser.add_argument('--manifest', '-m', help='Manifest path (defaults to FARCASTER_MANIFEST_PATH)')
    verify_parser.add_argument('--expected-domain', help='Domain the payload must name')
    verify_parser.add_argument('--expected-fid', type=int, help='FID the header must name')

    key_parser = subparsers.add_parser('derive-key', help='Print the public key for a private key')
    key_parser.add_argument('--private-key', help='Private key, hex or JWK (defaults to FARCASTER_PRIVATE_KEY)')

    return parser.parse_args(argv)


def generate_association(
    fid: Optional[str] = None,
    private_key: Optional[str] = None,
    domain: Optional[str] = None,
    manifest_path: Optional[str] = None,
    dry_run: bool = False,
) -> Dict[str, Any]:
    """Generate an association, verify it and merge it into the manifest."""
    credentials = load_credentials(fid=fid, private_key=private_key, domain=domain)
    service = AssociationService(credentials)
    association = service.generate()
    public_key = f"{HEX_PREFIX}{bytes_to_hex(service.public_key())}"
    logger.info(f"Public key: {public_key}")

    report = verify_association(association, expected_domain=credentials.domain,
                                expected_fid=credentials.account_id)

    path = resolve_manifest_path(manifest_path)
    if dry_run:
        logger.info("Dry run: manifest not written.")
        written = None
    else:
        store = ManifestStore(path, domain=credentials.domain)
        store.save(ManifestStore.merge(store.load(), association))
        written = path

    return GenerateOutput(
        accountAssociation=association,
        fid=credentials.account_id,
        domain=credentials.domain,
        publicKey=public_key,
        manifestPath=written,
        signatureValid=report.signature_valid,
    ).model_dump()


def verify_manifest(
    manifest_path: Optional[str] = None,
    expected_domain: Optional[str] = None,
    expected_fid: Optional[int] = None,
) -> Dict[str, Any]:
    """Verify the association stored in a manifest and return the report."""
    path = resolve_manifest_path(manifest_path)
    manifest = ManifestStore(path).load_strict()
    association = read_association(manifest)
    report = verify_association(association, expected_domain=expected_domain, expected_fid=expected_fid)
    return report.model_dump(by_alias=True)


def derive_key(private_key: Optional[str] = None) -> Dict[str, Any]:
    """Return the 0x-prefixed public key for a private key."""
    value = private_key or os.environ.get(ENV_PRIVATE_KEY)
    if not value:
        raise ConfigError(f"Missing required environment variables: {ENV_PRIVATE_KEY}")
    public_key = derive_public_key(parse_private_key(value))
    return {"publicKey": f"{HEX_PREFIX}{bytes_to_hex(public_key)}"}


def main(argv: Optional[List[str]] = None) -> int:
    """Command-line entry point."""
    try:
        args = parse_args(argv)
        setup_logging(args.verbose)
        load_env_file(args.env_file)

        if args.command == 'generate':
            result = generate_association(
                fid=args.fid,
                private_key=args.private_key,
                domain=args.domain,
                manifest_path=args.manifest,
                dry_run=args.dry_run,
            )

        elif args.command == 'verify':
            result = verify_manifest(
                manifest_path=args.manifest,
                expected_domain=args.expected_domain,
                expected_fid=args.expected_fid,
            )

        elif args.command == 'derive-key':
            result = derive_key(private_key=args.private_key)

        else:
            print(f"Unknown command: {args.command}", file=sys.stderr)
            return EXIT_FAILURE

        print(json.dumps(result, indent=2))
        return EXIT_SUCCESS

    except AssociationToolError as e:
        logger.error(str(e))
        print(ErrorOutput(error=e.error_code, message=e.message).model_dump_json(indent=2))
        return EXIT_FAILURE
    except Exception as e:
        logger.exception("Unexpected error occurred")
        print(ErrorOutput(error="UnexpectedError", message=str(e)).model_dump_json(indent=2))
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
