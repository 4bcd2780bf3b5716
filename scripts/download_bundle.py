#!/usr/bin/env python3
"""
Download a cert bundle from the Certificate Web Service
Connection settings come from CWS_* environment variables (see ClientConfig.from_env)

Writes <common_name>.key, <common_name>.crt and <common_name>-cacerts.crt
"""

import argparse
import getpass
import logging
import os
import sys
from pathlib import Path

from cws_client import ClientConfig, CwsClient, CwsError
from cws_client.certificates.formats import decode_pem
from cws_client.config import settings

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Download a PEM cert bundle from CWS")
    parser.add_argument("common_name", help="Certificate common name")
    parser.add_argument("--team-dl", default="", help="Team DL, absolute or relative to CWS_TEAM_DL")
    parser.add_argument("--out", default=".", help="Output directory")
    parser.add_argument("--encrypt-key", action="store_true",
                        help="Prompt for a password and encrypt the private key")
    return parser.parse_args(argv)


def write_file(path: Path, content: str, private: bool = False):
    path.write_text(content)
    if private:
        os.chmod(path, 0o600)
    print(f"✅ Wrote {path}")


def main(argv=None) -> int:
    args = parse_args(argv)

    key_password = None
    if args.encrypt_key:
        key_password = getpass.getpass("Private key password: ")

    try:
        with CwsClient(ClientConfig.from_env()) as client:
            team_dl = args.team_dl or client.config.team_dl
            logger.info(f"Downloading cert bundle for {args.common_name} ({team_dl})")
            bundle = client.download_cert_bundle(args.common_name, team_dl, key_password)
    except (CwsError, ValueError) as e:
        print(f"❌ Failed to download cert bundle: {e}")
        return 1

    out_dir = Path(args.out)
    out_dir.mkdir(parents=True, exist_ok=True)
    write_file(out_dir / f"{args.common_name}.key", bundle.key, private=True)
    write_file(out_dir / f"{args.common_name}.crt", bundle.cert)
    if bundle.cacerts:
        write_file(out_dir / f"{args.common_name}-cacerts.crt", bundle.cacerts)

    print(f"\n📦 Private key encrypted: {'YES' if bundle.encrypted else 'NO'}")
    print(f"📜 CA certificates: {len(decode_pem(bundle.cacerts))}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
