#!/usr/bin/env python3
"""
Command line front end for the RPG Maker asset decoder.

Example usage:

    rpgmaker-decoder decrypt www/img --key d41d8cd98f00b204e9800998ecf8427e
    rpgmaker-decoder restore www/img/pictures/Title.rpgmvp
    rpgmaker-decoder recover-key www/img/system/Window.rpgmvp
    rpgmaker-decoder encrypt decrypted/img --key <hex> --flavor mz
    rpgmaker-decoder project MyGame/www
    rpgmaker-decoder extension png_

Directories are walked recursively and mirrored under ``--output``
(default: ``decrypted/`` next to the source folder, ``encrypted/`` when
encrypting). When no ``--key`` is given the key is read from System.json or
recovered from an encrypted image.
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from rpgmaker_decoder.config import get_settings
from rpgmaker_decoder.core.errors import DecoderError, InvalidArgument
from rpgmaker_decoder.core.scheme import HeaderScheme
from rpgmaker_decoder.models.asset import DecodeMode, DecodeSummary
from rpgmaker_decoder.services.asset_classifier import EngineFlavor, real_extension
from rpgmaker_decoder.services.asset_service import AssetService
from rpgmaker_decoder.services.header_engine import HeaderTransformEngine
from rpgmaker_decoder.services.project_service import discover_key


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="rpgmaker-decoder",
        description="Decrypt, restore and re-encrypt RPG Maker MV/MZ asset headers.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging.",
    )
    parser.add_argument(
        "--no-verify",
        action="store_true",
        help="Do not check the fake signature before transforming.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    for mode in DecodeMode:
        sub = commands.add_parser(mode.value, help=f"{mode.value.capitalize()} a file or directory.")
        sub.add_argument("path", type=Path, help="Asset file or directory to process.")
        sub.add_argument("--key", help="Project key as hex (discovered when omitted).")
        sub.add_argument(
            "--output",
            type=Path,
            help="Output file or directory (default: next to the source).",
        )
        sub.add_argument(
            "--flavor",
            choices=[f.value for f in EngineFlavor],
            default=EngineFlavor.MV.value,
            help="Extension style when encrypting (default: %(default)s).",
        )
        sub.add_argument(
            "--workers",
            type=int,
            default=None,
            help="Worker threads for directories (default: from settings).",
        )
        sub.add_argument(
            "--copy-others",
            action="store_true",
            help="Copy files that are not assets into the output tree.",
        )

    project = commands.add_parser("project", help="Decode a whole game folder.")
    project.add_argument("path", type=Path, help="Folder holding img/ or www/.")
    project.add_argument(
        "--mode",
        choices=[m.value for m in DecodeMode],
        default=DecodeMode.DECRYPT.value,
        help="What to do with each asset (default: %(default)s).",
    )
    project.add_argument("--key", help="Project key as hex (discovered when omitted).")
    project.add_argument("--output", type=Path, help="Output directory (default: <root>/decrypted).")
    project.add_argument(
        "--flavor",
        choices=[f.value for f in EngineFlavor],
        default=EngineFlavor.MV.value,
    )
    project.add_argument("--workers", type=int, default=None)

    recover = commands.add_parser("recover-key", help="Recover the key from an encrypted image.")
    recover.add_argument("path", type=Path, help="Encrypted .rpgmvp / .png_ file.")

    extension = commands.add_parser("extension", help="Show the real extension for a disguised one.")
    extension.add_argument("fake_extension")

    return parser.parse_args(argv)


def build_engine(no_verify: bool) -> HeaderTransformEngine:
    scheme = HeaderScheme.from_settings(get_settings())
    if no_verify:
        scheme = dataclasses.replace(scheme, verify_signature=False)
    return HeaderTransformEngine(scheme)


def report(summary: DecodeSummary) -> int:
    for failure in summary.failures:
        logging.error("Failed: %s", failure)
    logging.info(
        "%d processed, %d copied, %d skipped, %d failed",
        summary.processed, summary.copied, summary.skipped, summary.failed,
    )
    return 0 if summary.ok else 1


def run_transform(args: argparse.Namespace, service: AssetService) -> int:
    mode = DecodeMode(args.command)
    flavor = EngineFlavor(args.flavor)
    key: Optional[str] = args.key
    source = args.path.resolve()

    if key is None and mode is not DecodeMode.ENCRYPT:
        key = discover_key(source if source.is_dir() else source.parent, service.engine)
        if key:
            logging.info("Using key %s", key)
    if key is None and mode is not DecodeMode.RESTORE:
        raise InvalidArgument(f"No encryption key given or found for {source}")

    if source.is_file():
        target = service.decode_file(source, mode=mode, key=key, output_path=args.output, flavor=flavor)
        logging.info("Wrote %s", target)
        return 0

    if not source.is_dir():
        logging.error("Source path does not exist: %s", source)
        return 1

    if args.output:
        output = args.output
    elif mode is DecodeMode.ENCRYPT:
        output = source.parent / "encrypted"
    else:
        output = source.parent / get_settings().output_dir_name
    summary = service.decode_directory(
        source,
        output,
        mode=mode,
        key=key,
        flavor=flavor,
        workers=args.workers,
        copy_others=args.copy_others,
    )
    return report(summary)


def run_project(args: argparse.Namespace, service: AssetService) -> int:
    result = service.decode_project(
        args.path,
        mode=DecodeMode(args.mode),
        key=args.key,
        output_dir=args.output,
        flavor=EngineFlavor(args.flavor),
        workers=args.workers,
    )
    logging.info("Project root: %s", result.root)
    logging.info("Output: %s", result.output_dir)
    return report(result.summary)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )

    engine = build_engine(args.no_verify)
    service = AssetService(engine=engine)

    try:
        if args.command == "extension":
            print(real_extension(args.fake_extension))
            return 0

        if args.command == "recover-key":
            with open(args.path, "rb") as f:
                head = f.read(engine.scheme.minimum_length)
            print(engine.recover_key(head).hex())
            return 0

        if args.command == "project":
            return run_project(args, service)

        return run_transform(args, service)
    except DecoderError as exc:
        logging.error("%s: %s", type(exc).__name__, exc)
        return 1
    except OSError as exc:
        logging.error("%s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
