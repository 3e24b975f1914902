# bundler/cli.py
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any, Sequence

from bundler.app.settings import BundlerSettings, loadSettings
from bundler.bundle.assembler import BundleAssembler, writeArtifact
from bundler.core.errors import BundleReferenceError, BundlerError, ConfigError, ManifestValidationError
from bundler.core.logging import clearLogContext, configureLogging
from bundler.manifest.loader import loadManifest
from bundler.manifest.validator import Validator
from bundler.resolve.resolver import ReferenceResolver

logger = logging.getLogger(__name__)

__all__ = ["EXIT_OK", "EXIT_INVALID", "EXIT_FAILED", "buildBundle", "main"]

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_FAILED = 2

_NOT_CREATED = "SpiraApp bundle NOT created due to errors in the manifest. Please fix and try again."

# EXAMPLE USAGE
# if your code is in a folder C:\work-in-progress
# and your Spira app bundle folder is in: C:\git\SpiraTeam\SpiraTest\SpiraAppBundles
# then run the following to build your app and save the bundle file in the right place:
#   spiraapp-bundle build --input "C:\work-in-progress" --output "C:\git\SpiraTeam\SpiraTest\SpiraAppBundles"
# Add --debug while testing (scripts are NOT minified).



def _parseArgs(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="spiraapp-bundle",
        description="Validate a SpiraApp manifest and package it into a .spiraapp bundle",
    )
    parser.add_argument(
        "command",
        nargs="?",
        choices=("build", "validate"),
        default="build",
        help="build (default) writes the bundle, validate only checks the manifest",
    )
    parser.add_argument("-i", "--input", help="Folder holding manifest.yaml and the referenced files")
    parser.add_argument("-o", "--output", help="Folder the .spiraapp file is written to")
    parser.add_argument("--debug", action="store_true", default=None, help="Do not minify scripts, verbose logs")
    parser.add_argument("--no-minify", dest="noMinify", action="store_true", default=None, help="Do not minify scripts")
    parser.add_argument("-c", "--config", help="json5 settings file")
    parser.add_argument("--log-file", dest="logFile", help="Also write JSON logs to this file")
    return parser.parse_args(argv)



def _cliOverrides(args: argparse.Namespace) -> dict[str, Any]:
    out: dict[str, Any] = {}
    if args.input:
        out["inputRoot"] = args.input
    if args.output:
        out["outputRoot"] = args.output
    if args.noMinify:
        out["noMinify"] = True
    if args.debug:
        out["debug"] = True
    if args.logFile:
        out["logging"] = {"file": args.logFile}
    return out



def _makeAssembler(settings: BundlerSettings) -> BundleAssembler:
    resolver = ReferenceResolver(
        settings.inputRoot,
        noMinify=settings.noMinify,
        allowSymlinks=settings.allowSymlinks,
    )
    return BundleAssembler(resolver, artifactExtension=settings.artifactExtension)



def buildBundle(settings: BundlerSettings) -> Path:
    """
    Loads, validates, resolves and writes one bundle. Returns the written path.
    Raises ManifestValidationError, reference errors and other BundlerErrors; nothing is
    written unless every step succeeds.
    """
    document, manifestPath = loadManifest(settings.inputRoot, settings.manifestNames)
    logger.debug("Using manifest '%s'", manifestPath)
    artifact = _makeAssembler(settings).assemble(document)
    target = writeArtifact(artifact, settings.outputRoot, allowSymlinks=settings.allowSymlinks)
    logger.info('Successfully created "%s" bundle - saved to %s', artifact.displayName, target)
    return target



def _validateOnly(settings: BundlerSettings) -> int:
    document, manifestPath = loadManifest(settings.inputRoot, settings.manifestNames)
    report = Validator().validate(document)
    if not report.ok:
        logger.error("Manifest '%s' has %d error(s)", manifestPath, report.errorCount)
        return EXIT_INVALID
    logger.info("Manifest '%s' is valid", manifestPath)
    return EXIT_OK



def main(argv: Sequence[str] | None = None) -> int:
    args = _parseArgs(argv)

    try:
        settings = loadSettings(cliOverrides=_cliOverrides(args), configPath=args.config)
    except ConfigError as err:
        configureLogging()
        logger.error("%s", err)
        return EXIT_FAILED

    configureLogging(devMode=settings.logging.devMode, logFile=settings.logging.file)

    try:
        if args.command == "validate":
            return _validateOnly(settings)
        buildBundle(settings)
        return EXIT_OK
    except ManifestValidationError:
        # Every violation has already been logged by the validator
        logger.error(_NOT_CREATED)
        return EXIT_INVALID
    except BundleReferenceError as err:
        logger.error("SpiraApp bundle NOT created: %s", err)
        return EXIT_FAILED
    except BundlerError as err:
        logger.error("%s", err)
        return EXIT_FAILED
    finally:
        clearLogContext()
