#!/usr/bin/env python3
"""
Command-line client for the animal identity service.

Usage:
  petid register cat.png
  petid search cat2.jpg
  petid --url http://localhost:5000 --timeout 10 search cat2.jpg
  petid gui

The register/search commands run the same workflow as the desktop window, one image
per invocation, and print what the window would show. Exit status is 0 on success,
1 when the request failed, and 2 when the input was rejected before sending.
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from typing import Optional

from petid.app.client import IdentityServiceClient
from petid.app.controller import WorkflowController, run_inline
from petid.app.render import format_search_text, registration_text
from petid.app.state import SessionState, UploadSession
from petid.core.config import ServiceConfig
from petid.core.models import RegistrationResult, SearchResult, WorkflowKind
from petid.validation.validator import ImageFile


def _build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="petid", description="Register or search animals by face image.")
    p.add_argument("--url", help="Identity service base URL (default: $PETID_SERVICE_URL or the hosted service)")
    p.add_argument("--timeout", type=float, help="Request timeout in seconds (default: 30)")
    p.add_argument("--verbose", "-v", action="store_true", help="Log request details to stderr")

    sub = p.add_subparsers(dest="command", required=True)
    reg = sub.add_parser("register", help="Register a new animal from a JPEG or PNG image")
    reg.add_argument("image", help="Path to the animal's face image")
    search = sub.add_parser("search", help="Find registered animals matching an image")
    search.add_argument("image", help="Path to the query image")
    sub.add_parser("gui", help="Open the desktop window")
    return p


def _config_from_args(args: argparse.Namespace) -> ServiceConfig:
    config = ServiceConfig.from_env()
    if args.url:
        config = replace(config, base_url=args.url)
    if args.timeout is not None:
        if args.timeout <= 0:
            raise ValueError("--timeout must be positive")
        config = replace(config, timeout=args.timeout)
    return config


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def run_workflow(kind: WorkflowKind, path: str, client: IdentityServiceClient) -> int:
    try:
        file = ImageFile.from_path(path)
    except OSError as e:
        print(f"ERROR: could not read {path}: {e}", file=sys.stderr)
        return 2

    controller = WorkflowController(
        client,
        dispatch=run_inline,
        on_registered=lambda animal_id: print(f"Animal registered successfully! ID: {animal_id}"),
    )
    with UploadSession(kind) as session:
        if controller.select(session, file):
            controller.submit(session)

        if session.state is not SessionState.SUCCEEDED:
            error = session.error
            print(f"ERROR: {error.message if error else 'Request did not complete.'}", file=sys.stderr)
            # 2 = bad input (nothing was sent), 1 = the request itself failed
            return 2 if error is not None and error.kind.is_validation else 1

        result = session.result
        if isinstance(result, RegistrationResult):
            print(registration_text(result))
        elif isinstance(result, SearchResult):
            print(format_search_text(result))
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    args = _build_arg_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = _config_from_args(args)
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    if args.command == "gui":
        from petid.ui.main_window import run  # tkinter only when asked for

        run(config)
        return 0

    client = IdentityServiceClient(config)
    try:
        return run_workflow(WorkflowKind(args.command), args.image, client)
    finally:
        client.close()


if __name__ == "__main__":
    raise SystemExit(main())
