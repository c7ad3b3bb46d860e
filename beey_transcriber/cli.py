"""Command-line interface for the Beey transcription client.

WHY: Handy for scripting and for checking an account by hand: create a
project, upload media, enqueue it, check its state, and pull exports
without writing any Python.

HOW: argparse sub-commands, one per client operation. Each command runs a
single coroutine through asyncio.run() with a BeeyClient built from the
environment (.env). Results go to stdout (JSON for projects and listings,
raw text/bytes for exports); status and errors go to stderr.

RULES:
- Exit code 0 on success, 1 on BeeyError, missing configuration, or an
  unwritable output file
- No polling command; run "show" again to check progress
- --option KEY=VALUE may repeat; values are sent as given
- upload accepts a local path or an http(s) URL
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, List, Optional

from beey_transcriber import __version__
from beey_transcriber.api.client import BeeyClient
from beey_transcriber.api.errors import BeeyError
from beey_transcriber.api.models import Project


def _status(msg: str) -> None:
    """Print a status message to stderr so stdout stays pipeable."""
    print(msg, file=sys.stderr, flush=True)


def _print_json(value: Any) -> None:
    print(json.dumps(value, indent=2, ensure_ascii=False))


def _print_project(project: Project) -> None:
    _print_json(project.to_dict())


def _write_output(content: bytes, output: Optional[str]) -> None:
    if output:
        Path(output).write_bytes(content)
        _status("Saved {} bytes to {}".format(len(content), output))
    else:
        sys.stdout.buffer.write(content)
        sys.stdout.buffer.flush()


def parse_options(pairs: Optional[List[str]]) -> Dict[str, str]:
    """Turn ["Lang=en-US", "WithVAD=false"] into a dict.

    Raises:
        argparse.ArgumentTypeError: If an item has no "=".
    """
    options: Dict[str, str] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise argparse.ArgumentTypeError(
                "Invalid option {!r}, expected KEY=VALUE".format(pair)
            )
        options[key.strip()] = value
    return options


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


async def _cmd_create(client: BeeyClient, args: argparse.Namespace) -> int:
    project = await client.add_project(args.name, custom_path=args.path)
    _print_project(project)
    return 0


async def _cmd_show(client: BeeyClient, args: argparse.Namespace) -> int:
    project = await client.get_project(args.project_id)
    if project is None:
        _status("Project {} not found.".format(args.project_id))
        return 1
    _print_project(project)
    return 0


async def _cmd_delete(client: BeeyClient, args: argparse.Namespace) -> int:
    project = await client.delete_project(args.project_id)
    _print_project(project)
    return 0


async def _cmd_upload(client: BeeyClient, args: argparse.Namespace) -> int:
    source: str = args.source
    _status("Uploading {} to project {}...".format(source, args.project_id))
    if source.startswith(("http://", "https://")):
        await client.upload_media_file_from_url(args.project_id, source)
    else:
        await client.upload_media_file(args.project_id, source)
    _status("Upload complete.")
    return 0


async def _cmd_enqueue(client: BeeyClient, args: argparse.Namespace) -> int:
    options = parse_options(args.option)
    if args.lang:
        options["Lang"] = args.lang
    project = await client.enqueue_project(args.project_id, options)
    _status("Project {} is {}.".format(project.id, project.processing_state.value))
    _print_project(project)
    return 0


async def _cmd_export(client: BeeyClient, args: argparse.Namespace) -> int:
    text = await client.export_project(args.project_id, args.format)
    _write_output(text.encode("utf-8"), args.output)
    return 0


async def _cmd_subtitles(client: BeeyClient, args: argparse.Namespace) -> int:
    text = await client.export_subtitles(
        args.project_id, args.file_format, parse_options(args.option)
    )
    _write_output(text.encode("utf-8"), args.output)
    return 0


async def _cmd_trsx(client: BeeyClient, args: argparse.Namespace) -> int:
    _write_output(await client.get_trsx(args.project_id), args.output)
    return 0


async def _cmd_media(client: BeeyClient, args: argparse.Namespace) -> int:
    _write_output(await client.get_project_media_file(args.project_id), args.output)
    return 0


async def _cmd_formats(client: BeeyClient, args: argparse.Namespace) -> int:
    _print_json({
        "export": [asdict(f) for f in await client.get_export_project_formats()],
        "subtitles": [asdict(f) for f in await client.get_subtitle_export_formats()],
        "subtitle_variants": [asdict(v) for v in await client.get_subtitle_export_variants()],
    })
    return 0


async def _cmd_tags(client: BeeyClient, args: argparse.Namespace) -> int:
    for tag in await client.get_tags(args.project_id):
        print(tag)
    return 0


async def _cmd_tag(client: BeeyClient, args: argparse.Namespace) -> int:
    project = await client.get_project(args.project_id)
    if project is None:
        _status("Project {} not found.".format(args.project_id))
        return 1
    if args.remove:
        project = await client.delete_tag(project.id, args.tag, project.access_token)
    else:
        project = await client.add_tag(project.id, args.tag, project.access_token)
    for tag in project.tags:
        print(tag)
    return 0


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="beey",
        description="Manage Beey transcription projects from the terminal.",
    )
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("create", help="Create a project.")
    p.add_argument("name")
    p.add_argument("--path", help="Custom folder path inside Beey.")
    p.set_defaults(handler=_cmd_create)

    for name, handler, help_text in (
        ("show", _cmd_show, "Show a project and its processing state."),
        ("delete", _cmd_delete, "Delete a project."),
        ("tags", _cmd_tags, "List a project's tags."),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("project_id", type=int)
        p.set_defaults(handler=handler)

    p = sub.add_parser("upload", help="Upload a local file or relay a URL.")
    p.add_argument("project_id", type=int)
    p.add_argument("source", help="Local path or http(s) URL.")
    p.set_defaults(handler=_cmd_upload)

    p = sub.add_parser("enqueue", help="Start transcription.")
    p.add_argument("project_id", type=int)
    p.add_argument("--lang", help="Language code, e.g. en-US (default cs-CZ).")
    p.add_argument("--option", action="append", metavar="KEY=VALUE")
    p.set_defaults(handler=_cmd_enqueue)

    p = sub.add_parser("export", help="Export the transcript.")
    p.add_argument("project_id", type=int)
    p.add_argument("--format", default="txt", help="Export format id (default txt).")
    p.add_argument("-o", "--output")
    p.set_defaults(handler=_cmd_export)

    p = sub.add_parser("subtitles", help="Export subtitles.")
    p.add_argument("project_id", type=int)
    p.add_argument("file_format", help="Subtitle file format id, e.g. srt.")
    p.add_argument("--option", action="append", metavar="KEY=VALUE")
    p.add_argument("-o", "--output")
    p.set_defaults(handler=_cmd_subtitles)

    for name, handler, help_text in (
        ("trsx", _cmd_trsx, "Download the TRSX transcript."),
        ("media", _cmd_media, "Download the project's media file."),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("project_id", type=int)
        p.add_argument("-o", "--output")
        p.set_defaults(handler=handler)

    p = sub.add_parser("formats", help="List export formats and subtitle variants.")
    p.set_defaults(handler=_cmd_formats)

    p = sub.add_parser("tag", help="Add (or --remove) a project tag.")
    p.add_argument("project_id", type=int)
    p.add_argument("tag")
    p.add_argument("--remove", action="store_true")
    p.set_defaults(handler=_cmd_tag)

    return parser


async def _run(args: argparse.Namespace) -> int:
    async with BeeyClient() as client:
        return await args.handler(client, args)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return asyncio.run(_run(args))
    except argparse.ArgumentTypeError as exc:
        parser.error(str(exc))
    except (BeeyError, ValueError, OSError) as exc:
        _status("Error: {}".format(exc))
        return 1
    return 0
