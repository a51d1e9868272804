#!/usr/bin/env python3
"""
Command-line interface for the LakayAlert incident feed.

Usage:
    python -m lakay_alert feed                      # Show the ranked feed once
    python -m lakay_alert watch                     # Keep polling and reprinting the feed
    python -m lakay_alert show <incident_id>        # Show one incident
    python -m lakay_alert report --type ROBBERY --severity HIGH --media photo.jpg
    python -m lakay_alert vote <incident_id> up     # Upvote (or "down")
    python -m lakay_alert serve --port 8000         # Run the HTTP API
"""

import argparse
import asyncio
import logging
import mimetypes
import sys
from pathlib import Path
from typing import Optional

from .config import FeedSettings, load_settings
from .errors import LocationError, StoreError
from .feed import FeedController, build_view
from .models import IncidentCreate, IncidentType, MediaPayload, Severity, VoteDirection
from .sources import ReverseGeocoder, locate_submission

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def format_incident(view) -> str:
    distance = f"{view.distance_km:.1f} km" if view.distance_km is not None else "-"
    zone = view.location.zone if view.location else "No location"
    media = f"  [{view.media_count} media]" if view.media_count else ""
    verified = " (verified)" if view.verified else ""
    return (
        f"{view.severity.value:<9} {view.category_label:<17} {zone:<24} {distance:>10}"
        f"  +{view.upvotes}/-{view.downvotes}{media}{verified}  {view.id}"
    )


def print_feed(controller: FeedController):
    if controller.feed_unavailable:
        print(f"! Feed unavailable, showing last known data ({controller.last_error})")

    incidents = controller.current_feed()
    if not incidents:
        print("No incidents reported.")
        return

    reference = controller.reference_location
    print(f"Recent incidents near ({reference.lat:.4f}, {reference.lng:.4f}):" if reference else "Recent incidents:")
    for incident in incidents:
        print("  " + format_incident(build_view(incident, reference)))


async def cmd_feed(args, settings: FeedSettings) -> int:
    """Show the ranked feed once."""
    controller = FeedController.from_settings(settings)
    try:
        await controller.start(poll=False)
        print_feed(controller)
        return 1 if controller.feed_unavailable and not controller.current_feed() else 0
    finally:
        await controller.aclose()


async def cmd_watch(args, settings: FeedSettings) -> int:
    """Poll the store and reprint the feed after every refresh."""
    controller = FeedController.from_settings(settings)
    try:
        await controller.start(poll=False)
        print_feed(controller)
        while True:
            await asyncio.sleep(controller.refresh_interval)
            await controller.refresh()
            print()
            print_feed(controller)
    finally:
        await controller.aclose()


async def cmd_show(args, settings: FeedSettings) -> int:
    """Show one incident in detail."""
    controller = FeedController.from_settings(settings)
    try:
        await controller.start(poll=False)
        incident = controller.get_incident(args.incident_id)
        if incident is None:
            print("Incident Not Found")
            return 1

        view = build_view(incident, controller.reference_location)
        print(f"{view.category_label} [{view.severity.value}]")
        print(f"  Reported: {view.created_at.isoformat()}")
        print(f"  Zone:     {view.location.zone}")
        if view.distance_km is not None:
            print(f"  Distance: {view.distance_km:.1f} km")
        if view.description:
            print(f"  {view.description}")
        for item in view.media:
            print(f"  {item.type.value}: {item.url}")
        print(f"  Votes:    +{view.upvotes} / -{view.downvotes}")
        return 0
    finally:
        await controller.aclose()


def _load_media(paths) -> list:
    media = []
    for filepath in paths or []:
        path = Path(filepath)
        content_type, _ = mimetypes.guess_type(path.name)
        media.append(MediaPayload(
            filename=path.name,
            content_type=content_type or "application/octet-stream",
            data=path.read_bytes(),
        ))
    return media


async def cmd_report(args, settings: FeedSettings) -> int:
    """Submit a new incident report from the current position."""
    try:
        media = _load_media(args.media)
    except (OSError, ValueError) as e:
        print(f"Invalid media: {e}")
        return 1

    controller = FeedController.from_settings(settings)
    geocoder = ReverseGeocoder(settings.geocoder_url, settings.user_agent, timeout=settings.request_timeout)
    try:
        try:
            location = await locate_submission(controller.geolocation, geocoder)
        except LocationError as e:
            print(f"Unable to retrieve your location ({e})")
            return 1
        print(f"Location detected: {location.zone}")

        draft = IncidentCreate(
            incident_type=IncidentType(args.type),
            severity=Severity(args.severity),
            description=args.description,
            location=location,
            anonymous=args.anonymous,
            media=media,
        )
        try:
            incident = await controller.submit_incident(draft)
        except StoreError as e:
            print(f"Failed to create incident: {e}")
            return 1
        print(f"Reported incident {incident.id}")
        return 0
    finally:
        await controller.aclose()


async def cmd_vote(args, settings: FeedSettings) -> int:
    """Upvote or downvote an incident."""
    direction = VoteDirection.UPVOTE if args.direction == "up" else VoteDirection.DOWNVOTE
    controller = FeedController.from_settings(settings)
    try:
        try:
            await controller.vote(args.incident_id, direction)
        except StoreError as e:
            print(f"Error updating votes: {e}")
            return 1
        incident = controller.cache.lookup(args.incident_id)
        if incident is not None:
            print(f"Votes: +{incident.upvotes} / -{incident.downvotes}")
        else:
            print(f"Recorded {direction.value}")
        return 0
    finally:
        await controller.aclose()


def cmd_serve(args, settings: FeedSettings) -> int:
    """Run the HTTP API."""
    import uvicorn
    from .api import create_app

    app = create_app(FeedController.from_settings(settings))
    uvicorn.run(app, host=args.host, port=args.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="LakayAlert incident feed client",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument("--env-file", help="Load settings from this .env file")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("feed", help="Show the ranked incident feed")
    subparsers.add_parser("watch", help="Poll and reprint the feed")

    show_parser = subparsers.add_parser("show", help="Show one incident")
    show_parser.add_argument("incident_id")

    report_parser = subparsers.add_parser("report", help="Report a new incident")
    report_parser.add_argument("--type", required=True, choices=[t.value for t in IncidentType])
    report_parser.add_argument("--severity", required=True, choices=[s.value for s in Severity])
    report_parser.add_argument("--description", help="Details about the incident")
    report_parser.add_argument("--anonymous", action="store_true", help="Report anonymously")
    report_parser.add_argument("--media", nargs="*", help="Image or video files to attach")

    vote_parser = subparsers.add_parser("vote", help="Vote on an incident")
    vote_parser.add_argument("incident_id")
    vote_parser.add_argument("direction", choices=["up", "down"])

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser


ASYNC_COMMANDS = {
    "feed": cmd_feed,
    "watch": cmd_watch,
    "show": cmd_show,
    "report": cmd_report,
    "vote": cmd_vote,
}


def main(argv: Optional[list] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    setup_logging(args.verbose)
    settings = load_settings(args.env_file)

    if args.command == "serve":
        return cmd_serve(args, settings)

    try:
        return asyncio.run(ASYNC_COMMANDS[args.command](args, settings))
    except KeyboardInterrupt:
        return 0


if __name__ == "__main__":
    sys.exit(main())
