# Main script to fetch directions, cache them locally and show the cached routes.

import argparse
import os
import re
import sys

from dotenv import load_dotenv

import logging_config
from api_adapters import TRAVEL_MODES, ApiAdapter, GoogleMapsAdapter
from response_parser import parse_cities, parse_routes, parse_status
from route_store import RouteStore, StorageError
from route_structures import Route

KILOMETER = 1000
TAG_RE = re.compile(r"<[^>]+>")


def format_duration(seconds: int) -> str:
    """Converts seconds into a readable 'X d Y h ZZ min', 'Y h ZZ min' or 'ZZ min' format."""
    minutes = round(seconds / 60)
    days, minutes = divmod(minutes, 24 * 60)
    hours, minutes = divmod(minutes, 60)
    if days:
        return f"{days} d {hours} h {minutes:02d} min"
    if hours:
        return f"{hours} h {minutes:02d} min"
    return f"{minutes} min"


def format_distance(meters: int) -> str:
    """Shows kilometers above one kilometer, meters otherwise."""
    if meters > KILOMETER:
        return f"{meters / KILOMETER:.1f} km"
    return f"{meters} m"


def plain_text(instructions: str) -> str:
    """Drops the HTML markup the directions service puts into step instructions."""
    return " ".join(TAG_RE.sub(" ", instructions).split())


# --- Core Logic ---

def fetch_routes(api_adapter: ApiAdapter, store: RouteStore, origin: str, destination: str,
                 travel_mode: str = "driving") -> list[Route]:
    """
    Requests directions and, when the service reports success, replaces the
    cached routes with the new ones. Returns the routes that were cached.
    """
    response = api_adapter.request_directions(origin, destination, travel_mode)

    status = parse_status(response)
    if status is None:
        print("\nThe directions service returned an unreadable response.")
        return []
    if not status.success:
        print(f"\nThe directions service reported: {status.kind.value}")
        return []

    routes = parse_routes(response)
    if not routes:
        print("\nNo routes were found in the response. The cache was left untouched.")
        return []

    store.replace_all(routes)
    return routes


def display_routes(routes: list, show_steps: bool = False):
    """Formats and prints the routes table, optionally followed by each route's steps."""
    if not routes:
        print("\nNo cached routes.")
        return

    header = "| #  | Distance   | Duration     | Summary                        |"
    divider = "-" * len(header)
    print(header)
    print(divider)
    for number, route in enumerate(routes, start=1):
        print(f"| {number:<2} | "
              f"{format_distance(route.distance):<10} | "
              f"{format_duration(route.duration):<12} | "
              f"{route.details.summary[:30]:<30} |")
    print(divider)

    for number, route in enumerate(routes, start=1):
        print(f"\nRoute {number}: {route.start_address} -> {route.end_address}")
        if route.details.warnings:
            for warning in route.details.warnings.splitlines():
                print(f"   ! {warning}")
        if route.details.copyrights:
            print(f"   {route.details.copyrights}")
        if show_steps:
            for step_number, step in enumerate(route.steps, start=1):
                print(f"   {step_number:>3}. {plain_text(step.instructions)} "
                      f"({format_distance(step.distance)}, {format_duration(step.duration)})")


def display_cities(cities: list):
    if not cities:
        print("\nNo matching places.")
        return
    for city in cities:
        print(f"{city.description}  [{city.id}]")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Route Cache: fetch directions once, read them back any time.")
    parser.add_argument('--db', default=os.getenv("ROUTE_CACHE_DB", "routes.db"),
                        help="Path of the route database file.")
    parser.add_argument('-v', '--verbose', action='store_true',
                        help="Enable verbose mode to see the exact API calls being made.")
    commands = parser.add_subparsers(dest='command', required=True)

    fetch = commands.add_parser('fetch', help="Request directions and cache them.")
    fetch.add_argument('origin')
    fetch.add_argument('destination')
    fetch.add_argument('--mode', choices=TRAVEL_MODES, default='driving')

    show = commands.add_parser('show', help="Print the cached routes.")
    show.add_argument('--id', type=int, dest='route_id',
                      help="Only show the route with this id.")
    show.add_argument('--steps', action='store_true', help="Also print every step.")

    cities = commands.add_parser('cities', help="Autocomplete a place name.")
    cities.add_argument('text')

    commands.add_parser('clear', help="Remove every cached route.")
    return parser


def main(argv=None, api_adapter: ApiAdapter | None = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    logging_config.configure(verbose=args.verbose)

    if args.command in ('fetch', 'cities') and api_adapter is None:
        try:
            api_adapter = GoogleMapsAdapter(verbose=args.verbose)
        except ValueError as e:
            print(e)
            return 1

    if args.command == 'cities':
        display_cities(parse_cities(api_adapter.request_cities(args.text)))
        return 0

    try:
        with RouteStore(args.db) as store:
            if args.command == 'fetch':
                print(f"Requesting {args.mode} directions from '{args.origin}' to '{args.destination}'...")
                routes = fetch_routes(api_adapter, store, args.origin, args.destination, args.mode)
                if not routes:
                    return 1
                print(f"Cached {len(routes)} route(s) in {args.db}.\n")
                display_routes(routes)
            elif args.command == 'show':
                if args.route_id is not None:
                    route = store.get_route(args.route_id)
                    if route is None:
                        print(f"No cached route with id {args.route_id}.")
                        return 1
                    display_routes([route], show_steps=args.steps)
                else:
                    display_routes(store.get_all_routes(), show_steps=args.steps)
            elif args.command == 'clear':
                if not store.delete_all():
                    print("Could not clear the route cache.")
                    return 1
                print("Route cache cleared.")
    except StorageError as e:
        print(f"FATAL ERROR: {e}")
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
