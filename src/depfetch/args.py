"""Argument parsing functionality for depfetch."""

import argparse

from depfetch.coordinates import ScopeType


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="depfetch",
        description="depfetch - resolve Maven coordinates into local artifact files",
        add_help=True,
    )

    parser.add_argument("coordinates",
                        metavar="COORDINATE",
                        nargs="+",
                        help="Coordinate in groupId:artifactId[:packaging[:classifier]]:version form")
    parser.add_argument("--without-transitivity",
                        dest="WITHOUT_TRANSITIVITY",
                        help="Resolve only the given coordinates, not their dependencies",
                        action="store_true")
    parser.add_argument("--scope",
                        dest="SCOPES",
                        help="Only keep dependencies in this scope (repeatable)",
                        action="append",
                        type=str.lower,
                        choices=[s.value for s in ScopeType],
                        default=[])
    parser.add_argument("--reject",
                        dest="REJECT",
                        help="Drop groupId:artifactId from the result (repeatable)",
                        action="append",
                        type=str,
                        default=[])
    parser.add_argument("--manage",
                        dest="MANAGED",
                        help="Pin a version through dependency management, e.g. g:a:1.0 (repeatable)",
                        action="append",
                        type=str,
                        default=[])
    parser.add_argument("--repo",
                        dest="REPOS",
                        help="Additional remote repository as ID=URL (repeatable)",
                        action="append",
                        type=str,
                        default=[])
    parser.add_argument("--no-central",
                        dest="NO_CENTRAL",
                        help="Do not use Maven Central",
                        action="store_true")
    parser.add_argument("--no-classpath",
                        dest="NO_CLASSPATH",
                        help="Do not resolve artifacts from workspace projects",
                        action="store_true")
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to a YAML or JSON settings file",
                        action="store",
                        type=str)
    parser.add_argument("-f", "--format",
                        dest="OUTPUT_FORMAT",
                        help="Output format: one path per line, or a JSON list (default: paths)",
                        action="store",
                        type=str.lower,
                        choices=["paths", "json"],
                        default="paths")
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        default="WARNING")

    return parser.parse_args(argv)
