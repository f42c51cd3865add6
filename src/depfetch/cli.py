"""Command line entry point."""
from __future__ import annotations

import json
import logging
import sys

from depfetch import resolver
from depfetch.args import parse_args
from depfetch.common.logging_utils import configure_logging, extra_context, is_debug_enabled
from depfetch.config import load_settings
from depfetch.constants import ExitCodes
from depfetch.coordinates import ScopeType
from depfetch.errors import InvalidArgumentError, MaterializationError, ResolutionFailedError
from depfetch.strategy import NON_TRANSITIVE, TRANSITIVE, accept_scopes, combined, reject_dependencies

logger = logging.getLogger(__name__)


def build_strategy(args):
    """Combine the strategies requested on the command line."""
    strategies = [NON_TRANSITIVE if args.WITHOUT_TRANSITIVITY else TRANSITIVE]
    if args.SCOPES:
        strategies.append(accept_scopes(*(ScopeType.from_string(s) for s in args.SCOPES)))
    if args.REJECT:
        strategies.append(reject_dependencies(*args.REJECT))
    return strategies[0] if len(strategies) == 1 else combined(*strategies)


def run(args) -> int:
    """Resolve and print; return the exit code."""
    settings = load_settings(args.CONFIG)
    stage = resolver(settings=settings)
    for repo in args.REPOS:
        repo_id, sep, url = repo.partition("=")
        if not sep:
            raise InvalidArgumentError(f"Repository '{repo}' must be given as ID=URL")
        stage.with_remote_repo(repo_id.strip(), url.strip())
    for managed in args.MANAGED:
        stage.add_dependency_management(managed)
    stage.with_maven_central_repo(not args.NO_CENTRAL)
    stage.with_classpath_resolution(not args.NO_CLASSPATH)

    artifacts = stage.resolve(*args.coordinates).using(build_strategy(args)).as_resolved_artifact()

    if args.OUTPUT_FORMAT == "json":
        payload = [
            {
                "coordinate": str(a.coordinate),
                "version": a.resolved_version,
                "snapshot": a.snapshot_version,
                "file": str(a.file),
                "dependencies": [str(c) for c in a.dependencies],
            }
            for a in artifacts
        ]
        print(json.dumps(payload, indent=2))
    else:
        for artifact in artifacts:
            print(artifact.file)
    return ExitCodes.SUCCESS.value


def main(argv=None) -> int:
    """Main function of the program."""
    args = parse_args(argv)
    configure_logging(args.LOG_LEVEL)
    if is_debug_enabled(logger):
        logger.debug("CLI start", extra=extra_context(event="function_entry", component="cli", action="main"))
    try:
        return run(args)
    except InvalidArgumentError as exc:
        logging.error("%s", exc)
        return ExitCodes.FILE_ERROR.value
    except ResolutionFailedError as exc:
        logging.error("%s", exc)
        return ExitCodes.RESOLUTION_ERROR.value
    except MaterializationError as exc:
        logging.error("%s", exc)
        return ExitCodes.MATERIALIZATION_ERROR.value


if __name__ == "__main__":
    sys.exit(main())
