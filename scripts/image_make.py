#!/usr/bin/env python

#  This file and its contents are licensed under the Apache License 2.0.
#  Please see the included NOTICE for copyright information and
#  LICENSE-APACHE for a copy of the license.

# Build, test, tag and push the PostGIS container images.
#
# Usage mirrors make: goals plus KEY=VALUE parameters, e.g.
#
#   image_make.py build VERSION=17-3.5 VARIANT=alpine
#   TAG_SUFFIX=-linux_amd64 image_make.py test
#   image_make.py push
#
# Without VERSION every directory holding a Dockerfile is processed.

import argparse
import functools
import os
import subprocess
import sys

from more_itertools import unique_everseen

import diagnostics
import image_settings
from cache_keys import image_tag
from dependency_graph import build_graph
from executor import run_command, run_goals
from image_config import ImageConfig, parse_assignments
from version_selector import TargetNotFound, select_targets


def update_sources(config, runner=run_command):
    workdir = os.path.abspath(config.root)
    runner(
        [
            config.docker,
            "run",
            "--rm",
            "-v",
            f"{workdir}:/work",
            "-w",
            "/work",
            image_settings.UPDATE_IMAGE,
            image_settings.UPDATE_SCRIPT,
        ]
    )


# Goals that run on their own, outside of the dependency graph.
# Each one is called with the configuration, the command runner and
# whether this is a dry run.
STANDALONE_GOALS = {
    "update": lambda c, r, n: update_sources(c, r),
    "binfmt": lambda c, r, n: diagnostics.binfmt(c, r),
    "image-list-postgis": lambda c, r, n: diagnostics.list_images(
        c, c.repository, runner=r
    ),
    "image-list-postgis-full": lambda c, r, n: diagnostics.list_images(
        c, c.repository, full=True, runner=r
    ),
    "image-remove-postgis": lambda c, r, n: diagnostics.remove_images(
        c, c.repository, runner=r, dry_run=n
    ),
    "image-list-librarytest-postgres-initdb": lambda c, r, n: diagnostics.list_images(
        c, image_settings.LIBRARYTEST_IMAGE, runner=r
    ),
    "image-list-librarytest-postgres-initdb-full": lambda c, r, n: diagnostics.list_images(
        c, image_settings.LIBRARYTEST_IMAGE, full=True, runner=r
    ),
    "image-remove-librarytest-postgres-initdb": lambda c, r, n: diagnostics.remove_images(
        c, image_settings.LIBRARYTEST_IMAGE, runner=r, dry_run=n
    ),
    "image-prune": lambda c, r, n: r([c.docker, "image", "prune", "-f"]),
    "buildx-prune": lambda c, r, n: r([c.docker, "buildx", "prune", "-f"]),
    "buildx-du": lambda c, r, n: r([c.docker, "buildx", "du"]),
    "buildx-inspect": lambda c, r, n: r([c.docker, "buildx", "inspect"]),
    "external-cache-remove": lambda c, r, n: diagnostics.external_cache_remove(
        c, dry_run=n
    ),
    "external-cache-du": lambda c, r, n: diagnostics.external_cache_du(c, dry_run=n),
    "diskfree": lambda c, r, n: diagnostics.diskfree(dry_run=n),
    "diskfree-local": lambda c, r, n: diagnostics.diskfree(c.root, dry_run=n),
}

ALL_GOALS = ["update", "build", "test"]


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Build, test and publish the PostGIS container images."
    )
    parser.add_argument(
        "goals",
        nargs="*",
        help="goals to run (default: build) and KEY=VALUE parameters, "
        "e.g. VERSION=17-3.5 VARIANT=alpine",
    )
    parser.add_argument(
        "-C",
        "--directory",
        default=".",
        help="directory holding the version directories",
    )
    parser.add_argument(
        "-j", "--jobs", type=int, default=1, help="operations to run at once"
    )
    parser.add_argument(
        "-k",
        "--keep-going",
        action="store_true",
        help="keep running independent targets after a failure",
    )
    parser.add_argument(
        "-n", "--dry-run", action="store_true", help="print the commands only"
    )
    parser.add_argument(
        "--list", action="store_true", help="print the selected targets and exit"
    )
    return parser.parse_args(argv)


def expand_goals(goals):
    """Expand `all` and drop repeated goals, each goal runs at most once."""
    expanded = []
    for goal in goals or ["build"]:
        if goal == "all":
            expanded.extend(ALL_GOALS)
        else:
            expanded.append(goal)
    return list(unique_everseen(expanded))


def batch_goals(goals):
    """Group consecutive graph goals so that `build test` builds only once."""
    batches = []
    for goal in goals:
        standalone = goal in STANDALONE_GOALS
        if batches and not standalone and not batches[-1][0]:
            batches[-1][1].append(goal)
        else:
            batches.append((standalone, [goal]))
    return batches


def print_targets(targets, config):
    for target in targets:
        print(f"{target.name}\t{image_tag(config.repo_name, config.image_name, target)}")


def main(argv=None, environ=None):
    args = parse_args(argv)

    try:
        goals, overrides = parse_assignments(args.goals)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    config = ImageConfig.from_environ(environ, overrides, root=args.directory)
    if config.variant and config.variant not in image_settings.VARIANTS:
        print(
            f"Error: unknown VARIANT '{config.variant}', "
            f"expected one of {', '.join(image_settings.VARIANTS)}",
            file=sys.stderr,
        )
        return 1

    runner = run_command
    if args.dry_run:
        runner = functools.partial(run_command, dry_run=True)

    goals = expand_goals(goals)
    graph = None
    targets = None
    if args.list or any(goal not in STANDALONE_GOALS for goal in goals):
        try:
            targets = select_targets(
                config.root, config.version, config.variant, config.tag_suffix
            )
        except TargetNotFound as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        graph = build_graph(targets, config)

    if args.list:
        print_targets(targets, config)
        return 0

    for standalone, batch in batch_goals(goals):
        if standalone:
            try:
                STANDALONE_GOALS[batch[0]](config, runner, args.dry_run)
            except (subprocess.CalledProcessError, OSError) as e:
                print(f"*** {batch[0]} failed: {e}", file=sys.stderr)
                return 1
            continue

        runnable = []
        for goal in batch:
            try:
                names = graph.resolve(goal)
            except KeyError:
                print(f"Error: no rule to make target '{goal}'", file=sys.stderr)
                return 1
            if not names:
                print(f"Nothing to be done for '{goal}'.")
                continue
            runnable.append(goal)
        if not runnable:
            continue

        result = run_goals(
            graph, runnable, runner=runner, jobs=args.jobs, keep_going=args.keep_going
        )
        if not result.ok:
            print(
                f"Failed: {', '.join(result.failed)}"
                + (f"; not run: {', '.join(result.skipped)}" if result.skipped else ""),
                file=sys.stderr,
            )
            return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
