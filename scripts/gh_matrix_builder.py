#!/usr/bin/env python

#  This file and its contents are licensed under the Apache License 2.0.
#  Please see the included NOTICE for copyright information and
#  LICENSE-APACHE for a copy of the license.

# Python script to dynamically generate matrix for github action

# The matrix follows the version directories in the repository so that
# adding or removing a directory is all it takes to change what CI builds.
# Every entry is one (version, variant, runner platform) job which then
# runs `image_make.py test` with VERSION, VARIANT and TAG_SUFFIX set.

import json
import os
import sys

from ci_settings import (
    ARM_PLATFORM,
    CANONICAL_REPOSITORY,
    EXPERIMENTAL_POSTGIS,
    PLATFORM_TAG_SUFFIX,
    PRIMARY_PLATFORM,
)
from version_selector import select_targets


def split_version(version_tag):
    """Split a version directory name like 17-3.5 into the postgres and
    postgis versions."""
    postgres, _, postgis = version_tag.partition("-")
    return postgres, postgis


def is_experimental(postgis):
    return postgis in EXPERIMENTAL_POSTGIS


# The ARM runner is only available in the postgis/docker-postgis
# repository, and we don't spend it on pull requests.
def runner_platforms(event_type, repository):
    platforms = [PRIMARY_PLATFORM]
    if repository == CANONICAL_REPOSITORY and event_type != "pull_request":
        platforms.append(ARM_PLATFORM)
    return platforms


def matrix_entry(target, platform):
    postgres, postgis = split_version(target.version_tag)
    return {
        "postgres": postgres,
        "postgis": postgis,
        "variant": target.variant,
        "version": target.version_tag,
        "runner-platform": platform,
        "tag_suffix": PLATFORM_TAG_SUFFIX[platform],
        "experimental": is_experimental(postgis),
    }


def build_matrix(root, event_type, repository=None):
    m = {"include": []}
    for platform in runner_platforms(event_type, repository):
        for target in select_targets(root):
            m["include"].append(matrix_entry(target, platform))
    return m


def main(argv=None):
    argv = sys.argv if argv is None else argv
    if len(argv) < 2:
        sys.exit(f"usage: {argv[0]} <event_type> [root]")

    # github event type which is either push, pull_request or schedule
    event_type = argv[1]
    root = argv[2] if len(argv) > 2 else "."

    m = build_matrix(root, event_type, os.environ.get("GITHUB_REPOSITORY"))
    if not m["include"]:
        print(f"no build definitions found in {os.path.abspath(root)}", file=sys.stderr)
        sys.exit(1)

    # generate command to set github action variable
    with open(os.environ["GITHUB_OUTPUT"], "a", encoding="utf-8") as output:
        print(str.format("matrix={0}", json.dumps(m)), file=output)


if __name__ == "__main__":
    main()
