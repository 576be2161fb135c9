#!/usr/bin/env python

#  This file and its contents are licensed under the Apache License 2.0.
#  Please see the included NOTICE for copyright information and
#  LICENSE-APACHE for a copy of the license.

# Decide whether a CI job may log in to the registry and push images.
#
# Reads GITHUB_EVENT_NAME, GITHUB_REF, GITHUB_REPOSITORY and RUNNER_PLATFORM
# (the runner-platform of the matrix entry) and sets the `login` and `push`
# github action outputs.

import json
import os

from ci_settings import CANONICAL_REPOSITORY, PRIMARY_PLATFORM, PUBLISH_REF


def should_login(event_name, ref, repository):
    return (
        event_name != "pull_request"
        and ref == PUBLISH_REF
        and repository == CANONICAL_REPOSITORY
    )


# Only the images built on the primary x86 runner are pushed for now,
# never the ones from the arm runners.
def should_push(event_name, ref, repository, runner_platform):
    return (
        should_login(event_name, ref, repository)
        and runner_platform == PRIMARY_PLATFORM
    )


def gate_outputs(environ):
    event_name = environ.get("GITHUB_EVENT_NAME", "")
    ref = environ.get("GITHUB_REF", "")
    repository = environ.get("GITHUB_REPOSITORY", "")
    # a job that does not say where it ran never pushes
    runner_platform = environ.get("RUNNER_PLATFORM", "")
    return {
        "login": should_login(event_name, ref, repository),
        "push": should_push(event_name, ref, repository, runner_platform),
    }


def main():
    outputs = gate_outputs(os.environ)
    # generate commands to set github action variables
    with open(os.environ["GITHUB_OUTPUT"], "a", encoding="utf-8") as output:
        for key, value in outputs.items():
            print(str.format("{0}={1}", key, json.dumps(value)), file=output)


if __name__ == "__main__":
    main()
