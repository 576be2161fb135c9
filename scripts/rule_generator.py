#  This file and its contents are licensed under the Apache License 2.0.
#  Please see the included NOTICE for copyright information and
#  LICENSE-APACHE for a copy of the license.

# Generate the build/test/push operations for a set of BuildTargets.
#
# Every target gets its own chain build-<name> -> test-<name> -> push-<name>.
# Variants that are not selected simply have no operations, so nothing
# downstream can depend on them.

import os
from collections import namedtuple

import image_settings
from cache_keys import cache_arguments, cache_key, image_tag, latest_tag
from image_settings import DEFAULT_VARIANT

BUILD = "build"
TEST_PREPARE = "test-prepare"
TEST = "test"
TAG = "tag"
PUSH = "push"
PUSH_LATEST = "push-latest"

TEST_PREPARE_NAME = "test-prepare"
TAG_LATEST_NAME = "tag-latest"
PUSH_LATEST_NAME = "push-latest"

Operation = namedtuple(
    "Operation",
    ["name", "kind", "commands", "dependencies", "target", "creates", "env"],
    defaults=((), None, None, None),
)


def operation_name(kind, target):
    return f"{kind}-{target.name}"


def build_operation(target, config):
    tag = image_tag(config.repo_name, config.image_name, target)
    cache = cache_key(config.cache_root, config.repo_name, config.image_name, target)
    build = (
        [config.docker, "build", "--pull"]
        + config.platforms
        + cache_arguments(cache)
        + ["-t", tag, target.context(config.root)]
    )
    return Operation(
        name=operation_name(BUILD, target),
        kind=BUILD,
        commands=[build, [config.docker, "images", tag]],
        target=target,
    )


def test_prepare_operation(config):
    clone = config.offimg_local_clone
    return Operation(
        name=TEST_PREPARE_NAME,
        kind=TEST_PREPARE,
        commands=[[config.git, "clone", config.offimg_repo_url, clone]],
        creates=clone,
    )


def test_operation(target, config):
    clone = config.offimg_local_clone
    run = [
        os.path.join(clone, "test", "run.sh"),
        "-c",
        os.path.join(clone, "test", "config.sh"),
        "-c",
        os.path.join(config.root, image_settings.PROJECT_TEST_CONFIG),
        image_tag(config.repo_name, config.image_name, target),
    ]
    return Operation(
        name=operation_name(TEST, target),
        kind=TEST,
        commands=[run],
        dependencies=(TEST_PREPARE_NAME, operation_name(BUILD, target)),
        target=target,
    )


def push_operation(target, config):
    tag = image_tag(config.repo_name, config.image_name, target)
    return Operation(
        name=operation_name(PUSH, target),
        kind=PUSH,
        commands=[[config.docker, "image", "push", tag]],
        dependencies=(operation_name(TEST, target),),
        target=target,
    )


def find_latest_target(targets, config):
    """Return the default variant target of the designated latest version,
    or None when it is not part of this invocation."""
    for target in targets:
        if (
            target.version_tag == config.latest_version
            and target.variant == DEFAULT_VARIANT
        ):
            return target
    return None


def tag_latest_operation(latest, config):
    return Operation(
        name=TAG_LATEST_NAME,
        kind=TAG,
        commands=[
            [
                config.docker,
                "image",
                "tag",
                image_tag(config.repo_name, config.image_name, latest),
                latest_tag(config.repo_name, config.image_name),
            ]
        ],
        dependencies=(operation_name(BUILD, latest),),
        target=latest,
    )


def push_latest_operation(latest, config):
    workspace = os.path.abspath(config.root)
    # credentials go through the environment so they never show up in the
    # echoed command line
    describe = [
        config.docker,
        "run",
        "-v",
        f"{workspace}:/workspace",
        "-e",
        "DOCKERHUB_USERNAME",
        "-e",
        "DOCKERHUB_PASSWORD",
        "-e",
        "DOCKERHUB_REPOSITORY",
        "-e",
        f"README_FILEPATH=/workspace/{image_settings.README_FILE}",
        config.dockerhub_desc_img,
    ]
    return Operation(
        name=PUSH_LATEST_NAME,
        kind=PUSH_LATEST,
        commands=[
            [
                config.docker,
                "image",
                "push",
                latest_tag(config.repo_name, config.image_name),
            ],
            describe,
        ],
        dependencies=(TAG_LATEST_NAME, operation_name(PUSH, latest)),
        target=latest,
        env={
            "DOCKERHUB_USERNAME": config.dockerhub_username,
            "DOCKERHUB_PASSWORD": config.dockerhub_access_token,
            "DOCKERHUB_REPOSITORY": config.repository,
        },
    )


def generate_rules(targets, config):
    """Return the list of operations for the targets, in the order build,
    test, push per target, followed by the latest tag rules when the
    designated latest version is among the targets."""
    operations = [test_prepare_operation(config)]
    for target in targets:
        operations.append(build_operation(target, config))
        operations.append(test_operation(target, config))
        operations.append(push_operation(target, config))

    latest = find_latest_target(targets, config)
    if latest is not None:
        operations.append(tag_latest_operation(latest, config))
        operations.append(push_latest_operation(latest, config))
    return operations
