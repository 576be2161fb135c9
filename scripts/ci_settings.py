#!/usr/bin/env python

#  This file and its contents are licensed under the Apache License 2.0.
#  Please see the included NOTICE for copyright information and
#  LICENSE-APACHE for a copy of the license.

# Common settings for our CI jobs
#
# Images are only published from the canonical repository, from the
# primary branch and from the primary runner platform.
#

CANONICAL_REPOSITORY = "postgis/docker-postgis"
PUBLISH_REF = "refs/heads/master"

PRIMARY_PLATFORM = "ubuntu-24.04"
ARM_PLATFORM = "ubuntu-24.04-arm"

# TAG_SUFFIX used for the images and caches built on each runner platform
PLATFORM_TAG_SUFFIX = {
    PRIMARY_PLATFORM: "-linux_amd64",
    ARM_PLATFORM: "-linux_arm64",
}

# PostGIS versions built from unreleased sources, their jobs are allowed
# to fail without failing the workflow
EXPERIMENTAL_POSTGIS = ["master"]
