#!/usr/bin/env python

#  This file and its contents are licensed under the Apache License 2.0.
#  Please see the included NOTICE for copyright information and
#  LICENSE-APACHE for a copy of the license.

# Common settings for building the container images
#
# LATEST_VERSION is the version that gets the "latest" tag when pushing
# the default variant
#

LATEST_VERSION = "17-3.5"

# The repository and image names default to the official ones but can be
# overridden via environment variables, see image_config.py
REPO_NAME = "postgis"
IMAGE_NAME_BASE = "postgis"
IMAGE_NAME_PREFIX = ""
IMAGE_NAME_SUFFIX = ""

EXTERNAL_CACHE_DIR_NAME = "external-cache"

DEFAULT_VARIANT = "default"
ALPINE_VARIANT = "alpine"
VARIANTS = [DEFAULT_VARIANT, ALPINE_VARIANT]

# every version directory holds one of these, the alpine variant lives in
# an "alpine" subdirectory of the version directory
BUILD_DEFINITION = "Dockerfile"

DOCKER = "docker"
DOCKERHUB_DESC_IMG = "peterevans/dockerhub-description:latest"
UPDATE_IMAGE = "buildpack-deps"
UPDATE_SCRIPT = "./update.sh"
BINFMT_IMAGE = "tonistiigi/binfmt"
LIBRARYTEST_IMAGE = "librarytest/postgres-initdb"
README_FILE = "README.md"

GIT = "git"
OFFIMG_LOCAL_CLONE = "~/official-images"
OFFIMG_REPO_URL = "https://github.com/docker-library/official-images.git"
PROJECT_TEST_CONFIG = "test/postgis-config.sh"
