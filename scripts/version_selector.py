#  This file and its contents are licensed under the Apache License 2.0.
#  Please see the included NOTICE for copyright information and
#  LICENSE-APACHE for a copy of the license.

# Work out which versions and variants an invocation processes.
#
# A version is a directory holding a Dockerfile, e.g. 17-3.5/Dockerfile.
# The alpine variant of that version lives in 17-3.5/alpine/.

import os
from collections import namedtuple

from image_settings import ALPINE_VARIANT, BUILD_DEFINITION, DEFAULT_VARIANT


class TargetNotFound(LookupError):
    """An explicitly requested version has no build definition."""

    def __init__(self, version, root):
        self.version = version
        self.root = root
        super().__init__(
            f"no {BUILD_DEFINITION} found for version '{version}' in {os.path.abspath(root)}"
        )


VariantFlags = namedtuple("VariantFlags", ["build_default", "build_alpine"])


class BuildTarget(
    namedtuple(
        "BuildTarget",
        ["version_tag", "variant", "has_variant_dir", "platform_suffix"],
    )
):
    __slots__ = ()

    @property
    def is_alpine(self):
        return self.variant == ALPINE_VARIANT

    @property
    def name(self):
        if self.is_alpine:
            return f"{self.version_tag}-{ALPINE_VARIANT}"
        return self.version_tag

    def context(self, root="."):
        if self.is_alpine:
            return os.path.join(root, self.version_tag, ALPINE_VARIANT)
        return os.path.join(root, self.version_tag)


def resolve_variant_flags(requested_version, requested_variant, has_alpine_dir):
    # Without a version everything is processed and the variant is ignored,
    # the alpine directory is then checked per version by the caller.
    if not requested_version:
        return VariantFlags(True, bool(has_alpine_dir))

    build_default = True
    build_alpine = True
    if requested_variant:
        build_default = requested_variant == DEFAULT_VARIANT
        build_alpine = requested_variant == ALPINE_VARIANT

    # can only turn alpine off, never on
    if not has_alpine_dir:
        build_alpine = False

    return VariantFlags(build_default, build_alpine)


def has_build_definition(root, version):
    return os.path.isfile(os.path.join(root, version, BUILD_DEFINITION))


def has_variant_dir(root, version, variant=ALPINE_VARIANT):
    return os.path.isdir(os.path.join(root, version, variant))


def discover_versions(root="."):
    """Return every subdirectory of root that holds a build definition,
    sorted so that the order is stable between runs."""
    if not os.path.isdir(root):
        return []
    return [
        entry for entry in sorted(os.listdir(root)) if has_build_definition(root, entry)
    ]


def select_targets(root=".", version=None, variant=None, platform_suffix=""):
    """Return the BuildTargets to process for the given version/variant
    request. Raises TargetNotFound when an explicitly requested version
    has no build definition."""
    if version:
        if not has_build_definition(root, version):
            raise TargetNotFound(version, root)
        versions = [version]
    else:
        versions = discover_versions(root)

    targets = []
    for version_tag in versions:
        alpine_dir = has_variant_dir(root, version_tag)
        flags = resolve_variant_flags(version, variant, alpine_dir)
        if flags.build_default:
            targets.append(
                BuildTarget(version_tag, DEFAULT_VARIANT, alpine_dir, platform_suffix)
            )
        if flags.build_alpine:
            targets.append(
                BuildTarget(version_tag, ALPINE_VARIANT, True, platform_suffix)
            )
    return targets
