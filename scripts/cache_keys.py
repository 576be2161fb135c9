#  This file and its contents are licensed under the Apache License 2.0.
#  Please see the included NOTICE for copyright information and
#  LICENSE-APACHE for a copy of the license.

# Cache paths and image tags of a BuildTarget. The variant and the platform
# suffix are always appended in the same order so no two targets share a
# cache directory or a tag.

import os


def target_suffix(target):
    return f"{target.name}{target.platform_suffix or ''}"


def cache_key(cache_root, repo_name, image_name, target):
    return os.path.join(cache_root, repo_name, image_name, target_suffix(target))


def image_tag(repo_name, image_name, target):
    return f"{repo_name}/{image_name}:{target_suffix(target)}"


def latest_tag(repo_name, image_name):
    return f"{repo_name}/{image_name}:latest"


def cache_arguments(path):
    # The cache is read from and written back to the same place, mode=max
    # exports every layer and not only the final image.
    return [
        "--cache-from",
        f"type=local,src={path}",
        "--cache-to",
        f"type=local,mode=max,dest={path}",
    ]
