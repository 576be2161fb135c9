#  This file and its contents are licensed under the Apache License 2.0.
#  Please see the included NOTICE for copyright information and
#  LICENSE-APACHE for a copy of the license.

# Configuration for a single invocation, taken from environment variables
# and make-style KEY=VALUE command line arguments

import os

import image_settings

# keys accepted as KEY=VALUE arguments, they map to the environment
# variables of the same name
KNOWN_KEYS = {
    "VERSION",
    "VARIANT",
    "REPO_NAME",
    "IMAGE_NAME_BASE",
    "IMAGE_NAME_PREFIX",
    "IMAGE_NAME_SUFFIX",
    "IMAGE_NAME",
    "TAG_SUFFIX",
    "EXTERNAL_CACHE_DIR_NAME",
    "PLATFORMS",
    "DOCKER",
    "GIT",
    "OFFIMG_LOCAL_CLONE",
    "DOCKERHUB_USERNAME",
    "DOCKERHUB_ACCESS_TOKEN",
}


def parse_assignments(args):
    """Split command line arguments into goals and KEY=VALUE overrides.
    Keys are case-insensitive, unknown keys raise ValueError."""
    goals = []
    overrides = {}
    for arg in args:
        if "=" not in arg:
            goals.append(arg)
            continue
        key, value = arg.split("=", 1)
        key = key.strip().upper()
        if key not in KNOWN_KEYS:
            raise ValueError(f"unknown parameter '{key}' in '{arg}'")
        overrides[key] = value
    return goals, overrides


class ImageConfig:
    """Parameters shared by every rule of one invocation."""

    def __init__(
        self,
        root=".",
        version=None,
        variant=None,
        repo_name=image_settings.REPO_NAME,
        image_name_base=image_settings.IMAGE_NAME_BASE,
        image_name_prefix=image_settings.IMAGE_NAME_PREFIX,
        image_name_suffix=image_settings.IMAGE_NAME_SUFFIX,
        image_name=None,
        tag_suffix="",
        external_cache_dir=image_settings.EXTERNAL_CACHE_DIR_NAME,
        platforms=None,
        docker=image_settings.DOCKER,
        git=image_settings.GIT,
        offimg_local_clone=image_settings.OFFIMG_LOCAL_CLONE,
        offimg_repo_url=image_settings.OFFIMG_REPO_URL,
        dockerhub_desc_img=image_settings.DOCKERHUB_DESC_IMG,
        dockerhub_username="",
        dockerhub_access_token="",
        latest_version=image_settings.LATEST_VERSION,
    ):
        self.root = root
        self.version = version or None
        self.variant = variant or None
        self.repo_name = repo_name
        self.image_name_base = image_name_base
        self.image_name_prefix = image_name_prefix
        self.image_name_suffix = image_name_suffix
        self.image_name = image_name or (
            f"{image_name_prefix}{image_name_base}{image_name_suffix}"
        )
        self.tag_suffix = tag_suffix
        self.external_cache_dir = external_cache_dir
        self.platforms = list(platforms or [])
        self.docker = docker
        self.git = git
        self.offimg_local_clone = os.path.expanduser(offimg_local_clone)
        self.offimg_repo_url = offimg_repo_url
        self.dockerhub_desc_img = dockerhub_desc_img
        self.dockerhub_username = dockerhub_username
        self.dockerhub_access_token = dockerhub_access_token
        self.latest_version = latest_version

    @property
    def repository(self):
        return f"{self.repo_name}/{self.image_name}"

    @property
    def cache_root(self):
        if os.path.isabs(self.external_cache_dir):
            return self.external_cache_dir
        return os.path.join(self.root, self.external_cache_dir)

    @classmethod
    def from_environ(cls, environ=None, overrides=None, root="."):
        """Build the configuration from the environment, overrides win.
        Empty values count as unset."""
        values = dict(os.environ if environ is None else environ)
        values.update(overrides or {})

        def getenv_or_default(key, default):
            return values.get(key) or default

        return cls(
            root=root,
            version=getenv_or_default("VERSION", None),
            variant=getenv_or_default("VARIANT", None),
            repo_name=getenv_or_default("REPO_NAME", image_settings.REPO_NAME),
            image_name_base=getenv_or_default(
                "IMAGE_NAME_BASE", image_settings.IMAGE_NAME_BASE
            ),
            image_name_prefix=getenv_or_default(
                "IMAGE_NAME_PREFIX", image_settings.IMAGE_NAME_PREFIX
            ),
            image_name_suffix=getenv_or_default(
                "IMAGE_NAME_SUFFIX", image_settings.IMAGE_NAME_SUFFIX
            ),
            image_name=getenv_or_default("IMAGE_NAME", None),
            tag_suffix=getenv_or_default("TAG_SUFFIX", ""),
            external_cache_dir=getenv_or_default(
                "EXTERNAL_CACHE_DIR_NAME", image_settings.EXTERNAL_CACHE_DIR_NAME
            ),
            platforms=getenv_or_default("PLATFORMS", "").split(),
            docker=getenv_or_default("DOCKER", image_settings.DOCKER),
            git=getenv_or_default("GIT", image_settings.GIT),
            offimg_local_clone=getenv_or_default(
                "OFFIMG_LOCAL_CLONE", image_settings.OFFIMG_LOCAL_CLONE
            ),
            dockerhub_username=getenv_or_default("DOCKERHUB_USERNAME", ""),
            dockerhub_access_token=getenv_or_default("DOCKERHUB_ACCESS_TOKEN", ""),
        )
