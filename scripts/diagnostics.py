#  This file and its contents are licensed under the Apache License 2.0.
#  Please see the included NOTICE for copyright information and
#  LICENSE-APACHE for a copy of the license.

# Reporting and cleanup helpers. None of these take part in the
# dependency graph, they are only run when asked for by name.

import os
import shutil
import subprocess

import psutil

import image_settings
from executor import run_command

TAG_FORMAT = "{{.Repository}}:{{.Tag}}"


# return human readable form of number of bytes n
def bytes2human(n):
    # >>> bytes2human(10000)
    # '9.8K'
    # >>> bytes2human(100001221)
    # '95.4M'
    symbols = ("K", "M", "G", "T", "P", "E", "Z", "Y")
    prefix = {}
    for i, s in enumerate(symbols):
        prefix[s] = 1 << (i + 1) * 10
    for s in reversed(symbols):
        if n >= prefix[s]:
            value = float(n) / prefix[s]
            return "%.1f%s" % (value, s)
    return "%sB" % n


def list_images(config, repository, full=False, runner=run_command):
    if full:
        runner([config.docker, "image", "ls", repository])
    else:
        runner([config.docker, "image", "ls", repository, "--format", TAG_FORMAT])


def image_tags(config, repository):
    output = subprocess.check_output(
        [config.docker, "image", "ls", repository, "--format", TAG_FORMAT],
        text=True,
    )
    return [line.strip() for line in output.splitlines() if line.strip()]


def remove_images(config, repository, runner=run_command, dry_run=False):
    if dry_run:
        # the tags are only known after listing them
        list_images(config, repository, runner=runner)
        print(f"Would remove the images listed for {repository}")
        return
    tags = image_tags(config, repository)
    if not tags:
        print(f"No images found for {repository}")
        return
    runner([config.docker, "image", "rm"] + tags)


def binfmt(config, runner=run_command):
    runner(
        [config.docker, "run", "--privileged", "--rm", image_settings.BINFMT_IMAGE]
        + ["--install", "all"]
    )
    runner([config.docker, "images", "--tree"])


def directory_size(path):
    total = 0
    for dirpath, _dirnames, filenames in os.walk(path):
        for filename in filenames:
            fp = os.path.join(dirpath, filename)
            if not os.path.islink(fp):
                total += os.path.getsize(fp)
    return total


def external_cache_du(config, dry_run=False):
    path = config.cache_root
    if dry_run:
        print(f"Would measure {path}")
        return None
    size = directory_size(path) if os.path.isdir(path) else 0
    print(f"{bytes2human(size)}\t{path}")
    return size


def external_cache_remove(config, dry_run=False):
    path = config.cache_root
    if not os.path.isdir(path):
        return
    if dry_run:
        print(f"Would remove {path}")
        return
    print(f"Removing {path}")
    shutil.rmtree(path)


def usage_line(mountpoint):
    usage = psutil.disk_usage(mountpoint)
    return "{:<30} {:>8} {:>8} {:>8} {:>5}%".format(
        mountpoint,
        bytes2human(usage.total),
        bytes2human(usage.used),
        bytes2human(usage.free),
        usage.percent,
    )


def diskfree(local_path=None, dry_run=False):
    """Print the disk usage of every mounted partition, or only of the one
    holding local_path."""
    if dry_run:
        what = os.path.abspath(local_path) if local_path is not None else "all partitions"
        print(f"Would report disk usage of {what}")
        return []
    print("{:<30} {:>8} {:>8} {:>8} {:>6}".format("Mounted on", "Size", "Used", "Avail", "Use"))
    if local_path is not None:
        lines = [usage_line(os.path.abspath(local_path))]
    else:
        lines = []
        for partition in psutil.disk_partitions():
            try:
                lines.append(usage_line(partition.mountpoint))
            except OSError:
                # unreadable cdrom, stale or container bind mounts
                continue
    for line in lines:
        print(line)
    return lines
