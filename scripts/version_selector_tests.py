#!/usr/bin/env python

import os
import tempfile
import unittest

from layout_helpers import make_layout
from version_selector import (
    BuildTarget,
    TargetNotFound,
    discover_versions,
    resolve_variant_flags,
    select_targets,
)


class TestResolveVariantFlags(unittest.TestCase):

    def testNoVersion(self):
        self.assertEqual(resolve_variant_flags(None, None, True), (True, True))
        self.assertEqual(resolve_variant_flags(None, None, False), (True, False))

    def testVariantIgnoredWithoutVersion(self):
        self.assertEqual(resolve_variant_flags(None, "alpine", True), (True, True))
        self.assertEqual(resolve_variant_flags("", "default", True), (True, True))

    def testVersionOnly(self):
        self.assertEqual(resolve_variant_flags("17-3.5", None, True), (True, True))
        self.assertEqual(resolve_variant_flags("17-3.5", None, False), (True, False))

    def testVersionAndVariant(self):
        self.assertEqual(
            resolve_variant_flags("17-3.5", "default", True), (True, False)
        )
        self.assertEqual(
            resolve_variant_flags("17-3.5", "alpine", True), (False, True)
        )

    def testAlpineDirOnlyDowngrades(self):
        flags = resolve_variant_flags("10-2.5", "alpine", False)
        self.assertFalse(flags.build_alpine)
        self.assertFalse(flags.build_default)

    def testUnknownVariant(self):
        self.assertEqual(resolve_variant_flags("17-3.5", "debian", True), (False, False))


class TestSelectTargets(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.root = make_layout(
            self.tmp.name,
            {"17-3.5": True, "16-3.5": True, "10-2.5": False, "13-master": False},
        )
        # not build definitions
        os.makedirs(os.path.join(self.root, "test"))
        os.makedirs(os.path.join(self.root, ".github"))
        with open(os.path.join(self.root, "README.md"), "w") as f:
            f.write("docs\n")

    def tearDown(self):
        self.tmp.cleanup()

    def testDiscoverVersions(self):
        versions = discover_versions(self.root)
        self.assertEqual(versions, ["10-2.5", "13-master", "16-3.5", "17-3.5"])
        self.assertEqual(len(versions), len(set(versions)))

    def testDiscoverMissingRoot(self):
        self.assertEqual(discover_versions(os.path.join(self.root, "nope")), [])

    def testNoVersionSelectsEverything(self):
        names = [t.name for t in select_targets(self.root)]
        self.assertEqual(
            names,
            [
                "10-2.5",
                "13-master",
                "16-3.5",
                "16-3.5-alpine",
                "17-3.5",
                "17-3.5-alpine",
            ],
        )

    def testVersionWithoutVariant(self):
        targets = select_targets(self.root, "17-3.5")
        self.assertEqual([t.variant for t in targets], ["default", "alpine"])
        self.assertTrue(all(t.has_variant_dir for t in targets))

    def testVersionWithVariant(self):
        targets = select_targets(self.root, "17-3.5", "alpine")
        self.assertEqual([t.name for t in targets], ["17-3.5-alpine"])
        targets = select_targets(self.root, "17-3.5", "default")
        self.assertEqual([t.name for t in targets], ["17-3.5"])

    def testAlpineRequestedWithoutAlpineDir(self):
        self.assertEqual(select_targets(self.root, "10-2.5", "alpine"), [])

    def testMissingVersion(self):
        with self.assertRaises(TargetNotFound) as cm:
            select_targets(self.root, "9.6-2.5")
        self.assertEqual(cm.exception.version, "9.6-2.5")
        self.assertIsInstance(cm.exception, LookupError)

    def testEmptyRoot(self):
        with tempfile.TemporaryDirectory() as empty:
            self.assertEqual(select_targets(empty), [])

    def testPlatformSuffix(self):
        targets = select_targets(self.root, "16-3.5", platform_suffix="-linux_arm64")
        self.assertTrue(all(t.platform_suffix == "-linux_arm64" for t in targets))

    def testContext(self):
        target = BuildTarget("17-3.5", "alpine", True, "")
        self.assertEqual(
            target.context(self.root), os.path.join(self.root, "17-3.5", "alpine")
        )
        target = BuildTarget("17-3.5", "default", True, "")
        self.assertEqual(target.context(self.root), os.path.join(self.root, "17-3.5"))


if __name__ == "__main__":
    unittest.main()
