import os
import re
import tempfile
import unittest
import zipfile
from pathlib import Path

from releasedock.release_package import PackageError, package_path, random_archive_name


class TestPackagePath(unittest.TestCase):
    def setUp(self) -> None:
        self._td = tempfile.TemporaryDirectory()
        self.addCleanup(self._td.cleanup)
        self.tmp = Path(self._td.name)
        self.out = self.tmp / "out"
        self.out.mkdir()

    def test_regular_file_is_passed_through(self) -> None:
        bundle = self.tmp / "app.zip"
        bundle.write_bytes(b"PK")

        pkg = package_path(bundle, work_dir=self.out)

        self.assertEqual(pkg.path, bundle)
        self.assertFalse(pkg.is_temporary)
        self.assertEqual(list(self.out.iterdir()), [])

    def test_directory_is_zipped_under_its_own_name(self) -> None:
        root = self.tmp / "CodePushRelease"
        (root / "img" / "icons").mkdir(parents=True)
        (root / "empty").mkdir()
        (root / "index.bundle").write_text("bundle", encoding="utf-8")
        (root / "img" / "icons" / "a.png").write_bytes(b"a")

        pkg = package_path(root, work_dir=self.out)

        self.assertTrue(pkg.is_temporary)
        self.assertEqual(pkg.path.parent, self.out.resolve())
        with zipfile.ZipFile(pkg.path) as zf:
            names = zf.namelist()
            self.assertEqual(zf.read("CodePushRelease/index.bundle"), b"bundle")

        self.assertEqual(names[0], "CodePushRelease/")
        self.assertEqual(
            sorted(names),
            [
                "CodePushRelease/",
                "CodePushRelease/empty/",
                "CodePushRelease/img/",
                "CodePushRelease/img/icons/",
                "CodePushRelease/img/icons/a.png",
                "CodePushRelease/index.bundle",
            ],
        )
        self.assertTrue(all("\\" not in n for n in names))

    def test_packager_never_deletes_the_archive(self) -> None:
        root = self.tmp / "rel"
        root.mkdir()
        (root / "f").write_text("x", encoding="utf-8")

        pkg = package_path(root, work_dir=self.out)

        self.assertTrue(pkg.path.exists())

    def test_defaults_to_current_directory(self) -> None:
        root = self.tmp / "rel"
        root.mkdir()
        old = os.getcwd()
        os.chdir(self.out)
        try:
            pkg = package_path(root)
        finally:
            os.chdir(old)

        self.assertEqual(pkg.path.parent, self.out.resolve())

    def test_missing_path_raises(self) -> None:
        with self.assertRaises(PackageError):
            package_path(self.tmp / "nope", work_dir=self.out)

    def test_unwritable_output_leaves_no_archive(self) -> None:
        root = self.tmp / "rel"
        root.mkdir()

        with self.assertRaises(PackageError):
            package_path(root, work_dir=self.tmp / "missing-dir")

        self.assertFalse((self.tmp / "missing-dir").exists())


class TestRandomArchiveName(unittest.TestCase):
    def test_name_shape(self) -> None:
        name = random_archive_name()
        self.assertRegex(name, r"^[A-Za-z0-9]{15}\.zip$")
        self.assertTrue(re.fullmatch(r"[A-Za-z0-9]{4}\.zip", random_archive_name(4)))


if __name__ == "__main__":
    unittest.main()
