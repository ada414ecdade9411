import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "installers" / "bootstrap"))

from hackatime_bootstrap.errors import AssetNotFoundError
from hackatime_bootstrap.resolver import (
    Asset,
    PlatformTarget,
    asset_name_for,
    executable_name_for,
    find_checksums_asset,
    parse_release,
    resolve_target,
    select_asset,
    select_asset_url,
)


class BootstrapResolverTests(unittest.TestCase):
    def test_resolve_target(self):
        target = resolve_target("Windows", "AMD64")
        self.assertEqual(target, PlatformTarget(os_name="windows", arch="x86_64"))
        self.assertEqual(resolve_target("Darwin", "arm64"), PlatformTarget("macos", "aarch64"))
        self.assertEqual(resolve_target("Linux", "aarch64"), PlatformTarget("linux", "aarch64"))
        self.assertEqual(resolve_target("FreeBSD", "riscv64").arch, "riscv64")

    def test_asset_name_per_platform(self):
        self.assertEqual(
            asset_name_for(resolve_target("Windows", "AMD64")),
            "hackatime_setup-windows-x86_64.zip",
        )
        self.assertEqual(
            asset_name_for(resolve_target("Linux", "x86_64")),
            "hackatime_setup-linux-x86_64.tar.gz",
        )
        self.assertEqual(
            asset_name_for(resolve_target("Darwin", "arm64")),
            "hackatime_setup-macos-aarch64.tar.gz",
        )

    def test_executable_name(self):
        self.assertEqual(executable_name_for(PlatformTarget("windows", "x86_64")), "hackatime_setup.exe")
        self.assertEqual(executable_name_for(PlatformTarget("linux", "x86_64")), "hackatime_setup")

    def test_select_exact_name(self):
        assets = [Asset(name="hackatime_setup-windows-x86_64.zip", url="U")]
        self.assertEqual(select_asset_url(assets, "hackatime_setup-windows-x86_64.zip"), "U")

    def test_select_missing_name_raises(self):
        assets = [Asset(name="hackatime_setup-windows-x86_64.zip", url="U")]
        with self.assertRaises(AssetNotFoundError) as ctx:
            select_asset(assets, "hackatime_setup-linux-x86_64.zip")
        self.assertEqual(ctx.exception.asset_name, "hackatime_setup-linux-x86_64.zip")
        self.assertEqual(ctx.exception.available, ["hackatime_setup-windows-x86_64.zip"])

    def test_select_is_case_sensitive(self):
        assets = [Asset(name="HACKATIME_SETUP-windows-x86_64.zip", url="U")]
        with self.assertRaises(AssetNotFoundError):
            select_asset(assets, "hackatime_setup-windows-x86_64.zip")

    def test_parse_release_skips_incomplete_assets(self):
        release = parse_release(
            {
                "tag_name": "v1.2.0",
                "assets": [
                    {"name": "hackatime_setup-linux-x86_64.tar.gz", "browser_download_url": "https://example/l"},
                    {"name": "no-url.zip"},
                    {"browser_download_url": "https://example/no-name"},
                    "garbage",
                ],
            }
        )
        self.assertEqual(release.tag_name, "v1.2.0")
        self.assertEqual(
            release.assets,
            (Asset(name="hackatime_setup-linux-x86_64.tar.gz", url="https://example/l"),),
        )

    def test_parse_release_without_assets(self):
        release = parse_release({"assets": None})
        self.assertEqual(release.assets, ())
        self.assertIsNone(release.tag_name)

    def test_parse_release_rejects_non_object(self):
        with self.assertRaises(ValueError):
            parse_release([{"name": "x"}])

    def test_parse_release_rejects_non_list_assets(self):
        with self.assertRaises(ValueError):
            parse_release({"assets": 5})

    def test_find_checksums_asset(self):
        assets = [Asset(name="a.zip", url="x"), Asset(name="Checksums.txt", url="c")]
        self.assertEqual(find_checksums_asset(assets).url, "c")
        self.assertIsNone(find_checksums_asset(assets[:1]))


if __name__ == "__main__":
    unittest.main()
