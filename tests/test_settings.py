from pathlib import Path

import pytest

from i3_installer.lib.env import Paths
from i3_installer.lib.group_install import EmptyGroupPolicy
from i3_installer.lib.manifests import alternatives_after, load_packages_manifest, package_groups, package_list
from i3_installer.settings import Settings, build_options, load_settings


def test_bundled_manifest_groups_in_order():
    groups = package_groups(load_packages_manifest())
    assert [g.key for g in groups] == [
        "core",
        "ui",
        "file_manager",
        "audio",
        "utilities",
        "terminal",
        "fonts",
        "build",
    ]
    core = groups[0]
    assert core.label == "Installing core packages"
    assert "i3" in core.packages
    assert all(g.packages for g in groups)


def test_manifest_alternatives_and_lists():
    manifest = load_packages_manifest()
    assert alternatives_after(manifest, "utilities") == [["firefox-esr", "firefox"]]
    assert alternatives_after(manifest, "terminal") == [["exa", "eza"]]
    assert alternatives_after(manifest, "fonts") == []
    assert package_list(manifest, "services") == ["avahi-daemon", "acpid"]


def test_extra_packages_appended_without_duplicates():
    manifest = {"package_groups": {"terminal": {"label": "T", "packages": ["tmux"]}}}
    groups = package_groups(manifest, extra={"terminal": ["tmux", "htop"]})
    assert groups[0].packages == ("tmux", "htop")


def test_extra_packages_for_unknown_group_rejected():
    with pytest.raises(ValueError):
        package_groups({"package_groups": {"core": {"packages": ["i3"]}}}, extra={"games": ["nethack"]})


def test_defaults_without_file():
    s = load_settings(None)
    assert s.empty_group_policy == EmptyGroupPolicy.FAIL
    assert s.progress == "auto"
    assert s.package_groups == {}


def test_load_yaml_settings(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text(
        "config_dir: /tmp/i3cfg\n"
        "empty_group_policy: succeed\n"
        "progress: never\n"
        "package_groups:\n"
        "  terminal: [htop]\n"
    )
    s = load_settings(str(path))
    assert s.config_dir == Path("/tmp/i3cfg")
    assert s.empty_group_policy == EmptyGroupPolicy.SUCCEED
    assert s.progress == "never"
    assert s.package_groups == {"terminal": ["htop"]}


@pytest.mark.parametrize(
    "content",
    ["- just\n- a list\n", "key: [unclosed\n"],
)
def test_bad_yaml_rejected(tmp_path, content):
    path = tmp_path / "settings.yaml"
    path.write_text(content)
    with pytest.raises(ValueError):
        load_settings(str(path))


def test_non_yaml_extension_rejected(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{}")
    with pytest.raises(ValueError):
        load_settings(str(path))


def test_bad_policy_rejected():
    with pytest.raises(ValueError):
        Settings(raw={"empty_group_policy": "maybe"}).empty_group_policy


def test_build_options_precedence(tmp_path):
    paths = Paths(home=tmp_path)
    settings = Settings(raw={"log_path": str(tmp_path / "from-settings.log")})

    opts = build_options(settings, paths, log_path=str(tmp_path / "from-cli.log"))
    assert opts.log_path == tmp_path / "from-cli.log"

    opts = build_options(settings, paths)
    assert opts.log_path == tmp_path / "from-settings.log"
    assert opts.config_dir == tmp_path / ".config" / "i3"
    assert opts.state_path == tmp_path / ".local" / "state" / "i3-installer" / "state.json"

    opts = build_options(Settings(), paths)
    assert opts.log_path == tmp_path / "i3-install.log"
