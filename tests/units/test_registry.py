from archsetup.config.loader import load_config
from archsetup.core.planner import plan, validate_order
from archsetup.units.registry import build_units


def test_default_units_in_execution_order(isolated_config):
    units = build_units(load_config(), user="alice")
    names = [u.name for u in units]

    validate_order(units)
    assert [u.name for u in plan(units)] == names

    expected = [
        "system-update",
        "aur-helper",
        "packages:system-utilities",
        "packages:fonts",
        "aur-packages",
        "flatpak-remote",
        "flatpak:spotify",
        "graphics:nvidia",
        "graphics:nvidia-drm",
        "graphics:amd",
        "graphics:intel",
        "graphics:video-acceleration",
        "grub",
        "drive-mounts",
        "services",
        "zsh",
        "git-config",
        "tmux",
        "neovim",
        "pacman-hooks",
        "performance",
        "security",
    ]
    assert [n for n in names if n in expected] == expected
    assert len(names) == len(set(names))


def test_interactive_units_have_prompts(isolated_config):
    units = build_units(load_config(), user="alice")
    by_name = {u.name: u for u in units}
    assert by_name["grub"].interactive
    assert by_name["drive-mounts"].confirmation == "Would you like to auto-mount detected drives?"
    assert not by_name["system-update"].interactive
    assert by_name["flatpak:discord"].requires == ("flatpak-remote",)


def test_optional_units_dropped_when_unconfigured(isolated_config):
    override = isolated_config / "minimal.yaml"
    override.write_text("services: []\npacman_hooks:\n  hooks: []\naur:\n  packages: []\n")
    names = [u.name for u in build_units(load_config(override), user="alice")]
    assert "services" not in names
    assert "pacman-hooks" not in names
    assert "aur-packages" not in names
