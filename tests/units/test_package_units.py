import os

import pytest

from archsetup.config.models import AurConfig, FlatpakApp, PackageGroup, ServiceSpec
from archsetup.core.errors import UnitDefinitionError
from archsetup.core.units import GuardState
from archsetup.system.interface import CommandResult
from archsetup.units.bootstrap import aur_helper_unit, system_update_unit
from archsetup.units.common import resolve_user
from archsetup.units.packages import aur_packages_unit, flatpak_app_unit, package_group_unit
from archsetup.units.services import services_unit


def _missing(*names):
    return CommandResult(argv=[], returncode=127, stdout="".join(f"{n}\n" for n in names))


def test_package_group_guard_reads_pacman_t(fake_system):
    unit = package_group_unit(PackageGroup(name="fonts", description="fonts", packages=["ttf-hack", "noto-fonts"]))

    fake_system.on("pacman", "-T", result=_missing("ttf-hack"))
    assert unit.guard(fake_system) == GuardState.NEEDS_APPLY

    fake_system.on("pacman", "-T", result=0)
    assert unit.guard(fake_system) == GuardState.SATISFIED


def test_package_group_guard_raises_on_pacman_error(fake_system):
    unit = package_group_unit(PackageGroup(name="fonts", packages=["ttf-hack"]))
    fake_system.on("pacman", "-T", result=1)
    with pytest.raises(RuntimeError):
        unit.guard(fake_system)


def test_package_group_apply_uses_needed(fake_system):
    unit = package_group_unit(PackageGroup(name="network", description="network utilities", packages=["nmap", "whois"]))
    unit.apply(fake_system, None)
    assert fake_system.calls[-1] == ["pacman", "-S", "--needed", "--noconfirm", "nmap", "whois"]
    assert unit.name == "packages:network"
    assert unit.confirmation == "Install network utilities?"


def test_aur_packages_run_as_user(fake_system):
    unit = aur_packages_unit(AurConfig(packages=["google-chrome"]), "alice")
    unit.apply(fake_system, None)
    assert fake_system.calls[-1] == ["yay", "-S", "--needed", "--noconfirm", "google-chrome"]
    assert fake_system.users_for[-1] == "alice"
    assert unit.requires == ("aur-helper",)


def test_aur_packages_reject_bad_names():
    cfg = AurConfig.model_construct(
        helper="yay",
        packages=["timeshift-autosnap", 'success "AUR packages installed successfully"'],
    )
    with pytest.raises(UnitDefinitionError):
        aur_packages_unit(cfg, "alice")


def test_aur_helper_builds_once(make_system):
    system = make_system(binaries=["git"])
    unit = aur_helper_unit(AurConfig())
    system.on("id", "aurbuilder", result=1)
    system.on("makepkg", effect=lambda argv: system.binaries.add("yay"))

    assert unit.guard(system) == GuardState.NEEDS_APPLY
    unit.apply(system, None)

    assert system.ran("useradd", "-m", "aurbuilder")
    assert system.modes["/etc/sudoers.d/aurbuilder"] == 0o440
    assert system.ran("git", "clone", "https://aur.archlinux.org/yay-git.git", "/tmp/archsetup-aur-helper")
    assert unit.guard(system) == GuardState.SATISFIED


def test_aur_helper_missing_after_build(make_system):
    system = make_system()
    with pytest.raises(RuntimeError):
        aur_helper_unit(AurConfig()).apply(system, None)


@pytest.mark.parametrize(
    "code,state",
    [(2, GuardState.SATISFIED), (0, GuardState.NEEDS_APPLY)],
)
def test_system_update_guard(make_system, code, state):
    system = make_system(binaries=["checkupdates"])
    system.on("checkupdates", result=code)
    assert system_update_unit().guard(system) == state


def test_system_update_guard_error(make_system):
    system = make_system(binaries=["checkupdates"])
    system.on("checkupdates", result=1)
    with pytest.raises(RuntimeError):
        system_update_unit().guard(system)


def test_flatpak_app(fake_system):
    unit = flatpak_app_unit(FlatpakApp(name="spotify", title="Spotify", app_id="com.spotify.Client"), "flathub")
    fake_system.on("flatpak", "info", result=1)
    assert unit.guard(fake_system) == GuardState.NEEDS_APPLY
    unit.apply(fake_system, None)
    assert fake_system.calls[-1] == ["flatpak", "install", "-y", "--noninteractive", "flathub", "com.spotify.Client"]
    assert unit.name == "flatpak:spotify"


def test_services_only_enable_installed_and_pending(fake_system):
    specs = [
        ServiceSpec(unit="NetworkManager", package="networkmanager"),
        ServiceSpec(unit="bluetooth", package="bluez"),
        ServiceSpec(unit="docker", package="docker"),
    ]
    fake_system.on("pacman", "-Q", "docker", result=1)
    fake_system.on("systemctl", "is-enabled", "--quiet", "bluetooth", result=1)
    unit = services_unit(specs)

    assert unit.guard(fake_system) == GuardState.NEEDS_APPLY
    unit.apply(fake_system, None)

    assert fake_system.calls_matching("systemctl", "enable") == [["systemctl", "enable", "--now", "bluetooth"]]


def test_resolve_user(monkeypatch):
    monkeypatch.delenv("SUDO_USER", raising=False)
    assert resolve_user("bob") == "bob"

    monkeypatch.setenv("SUDO_USER", "alice")
    assert resolve_user() == "alice"

    monkeypatch.setenv("SUDO_USER", "root")
    monkeypatch.setattr(os, "getlogin", lambda: "carol")
    assert resolve_user() == "carol"

    def no_terminal():
        raise OSError(6, "No such device or address")

    monkeypatch.setattr(os, "getlogin", no_terminal)
    assert resolve_user() == "root"
