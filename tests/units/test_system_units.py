from archsetup.config.models import (
    GraphicsConfig,
    GrubConfig,
    MountConfig,
    PacmanHooksConfig,
    PerformanceConfig,
    SecurityConfig,
)
from archsetup.core.units import GuardState
from archsetup.system.interface import CommandResult
from archsetup.system.render import TemplateRenderer
from archsetup.units.boot import OS_PROBER_LINE, grub_unit
from archsetup.units.graphics import gpu_present, nvidia_drm_unit
from archsetup.units.hooks import pacman_hooks_unit
from archsetup.units.mounts import drive_mounts_unit
from archsetup.units.tuning import performance_unit, security_unit

LSPCI_NVIDIA = (
    "00:02.0 Audio device: Intel Corporation Device 7ad0\n"
    "01:00.0 VGA compatible controller: NVIDIA Corporation GA104 [GeForce RTX 3070]\n"
)

LSBLK = (
    'NAME="nvme0n1p2" FSTYPE="ext4" UUID="root-uuid" MOUNTPOINT="/" ROTA="0"\n'
    'NAME="nvme1n1p1" FSTYPE="ext4" UUID="ssd-uuid" MOUNTPOINT="" ROTA="0"\n'
    'NAME="sda1" FSTYPE="ntfs" UUID="win-uuid" MOUNTPOINT="" ROTA="1"\n'
)


def _out(text):
    return CommandResult(argv=[], returncode=0, stdout=text)


def test_grub_enables_os_prober_and_regenerates(fake_system):
    cfg = GrubConfig()
    fake_system.add_file(cfg.default_file, 'GRUB_DEFAULT=0\nGRUB_CMDLINE_LINUX_DEFAULT="quiet"\n')
    fake_system.on("grub-mkconfig", effect=lambda argv: fake_system.write_text(argv[-1], "# generated\n"))
    unit = grub_unit(cfg)

    assert unit.guard(fake_system) == GuardState.NEEDS_APPLY
    unit.apply(fake_system, None)
    assert unit.guard(fake_system) == GuardState.SATISFIED
    assert fake_system.files[cfg.default_file].splitlines().count(OS_PROBER_LINE) == 1

    # editing /etc/default/grub later makes grub.cfg stale again
    fake_system.write_text(cfg.default_file, fake_system.files[cfg.default_file] + "GRUB_TIMEOUT=3\n")
    assert unit.guard(fake_system) == GuardState.NEEDS_APPLY


def test_gpu_detection_ignores_non_display_devices(fake_system):
    fake_system.on("lspci", result=_out(LSPCI_NVIDIA))
    assert gpu_present(fake_system, "nvidia")
    assert not gpu_present(fake_system, "intel")
    assert not gpu_present(fake_system, "amd")


def test_nvidia_drm_param_added_once(fake_system):
    graphics, grub = GraphicsConfig(), GrubConfig()
    fake_system.on("lspci", result=_out(LSPCI_NVIDIA))
    fake_system.add_file(grub.default_file, 'GRUB_CMDLINE_LINUX_DEFAULT="loglevel=3 quiet"\n')
    unit = nvidia_drm_unit(graphics, grub)

    assert unit.guard(fake_system) == GuardState.NEEDS_APPLY
    unit.apply(fake_system, None)
    unit.apply(fake_system, None)

    assert fake_system.files[grub.default_file] == 'GRUB_CMDLINE_LINUX_DEFAULT="nvidia-drm.modeset=1 loglevel=3 quiet"\n'
    assert unit.guard(fake_system) == GuardState.SATISFIED


def test_nvidia_units_satisfied_without_nvidia_gpu(fake_system):
    fake_system.on("lspci", result=_out("00:02.0 VGA compatible controller: Intel Corporation UHD 770\n"))
    assert nvidia_drm_unit(GraphicsConfig(), GrubConfig()).guard(fake_system) == GuardState.SATISFIED


def test_drive_mounts_written_once(fake_system):
    cfg = MountConfig()
    fake_system.add_file(cfg.fstab, "UUID=root-uuid / ext4 defaults 0 1\n")
    fake_system.on("findmnt", result=_out("root-uuid\n"))
    fake_system.on("lsblk", result=_out(LSBLK))
    unit = drive_mounts_unit(cfg, "alice")

    assert unit.guard(fake_system) == GuardState.NEEDS_APPLY
    unit.apply(fake_system, None)
    unit.apply(fake_system, None)

    fstab = fake_system.files[cfg.fstab].splitlines()
    assert len(fstab) == 3
    assert fstab[1].split() == [
        "UUID=win-uuid", "/home/alice/mnt/Windows", "ntfs-3g",
        "uid=1000,gid=1000,rw,user,exec,umask=000", "0", "0",
    ]
    assert fstab[2].split() == ["UUID=ssd-uuid", "/home/alice/mnt/SSD", "ext4", "defaults,nofail", "0", "2"]
    assert fake_system.owners["/home/alice/mnt/SSD"] == "alice"
    assert fake_system.ran("mount", "-a")
    assert unit.guard(fake_system) == GuardState.SATISFIED


def test_pacman_hooks_idempotent(fake_system):
    cfg = PacmanHooksConfig.model_validate(
        {
            "hooks": [
                {
                    "name": "clean-cache",
                    "operations": ["Upgrade", "Install", "Remove"],
                    "targets": ["*"],
                    "description": "Cleaning pacman cache",
                    "exec": "/usr/bin/paccache -rk3",
                }
            ]
        }
    )
    unit = pacman_hooks_unit(cfg, TemplateRenderer())

    assert unit.guard(fake_system) == GuardState.NEEDS_APPLY
    unit.apply(fake_system, None)
    writes = len(fake_system.writes)
    unit.apply(fake_system, None)

    assert len(fake_system.writes) == writes
    assert "Exec = /usr/bin/paccache -rk3" in fake_system.files["/etc/pacman.d/hooks/clean-cache.hook"]
    assert unit.guard(fake_system) == GuardState.SATISFIED


def test_performance_reloads_sysctl_only_on_change(fake_system):
    unit = performance_unit(PerformanceConfig(), TemplateRenderer())
    unit.apply(fake_system, None)
    unit.apply(fake_system, None)

    assert len(fake_system.calls_matching("sysctl", "-p")) == 1
    assert "vm.swappiness=10" in fake_system.files["/etc/sysctl.d/99-swappiness.conf"]
    assert unit.guard(fake_system) == GuardState.SATISFIED


def _security():
    return SecurityConfig(
        packages=["ufw", "fail2ban"],
        ufw_rules=[["default", "deny", "incoming"], ["allow", "ssh"]],
        kde_connect_rules=[["allow", "1714:1764/udp"]],
    )


def test_security_opens_kde_connect_on_plasma(fake_system):
    security_unit(_security(), TemplateRenderer()).apply(fake_system, None)
    assert fake_system.ran("ufw", "allow", "1714:1764/udp")
    assert fake_system.ran("ufw", "--force", "enable")


def test_security_without_plasma(fake_system):
    fake_system.on("pacman", "-Q", "plasma-desktop", result=1)
    unit = security_unit(_security(), TemplateRenderer())
    unit.apply(fake_system, None)

    assert not fake_system.ran("ufw", "allow", "1714:1764/udp")
    assert fake_system.ran("ufw", "default", "deny", "incoming")

    fake_system.on("ufw", "status", result=_out("Status: active\n"))
    assert unit.guard(fake_system) == GuardState.SATISFIED
