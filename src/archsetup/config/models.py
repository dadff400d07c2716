# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/archsetup/config/models.py

from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from ..core.units import PACKAGE_NAME_RE


def _check_packages(packages: List[str]) -> List[str]:
    bad = [p for p in packages if not PACKAGE_NAME_RE.match(p)]
    if bad:
        raise ValueError(f"invalid package names: {', '.join(repr(p) for p in bad)}")
    return packages


class PackageGroup(BaseModel):
    name: str
    description: str = ""
    packages: List[str]
    interactive: bool = True

    @field_validator("packages")
    @classmethod
    def valid_packages(cls, v: List[str]) -> List[str]:
        return _check_packages(v)


class AurConfig(BaseModel):
    helper: str = "yay"
    helper_repo: str = "https://aur.archlinux.org/yay-git.git"
    build_user: str = "aurbuilder"
    packages: List[str] = Field(default_factory=list)

    @field_validator("packages")
    @classmethod
    def valid_packages(cls, v: List[str]) -> List[str]:
        return _check_packages(v)


class FlatpakApp(BaseModel):
    name: str
    title: str
    app_id: str


class FlatpakConfig(BaseModel):
    remote_name: str = "flathub"
    remote_url: str = "https://flathub.org/repo/flathub.flatpakrepo"
    apps: List[FlatpakApp] = Field(default_factory=list)


class GraphicsConfig(BaseModel):
    nvidia_packages: List[str] = Field(default_factory=list)
    nvidia_xorg_conf: str = "/etc/X11/xorg.conf.d/20-nvidia.conf"
    nvidia_kernel_param: str = "nvidia-drm.modeset=1"
    amd_packages: List[str] = Field(default_factory=list)
    intel_packages: List[str] = Field(default_factory=list)
    video_acceleration_packages: List[str] = Field(default_factory=list)


class GrubConfig(BaseModel):
    default_file: str = "/etc/default/grub"
    cfg_path: str = "/boot/grub/grub.cfg"
    os_prober: bool = True


class MountConfig(BaseModel):
    fstab: str = "/etc/fstab"
    base_dir: str = "mnt"                   # relative to the user's home
    ntfs_options: str = "uid=1000,gid=1000,rw,user,exec,umask=000"
    linux_options: str = "defaults,nofail"


class ServiceSpec(BaseModel):
    unit: str
    package: Optional[str] = None           # only enabled when this package is installed


class ZshConfig(BaseModel):
    installer_url: str
    theme: str = "powerlevel10k/powerlevel10k"
    theme_repo: str
    plugins: List[str] = Field(default_factory=lambda: ["git"])
    plugin_repos: Dict[str, str] = Field(default_factory=dict)
    source_plugins: List[str] = Field(default_factory=list)   # extra `source` lines appended to .zshrc


class GitConfig(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    editor: str = "vim"
    default_branch: str = "main"


class TmuxConfig(BaseModel):
    prefix_key: str = "a"
    mouse: bool = True
    history_limit: int = 10000


class NeovimConfig(BaseModel):
    plug_url: str
    colorscheme: str = "gruvbox"
    plugins: List[str] = Field(default_factory=list)


class HookSpec(BaseModel):
    name: str
    operations: List[str]
    targets: List[str]
    description: str
    exec: str
    depends: List[str] = Field(default_factory=list)


class PacmanHooksConfig(BaseModel):
    dir: str = "/etc/pacman.d/hooks"
    hooks: List[HookSpec] = Field(default_factory=list)


class PerformanceConfig(BaseModel):
    swappiness: int = Field(10, ge=0, le=200)
    sysctl_file: str = "/etc/sysctl.d/99-swappiness.conf"
    udev_file: str = "/etc/udev/rules.d/60-ioscheduler.rules"
    schedulers: Dict[str, str] = Field(
        default_factory=lambda: {"nvme": "none", "ssd": "mq-deadline", "hdd": "bfq"}
    )


class SecurityConfig(BaseModel):
    packages: List[str] = Field(default_factory=list)
    ufw_rules: List[List[str]] = Field(default_factory=list)
    kde_connect_rules: List[List[str]] = Field(default_factory=list)
    jail_file: str = "/etc/fail2ban/jail.local"
    bantime: str = "1h"
    findtime: str = "10m"
    maxretry: int = 5


class ProvisionConfig(BaseModel):
    user: Optional[str] = None              # None = SUDO_USER / login name
    log_dir: Optional[str] = None
    package_groups: List[PackageGroup] = Field(default_factory=list)
    aur: AurConfig = AurConfig()
    flatpak: FlatpakConfig = FlatpakConfig()
    graphics: GraphicsConfig = GraphicsConfig()
    grub: GrubConfig = GrubConfig()
    mounts: MountConfig = MountConfig()
    services: List[ServiceSpec] = Field(default_factory=list)
    zsh: ZshConfig
    git: GitConfig = GitConfig()
    tmux: TmuxConfig = TmuxConfig()
    neovim: NeovimConfig
    pacman_hooks: PacmanHooksConfig = PacmanHooksConfig()
    performance: PerformanceConfig = PerformanceConfig()
    security: SecurityConfig = SecurityConfig()
