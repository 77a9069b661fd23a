from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FstabEntry:
    spec: str
    mountpoint: str
    fstype: str
    options: str = "defaults"
    dump: int = 0
    passno: int = 0

    def render(self) -> str:
        return f"{self.spec} {self.mountpoint} {self.fstype} {self.options} {self.dump} {self.passno}"


def swap_entry(path: str) -> FstabEntry:
    return FstabEntry(spec=path, mountpoint="none", fstype="swap", options="sw")


def render_fstab(entries: Iterable[FstabEntry]) -> str:
    return "".join(e.render() + "\n" for e in entries)


def parse_fstab(text: str) -> List[FstabEntry]:
    """Parse fstab contents, skipping comments and malformed lines."""

    entries: List[FstabEntry] = []
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        fields = line.split()
        if len(fields) < 3:
            continue
        try:
            dump = int(fields[4]) if len(fields) > 4 else 0
            passno = int(fields[5]) if len(fields) > 5 else 0
        except ValueError:
            continue
        entries.append(
            FstabEntry(
                spec=fields[0],
                mountpoint=fields[1],
                fstype=fields[2],
                options=fields[3] if len(fields) > 3 else "defaults",
                dump=dump,
                passno=passno,
            )
        )
    return entries


@dataclass(frozen=True)
class FstabMountTable:
    """The persistent mount table (/etc/fstab)."""

    path: str = "/etc/fstab"
    dry_run: bool = False

    def entries(self) -> List[FstabEntry]:
        p = Path(self.path)
        if not p.exists():
            return []
        return parse_fstab(p.read_text(encoding="utf-8"))

    def has_entry(self, spec: str, fstype: str) -> bool:
        return any(e.spec == spec and e.fstype == fstype for e in self.entries())

    def add_entry(self, entry: FstabEntry) -> None:
        p = Path(self.path)
        if self.dry_run:
            logger.info("Would append to %s: %s", str(p), entry.render())
            return

        existing = p.read_text(encoding="utf-8") if p.exists() else ""
        prefix = "" if (not existing or existing.endswith("\n")) else "\n"
        with p.open("a", encoding="utf-8") as fh:
            fh.write(prefix + entry.render() + "\n")
        logger.info("Appended to %s: %s", str(p), entry.render())
