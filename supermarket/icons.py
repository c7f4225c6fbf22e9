"""Copy the SVG icons the web front end uses into its public directory."""

from __future__ import annotations

import argparse
import shutil
from collections.abc import Iterable
from pathlib import Path

ICONS: tuple[str, ...] = ("shopping-cart",)
ICON_RENAMES: tuple[tuple[str, str], ...] = ()

PROVIDER_ICONS: tuple[str, ...] = ("apple", "azure", "google")
PROVIDER_ICON_RENAMES: tuple[tuple[str, str], ...] = (("azure", "microsoft"),)


def copy_icons(
    from_path: str | Path,
    to_path: str | Path,
    icons: Iterable[str],
    renames: Iterable[tuple[str, str]],
) -> None:
    """Copy ``icons`` into ``to_path`` and remove every other file there.

    ``renames`` holds ``(source, target)`` pairs: the icon named ``source``
    is stored under the name ``target``.
    """
    from_path = Path(from_path)
    to_path = Path(to_path)
    icons = tuple(icons)

    forward: dict[str, str] = {}
    backward: dict[str, str] = {}
    for source, target in renames:
        forward.setdefault(source, target)
        backward.setdefault(target, source)

    for icon in icons:
        target = forward.get(icon, icon)
        shutil.copy(from_path / f"{icon}.svg", to_path / f"{target}.svg")

    for path in list(to_path.iterdir()):
        if not path.is_file():
            continue
        stem = path.stem
        if stem in forward or backward.get(stem, stem) not in icons:
            path.unlink()


def main(argv: list[str] | None = None) -> int:
    """Copy the interface and provider icons, relative to the resources directory."""
    parser = argparse.ArgumentParser(
        prog="supermarket-icons",
        description="Copy the icons used by the web front end into its public directory.",
    )
    parser.add_argument(
        "--root",
        type=Path,
        default=Path.cwd(),
        help="the resources directory to resolve paths from (default: current directory)",
    )
    args = parser.parse_args(argv)
    root: Path = args.root

    copy_icons(
        root / "../../node_modules/lucide-static/icons",
        root / "../public/images/icons",
        ICONS,
        ICON_RENAMES,
    )
    copy_icons(
        root / "../../node_modules/next-auth/docs/static/img/providers",
        root / "../public/images/icons/providers",
        PROVIDER_ICONS,
        PROVIDER_ICON_RENAMES,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())