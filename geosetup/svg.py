"""Reader for plain SVG drawings used as 2D geometry input."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
import xml.etree.ElementTree as ET

from geosetup.errors import ConfigurationError

REFERENCE_ID = "Reference"


@dataclass(frozen=True)
class SvgPath:
    id: str
    d: str


@dataclass(frozen=True)
class PathCollection:
    """Named paths of a drawing plus the extent of its reference rectangle."""

    width: float
    height: float
    x0: float = 0.0
    y0: float = 0.0
    paths: tuple[SvgPath, ...] = field(default_factory=tuple)

    @property
    def num_paths(self) -> int:
        return len(self.paths)

    def by_id(self, path_id: str) -> SvgPath:
        for path in self.paths:
            if path.id == path_id:
                return path
        raise KeyError(path_id)


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def parse_plain_svg(text: str) -> PathCollection:
    """Parse a plain SVG document (e.g. Inkscape "Plain SVG" output).

    Only elements nested one level under ``<g>`` groups are read: the rect with
    id "Reference" gives the drawing extent and every ``<path>`` becomes an
    ``SvgPath``.
    """

    try:
        root = ET.fromstring(text)
    except ET.ParseError as exc:
        raise ConfigurationError(f"Invalid SVG document: {exc}") from exc

    width = height = x0 = y0 = 0.0
    paths: list[SvgPath] = []
    for group in root:
        if _local_name(group.tag) != "g":
            continue
        for elem in group:
            name = _local_name(elem.tag)
            if name == "rect" and elem.get("id") == REFERENCE_ID:
                try:
                    width = float(elem.get("width", "0"))
                    height = float(elem.get("height", "0"))
                    x0 = float(elem.get("x", "0"))
                    y0 = float(elem.get("y", "0"))
                except ValueError as exc:
                    raise ConfigurationError(f"Reference rectangle has non-numeric attributes: {exc}") from exc
            elif name == "path":
                paths.append(SvgPath(id=elem.get("id", ""), d=elem.get("d", "")))

    return PathCollection(width=width, height=height, x0=x0, y0=y0, paths=tuple(paths))


def read_plain_svg(path: str | Path) -> PathCollection:
    return parse_plain_svg(Path(path).read_text(encoding="utf-8"))
