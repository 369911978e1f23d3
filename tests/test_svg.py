from __future__ import annotations

import pytest

from geosetup.errors import ConfigurationError
from geosetup.svg import parse_plain_svg, read_plain_svg

_SVG = """<?xml version="1.0" encoding="UTF-8"?>
<svg xmlns="http://www.w3.org/2000/svg" width="210mm" height="297mm" viewBox="0 0 210 297">
  <g id="layer1">
    <rect id="Reference" width="150.5" height="80" x="10" y="20.25" />
    <path id="Slab" d="m 10,20 h 50 v 10 z" />
    <path id="Crust" d="M 0,0 L 10,0 L 10,5 Z" />
  </g>
  <g id="layer2">
    <path id="Plume" d="m 1,1 h 2 v 2 z" />
    <g id="nested">
      <path id="Ignored" d="m 0,0 h 1" />
    </g>
  </g>
  <path id="TopLevel" d="m 5,5 h 1" />
</svg>
"""


def test_parse_plain_svg_reads_reference_and_paths() -> None:
    collection = parse_plain_svg(_SVG)

    assert collection.width == 150.5
    assert collection.height == 80.0
    assert (collection.x0, collection.y0) == (10.0, 20.25)
    assert [path.id for path in collection.paths] == ["Slab", "Crust", "Plume"]
    assert collection.num_paths == 3
    assert collection.by_id("Crust").d == "M 0,0 L 10,0 L 10,5 Z"


def test_missing_path_id_raises_key_error() -> None:
    with pytest.raises(KeyError):
        parse_plain_svg(_SVG).by_id("Ignored")


def test_invalid_svg_is_a_configuration_error() -> None:
    with pytest.raises(ConfigurationError):
        parse_plain_svg("<svg><g></svg>")


def test_read_plain_svg_from_file(tmp_path) -> None:
    path = tmp_path / "setup.svg"
    path.write_text(_SVG, encoding="utf-8")

    collection = read_plain_svg(path)

    assert collection.num_paths == 3
