"""Shared test fixtures for Layerlint."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture()
def tmp_project(tmp_path: Path) -> Path:
    """Create a minimal PHP project where Logic depends on IO."""
    logic = tmp_path / "src" / "Logic"
    io = tmp_path / "src" / "IO"
    logic.mkdir(parents=True)
    io.mkdir(parents=True)

    (io / "Writer.php").write_text(
        "<?php\nnamespace App\\IO;\n\nclass Writer\n{\n}\n", encoding="utf-8"
    )
    (io / "WriterInterface.php").write_text(
        "<?php\nnamespace App\\IO;\n\ninterface WriterInterface\n{\n}\n", encoding="utf-8"
    )
    (logic / "Service.php").write_text(
        "<?php\n"
        "namespace App\\Logic;\n"
        "\n"
        "use App\\IO\\Writer;\n"
        "use App\\IO\\WriterInterface;\n"
        "\n"
        "class Service\n"
        "{\n"
        "    public function run(WriterInterface $out): void\n"
        "    {\n"
        "        $writer = new Writer();\n"
        "    }\n"
        "}\n",
        encoding="utf-8",
    )
    return tmp_path
